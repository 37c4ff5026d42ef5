"""End-to-end tests for GestureEngine.process."""

import logging

import numpy as np
import pytest

from airhand.config import EngineConfig
from airhand.engine import GestureEngine
from airhand.errors import MalformedFrameError, TimestampError
from airhand.landmarks import Point2D
from airhand.state import GestureLabel

from hands import fist, make_array, open_hand, pinching, pointing

FRAME_MS = 33.0


def run(engine, frames, start=0.0, step=FRAME_MS):
    return [engine.process(f, start + i * step) for i, f in enumerate(frames)]


class TestBasics:
    def test_first_frame_velocity_zero(self):
        state = GestureEngine().process(open_hand(offset=(100, 0)), 0.0)
        assert state.velocity == Point2D(0.0, 0.0)

    def test_confidence_fixed(self):
        states = run(GestureEngine(), [fist(), None, pointing()])
        assert all(s.confidence == 1.0 for s in states)

    def test_pinch(self):
        assert GestureEngine().process(pinching(), 0.0).current == GestureLabel.PINCH

    def test_fist(self):
        assert GestureEngine().process(fist(), 0.0).current == GestureLabel.FIST

    def test_draw(self):
        assert GestureEngine().process(pointing(), 0.0).current == GestureLabel.DRAW

    def test_accepts_raw_arrays(self):
        assert GestureEngine().process(make_array(), 0.0).current == GestureLabel.FIST

    def test_state_property(self):
        engine = GestureEngine()
        assert engine.state is None
        state = engine.process(fist(), 0.0)
        assert engine.state is state


class TestPalm:
    def test_palm_after_three_still_frames(self):
        states = run(GestureEngine(), [open_hand()] * 3)
        assert [s.current for s in states] == [
            GestureLabel.NONE, GestureLabel.NONE, GestureLabel.PALM,
        ]

    def test_brief_open_hand_never_palm(self):
        for n in (1, 2):
            states = run(GestureEngine(), [open_hand()] * n + [fist()])
            assert GestureLabel.PALM not in [s.current for s in states]

    def test_absent_frame_breaks_streak(self):
        states = run(GestureEngine(), [open_hand(), open_hand(), None, open_hand()])
        assert GestureLabel.PALM not in [s.current for s in states]

    def test_wave_through_never_palm(self):
        # 20px per frame: too slow for a swipe, too fast to be held still
        frames = [open_hand(offset=(20 * i, 0)) for i in range(12)]
        states = run(GestureEngine(), frames)
        assert GestureLabel.PALM not in [s.current for s in states]
        assert GestureLabel.SWIPE not in [s.current for s in states]

    def test_palm_history_bounded(self):
        engine = GestureEngine()
        run(engine, [open_hand()] * 20)
        assert len(engine.session.palm_history) == 6

    def test_absent_frame_clears_session_history(self):
        engine = GestureEngine()
        run(engine, [open_hand(), open_hand()])
        assert len(engine.session.palm_history) == 2
        engine.process(None, 2 * FRAME_MS)
        assert engine.session.palm_history == []

    def test_closed_pose_between_open_frames_breaks_streak(self):
        states = run(GestureEngine(), [open_hand(), open_hand(), fist(), open_hand()])
        assert [s.current for s in states] == [
            GestureLabel.NONE, GestureLabel.NONE, GestureLabel.FIST, GestureLabel.NONE,
        ]

    def test_classifier_shares_session_tracker(self):
        engine = GestureEngine()
        assert engine.classifier.stability is engine.session.stability
        engine.reset()
        assert engine.classifier.stability is engine.session.stability


class TestSwipe:
    def test_fast_horizontal_motion(self):
        # 40px per 33ms is roughly 1200 px/s
        frames = [fist(offset=(40 * i, 0)) for i in range(3)]
        states = run(GestureEngine(), frames)
        assert states[0].current == GestureLabel.FIST
        assert states[1].current == GestureLabel.SWIPE
        assert states[1].velocity.x == pytest.approx(40 / 0.033)

    def test_swipe_regardless_of_pose(self):
        for make in (open_hand, pinching, pointing):
            engine = GestureEngine()
            engine.process(make(), 0.0)
            assert engine.process(make(offset=(50, 5)), FRAME_MS).current == GestureLabel.SWIPE

    def test_fast_vertical_motion_is_pose(self):
        frames = [fist(offset=(0, 40 * i)) for i in range(3)]
        states = run(GestureEngine(), frames)
        assert all(s.current == GestureLabel.FIST for s in states)

    def test_duplicate_timestamp_gives_zero_velocity(self):
        engine = GestureEngine()
        engine.process(fist(), 100.0)
        state = engine.process(fist(offset=(80, 0)), 100.0)
        assert state.velocity == Point2D(0.0, 0.0)
        assert state.current == GestureLabel.FIST


class TestTransitions:
    def test_previous_tracks_last_current(self):
        frames = [fist(), fist(), pointing(), None, pinching(), pinching(), fist()]
        states = run(GestureEngine(), frames)
        held_previous = GestureLabel.NONE
        for before, after in zip(states, states[1:]):
            if after.current != before.current:
                assert after.previous == before.current
                held_previous = after.previous
            else:
                assert after.previous == held_previous

    def test_absent_after_label(self):
        engine = GestureEngine()
        engine.process(pointing(), 0.0)
        state = engine.process(None, FRAME_MS)
        assert state.current == GestureLabel.NONE
        assert state.previous == GestureLabel.DRAW
        assert state.velocity == Point2D(0.0, 0.0)
        assert state.duration_ms == 0.0

    def test_duration_monotonic_while_held(self):
        states = run(GestureEngine(), [fist()] * 10)
        durations = [s.duration_ms for s in states]
        assert durations == sorted(durations)
        assert durations[-1] == pytest.approx(9 * FRAME_MS)

    def test_duration_resets_at_transition(self):
        states = run(GestureEngine(), [fist()] * 5 + [pointing()] * 3)
        assert states[5].current == GestureLabel.DRAW
        assert states[5].duration_ms == 0.0
        assert states[7].duration_ms == pytest.approx(2 * FRAME_MS)

    def test_none_duration_counts_from_first_frame(self):
        states = run(GestureEngine(), [None, None, None], start=5000.0)
        assert [s.duration_ms for s in states] == [0.0, FRAME_MS, 2 * FRAME_MS]

    def test_on_transition(self):
        engine = GestureEngine()
        seen = []
        engine.on_transition(lambda prev, cur, t: seen.append((prev.value, cur.value, t)))
        run(engine, [fist(), fist(), None])
        assert seen == [("none", "fist", 0.0), ("fist", "none", 2 * FRAME_MS)]


class TestPreconditions:
    def test_strict_rejects_malformed(self):
        with pytest.raises(MalformedFrameError):
            GestureEngine().process(np.zeros((5, 2)), 0.0)

    def test_strict_rejects_backwards_time(self):
        engine = GestureEngine()
        engine.process(fist(), 100.0)
        with pytest.raises(TimestampError):
            engine.process(fist(), 50.0)

    def test_rejected_frame_leaves_session_untouched(self):
        engine = GestureEngine()
        engine.process(pointing(), 0.0)
        with pytest.raises(MalformedFrameError):
            engine.process([[0, 0]] * 3, FRAME_MS)
        assert engine.session.frames == 1
        assert engine.session.current == GestureLabel.DRAW

    def test_lenient_malformed_is_no_hand(self, caplog):
        engine = GestureEngine(EngineConfig(strict=False))
        engine.process(pointing(), 0.0)
        with caplog.at_level(logging.WARNING, logger="airhand.engine"):
            state = engine.process(np.zeros((5, 2)), FRAME_MS)
        assert state.current == GestureLabel.NONE
        assert state.previous == GestureLabel.DRAW
        assert "Malformed" in caplog.text

    def test_lenient_backwards_time_clamped(self, caplog):
        engine = GestureEngine(EngineConfig(strict=False))
        engine.process(fist(), 100.0)
        with caplog.at_level(logging.WARNING, logger="airhand.engine"):
            state = engine.process(fist(offset=(80, 0)), 50.0)
        assert state.velocity == Point2D(0.0, 0.0)
        assert state.duration_ms == 0.0
        assert engine.session.last_ms == 100.0
        assert "backwards" in caplog.text

    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_strict_rejects_non_finite_time(self, bad):
        engine = GestureEngine()
        engine.process(fist(), 0.0)
        with pytest.raises(TimestampError):
            engine.process(fist(), bad)
        assert engine.session.last_ms == 0.0
        assert engine.process(fist(), FRAME_MS).duration_ms == FRAME_MS

    def test_lenient_non_finite_time_reuses_previous(self, caplog):
        engine = GestureEngine(EngineConfig(strict=False))
        engine.process(fist(), 100.0)
        with caplog.at_level(logging.WARNING, logger="airhand.engine"):
            state = engine.process(fist(), float("nan"))
        assert state.duration_ms == 0.0
        assert engine.session.last_ms == 100.0
        assert engine.process(fist(), 133.0).duration_ms == pytest.approx(33.0)
        assert "Non-finite" in caplog.text

    def test_lenient_non_finite_first_frame(self):
        engine = GestureEngine(EngineConfig(strict=False))
        engine.process(None, float("nan"))
        assert engine.session.last_ms == 0.0


class TestSession:
    def test_independent_engines(self):
        a, b = GestureEngine(), GestureEngine()
        a.process(fist(), 0.0)
        b.process(pointing(), 0.0)
        assert a.session.current == GestureLabel.FIST
        assert b.session.current == GestureLabel.DRAW

    def test_velocity_history_bounded(self):
        engine = GestureEngine()
        run(engine, [fist(offset=(i, 0)) for i in range(10)])
        assert len(engine.session.velocity_history) == 2

    def test_last_frame_tracks_absent(self):
        engine = GestureEngine()
        engine.process(fist(), 0.0)
        engine.process(None, FRAME_MS)
        assert engine.session.last_frame is None
        assert engine.session.last_ms == FRAME_MS

    def test_stats(self):
        engine = GestureEngine()
        run(engine, [fist(), None, pointing(), pointing()])
        stats = engine.stats
        assert stats.frames == 4
        assert stats.hand_frames == 3
        assert stats.transitions == 3
        assert stats.current == "draw"
        assert {"velocity", "classification", "state", "total"} <= set(stats.profiler_summary)

    def test_reset(self):
        engine = GestureEngine()
        seen = []
        engine.on_transition(lambda *args: seen.append(args))
        run(engine, [open_hand(), open_hand(), fist()])
        engine.reset()
        assert engine.session.frames == 0
        assert engine.session.palm_history == []
        assert engine.state is None
        # clock restarts and listeners survive
        engine.process(pointing(), 0.0)
        assert len(seen) == 2
