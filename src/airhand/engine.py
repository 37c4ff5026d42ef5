"""Per-frame gesture engine: velocity → classification → stability → state.

Usage:
    engine = GestureEngine(EngineConfig(pinch_distance=35))
    engine.on_transition(lambda prev, cur, t: print(f"{prev.value} -> {cur.value}"))

    # Once per video frame, from the frame-pump loop:
    state = engine.process(frame_or_none, now_ms)
    if state.current is GestureLabel.DRAW:
        canvas.line_to(index_tip(frame))

The engine is synchronous and single-owner: every call is a bounded
computation over 21 points and histories of at most a few samples. It
mutates its session in place, so concurrent calls against one engine need
external locking. Independent hands or users get independent engines.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from airhand.classifier import PoseClassifier
from airhand.config import EngineConfig
from airhand.errors import MalformedFrameError, TimestampError
from airhand.landmarks import HandFrame, Point2D, as_hand_frame
from airhand.profiler import PipelineProfiler
from airhand.stability import StabilityTracker
from airhand.state import GestureLabel, GestureState, GestureStateMachine, TransitionCallback
from airhand.velocity import VelocityEstimator

logger = logging.getLogger("airhand.engine")


@dataclass
class EngineSession:
    """All rolling state of one capture session, owned by one engine."""
    velocity: VelocityEstimator
    stability: StabilityTracker
    machine: GestureStateMachine
    last_ms: Optional[float] = None
    frames: int = 0
    hand_frames: int = 0

    @classmethod
    def create(cls, config: EngineConfig) -> EngineSession:
        return cls(
            velocity=VelocityEstimator(window=config.velocity_window),
            stability=StabilityTracker(
                radius=config.palm_stability_radius,
                capacity=config.palm_history_size,
                min_samples=config.palm_min_samples,
            ),
            machine=GestureStateMachine(),
        )

    @property
    def last_frame(self) -> Optional[HandFrame]:
        return self.velocity.last_frame

    @property
    def current(self) -> GestureLabel:
        return self.machine.current

    @property
    def previous(self) -> GestureLabel:
        return self.machine.previous

    @property
    def gesture_start_ms(self) -> Optional[float]:
        return self.machine.started_ms

    @property
    def palm_history(self) -> list[Point2D]:
        return self.stability.samples

    @property
    def velocity_history(self) -> list[Point2D]:
        return self.velocity.samples


@dataclass
class EngineStats:
    """Counters and stage timings for one engine."""
    frames: int
    hand_frames: int
    transitions: int
    current: str
    profiler_summary: dict = field(default_factory=dict)


class GestureEngine:
    """Classifies one hand's gesture per frame and tracks how long it has lasted.

    Precondition policy for upstream contract violations, chosen by
    ``config.strict``:

    - strict (default): input that is not a valid 21-landmark frame raises
      ``MalformedFrameError``; a timestamp earlier than the previous call's
      raises ``TimestampError``, as does a NaN or infinite timestamp.
    - lenient: a malformed frame is logged and processed as "no hand"; a
      backwards or non-finite timestamp is logged and replaced by the
      previous one (dt = 0).
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        profiler: Optional[PipelineProfiler] = None,
    ):
        self.config = config or EngineConfig()
        self.profiler = profiler or PipelineProfiler()
        self._session = EngineSession.create(self.config)
        self._listeners: list[TransitionCallback] = []
        self._classifier = PoseClassifier(self.config, self._session.stability)
        self._state: Optional[GestureState] = None
        self._wire_listeners()

    def process(self, frame: Any, now_ms: float) -> GestureState:
        """Classify one frame.

        Args:
            frame: A ``HandFrame``, anything ``HandFrame`` accepts (e.g. a
                (21, 2) array), or None when no hand is visible.
            now_ms: Frame timestamp in milliseconds, non-decreasing per session.

        Returns:
            The gesture state for this frame. Always complete, including on
            frames with no hand.
        """
        session = self._session
        hand = self._coerce_frame(frame)
        now_ms = self._check_timestamp(float(now_ms))
        dt = (now_ms - session.last_ms) / 1000.0 if session.last_ms is not None else 0.0

        with self.profiler.stage("total"):
            with self.profiler.stage("velocity"):
                velocity = session.velocity.update(hand, dt)

            with self.profiler.stage("classification"):
                if hand is None:
                    session.stability.clear()
                    label = GestureLabel.NONE
                else:
                    label = self._classifier.classify(hand, velocity)

            with self.profiler.stage("state"):
                state = session.machine.update(label, now_ms, velocity)

        session.last_ms = now_ms
        session.frames += 1
        if hand is not None:
            session.hand_frames += 1
        self._state = state
        return state

    def on_transition(self, callback: TransitionCallback):
        """Call ``callback(previous, current, now_ms)`` whenever the label changes."""
        self._listeners.append(callback)

    def reset(self):
        """Start a fresh session. Listeners and configuration are kept."""
        self._session = EngineSession.create(self.config)
        self._classifier = PoseClassifier(self.config, self._session.stability)
        self._state = None
        self.profiler.reset()
        self._wire_listeners()

    @property
    def session(self) -> EngineSession:
        return self._session

    @property
    def classifier(self) -> PoseClassifier:
        return self._classifier

    @property
    def state(self) -> Optional[GestureState]:
        """The state returned by the most recent ``process`` call."""
        return self._state

    @property
    def stats(self) -> EngineStats:
        s = self._session
        return EngineStats(
            frames=s.frames,
            hand_frames=s.hand_frames,
            transitions=s.machine.transitions,
            current=s.current.value,
            profiler_summary=self.profiler.summary(),
        )

    def _wire_listeners(self):
        self._session.machine.on_transition(self._dispatch_transition)

    def _dispatch_transition(self, previous: GestureLabel, current: GestureLabel, now_ms: float):
        for cb in self._listeners:
            cb(previous, current, now_ms)

    def _coerce_frame(self, frame: Any) -> Optional[HandFrame]:
        if frame is None or isinstance(frame, HandFrame):
            return frame
        try:
            return as_hand_frame(frame)
        except MalformedFrameError:
            if self.config.strict:
                raise
            logger.warning("Malformed hand frame treated as no hand", exc_info=True)
            return None

    def _check_timestamp(self, now_ms: float) -> float:
        last = self._session.last_ms
        if not math.isfinite(now_ms):
            if self.config.strict:
                raise TimestampError(f"timestamp {now_ms}ms is not finite")
            fallback = last if last is not None else 0.0
            logger.warning("Non-finite timestamp %s, using %.1fms", now_ms, fallback)
            return fallback
        if last is None or now_ms >= last:
            return now_ms
        if self.config.strict:
            raise TimestampError(f"timestamp {now_ms}ms is earlier than previous {last}ms")
        logger.warning("Timestamp went backwards (%.1fms < %.1fms), clamping", now_ms, last)
        return last
