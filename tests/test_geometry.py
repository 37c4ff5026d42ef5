"""Tests for distance, palm center and finger extension tests."""

import pytest

from airhand import geometry
from airhand.landmarks import HandLandmark, Point2D

from hands import ALL_FINGERS, PALM_CENTER, fist, make_hand, open_hand, pinching, pointing

CURL = 1.1
THUMB = 1.5


class TestDistance:
    def test_pythagorean(self):
        assert geometry.distance(Point2D(0, 0), Point2D(3, 4)) == pytest.approx(5.0)

    def test_symmetric(self):
        a, b = Point2D(1.5, -2), Point2D(-4, 7)
        assert geometry.distance(a, b) == pytest.approx(geometry.distance(b, a))

    def test_landmark_distance(self):
        frame = open_hand()
        d = geometry.landmark_distance(frame, HandLandmark.WRIST, HandLandmark.INDEX_MCP)
        assert d == pytest.approx(geometry.distance(Point2D(320, 400), Point2D(300, 320)))

    def test_speed(self):
        assert geometry.speed(Point2D(-6, 8)) == pytest.approx(10.0)


class TestPalmCenter:
    def test_mean_of_three_landmarks(self):
        c = geometry.palm_center(open_hand())
        assert c.x == pytest.approx(PALM_CENTER[0])
        assert c.y == pytest.approx(PALM_CENTER[1])

    def test_follows_translation(self):
        c = geometry.palm_center(open_hand(offset=(15, -5)))
        assert c.x == pytest.approx(PALM_CENTER[0] + 15)
        assert c.y == pytest.approx(PALM_CENTER[1] - 5)

    def test_ignores_fingertips(self):
        assert geometry.palm_center(open_hand()) == geometry.palm_center(fist())


class TestFingerExtension:
    @pytest.mark.parametrize("finger", ["index", "middle", "ring", "pinky"])
    def test_extended(self, finger):
        assert geometry.is_finger_extended(open_hand(), finger, CURL)

    @pytest.mark.parametrize("finger", ["index", "middle", "ring", "pinky"])
    def test_curled(self, finger):
        assert not geometry.is_finger_extended(fist(), finger, CURL)

    def test_ratio_raises_bar(self):
        # tip/pip distance ratio of the index finger is about 1.41
        assert geometry.is_finger_extended(open_hand(), "index", 1.3)
        assert not geometry.is_finger_extended(open_hand(), "index", 1.5)

    def test_scale_invariant(self):
        frame = open_hand()
        scaled = type(frame)(frame.points * 0.25)
        for finger in ("index", "middle", "ring", "pinky"):
            assert geometry.is_finger_extended(scaled, finger, CURL)

    def test_thumb_extended(self):
        assert geometry.is_thumb_extended(open_hand(), THUMB)

    def test_thumb_curled(self):
        assert not geometry.is_thumb_extended(fist(), THUMB)

    def test_finger_states(self):
        states = geometry.finger_states(make_hand(("thumb", "ring")), CURL, THUMB)
        assert states == {
            "thumb": True, "index": False, "middle": False, "ring": True, "pinky": False,
        }


class TestPoses:
    def test_open_palm(self):
        assert geometry.is_open_palm(open_hand(), CURL, THUMB)
        assert not geometry.is_fist(open_hand(), CURL, THUMB)

    def test_open_palm_needs_thumb(self):
        four = make_hand(("index", "middle", "ring", "pinky"))
        assert not geometry.is_open_palm(four, CURL, THUMB)

    def test_fist(self):
        assert geometry.is_fist(fist(), CURL, THUMB)
        assert not geometry.is_open_palm(fist(), CURL, THUMB)

    def test_fist_needs_thumb_curled(self):
        assert not geometry.is_fist(make_hand(("thumb",)), CURL, THUMB)

    def test_pointing(self):
        assert geometry.is_pointing_index(pointing(), CURL)

    def test_pointing_ignores_thumb(self):
        assert geometry.is_pointing_index(make_hand(("thumb", "index")), CURL)

    def test_pointing_rejects_second_finger(self):
        assert not geometry.is_pointing_index(make_hand(("index", "middle")), CURL)

    def test_pinch_distance(self):
        assert geometry.pinch_distance(pinching()) < 40
        for frame in (open_hand(), fist(), pointing()):
            assert geometry.pinch_distance(frame) > 40


class TestPointerHelpers:
    def test_tips(self):
        frame = open_hand()
        assert geometry.index_tip(frame) == Point2D(300.0, 230.0)
        assert geometry.thumb_tip(frame) == Point2D(225.0, 310.0)

    def test_pinch_center_is_midpoint(self):
        c = geometry.pinch_center(pinching())
        assert c == Point2D(301.0, 235.0)


def test_all_fingers_listed():
    assert set(geometry.FINGER_JOINTS) | {"thumb"} == set(ALL_FINGERS)
