"""Planar hand geometry: distances, palm center and finger extension tests.

All distances are Euclidean in the landmark plane. Extension tests compare
ratios of distances rather than absolute lengths, so they hold regardless of
hand size or distance from the camera.
"""

from __future__ import annotations

import numpy as np

from airhand.landmarks import HandFrame, HandLandmark, Point2D

# (tip, pip) for the four non-thumb fingers
FINGER_JOINTS = {
    "index": (HandLandmark.INDEX_TIP, HandLandmark.INDEX_PIP),
    "middle": (HandLandmark.MIDDLE_TIP, HandLandmark.MIDDLE_PIP),
    "ring": (HandLandmark.RING_TIP, HandLandmark.RING_PIP),
    "pinky": (HandLandmark.PINKY_TIP, HandLandmark.PINKY_PIP),
}

PALM_LANDMARKS = (HandLandmark.WRIST, HandLandmark.INDEX_MCP, HandLandmark.PINKY_MCP)


def distance(a: Point2D, b: Point2D) -> float:
    return float(np.hypot(a.x - b.x, a.y - b.y))


def landmark_distance(frame: HandFrame, a: int, b: int) -> float:
    pts = frame.points
    return float(np.linalg.norm(pts[a] - pts[b]))


def palm_center(frame: HandFrame) -> Point2D:
    """Mean of wrist, index MCP and pinky MCP: a cheap palm centroid proxy."""
    x, y = frame.points[list(PALM_LANDMARKS)].mean(axis=0)
    return Point2D(float(x), float(y))


def is_finger_extended(frame: HandFrame, finger: str, curl_ratio: float) -> bool:
    """Tip is farther from the wrist than the PIP joint, by ``curl_ratio``."""
    tip, pip = FINGER_JOINTS[finger]
    tip_dist = landmark_distance(frame, tip, HandLandmark.WRIST)
    pip_dist = landmark_distance(frame, pip, HandLandmark.WRIST)
    return tip_dist > pip_dist * curl_ratio


def is_thumb_extended(frame: HandFrame, ratio: float) -> bool:
    """Thumb tip sits well away from the index base relative to its last segment.

    The thumb has no PIP joint comparable to the other fingers, so the test
    compares tip→INDEX_MCP against tip→THUMB_IP instead of wrist distances.
    """
    from_index = landmark_distance(frame, HandLandmark.THUMB_TIP, HandLandmark.INDEX_MCP)
    last_segment = landmark_distance(frame, HandLandmark.THUMB_TIP, HandLandmark.THUMB_IP)
    return from_index > last_segment * ratio


def finger_states(frame: HandFrame, curl_ratio: float, thumb_ratio: float) -> dict[str, bool]:
    """Extension state of all five fingers, keyed by finger name."""
    states = {"thumb": is_thumb_extended(frame, thumb_ratio)}
    for finger in FINGER_JOINTS:
        states[finger] = is_finger_extended(frame, finger, curl_ratio)
    return states


def is_open_palm(frame: HandFrame, curl_ratio: float, thumb_ratio: float) -> bool:
    return all(finger_states(frame, curl_ratio, thumb_ratio).values())


def is_fist(frame: HandFrame, curl_ratio: float, thumb_ratio: float) -> bool:
    return not any(finger_states(frame, curl_ratio, thumb_ratio).values())


def is_pointing_index(frame: HandFrame, curl_ratio: float) -> bool:
    """Index extended with middle, ring and pinky curled. Thumb is ignored."""
    if not is_finger_extended(frame, "index", curl_ratio):
        return False
    return not any(
        is_finger_extended(frame, finger, curl_ratio)
        for finger in ("middle", "ring", "pinky")
    )


def pinch_distance(frame: HandFrame) -> float:
    return landmark_distance(frame, HandLandmark.THUMB_TIP, HandLandmark.INDEX_TIP)


def index_tip(frame: HandFrame) -> Point2D:
    return frame[HandLandmark.INDEX_TIP]


def thumb_tip(frame: HandFrame) -> Point2D:
    return frame[HandLandmark.THUMB_TIP]


def pinch_center(frame: HandFrame) -> Point2D:
    """Midpoint between thumb and index tips, the anchor for grab interactions."""
    t, i = thumb_tip(frame), index_tip(frame)
    return Point2D((t.x + i.x) / 2, (t.y + i.y) / 2)


def speed(velocity: Point2D) -> float:
    return float(np.hypot(velocity.x, velocity.y))
