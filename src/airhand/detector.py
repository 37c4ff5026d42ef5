"""MediaPipe Hands adapter producing ``HandFrame``s in canvas coordinates.

The engine does no coordinate transforms of its own, so frames are emitted
already mirrored for a selfie-view canvas: x is flipped and both axes are
scaled from MediaPipe's normalized [0, 1] space to canvas pixels. World
landmarks are mirrored in x and y and carried through for the renderer.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

from airhand.landmarks import HandFrame

try:
    import mediapipe as mp
except ImportError:
    mp = None

logger = logging.getLogger("airhand.detector")


def to_hand_frame(
    landmarks: Any,
    width: float,
    height: float,
    world: Any = None,
    mirror: bool = True,
) -> HandFrame:
    """Convert normalized estimator landmarks to a canvas-space frame.

    Args:
        landmarks: (21, 2+) array of normalized x/y (z ignored).
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        world: Optional (21, 3) world landmarks in meters.
        mirror: Flip horizontally, as for a front-facing camera.
    """
    lm = np.asarray(landmarks, dtype=np.float64)
    xs = lm[:, 0]
    if mirror:
        xs = 1.0 - xs
    points = np.stack([xs * width, lm[:, 1] * height], axis=1)

    world_arr = None
    if world is not None:
        w = np.asarray(world, dtype=np.float64)
        sign = -1.0 if mirror else 1.0
        world_arr = np.stack([sign * w[:, 0], sign * w[:, 1], w[:, 2]], axis=1)

    return HandFrame(points, world_arr)


class HandDetector:
    """Single-hand landmark extraction with MediaPipe Hands.

    Returns at most one ``HandFrame`` per image, or None when no hand is
    visible, matching what ``GestureEngine.process`` expects.
    """

    def __init__(
        self,
        width: int = 640,
        height: int = 480,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.6,
        min_tracking_confidence: float = 0.5,
        mirror: bool = True,
    ):
        if mp is None:
            raise ImportError(
                "mediapipe is required. Install with: pip install 'airhand[camera]'"
            )

        self.width = width
        self.height = height
        self.mirror = mirror
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=1,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        logger.info("MediaPipe Hands initialized (%dx%d canvas)", width, height)

    def set_canvas_size(self, width: int, height: int):
        self.width = width
        self.height = height

    def detect(self, frame_rgb: np.ndarray) -> Optional[HandFrame]:
        """Detect the first hand in an RGB image (H, W, 3), uint8."""
        results = self._hands.process(frame_rgb)

        if not results.multi_hand_landmarks:
            return None

        landmarks = [[lm.x, lm.y] for lm in results.multi_hand_landmarks[0].landmark]
        world = None
        if results.multi_hand_world_landmarks:
            world = [
                [lm.x, lm.y, lm.z]
                for lm in results.multi_hand_world_landmarks[0].landmark
            ]

        return to_hand_frame(landmarks, self.width, self.height, world, self.mirror)

    def close(self):
        """Release MediaPipe resources."""
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
