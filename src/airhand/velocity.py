"""Smoothed palm velocity from consecutive frames."""

from __future__ import annotations

from collections import deque
from typing import Optional

from airhand.geometry import palm_center
from airhand.landmarks import ZERO, HandFrame, Point2D


class VelocityEstimator:
    """Palm-center velocity averaged over a short window of raw samples.

    The window is deliberately tiny (2 samples by default) so swipes register
    within a couple of frames. Units are landmark units per second.
    """

    def __init__(self, window: int = 2):
        self._samples: deque[Point2D] = deque(maxlen=window)
        self._last_frame: Optional[HandFrame] = None

    def update(self, frame: Optional[HandFrame], dt: float) -> Point2D:
        """Record ``frame`` and return the smoothed velocity.

        Args:
            frame: Current frame, or None when no hand is visible.
            dt: Seconds since the previous frame. Negative values count as 0.
        """
        dt = max(0.0, dt)
        last, self._last_frame = self._last_frame, frame

        if frame is None:
            self._samples.clear()
            return ZERO
        if last is None or dt == 0:
            return ZERO

        now, prev = palm_center(frame), palm_center(last)
        self._samples.append(Point2D((now.x - prev.x) / dt, (now.y - prev.y) / dt))

        n = len(self._samples)
        return Point2D(
            sum(v.x for v in self._samples) / n,
            sum(v.y for v in self._samples) / n,
        )

    @property
    def samples(self) -> list[Point2D]:
        return list(self._samples)

    @property
    def last_frame(self) -> Optional[HandFrame]:
        return self._last_frame

    def reset(self):
        self._samples.clear()
        self._last_frame = None
