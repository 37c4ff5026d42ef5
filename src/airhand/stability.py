"""Palm stability tracking.

An open hand only counts as "palm" once it has been held still for a few
frames. A hand waved through the frame never accumulates a stable streak.
"""

from __future__ import annotations

from collections import deque

from airhand.geometry import distance, palm_center
from airhand.landmarks import HandFrame, Point2D


class StabilityTracker:
    """Bounded history of palm centers recorded while the hand is open."""

    def __init__(self, radius: float, capacity: int = 6, min_samples: int = 3):
        self.radius = radius
        self.min_samples = min_samples
        self._history: deque[Point2D] = deque(maxlen=capacity)

    def observe(self, frame: HandFrame, is_open: bool) -> bool:
        """Extend the streak on an open-palm frame, otherwise break it.

        Returns:
            Whether the palm is confirmed stable after this observation.
        """
        if not is_open:
            self._history.clear()
            return False
        self._history.append(palm_center(frame))
        return self.is_stable()

    def is_stable(self) -> bool:
        """Every one of the last ``min_samples`` centers lies within
        ``radius`` of the oldest of them."""
        if len(self._history) < self.min_samples:
            return False
        recent = list(self._history)[-self.min_samples:]
        anchor = recent[0]
        return all(distance(p, anchor) <= self.radius for p in recent)

    def clear(self):
        self._history.clear()

    @property
    def samples(self) -> list[Point2D]:
        return list(self._history)

    @property
    def capacity(self) -> int:
        return self._history.maxlen

    def __len__(self) -> int:
        return len(self._history)
