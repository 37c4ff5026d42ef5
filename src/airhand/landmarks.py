"""Hand landmark types produced by the pose estimator.

A ``HandFrame`` is 21 anatomically indexed 2D points (MediaPipe Hands
ordering), already in the consumer's coordinate space. Frames are read-only:
the engine never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional, Sequence

import numpy as np

from airhand.errors import MalformedFrameError


class HandLandmark(IntEnum):
    """MediaPipe hand landmark indices."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


NUM_LANDMARKS = 21


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Point3D:
    x: float
    y: float
    z: float


ZERO = Point2D(0.0, 0.0)


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


class HandFrame:
    """One frame of hand landmarks.

    Precondition: exactly 21 landmarks with finite x/y. Anything else is a
    contract violation by the estimator and raises ``MalformedFrameError``
    at construction, so every ``HandFrame`` in circulation is well formed.

    Args:
        points: Array-like of shape (21, 2) or (21, 3); z is dropped.
        world: Optional (21, 3) world-space landmarks, carried through for
            the renderer and never read by classification.
    """

    __slots__ = ("_points", "_world")

    def __init__(self, points: Any, world: Any = None):
        try:
            arr = np.array(points, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise MalformedFrameError(f"landmarks are not numeric: {e}") from e

        if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] < 2:
            raise MalformedFrameError(
                f"expected {NUM_LANDMARKS} landmarks with x/y, got shape {arr.shape}"
            )
        arr = np.ascontiguousarray(arr[:, :2])
        if not np.all(np.isfinite(arr)):
            raise MalformedFrameError("landmark coordinates must be finite")

        world_arr = None
        if world is not None:
            world_arr = np.array(world, dtype=np.float64)
            if world_arr.shape != (NUM_LANDMARKS, 3):
                raise MalformedFrameError(
                    f"expected world landmarks of shape (21, 3), got {world_arr.shape}"
                )
            world_arr = _readonly(world_arr)

        self._points = _readonly(arr)
        self._world = world_arr

    @classmethod
    def from_points(
        cls,
        points: Sequence[Any],
        world: Optional[Sequence[Any]] = None,
    ) -> HandFrame:
        """Build a frame from ``Point2D`` objects, ``(x, y)`` pairs or ``{"x", "y"}`` dicts."""
        try:
            coords = [_xy(p) for p in points]
            world_coords = [_xyz(p) for p in world] if world is not None else None
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedFrameError(f"unreadable landmark: {e!r}") from e
        return cls(coords, world_coords)

    @classmethod
    def from_array(cls, array: Any, world: Any = None) -> HandFrame:
        return cls(array, world)

    @property
    def points(self) -> np.ndarray:
        """Read-only (21, 2) landmark array."""
        return self._points

    @property
    def world(self) -> Optional[np.ndarray]:
        return self._world

    def __getitem__(self, index: int) -> Point2D:
        x, y = self._points[int(index)]
        return Point2D(float(x), float(y))

    def __len__(self) -> int:
        return NUM_LANDMARKS

    def __iter__(self):
        for i in range(NUM_LANDMARKS):
            yield self[i]

    def world_points(self) -> Optional[list[Point3D]]:
        if self._world is None:
            return None
        return [Point3D(float(x), float(y), float(z)) for x, y, z in self._world]

    def to_dict(self) -> dict:
        data: dict = {"landmarks": self._points.tolist()}
        if self._world is not None:
            data["world"] = self._world.tolist()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> HandFrame:
        return cls(data["landmarks"], data.get("world"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandFrame):
            return NotImplemented
        if not np.array_equal(self._points, other._points):
            return False
        if self._world is None or other._world is None:
            return self._world is other._world
        return np.array_equal(self._world, other._world)

    def __hash__(self) -> int:
        world = b"" if self._world is None else self._world.tobytes()
        return hash((self._points.tobytes(), world))

    def __repr__(self) -> str:
        wrist = self[HandLandmark.WRIST]
        return f"HandFrame(wrist=({wrist.x:.1f}, {wrist.y:.1f}))"


def _xy(p: Any) -> tuple[float, float]:
    if isinstance(p, (Point2D, Point3D)):
        return p.x, p.y
    if isinstance(p, dict):
        return p["x"], p["y"]
    return p[0], p[1]


def _xyz(p: Any) -> tuple[float, float, float]:
    if isinstance(p, Point3D):
        return p.x, p.y, p.z
    if isinstance(p, dict):
        return p["x"], p["y"], p["z"]
    return p[0], p[1], p[2]


def as_hand_frame(obj: Any) -> HandFrame:
    """Coerce estimator output (array, point list or dict) into a ``HandFrame``."""
    if isinstance(obj, HandFrame):
        return obj
    if isinstance(obj, dict):
        if "landmarks" not in obj:
            raise MalformedFrameError("frame dict has no 'landmarks' key")
        return HandFrame.from_dict(obj)
    if isinstance(obj, (list, tuple)) and obj and isinstance(obj[0], (Point2D, Point3D, dict)):
        return HandFrame.from_points(obj)
    return HandFrame(obj)
