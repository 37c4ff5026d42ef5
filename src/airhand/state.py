"""Gesture labels, per-frame output records and the gesture state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from airhand.landmarks import ZERO, Point2D

logger = logging.getLogger("airhand.state")


class GestureLabel(str, Enum):
    NONE = "none"
    DRAW = "draw"
    PINCH = "pinch"
    FIST = "fist"
    PALM = "palm"
    SWIPE = "swipe"


@dataclass(frozen=True)
class GestureState:
    """Engine output for one frame."""
    current: GestureLabel
    previous: GestureLabel
    duration_ms: float
    velocity: Point2D = ZERO
    confidence: float = 1.0  # reserved for probabilistic scoring

    def to_dict(self) -> dict:
        return {
            "current": self.current.value,
            "previous": self.previous.value,
            "duration_ms": self.duration_ms,
            "velocity": self.velocity.to_dict(),
            "confidence": self.confidence,
        }


TransitionCallback = Callable[[GestureLabel, GestureLabel, float], None]


class GestureStateMachine:
    """Tracks the current/previous label pair and when the current one began.

    ``previous`` only changes at a transition, and duration restarts from the
    transition frame's timestamp.
    """

    def __init__(self, now_ms: Optional[float] = None):
        self.current = GestureLabel.NONE
        self.previous = GestureLabel.NONE
        self.started_ms: Optional[float] = now_ms
        self.transitions = 0
        self._listeners: list[TransitionCallback] = []

    def on_transition(self, callback: TransitionCallback):
        """Register ``callback(previous, current, now_ms)`` for label changes."""
        self._listeners.append(callback)

    def update(
        self,
        label: GestureLabel,
        now_ms: float,
        velocity: Point2D = ZERO,
    ) -> GestureState:
        if self.started_ms is None:
            # The session clock starts with the first frame.
            self.started_ms = now_ms

        if label != self.current:
            self.previous, self.current = self.current, label
            self.started_ms = now_ms
            self.transitions += 1
            logger.debug("Gesture %s -> %s at %.1fms", self.previous.value, label.value, now_ms)
            for cb in self._listeners:
                cb(self.previous, self.current, now_ms)

        return GestureState(
            current=self.current,
            previous=self.previous,
            duration_ms=now_ms - self.started_ms,
            velocity=velocity,
        )

    def reset(self):
        self.current = GestureLabel.NONE
        self.previous = GestureLabel.NONE
        self.started_ms = None
        self.transitions = 0
