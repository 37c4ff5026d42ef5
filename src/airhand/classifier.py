"""Rule-based pose classification.

Rules are evaluated in a fixed priority order and the first match wins:

    swipe > pinch > fist > palm > draw > none

Motion (swipe) is checked before any finger pose, so a fast lateral wave is
reported as a swipe whatever the hand shape. The palm rule is gated by the
stability tracker: an open hand that has not yet been held still does not
match and classification falls through to the later rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from airhand import geometry
from airhand.config import EngineConfig
from airhand.landmarks import HandFrame, Point2D
from airhand.stability import StabilityTracker
from airhand.state import GestureLabel

RulePredicate = Callable[[HandFrame, Point2D], bool]


@dataclass(frozen=True)
class GestureRule:
    """Maps a predicate over (frame, velocity) to a label."""
    label: GestureLabel
    predicate: RulePredicate
    description: str = ""

    def matches(self, frame: HandFrame, velocity: Point2D) -> bool:
        return self.predicate(frame, velocity)


class PoseClassifier:
    """Maps a hand frame and its palm velocity to one ``GestureLabel``.

    Apart from the palm stability bookkeeping, classification is a pure
    function of its inputs. Any frame that fails the open-palm test breaks
    the streak, even when an earlier rule claims it; the palm rule itself
    only extends the streak when evaluation reaches it.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        stability: Optional[StabilityTracker] = None,
    ):
        self.config = config or EngineConfig()
        self.stability = stability if stability is not None else StabilityTracker(
            radius=self.config.palm_stability_radius,
            capacity=self.config.palm_history_size,
            min_samples=self.config.palm_min_samples,
        )
        self.rules: list[GestureRule] = [
            GestureRule(GestureLabel.SWIPE, self._is_swipe, "fast, mostly horizontal palm motion"),
            GestureRule(GestureLabel.PINCH, self._is_pinch, "thumb tip touching index tip"),
            GestureRule(GestureLabel.FIST, self._is_fist, "all five fingers curled"),
            GestureRule(GestureLabel.PALM, self._is_stable_palm, "open hand held still"),
            GestureRule(GestureLabel.DRAW, self._is_draw, "index pointing, others curled"),
        ]

    def classify(self, frame: HandFrame, velocity: Point2D) -> GestureLabel:
        if not self._is_open(frame):
            self.stability.clear()
        for rule in self.rules:
            if rule.matches(frame, velocity):
                return rule.label
        return GestureLabel.NONE

    def evaluate(self, frame: HandFrame, velocity: Point2D) -> dict[str, bool]:
        """Report which rules match this frame, for diagnostics.

        Palm is reported from its finger test alone; the stability history
        is not touched.
        """
        return {
            GestureLabel.SWIPE.value: self._is_swipe(frame, velocity),
            GestureLabel.PINCH.value: self._is_pinch(frame, velocity),
            GestureLabel.FIST.value: self._is_fist(frame, velocity),
            GestureLabel.PALM.value: self._is_open(frame),
            GestureLabel.DRAW.value: self._is_draw(frame, velocity),
        }

    # --- rules ---

    def _is_swipe(self, frame: HandFrame, velocity: Point2D) -> bool:
        cfg = self.config
        return (
            geometry.speed(velocity) > cfg.swipe_velocity
            and abs(velocity.x) > abs(velocity.y) * cfg.swipe_axis_ratio
        )

    def _is_pinch(self, frame: HandFrame, velocity: Point2D) -> bool:
        return geometry.pinch_distance(frame) < self.config.pinch_distance

    def _is_fist(self, frame: HandFrame, velocity: Point2D) -> bool:
        cfg = self.config
        return geometry.is_fist(frame, cfg.finger_curl_ratio, cfg.thumb_extension_ratio)

    def _is_stable_palm(self, frame: HandFrame, velocity: Point2D) -> bool:
        return self.stability.observe(frame, self._is_open(frame))

    def _is_draw(self, frame: HandFrame, velocity: Point2D) -> bool:
        return geometry.is_pointing_index(frame, self.config.finger_curl_ratio)

    def _is_open(self, frame: HandFrame) -> bool:
        cfg = self.config
        return geometry.is_open_palm(frame, cfg.finger_curl_ratio, cfg.thumb_extension_ratio)
