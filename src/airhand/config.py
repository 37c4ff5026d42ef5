"""Engine configuration: classification thresholds and history sizes.

Supplied once at construction and never hot-reloaded. Distance thresholds
are in the same units as the incoming landmarks (canvas pixels for frames
from ``airhand.detector``), velocities in those units per second.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml

from airhand.errors import ConfigError


@dataclass
class EngineConfig:
    """Thresholds and capacities for one ``GestureEngine``.

    Attributes:
        swipe_velocity: Minimum palm speed for a swipe.
        swipe_axis_ratio: Horizontal speed must exceed vertical speed by this factor.
        pinch_distance: Thumb tip to index tip distance below which a pinch fires.
        finger_curl_ratio: A finger is extended when tip→wrist exceeds
            pip→wrist by this factor. Must be > 1.
        thumb_extension_ratio: Thumb is extended when tip→index MCP exceeds
            tip→thumb IP by this factor.
        palm_stability_radius: Maximum drift of the palm center over the
            confirming samples.
        palm_history_size: Capacity of the palm-position history.
        palm_min_samples: Consecutive open-palm samples needed before palm
            can be confirmed.
        velocity_window: Number of raw velocity samples averaged.
        strict: Raise on malformed frames and backwards timestamps instead of
            degrading to "no hand" / zero dt.
    """

    swipe_velocity: float = 800.0
    swipe_axis_ratio: float = 1.5
    pinch_distance: float = 40.0
    finger_curl_ratio: float = 1.1
    thumb_extension_ratio: float = 1.5
    palm_stability_radius: float = 30.0
    palm_history_size: int = 6
    palm_min_samples: int = 3
    velocity_window: int = 2
    strict: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Raise ``ConfigError`` if any value is out of range."""
        for name in ("swipe_velocity", "pinch_distance", "palm_stability_radius"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.finger_curl_ratio <= 1.0:
            raise ConfigError(
                f"finger_curl_ratio must be > 1.0, got {self.finger_curl_ratio}"
            )
        if self.thumb_extension_ratio <= 0 or self.swipe_axis_ratio <= 0:
            raise ConfigError("thumb_extension_ratio and swipe_axis_ratio must be positive")
        if self.velocity_window < 1:
            raise ConfigError(f"velocity_window must be >= 1, got {self.velocity_window}")
        if self.palm_min_samples < 1:
            raise ConfigError(f"palm_min_samples must be >= 1, got {self.palm_min_samples}")
        if self.palm_history_size < self.palm_min_samples:
            raise ConfigError(
                f"palm_history_size ({self.palm_history_size}) must hold at least "
                f"palm_min_samples ({self.palm_min_samples})"
            )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> EngineConfig:
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        """Load a config from YAML. Settings may sit under an ``engine`` key."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at top level")
        return cls.from_dict(data.get("engine", data))

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump({"engine": self.to_dict()}, f, default_flow_style=False, sort_keys=False)
