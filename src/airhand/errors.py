"""Exception types raised on upstream contract violations."""


class AirhandError(Exception):
    """Base class for airhand errors."""


class MalformedFrameError(AirhandError, ValueError):
    """A hand frame without exactly 21 finite 2D landmarks."""


class TimestampError(AirhandError, ValueError):
    """A frame timestamp earlier than the previous one in the session."""


class ConfigError(AirhandError, ValueError):
    """An engine configuration value outside its valid range."""
