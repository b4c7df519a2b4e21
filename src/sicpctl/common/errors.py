from __future__ import annotations

__all__ = [
    "SICPError",
    "UsageError",
    "ConfigError",
    "TransportError",
    "EncodingError",
]


class SICPError(Exception):
    """Base class for everything this package raises on purpose."""


class UsageError(SICPError, ValueError):
    """Unknown or empty command selector. Shown as help, not as a crash."""


class ConfigError(SICPError):
    """Unsupported baud rate or a failed line-configuration call."""


class TransportError(SICPError):
    """Port open, write or read failed, including short writes."""


class EncodingError(SICPError, ValueError):
    """Payload does not fit the single-byte length field."""
