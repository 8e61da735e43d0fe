"""
AlertMap Exceptions

The grouping and layout engine never raises for malformed alert data; it
falls back to the ``"Unknown"`` bucket instead. These errors cover the outer
surfaces only: loading input files and configuration.
"""

from __future__ import annotations


class AlertMapError(Exception):
    """Base class for AlertMap errors."""


class AlertRecordError(AlertMapError):
    """Alert input could not be read as a list of alert objects."""

    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class ConfigError(AlertMapError):
    """Configuration file is missing or invalid."""
