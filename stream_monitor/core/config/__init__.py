"""Configuration module for the stream monitor."""

from .settings import DEFAULT_CAPTURE_BYTE_BUDGET, DELIVERY_MODES, Settings, get_settings

VERSION = "1.0.0"

__all__ = [
    "get_settings",
    "Settings",
    "VERSION",
    "DELIVERY_MODES",
    "DEFAULT_CAPTURE_BYTE_BUDGET",
]
