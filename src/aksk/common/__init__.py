"""Common utilities for aksk."""

from aksk.common.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
