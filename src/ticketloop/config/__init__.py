"""Configuration loading for settings."""

from ticketloop.config.settings import get_setting, load_settings
from ticketloop.config.utils import deep_merge, load_yaml

__all__ = [
    "load_settings",
    "get_setting",
    "deep_merge",
    "load_yaml",
]
