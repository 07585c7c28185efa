"""Utility modules for Auto Leveler."""

from .config import Settings, get_settings_path
from .exceptions import *
from .logging_config import setup_logging

__all__ = [
    "Settings",
    "get_settings_path",
    "setup_logging",
]
