"""
Configuration Module

Application configuration settings.
"""

from orderflow.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
