"""Configuration management for lifecyclekit."""

from lifecyclekit.config.settings import DispatcherSettings, load_settings

__all__ = [
    "DispatcherSettings",
    "load_settings",
]
