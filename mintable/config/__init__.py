"""Configuration management module."""

from mintable.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
