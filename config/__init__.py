"""Configuration management for Config Keeper."""

from .loader import load_settings
from .schema import CallbackSettings, KeeperSettings

__all__ = ["CallbackSettings", "KeeperSettings", "load_settings"]
