"""Core of Config Keeper: error taxonomy, validation and the callback pipeline."""

from core.errors import ErrorCode, KeeperError

__all__ = [
    "ErrorCode",
    "KeeperError",
]
