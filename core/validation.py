"""Input cleanup and required-field checks shared by the service layer."""

from __future__ import annotations

from typing import Any

from core.errors import RequiredFieldError, ValidationError

_FORBIDDEN_NAME_CHARS = ("/", "\\", "'", '"')


def clear_name(name: str | None) -> str:
    """Strip path separators and quotes from a folder/file name.

    Raises ValidationError when nothing is left.
    """
    cleaned = name or ""
    for ch in _FORBIDDEN_NAME_CHARS:
        cleaned = cleaned.replace(ch, "")
    if not cleaned:
        raise ValidationError("not valid name")
    return cleaned


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (str, int, float)):
        return not value
    return False


def missing_fields(fields: dict[str, Any]) -> dict[str, str]:
    return {name: "required" for name, value in fields.items() if _is_missing(value)}


def require_fields(fields: dict[str, Any]) -> None:
    """Raise RequiredFieldError listing every empty field in ``fields``."""
    missing = missing_fields(fields)
    if missing:
        raise RequiredFieldError(details=missing)
