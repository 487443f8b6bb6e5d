"""Error taxonomy for Config Keeper.

Two families live here:

- ``KeeperError`` and subclasses: CRUD/service failures carrying an
  ``ErrorCode``. The HTTP layer turns them into status codes.
- ``DeliveryError`` and subclasses: callback delivery failures. They never
  leave the callback pipeline; they are logged where they are contained.

``ERROR_MESSAGES`` is built once at import and is read-only.
"""

from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import Any, Mapping


class ErrorCode(IntEnum):
    DATABASE = 1
    MARSHAL = 2
    BODY_REQUIRED = 3
    INVALID_PATH = 4
    NOT_FOUND = 5
    NOT_VALID = 6
    EXISTS = 7
    REQUIRED_FIELD = 8


ERROR_MESSAGES: Mapping[ErrorCode, str] = MappingProxyType(
    {
        ErrorCode.DATABASE: "database error",
        ErrorCode.MARSHAL: "marshal error",
        ErrorCode.BODY_REQUIRED: "body required",
        ErrorCode.INVALID_PATH: "invalid path",
        ErrorCode.NOT_FOUND: "not found",
        ErrorCode.NOT_VALID: "not valid",
        ErrorCode.EXISTS: "already exists",
        ErrorCode.REQUIRED_FIELD: "required field is missing",
    }
)


class KeeperError(Exception):
    """Service error with a stable code, a message and optional per-field details."""

    code: ErrorCode = ErrorCode.DATABASE

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | None = None,
        details: Mapping[str, str] | None = None,
        messages: Mapping[ErrorCode, str] = ERROR_MESSAGES,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message or messages.get(self.code, "unknown error")
        self.details = dict(details or {})
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": int(self.code),
            "message": self.message,
            "details": self.details,
        }


class DatabaseError(KeeperError):
    code = ErrorCode.DATABASE


class NotFoundError(KeeperError):
    code = ErrorCode.NOT_FOUND


class AlreadyExistsError(KeeperError):
    code = ErrorCode.EXISTS


class ValidationError(KeeperError):
    code = ErrorCode.NOT_VALID


class RequiredFieldError(ValidationError):
    code = ErrorCode.REQUIRED_FIELD


class BodyRequiredError(ValidationError):
    code = ErrorCode.BODY_REQUIRED


# ============================================================================
# Callback delivery
# ============================================================================


class DeliveryError(Exception):
    """Base class for failures while delivering a callback to one listener."""

    def __init__(self, endpoint: str, message: str) -> None:
        self.endpoint = endpoint
        super().__init__(message)


class RetryableDeliveryError(DeliveryError):
    """5xx response or transport failure; the attempt may be retried."""


class FatalDeliveryError(DeliveryError):
    """Failure that retrying cannot fix (e.g. malformed endpoint URL)."""


class MaxRetriesError(DeliveryError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(endpoint, f"max retries reached for endpoint {endpoint}")


class DeliveryCancelledError(DeliveryError):
    """The stop signal fired before delivery could finish."""

    def __init__(self, endpoint: str) -> None:
        super().__init__(endpoint, f"delivery to {endpoint} cancelled")


class FanOutError(Exception):
    """One or more listener deliveries for a single notification failed."""

    def __init__(self, file_id: str, failures: list[DeliveryError]) -> None:
        self.file_id = file_id
        self.failures = failures
        endpoints = ", ".join(f.endpoint for f in failures)
        super().__init__(f"{len(failures)} delivery(ies) failed for file {file_id}: {endpoints}")
