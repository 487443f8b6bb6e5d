"""General helper utilities."""

from collections.abc import Awaitable
from typing import Any, TypeVar

from fastapi import HTTPException
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.errors import ErrorCode, KeeperError

T = TypeVar("T")

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.EXISTS: 409,
    ErrorCode.REQUIRED_FIELD: 400,
    ErrorCode.NOT_VALID: 400,
    ErrorCode.BODY_REQUIRED: 400,
    ErrorCode.INVALID_PATH: 400,
    ErrorCode.DATABASE: 500,
    ErrorCode.MARSHAL: 500,
}


def status_for(error: KeeperError) -> int:
    return STATUS_BY_CODE.get(error.code, 500)


def to_http_exception(error: KeeperError) -> HTTPException:
    """Translate a service error into an HTTPException with an ``{"error": ...}`` body."""
    return HTTPException(status_for(error), detail={"error": error.to_dict()})


async def call_service(awaitable: Awaitable[T]) -> T:
    """Await a KeeperService call, turning KeeperError into HTTPException."""
    try:
        return await awaitable
    except KeeperError as e:
        raise to_http_exception(e) from e


def error_body(exc: StarletteHTTPException) -> dict[str, Any]:
    """Response body for an HTTPException: keep ``{"error": ...}`` details as-is."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        return exc.detail
    return {"detail": exc.detail}
