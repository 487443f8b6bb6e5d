"""Health check."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException

from backend.web.core.dependencies import get_keeper
from backend.web.services.keeper_service import KeeperService
from core.errors import KeeperError

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(keeper: Annotated[KeeperService, Depends(get_keeper)]) -> dict[str, Any]:
    """Report whether the database answers, plus callback queue depth."""
    try:
        await keeper.ping()
    except KeeperError as e:
        raise HTTPException(503, f"database unavailable: {e.message}") from e
    return {"status": "ok", "callback_queue": keeper.callback_queue()}
