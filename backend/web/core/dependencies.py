"""FastAPI dependencies shared by routers."""

from typing import Any

from fastapi import HTTPException, Request

from backend.web.services.keeper_service import KeeperService


async def get_keeper(request: Request) -> KeeperService:
    """KeeperService built by the lifespan; 503 before startup has finished."""
    keeper: Any = getattr(request.app.state, "keeper", None)
    if keeper is None:
        raise HTTPException(503, "Service is not ready")
    return keeper
