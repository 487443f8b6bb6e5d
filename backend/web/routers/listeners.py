"""Listener endpoints addressed by listener id."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from backend.web.core.dependencies import get_keeper
from backend.web.models.requests import EditListenerRequest
from backend.web.services.keeper_service import KeeperService
from backend.web.utils.helpers import call_service

router = APIRouter(prefix="/api/listeners", tags=["listeners"])

Keeper = Annotated[KeeperService, Depends(get_keeper)]


@router.get("/{listener_id}")
async def get_listener(listener_id: str, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.get_listener(listener_id))


@router.patch("/{listener_id}")
async def edit_listener(listener_id: str, payload: EditListenerRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.edit_listener(listener_id, payload.name, payload.callback_endpoint))


@router.delete("/{listener_id}")
async def delete_listener(listener_id: str, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.delete_listener(listener_id))
