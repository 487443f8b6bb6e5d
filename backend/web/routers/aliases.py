"""Alias CRUD endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from backend.web.core.dependencies import get_keeper
from backend.web.models.requests import CreateAliasRequest, EditAliasRequest
from backend.web.services.keeper_service import KeeperService
from backend.web.utils.helpers import call_service

router = APIRouter(prefix="/api/aliases", tags=["aliases"])

Keeper = Annotated[KeeperService, Depends(get_keeper)]


@router.post("")
async def create_alias(payload: CreateAliasRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.create_alias(payload.key, payload.value, payload.color))


@router.get("")
async def get_aliases(
    keeper: Keeper,
    key: str | None = Query(None),
    value: str | None = Query(None),
    limit: int | None = Query(None, ge=1),
    offset: int | None = Query(None, ge=0),
    order_by: str | None = Query(None),
    order_type: str | None = Query(None),
) -> list[dict[str, Any]]:
    return await call_service(keeper.get_aliases(key, value, limit, offset, order_by, order_type))


@router.get("/{alias_id}")
async def get_alias(alias_id: str, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.get_alias(alias_id))


@router.patch("/{alias_id}")
async def edit_alias(alias_id: str, payload: EditAliasRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.edit_alias(alias_id, payload.key, payload.value, payload.color))


@router.delete("/{alias_id}")
async def delete_alias(alias_id: str, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.delete_alias(alias_id))
