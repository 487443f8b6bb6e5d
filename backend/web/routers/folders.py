"""Folder endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from backend.web.core.dependencies import get_keeper
from backend.web.models.requests import CreateFolderRequest, EditFolderRequest
from backend.web.services.keeper_service import KeeperService
from backend.web.utils.helpers import call_service

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.post("")
async def create_folder(
    payload: CreateFolderRequest,
    keeper: Annotated[KeeperService, Depends(get_keeper)],
) -> dict[str, Any]:
    return await call_service(keeper.create_folder(payload.name, payload.parent_id))


@router.get("/{folder_id}")
async def get_folder(
    folder_id: str,
    keeper: Annotated[KeeperService, Depends(get_keeper)],
    order_column: str | None = Query(None),
    order_type: str | None = Query(None),
) -> dict[str, Any]:
    """Folder with path, sub-folders and files. ``root`` lists the top level."""
    return await call_service(keeper.get_folder(folder_id, order_column, order_type))


@router.patch("/{folder_id}")
async def edit_folder(
    folder_id: str,
    payload: EditFolderRequest,
    keeper: Annotated[KeeperService, Depends(get_keeper)],
) -> dict[str, Any]:
    return await call_service(keeper.edit_folder(folder_id, payload.name))


@router.delete("/{folder_id}")
async def delete_folder(folder_id: str, keeper: Annotated[KeeperService, Depends(get_keeper)]) -> dict[str, Any]:
    return await call_service(keeper.delete_folder(folder_id))
