"""File endpoints, including a file's content versions, listeners and aliases."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from backend.web.core.dependencies import get_keeper
from backend.web.models.requests import (
    CreateFileContentRequest,
    CreateFileRequest,
    CreateListenerRequest,
    EditFileRequest,
    FileAliasesRequest,
)
from backend.web.services.keeper_service import KeeperService
from backend.web.utils.helpers import call_service

router = APIRouter(prefix="/api/files", tags=["files"])

Keeper = Annotated[KeeperService, Depends(get_keeper)]


@router.post("")
async def create_file(payload: CreateFileRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.create_file(payload.name, payload.folder_id))


@router.get("/{file_id}")
async def get_file(file_id: str, keeper: Keeper) -> dict[str, Any]:
    """File with its content versions and aliases."""
    return await call_service(keeper.get_file(file_id))


@router.patch("/{file_id}")
async def edit_file(file_id: str, payload: EditFileRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.edit_file(file_id, payload.name))


@router.delete("/{file_id}")
async def delete_file(file_id: str, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.delete_file(file_id))


# ---------------------------------------------------------------------------
# Contents
# ---------------------------------------------------------------------------


@router.post("/{file_id}/contents")
async def create_file_content(file_id: str, payload: CreateFileContentRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(
        keeper.create_file_content(file_id, payload.version, payload.content, payload.format)
    )


@router.get("/{file_id}/contents")
async def get_file_contents(
    file_id: str,
    keeper: Keeper,
    version: str | None = Query(None),
) -> list[dict[str, Any]]:
    return await call_service(keeper.get_file_contents(file_id, version))


# ---------------------------------------------------------------------------
# Listeners
# ---------------------------------------------------------------------------


@router.post("/{file_id}/listeners")
async def create_listener(file_id: str, payload: CreateListenerRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.create_listener(file_id, payload.name, payload.callback_endpoint))


@router.get("/{file_id}/listeners")
async def get_file_listeners(file_id: str, keeper: Keeper) -> list[dict[str, Any]]:
    return await call_service(keeper.get_file_listeners(file_id))


# ---------------------------------------------------------------------------
# Aliases
# ---------------------------------------------------------------------------


@router.post("/{file_id}/aliases")
async def add_file_aliases(file_id: str, payload: FileAliasesRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.add_aliases_to_file(file_id, payload.aliases))


@router.get("/{file_id}/aliases")
async def get_file_aliases(file_id: str, keeper: Keeper) -> list[dict[str, Any]]:
    return await call_service(keeper.get_file_aliases(file_id))


@router.delete("/{file_id}/aliases")
async def remove_file_aliases(file_id: str, payload: FileAliasesRequest, keeper: Keeper) -> dict[str, Any]:
    return await call_service(keeper.remove_aliases_from_file(file_id, payload.aliases))
