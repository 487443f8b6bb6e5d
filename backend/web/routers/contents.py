"""Content version endpoints addressed by content id."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from backend.web.core.dependencies import get_keeper
from backend.web.models.requests import EditFileContentRequest
from backend.web.services.keeper_service import KeeperService
from backend.web.utils.helpers import call_service

router = APIRouter(prefix="/api/contents", tags=["contents"])


@router.patch("/{content_id}")
async def edit_file_content(
    content_id: str,
    payload: EditFileContentRequest,
    keeper: Annotated[KeeperService, Depends(get_keeper)],
) -> dict[str, Any]:
    """Update a content version; the file's listeners are notified asynchronously."""
    return await call_service(keeper.edit_file_content(content_id, payload.version, payload.content))


@router.delete("/{content_id}")
async def delete_file_content(
    content_id: str,
    keeper: Annotated[KeeperService, Depends(get_keeper)],
) -> dict[str, Any]:
    return await call_service(keeper.delete_file_content(content_id))
