"""Content format listing."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from backend.web.core.dependencies import get_keeper
from backend.web.services.keeper_service import KeeperService
from backend.web.utils.helpers import call_service

router = APIRouter(prefix="/api/content-formats", tags=["content-formats"])


@router.get("")
async def get_content_formats(keeper: Annotated[KeeperService, Depends(get_keeper)]) -> list[dict[str, Any]]:
    return await call_service(keeper.get_content_formats())
