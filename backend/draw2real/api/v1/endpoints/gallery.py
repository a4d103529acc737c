"""
画廊API端点
"""

from fastapi import APIRouter, Depends, Query

from draw2real.api.deps import get_gallery_handler
from draw2real.core.security import CurrentUser, get_current_user
from draw2real.schemas.common import StandardResponse
from draw2real.services.gallery.handler import GalleryHandler

router = APIRouter(tags=["画廊"])


@router.get(
    "",
    response_model=StandardResponse,
    summary="获取我的画廊",
    description="按时间倒序返回原图与生成图配对记录"
)
async def list_gallery(
    skip: int = Query(0, ge=0, description="跳过记录数"),
    limit: int = Query(20, ge=1, le=100, description="每页记录数"),
    user: CurrentUser = Depends(get_current_user),
    handler: GalleryHandler = Depends(get_gallery_handler)
) -> StandardResponse:
    data = await handler.handle_list(user.id, skip=skip, limit=limit)
    return StandardResponse(
        status="success",
        message=f"Loaded {len(data['items'])} images",
        data=data
    )
