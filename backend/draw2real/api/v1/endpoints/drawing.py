"""
画作捕获API端点
保存、读取和清除当前会话待生成的画作（每个会话只保留一幅，新画作覆盖旧画作）
"""

from fastapi import APIRouter, Depends, File, UploadFile, status

from draw2real.api.deps import get_drawing_handler
from draw2real.core.security import CurrentUser, get_current_user
from draw2real.schemas.common import StandardResponse
from draw2real.schemas.drawing import DrawingUploadRequest
from draw2real.services.drawing.handler import DrawingHandler

router = APIRouter(tags=["画作捕获"])


@router.post(
    "",
    response_model=StandardResponse,
    summary="保存画作（data URL）",
    description="保存相机拍摄或画布导出的画作，格式为 data:image/...;base64,..."
)
async def set_drawing(
    request: DrawingUploadRequest,
    user: CurrentUser = Depends(get_current_user),
    handler: DrawingHandler = Depends(get_drawing_handler)
) -> StandardResponse:
    data = await handler.handle_set_data_url(user.id, request.image_data)
    return StandardResponse(status="success", message="Drawing saved", data=data)


@router.post(
    "/upload",
    response_model=StandardResponse,
    summary="保存画作（文件上传）",
    description="以multipart文件形式上传画作"
)
async def upload_drawing(
    file: UploadFile = File(..., description="画作图片文件"),
    user: CurrentUser = Depends(get_current_user),
    handler: DrawingHandler = Depends(get_drawing_handler)
) -> StandardResponse:
    content = await file.read()
    data = await handler.handle_set_bytes(user.id, content)
    return StandardResponse(status="success", message="Drawing saved", data=data)


@router.get(
    "",
    response_model=StandardResponse,
    summary="获取当前画作"
)
async def get_drawing(
    user: CurrentUser = Depends(get_current_user),
    handler: DrawingHandler = Depends(get_drawing_handler)
) -> StandardResponse:
    data = await handler.handle_get(user.id)
    return StandardResponse(status="success", data=data)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="清除当前画作"
)
async def clear_drawing(
    user: CurrentUser = Depends(get_current_user),
    handler: DrawingHandler = Depends(get_drawing_handler)
) -> None:
    await handler.handle_clear(user.id)
