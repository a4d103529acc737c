"""
画作生成API端点
开始生成（后台执行）、轮询状态、取消生成
"""

from fastapi import APIRouter, Depends, status

from draw2real.api.deps import get_generation_handler
from draw2real.core.security import CurrentUser, get_current_user
from draw2real.schemas.common import StandardResponse
from draw2real.services.generation.handler import GenerationHandler

router = APIRouter(tags=["画作生成"])


@router.post(
    "",
    response_model=StandardResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="开始生成写实图片",
    description="扣减1积分后在后台执行 描述 → 合成 → 持久化，立即返回生成状态供轮询"
)
async def start_generation(
    user: CurrentUser = Depends(get_current_user),
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    """
    开始生成

    - 400: 当前没有画作
    - 402: 积分不足
    - 409: 已有进行中的生成
    """
    data = await handler.handle_start(user.id)
    return StandardResponse(status="success", message="Generation started", data=data)


@router.get(
    "/current",
    response_model=StandardResponse,
    summary="查询当前生成状态"
)
async def get_current_generation(
    user: CurrentUser = Depends(get_current_user),
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    data = await handler.handle_get_current(user.id)
    return StandardResponse(status="success", data=data)


@router.post(
    "/cancel",
    response_model=StandardResponse,
    summary="取消进行中的生成"
)
async def cancel_generation(
    user: CurrentUser = Depends(get_current_user),
    handler: GenerationHandler = Depends(get_generation_handler)
) -> StandardResponse:
    data = await handler.handle_cancel(user.id)
    return StandardResponse(status="success", message="Generation cancelled", data=data)
