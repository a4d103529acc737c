"""
积分API端点
"""

from fastapi import APIRouter, Depends, Query

from draw2real.api.deps import get_credits_handler
from draw2real.core.security import CurrentUser, get_current_user
from draw2real.schemas.common import StandardResponse
from draw2real.services.credits.handler import CreditsHandler

router = APIRouter(tags=["积分"])


@router.get(
    "",
    response_model=StandardResponse,
    summary="查询积分余额"
)
async def get_balance(
    user: CurrentUser = Depends(get_current_user),
    handler: CreditsHandler = Depends(get_credits_handler)
) -> StandardResponse:
    data = await handler.handle_get_balance(user.id)
    return StandardResponse(status="success", data=data)


@router.get(
    "/transactions",
    response_model=StandardResponse,
    summary="查询积分流水",
    description="按时间倒序返回积分变动记录"
)
async def list_transactions(
    skip: int = Query(0, ge=0, description="跳过记录数"),
    limit: int = Query(20, ge=1, le=100, description="每页记录数"),
    user: CurrentUser = Depends(get_current_user),
    handler: CreditsHandler = Depends(get_credits_handler)
) -> StandardResponse:
    data = await handler.handle_list_transactions(user.id, skip=skip, limit=limit)
    return StandardResponse(status="success", data=data)
