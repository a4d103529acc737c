"""
推荐API端点
"""

from fastapi import APIRouter, Depends

from draw2real.api.deps import get_credits_handler
from draw2real.core.security import CurrentUser, get_current_user
from draw2real.schemas.common import StandardResponse
from draw2real.schemas.payments import ReferralRegisterRequest
from draw2real.services.credits.handler import CreditsHandler

router = APIRouter(tags=["推荐"])


@router.get(
    "",
    response_model=StandardResponse,
    summary="获取推荐码与推荐统计"
)
async def get_referral(
    user: CurrentUser = Depends(get_current_user),
    handler: CreditsHandler = Depends(get_credits_handler)
) -> StandardResponse:
    data = await handler.handle_get_referral(user.id)
    return StandardResponse(status="success", data=data)


@router.post(
    "/register",
    response_model=StandardResponse,
    summary="登记推荐码",
    description="被推荐用户首次购买积分后，推荐人获得奖励积分"
)
async def register_referral(
    request: ReferralRegisterRequest,
    user: CurrentUser = Depends(get_current_user),
    handler: CreditsHandler = Depends(get_credits_handler)
) -> StandardResponse:
    await handler.handle_register_referral(user.id, request.code)
    return StandardResponse(status="success", message="Referral code applied")
