"""
积分购买API端点
Stripe Checkout 下单、返回页确认与Webhook
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from draw2real.api.deps import get_payment_handler
from draw2real.core.security import CurrentUser, get_current_user
from draw2real.schemas.common import StandardResponse
from draw2real.schemas.payments import CheckoutConfirmRequest, CheckoutRequest
from draw2real.services.payments.checkout_service import resolve_return_origin
from draw2real.services.payments.handler import PaymentHandler

router = APIRouter(tags=["积分购买"])


@router.get(
    "/packages",
    response_model=StandardResponse,
    summary="获取积分包列表"
)
async def list_packages(
    handler: PaymentHandler = Depends(get_payment_handler)
) -> StandardResponse:
    return StandardResponse(status="success", data=handler.handle_list_packages())


@router.post(
    "/checkout",
    response_model=StandardResponse,
    summary="创建Checkout会话",
    description="返回Stripe支付页面地址，支付完成后跳转到 {origin}/payment-success"
)
async def create_checkout(
    request: CheckoutRequest,
    origin: Optional[str] = Header(None),
    user: CurrentUser = Depends(get_current_user),
    handler: PaymentHandler = Depends(get_payment_handler)
) -> StandardResponse:
    site = resolve_return_origin(request.origin, origin)
    data = await handler.handle_create_checkout(user, request.price_id, site)
    return StandardResponse(status="success", data=data)


@router.post(
    "/confirm",
    response_model=StandardResponse,
    summary="确认支付并发放积分",
    description="支付返回页调用；同一会话的积分只发放一次"
)
async def confirm_checkout(
    request: CheckoutConfirmRequest,
    user: CurrentUser = Depends(get_current_user),
    handler: PaymentHandler = Depends(get_payment_handler)
) -> StandardResponse:
    data = await handler.handle_confirm_checkout(user, request.session_id)
    message = "Credits added" if data["granted"] else "Credits were already added"
    return StandardResponse(status="success", message=message, data=data)


@router.post(
    "/webhook",
    summary="Stripe Webhook",
    include_in_schema=False
)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    handler: PaymentHandler = Depends(get_payment_handler)
):
    payload = await request.body()
    return await handler.handle_webhook(payload, stripe_signature)
