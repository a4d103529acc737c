"""
积分购买服务
通过Stripe Checkout购买积分包，支付完成后（返回页确认或Webhook）发放积分

同一个Checkout会话的积分只发放一次：会话ID作为积分流水的reference。
"""

import asyncio
import functools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

import stripe

from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.core.security import CurrentUser
from draw2real.models.credit import CreditKind
from draw2real.services.credits.ledger_service import CreditLedgerService
from draw2real.services.credits.referral_service import ReferralService

logger = get_logger(__name__)

CHECKOUT_COMPLETED_EVENT = "checkout.session.completed"


@dataclass(frozen=True)
class CreditPackage:
    """积分包"""
    price_id: str
    credits: int
    amount: int  # 最小货币单位（便士）
    name: str


CREDIT_PACKAGES: Dict[str, CreditPackage] = {
    package.price_id: package
    for package in (
        CreditPackage("price_1", 10, 100, "10 Credits - £1"),
        CreditPackage("price_5", 50, 500, "50 Credits - £5"),
        CreditPackage("price_10", 100, 1000, "100 Credits - £10"),
        CreditPackage("price_20", 200, 2000, "200 Credits - £20"),
    )
}


class CheckoutError(Exception):
    """购买流程无法继续"""


class PaymentsNotConfiguredError(CheckoutError):
    """未配置Stripe密钥"""


class InvalidWebhookError(CheckoutError):
    """Webhook负载或签名无效"""


@dataclass(frozen=True)
class CheckoutGrant:
    """一次Checkout会话的积分发放结果"""
    session_id: str
    user_id: str
    credits: int
    granted: bool


def resolve_return_origin(
    *candidates: Optional[str],
    allowed: Optional[Iterable[str]] = None,
    default: Optional[str] = None
) -> str:
    """
    选择支付完成后跳回的站点地址

    只接受允许列表（CORS origins与前端地址）中的站点，否则回退到前端地址。
    """
    default = (default or settings.frontend_url).rstrip("/")
    if allowed is None:
        allowed = [*settings.cors_origins, default]
    permitted = {origin.rstrip("/") for origin in allowed}
    for candidate in candidates:
        if candidate and candidate.rstrip("/") in permitted:
            return candidate.rstrip("/")
    if any(candidates):
        logger.warning("拒绝不在允许列表中的跳转站点: {origins}", origins=[c for c in candidates if c])
    return default


def _field(obj: Any, key: str, default: Any = None) -> Any:
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


class CheckoutService:
    """积分购买服务"""

    def __init__(
        self,
        ledger: CreditLedgerService,
        referrals: ReferralService,
        api_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        currency: Optional[str] = None
    ):
        self.ledger = ledger
        self.referrals = referrals
        self._api_key = api_key if api_key is not None else settings.stripe_secret_key
        self._webhook_secret = webhook_secret if webhook_secret is not None else settings.stripe_webhook_secret
        self._currency = currency or settings.stripe_currency

    @staticmethod
    def list_packages() -> list:
        return list(CREDIT_PACKAGES.values())

    async def _call_stripe(self, func: Callable[..., Any], **kwargs: Any) -> Any:
        """在线程池中执行同步的Stripe SDK调用"""
        if not self._api_key:
            raise PaymentsNotConfiguredError("Payments are not configured")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            functools.partial(func, api_key=self._api_key, **kwargs)
        )

    async def create_checkout(self, user: CurrentUser, price_id: str, origin: str) -> Dict[str, str]:
        """
        创建Checkout会话

        Returns:
            Dict: {"url": 跳转地址, "session_id": 会话ID}

        Raises:
            CheckoutError: 积分包不存在或Stripe调用失败
        """
        package = CREDIT_PACKAGES.get(price_id)
        if package is None:
            raise CheckoutError("Invalid price ID")

        origin = origin.rstrip("/")
        try:
            customer_id = None
            if user.email:
                customers = await self._call_stripe(stripe.Customer.list, email=user.email, limit=1)
                existing = _field(customers, "data", [])
                if existing:
                    customer_id = existing[0]["id"]

            session = await self._call_stripe(
                stripe.checkout.Session.create,
                customer=customer_id,
                customer_email=None if customer_id else user.email,
                line_items=[{
                    "price_data": {
                        "currency": self._currency,
                        "product_data": {
                            "name": package.name,
                            "description": f"{package.credits} credits for AI image generation",
                        },
                        "unit_amount": package.amount,
                    },
                    "quantity": 1,
                }],
                mode="payment",
                success_url=(
                    f"{origin}/payment-success?credits={package.credits}"
                    "&session_id={CHECKOUT_SESSION_ID}"
                ),
                cancel_url=f"{origin}/premium",
                metadata={
                    "user_id": user.id,
                    "credits": str(package.credits),
                    "package_type": package.price_id,
                },
            )
        except stripe.StripeError as e:
            logger.error(LogMessages.CHECKOUT_FAILED, exception=e, operation_name="create_checkout")
            raise CheckoutError("Could not start checkout, please try again") from e

        logger.info(LogMessages.CHECKOUT_CREATED, session_id=session["id"], user_id=user.id, package=price_id)
        return {"url": session["url"], "session_id": session["id"]}

    async def confirm_checkout(self, user: CurrentUser, session_id: str) -> CheckoutGrant:
        """
        支付返回页确认：核对会话归属与支付状态后发放积分

        Raises:
            CheckoutError: 会话不存在、不属于当前用户或尚未支付
        """
        try:
            session = await self._call_stripe(stripe.checkout.Session.retrieve, id=session_id)
        except stripe.StripeError as e:
            logger.error(LogMessages.CHECKOUT_FAILED, exception=e, operation_name="confirm_checkout")
            raise CheckoutError("Could not verify the payment") from e

        metadata = _field(session, "metadata", {})
        if _field(metadata, "user_id") != user.id:
            raise CheckoutError("This payment belongs to another account")
        if _field(session, "payment_status") != "paid":
            raise CheckoutError("The payment has not been completed yet")

        return await self._grant(session)

    async def handle_webhook(self, payload: bytes, sig_header: Optional[str]) -> Optional[CheckoutGrant]:
        """
        处理Stripe Webhook

        Returns:
            Optional[CheckoutGrant]: checkout.session.completed 事件的发放结果，其他事件返回None

        Raises:
            PaymentsNotConfiguredError: 未配置Webhook密钥
            InvalidWebhookError: 负载或签名无效
        """
        if not self._webhook_secret:
            raise PaymentsNotConfiguredError("Stripe webhook secret is not configured")

        try:
            event = stripe.Webhook.construct_event(payload, sig_header or "", self._webhook_secret)
        except ValueError as e:
            raise InvalidWebhookError("Invalid payload") from e
        except stripe.SignatureVerificationError as e:
            raise InvalidWebhookError("Invalid signature") from e

        event_type = event["type"]
        logger.info(LogMessages.WEBHOOK_RECEIVED, event_type=event_type)
        if event_type != CHECKOUT_COMPLETED_EVENT:
            return None

        session = event["data"]["object"]
        if _field(session, "payment_status") != "paid":
            return None
        return await self._grant(session)

    async def _grant(self, session: Any) -> CheckoutGrant:
        session_id = session["id"]
        metadata = _field(session, "metadata", {})
        user_id = _field(metadata, "user_id")
        package = CREDIT_PACKAGES.get(_field(metadata, "package_type"))
        if not user_id or package is None:
            raise CheckoutError("The payment is missing its credit package details")

        granted = await self.ledger.credit(
            user_id=user_id,
            amount=package.credits,
            kind=CreditKind.PURCHASE,
            description=f"Purchased {package.name}",
            reference=session_id
        )

        if granted:
            logger.info(LogMessages.CHECKOUT_CONFIRMED, session_id=session_id, credits=package.credits)
            try:
                await self.referrals.reward_referrer(user_id)
            except Exception as e:
                # 积分已发放，推荐奖励失败不影响本次购买
                logger.error(LogMessages.CHECKOUT_FAILED, exception=e, operation_name="reward_referrer")

        return CheckoutGrant(
            session_id=session_id,
            user_id=user_id,
            credits=package.credits,
            granted=granted
        )
