"""
积分购买业务处理器
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from draw2real.core.log_utils import get_logger
from draw2real.core.security import CurrentUser
from draw2real.services.credits.ledger_service import CreditLedgerError
from .checkout_service import (
    CheckoutError,
    CheckoutGrant,
    CheckoutService,
    InvalidWebhookError,
    PaymentsNotConfiguredError,
)

logger = get_logger(__name__)


def grant_to_dict(grant: CheckoutGrant, balance: Optional[int] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "session_id": grant.session_id,
        "credits": grant.credits,
        "granted": grant.granted,
    }
    if balance is not None:
        data["balance"] = balance
    return data


class PaymentHandler:
    """积分购买业务处理器"""

    def __init__(self, checkout: CheckoutService):
        self.checkout = checkout

    def handle_list_packages(self) -> Dict[str, Any]:
        return {
            "packages": [
                {
                    "price_id": package.price_id,
                    "credits": package.credits,
                    "amount": package.amount,
                    "name": package.name,
                }
                for package in self.checkout.list_packages()
            ]
        }

    async def handle_create_checkout(self, user: CurrentUser, price_id: str, origin: str) -> Dict[str, Any]:
        """
        Raises:
            HTTPException: 503 未配置支付；400 积分包无效或Stripe调用失败
        """
        try:
            return await self.checkout.create_checkout(user, price_id, origin)
        except PaymentsNotConfiguredError as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        except CheckoutError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    async def handle_confirm_checkout(self, user: CurrentUser, session_id: str) -> Dict[str, Any]:
        """
        Raises:
            HTTPException: 503 未配置支付；400 会话无效或未支付；500 积分发放失败
        """
        try:
            grant = await self.checkout.confirm_checkout(user, session_id)
            balance = await self.checkout.ledger.get_balance(user.id)
        except PaymentsNotConfiguredError as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
        except CheckoutError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except CreditLedgerError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
        return grant_to_dict(grant, balance)

    async def handle_webhook(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """
        Raises:
            HTTPException: 400 负载或签名无效；500 未配置密钥或积分发放失败（Stripe会重试）
        """
        try:
            grant = await self.checkout.handle_webhook(payload, sig_header)
        except InvalidWebhookError as e:
            logger.warning("Stripe回调校验失败: {reason}", reason=str(e))
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except PaymentsNotConfiguredError as e:
            logger.error("Stripe回调密钥未配置", exception=e)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
        except CheckoutError as e:
            logger.error("Stripe回调处理失败", exception=e)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except CreditLedgerError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

        if grant is None:
            return {"received": True}
        return {"received": True, **grant_to_dict(grant)}
