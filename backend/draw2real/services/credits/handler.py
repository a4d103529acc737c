"""
积分与推荐业务处理器
"""

from typing import Any, Dict

from fastapi import HTTPException, status

from draw2real.core.log_utils import get_logger
from draw2real.models.credit import CreditTransaction
from .ledger_service import CreditLedgerService
from .referral_service import ReferralError, ReferralService

logger = get_logger(__name__)


def transaction_to_dict(transaction: CreditTransaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "amount": transaction.amount,
        "type": transaction.kind,
        "description": transaction.description,
        "created_at": transaction.created_at.isoformat() if transaction.created_at else None,
    }


class CreditsHandler:
    """积分与推荐业务处理器"""

    def __init__(self, ledger: CreditLedgerService, referrals: ReferralService):
        self.ledger = ledger
        self.referrals = referrals

    async def handle_get_balance(self, user_id: str) -> Dict[str, Any]:
        try:
            credits = await self.ledger.get_balance(user_id)
        except Exception as e:
            logger.error("查询积分余额失败", exception=e, user_id=user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not load your credits"
            )
        return {"credits": credits}

    async def handle_list_transactions(self, user_id: str, skip: int, limit: int) -> Dict[str, Any]:
        transactions = await self.ledger.list_transactions(user_id, limit=limit, offset=skip)
        return {
            "items": [transaction_to_dict(t) for t in transactions],
            "skip": skip,
            "limit": limit,
        }

    async def handle_get_referral(self, user_id: str) -> Dict[str, Any]:
        try:
            stats = await self.referrals.get_stats(user_id)
        except ReferralError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(e)
            )
        return {
            "code": stats.code,
            "referred_count": stats.referred_count,
            "rewarded_count": stats.rewarded_count,
            "bonus_per_referral": stats.bonus_per_referral,
        }

    async def handle_register_referral(self, user_id: str, code: str) -> None:
        """
        Raises:
            HTTPException: 400 推荐码无效、自我推荐或重复登记
        """
        try:
            await self.referrals.register_referral(user_id, code)
        except ReferralError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e)
            )
