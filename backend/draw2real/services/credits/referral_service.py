"""
推荐服务
管理推荐码、推荐关系，以及被推荐用户首次购买后给推荐人发放奖励
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.models.credit import CreditKind
from draw2real.repositories.referral import ReferralRepository
from draw2real.services.credits.ledger_service import CreditLedgerService
from draw2real.utils.id_utils import generate_code

logger = get_logger(__name__)

CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 5


class ReferralError(Exception):
    """推荐码无效或推荐关系不允许"""


@dataclass(frozen=True)
class ReferralStats:
    code: str
    referred_count: int
    rewarded_count: int
    bonus_per_referral: int


class ReferralService:
    """推荐服务"""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ledger: CreditLedgerService,
        bonus_credits: Optional[int] = None
    ):
        self._session_factory = session_factory
        self._ledger = ledger
        self._bonus_credits = bonus_credits or settings.referral_bonus_credits

    async def get_or_create_code(self, user_id: str) -> str:
        """获取用户的推荐码，没有时生成一个"""
        for _ in range(MAX_CODE_ATTEMPTS):
            async with self._session_factory() as session:
                repository = ReferralRepository(session)
                existing = await repository.get_code_for_user(user_id)
                if existing is not None:
                    return existing.code

                code = generate_code(CODE_LENGTH)
                try:
                    await repository.create_code(user_id, code)
                    await session.commit()
                    return code
                except IntegrityError:
                    # 推荐码碰撞或并发创建，重新查询/生成
                    await session.rollback()
                    continue

        raise ReferralError("Could not allocate a referral code")

    async def register_referral(self, user_id: str, code: str) -> None:
        """
        登记推荐关系

        Raises:
            ReferralError: 推荐码不存在、自我推荐或用户已被推荐过
        """
        normalized = code.strip().upper()
        async with self._session_factory() as session:
            repository = ReferralRepository(session)
            referral_code = await repository.get_code(normalized)
            if referral_code is None:
                raise ReferralError("Unknown referral code")
            if referral_code.user_id == user_id:
                raise ReferralError("You cannot use your own referral code")
            if await repository.get_by_referred_user(user_id) is not None:
                raise ReferralError("A referral code has already been applied to this account")

            try:
                await repository.add(
                    referrer_id=referral_code.user_id,
                    referred_user_id=user_id,
                    rewarded=False
                )
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ReferralError("A referral code has already been applied to this account") from e

        logger.info(LogMessages.REFERRAL_REGISTERED, referrer_id=referral_code.user_id, referred_id=user_id)

    async def reward_referrer(self, referred_user_id: str) -> bool:
        """
        被推荐用户完成购买后给推荐人发放奖励，每个推荐关系只发放一次

        Returns:
            bool: 本次调用是否发放了奖励
        """
        async with self._session_factory() as session:
            referral = await ReferralRepository(session).get_by_referred_user(referred_user_id)
            if referral is None or referral.rewarded:
                return False
            referral_id = referral.id
            referrer_id = referral.referrer_id

        granted = await self._ledger.credit(
            user_id=referrer_id,
            amount=self._bonus_credits,
            kind=CreditKind.REFERRAL,
            description="Referral bonus",
            reference=f"referral:{referral_id}"
        )

        async with self._session_factory() as session:
            await ReferralRepository(session).mark_rewarded(referral_id)
            await session.commit()

        if granted:
            logger.info(LogMessages.REFERRAL_REWARDED, referrer_id=referrer_id, referred_id=referred_user_id)
        return granted

    async def get_stats(self, user_id: str) -> ReferralStats:
        code = await self.get_or_create_code(user_id)
        async with self._session_factory() as session:
            repository = ReferralRepository(session)
            referred_count = await repository.count(referrer_id=user_id)
            rewarded_count = await repository.count(referrer_id=user_id, rewarded=True)
        return ReferralStats(
            code=code,
            referred_count=referred_count,
            rewarded_count=rewarded_count,
            bonus_per_referral=self._bonus_credits
        )
