"""
推荐数据访问层
"""

from typing import Optional

from sqlalchemy import select, update

from draw2real.models.referral import Referral, ReferralCode
from .base import BaseRepository


class ReferralRepository(BaseRepository):
    """推荐码与推荐关系Repository"""

    @property
    def model(self):
        return Referral

    async def get_code_for_user(self, user_id: str) -> Optional[ReferralCode]:
        return await self.db.get(ReferralCode, user_id)

    async def get_code(self, code: str) -> Optional[ReferralCode]:
        stmt = select(ReferralCode).where(ReferralCode.code == code)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_code(self, user_id: str, code: str) -> ReferralCode:
        referral_code = ReferralCode(user_id=user_id, code=code)
        self.db.add(referral_code)
        await self.db.flush()
        return referral_code

    async def get_by_referred_user(self, referred_user_id: str) -> Optional[Referral]:
        stmt = select(Referral).where(Referral.referred_user_id == referred_user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_rewarded(self, referral_id: str) -> bool:
        """仅当尚未发放时标记为已发放，返回本次是否标记成功"""
        stmt = (
            update(Referral)
            .where(Referral.id == referral_id, Referral.rewarded.is_(False))
            .values(rewarded=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
