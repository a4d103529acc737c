"""
积分数据访问层
"""

from typing import List, Optional

from sqlalchemy import desc, func, select, update

from draw2real.models.credit import CreditTransaction, UserCredit
from .base import BaseRepository


class CreditRepository(BaseRepository):
    """积分余额与流水Repository"""

    @property
    def model(self):
        return UserCredit

    async def get_account(self, user_id: str) -> Optional[UserCredit]:
        stmt = select(UserCredit).where(UserCredit.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_balance(self, user_id: str) -> int:
        """查询余额，没有记录时返回0"""
        stmt = select(UserCredit.credits).where(UserCredit.user_id == user_id)
        result = await self.db.execute(stmt)
        balance = result.scalar_one_or_none()
        return balance or 0

    async def create_account(self, user_id: str) -> UserCredit:
        """创建零余额账户"""
        return await self.add(user_id=user_id, credits=0)

    async def decrement_if_sufficient(self, user_id: str, amount: int) -> Optional[int]:
        """
        条件扣减：仅当余额不少于amount时扣减

        Returns:
            扣减后的余额；余额不足或账户不存在时返回None
        """
        stmt = (
            update(UserCredit)
            .where(UserCredit.user_id == user_id, UserCredit.credits >= amount)
            .values(credits=UserCredit.credits - amount)
            .returning(UserCredit.credits)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def increment(self, user_id: str, amount: int) -> Optional[int]:
        """增加余额，返回增加后的余额"""
        stmt = (
            update(UserCredit)
            .where(UserCredit.user_id == user_id)
            .values(credits=UserCredit.credits + amount)
            .returning(UserCredit.credits)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def add_transaction(
        self,
        user_id: str,
        amount: int,
        kind: str,
        description: Optional[str] = None,
        reference: Optional[str] = None
    ) -> CreditTransaction:
        transaction = CreditTransaction(
            user_id=user_id,
            amount=amount,
            kind=kind,
            description=description,
            reference=reference
        )
        self.db.add(transaction)
        await self.db.flush()
        return transaction

    async def reference_exists(self, reference: str) -> bool:
        stmt = select(CreditTransaction.id).where(CreditTransaction.reference == reference)
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def list_transactions(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0
    ) -> List[CreditTransaction]:
        """按时间倒序查询流水"""
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(desc(CreditTransaction.created_at), desc(CreditTransaction.id))
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_transactions(self, user_id: str, kind: Optional[str] = None) -> int:
        stmt = select(func.count(CreditTransaction.id)).where(CreditTransaction.user_id == user_id)
        if kind:
            stmt = stmt.where(CreditTransaction.kind == kind)
        result = await self.db.execute(stmt)
        return result.scalar() or 0
