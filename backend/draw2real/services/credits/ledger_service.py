"""
积分账本服务
维护用户积分余额与只追加的积分流水

每次变更余额都在同一个数据库事务中写入恰好一条流水，
事务整体作为一个单元在瞬时数据库错误时重试。
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from draw2real.core.config import settings
from draw2real.core.log_messages import LogMessages
from draw2real.core.log_utils import get_logger
from draw2real.core.retry import exponential_backoff, retry_async
from draw2real.models.credit import CreditKind, CreditTransaction
from draw2real.repositories.credit import CreditRepository

logger = get_logger(__name__)

# 可重试的数据库错误：连接中断、锁冲突、并发插入导致的唯一约束冲突
TRANSIENT_DB_ERRORS = (OperationalError, InterfaceError, IntegrityError)

USAGE_DESCRIPTION = "AI image generation"


class CreditLedgerError(Exception):
    """积分账本无法完成变更（重试后仍失败）"""


class CreditLedgerService:
    """积分账本服务"""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_attempts: Optional[int] = None
    ):
        self._session_factory = session_factory
        self._max_attempts = max_attempts or settings.ledger_max_attempts
        self._backoff = exponential_backoff()

    @staticmethod
    def _validate_amount(amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise ValueError("amount must be a positive integer")

    async def get_balance(self, user_id: str) -> int:
        """查询余额，用户没有账户时返回0"""
        async with self._session_factory() as session:
            return await CreditRepository(session).get_balance(user_id)

    async def deduct(
        self,
        user_id: str,
        amount: int = 1,
        description: str = USAGE_DESCRIPTION
    ) -> bool:
        """
        扣减积分

        在数据库层以条件更新完成“余额充足才扣减”，余额永远不会为负。

        Returns:
            bool: 扣减成功返回True；余额不足返回False且不做任何修改

        Raises:
            ValueError: amount不是正整数
            CreditLedgerError: 数据库错误重试后仍失败
        """
        self._validate_amount(amount)

        async def _deduct_once() -> Optional[int]:
            async with self._session_factory() as session:
                async with session.begin():
                    repository = CreditRepository(session)
                    balance = await repository.decrement_if_sufficient(user_id, amount)
                    if balance is None:
                        return None
                    await repository.add_transaction(
                        user_id=user_id,
                        amount=-amount,
                        kind=CreditKind.USAGE,
                        description=description
                    )
                    return balance

        try:
            balance = await retry_async(
                _deduct_once,
                max_attempts=self._max_attempts,
                backoff=self._backoff,
                retry_on=TRANSIENT_DB_ERRORS,
                operation_name="deduct_credits"
            )
        except TRANSIENT_DB_ERRORS as e:
            logger.error(LogMessages.CREDIT_OPERATION_FAILED, exception=e, user_id=user_id)
            raise CreditLedgerError("Could not update your credits, please try again") from e

        if balance is None:
            logger.info(LogMessages.CREDIT_INSUFFICIENT, user_id=user_id, amount=amount)
            return False

        logger.info(LogMessages.CREDIT_DEDUCTED, user_id=user_id, amount=amount, balance=balance)
        return True

    async def credit(
        self,
        user_id: str,
        amount: int,
        kind: str,
        description: str,
        reference: Optional[str] = None
    ) -> bool:
        """
        发放积分

        用户没有账户时先创建；提供reference时同一reference只会生效一次。

        Returns:
            bool: 本次调用实际发放了积分返回True；reference已处理过返回False

        Raises:
            ValueError: amount不是正整数或kind不合法
            CreditLedgerError: 账户无法创建或更新
        """
        self._validate_amount(amount)
        if kind not in CreditKind.ALL:
            raise ValueError(f"kind must be one of {', '.join(CreditKind.ALL)}")

        async def _credit_once() -> bool:
            async with self._session_factory() as session:
                async with session.begin():
                    repository = CreditRepository(session)
                    if reference and await repository.reference_exists(reference):
                        return False
                    if await repository.get_account(user_id) is None:
                        await repository.create_account(user_id)
                    await repository.increment(user_id, amount)
                    await repository.add_transaction(
                        user_id=user_id,
                        amount=amount,
                        kind=kind,
                        description=description,
                        reference=reference
                    )
                    return True

        try:
            applied = await retry_async(
                _credit_once,
                max_attempts=self._max_attempts,
                backoff=self._backoff,
                retry_on=TRANSIENT_DB_ERRORS,
                operation_name="credit_user"
            )
        except TRANSIENT_DB_ERRORS as e:
            logger.error(LogMessages.CREDIT_OPERATION_FAILED, exception=e, user_id=user_id)
            raise CreditLedgerError("Could not grant credits") from e

        if applied:
            logger.info(LogMessages.CREDIT_GRANTED, user_id=user_id, amount=amount, kind=kind)
        else:
            logger.info(LogMessages.CREDIT_GRANT_DUPLICATE, reference=reference)
        return applied

    async def list_transactions(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0
    ) -> List[CreditTransaction]:
        """按时间倒序查询积分流水"""
        async with self._session_factory() as session:
            return await CreditRepository(session).list_transactions(user_id, limit=limit, offset=offset)

    async def has_transaction(self, user_id: str, kind: str) -> bool:
        async with self._session_factory() as session:
            return await CreditRepository(session).count_transactions(user_id, kind=kind) > 0
