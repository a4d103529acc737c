"""
积分数据模型
用户积分余额与只追加的积分流水
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text

from draw2real.db.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CreditKind:
    """积分流水类型"""

    USAGE = "usage"
    PURCHASE = "purchase"
    REFERRAL = "referral"

    ALL = (USAGE, PURCHASE, REFERRAL)


class UserCredit(Base):
    """用户积分余额，余额等于该用户所有流水金额之和"""

    __tablename__ = "user_credits"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_user_credits_non_negative"),
    )

    user_id = Column(String(64), primary_key=True)
    credits = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<UserCredit(user_id={self.user_id}, credits={self.credits})>"


class CreditTransaction(Base):
    """积分流水（只追加，不修改）"""

    __tablename__ = "credit_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # 有符号：消费为负，发放为正
    kind = Column("type", String(20), nullable=False)
    description = Column(Text, nullable=True)
    # 幂等发放使用的外部引用（如支付会话ID）
    reference = Column(String(255), nullable=True, unique=True)

    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<CreditTransaction(user_id={self.user_id}, amount={self.amount}, kind={self.kind})>"
