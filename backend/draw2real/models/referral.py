"""
推荐数据模型
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String

from draw2real.db.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ReferralCode(Base):
    """每个用户唯一的推荐码"""

    __tablename__ = "referral_codes"

    user_id = Column(String(64), primary_key=True)
    code = Column(String(16), nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Referral(Base):
    """推荐关系，被推荐用户只能被推荐一次"""

    __tablename__ = "referrals"

    id = Column(String(36), primary_key=True)
    referrer_id = Column(String(64), nullable=False, index=True)
    referred_user_id = Column(String(64), nullable=False, unique=True)
    rewarded = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Referral(referrer={self.referrer_id}, referred={self.referred_user_id}, rewarded={self.rewarded})>"
