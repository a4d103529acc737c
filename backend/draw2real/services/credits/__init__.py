"""
积分服务模块
"""

from .ledger_service import CreditLedgerError, CreditLedgerService
from .referral_service import ReferralError, ReferralService, ReferralStats

__all__ = [
    'CreditLedgerError',
    'CreditLedgerService',
    'ReferralError',
    'ReferralService',
    'ReferralStats',
]
