"""
支付模块
"""

from .checkout_service import (
    CREDIT_PACKAGES,
    CheckoutError,
    CheckoutGrant,
    CheckoutService,
    CreditPackage,
    InvalidWebhookError,
    PaymentsNotConfiguredError,
)

__all__ = [
    'CREDIT_PACKAGES',
    'CheckoutError',
    'CheckoutGrant',
    'CheckoutService',
    'CreditPackage',
    'InvalidWebhookError',
    'PaymentsNotConfiguredError',
]
