from __future__ import annotations


class CreditAccountError(Exception):
    """Base exception for all credit-service errors."""


class CouponCreditConflictError(CreditAccountError):
    """A coupon was applied while store credit is already used for the checkout."""
