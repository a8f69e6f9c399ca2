from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from common.types.amount import AmountStr

from ...models.checkout import CheckoutCreditUsage
from ...models.order import OrderStatus


class CheckoutCreditUsagePayload(BaseModel):
    """체크아웃 세션의 크레딧 사용 의사."""

    used: bool = False
    amount: AmountStr = Decimal("0")

    def to_domain(self) -> CheckoutCreditUsage:
        return CheckoutCreditUsage(used=self.used, amount=self.amount)

    @classmethod
    def from_domain(cls, usage: CheckoutCreditUsage) -> "CheckoutCreditUsagePayload":
        return cls(used=usage.used, amount=usage.amount)


class BeforePaymentRequest(BaseModel):
    order_id: str
    customer_id: str
    status: str = OrderStatus.NOT_PAID
    checkout: CheckoutCreditUsagePayload


class CouponConsumeRequest(BaseModel):
    code: str
    customer_id: str | None = None
    checkout: CheckoutCreditUsagePayload
