"""크레딧 규칙이 참조하는 주문/장바구니 모델.

주문/장바구니 자체는 다른 서비스 소유이며, 여기에는 규칙 판단에 필요한 필드만 둔다.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class OrderStatus(StrEnum):
    NOT_PAID = "not_paid"
    PAID = "paid"
    PROCESSING = "processing"
    SENT = "sent"
    CANCELED = "canceled"
    REFUNDED = "refunded"


class Order(BaseModel):
    id: str
    customer_id: str
    # 알려지지 않은 상태 값도 그대로 받는다. 규칙은 취소 여부만 본다.
    status: str = OrderStatus.NOT_PAID

    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELED


class Cart(BaseModel):
    id: str
    customer_id: str | None = None  # 비로그인 장바구니는 None
