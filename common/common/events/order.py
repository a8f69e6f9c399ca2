"""주문/장바구니 서비스가 발행하는 이벤트 정의.

credit_service 는 이 중 주문 상태 변경과 장바구니 상품 추가만 구독한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Self


class OrderEventType:
    """주문 이벤트 타입 상수."""

    ORDER_STATUS_UPDATED = "order.status_updated"
    CART_ITEM_ADDED = "cart.item_added"


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(slots=True)
class OrderStatusUpdatedEvent:
    """주문 상태 변경 이벤트."""

    id: str
    type: str
    timestamp: str
    source: str
    version: str
    order_id: str
    customer_id: str
    status: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            timestamp=str(data["timestamp"]),
            source=str(data["source"]),
            version=str(data.get("version", "1.0")),
            order_id=str(data["order_id"]),
            customer_id=str(data["customer_id"]),
            status=str(data["status"]),
        )


@dataclass(slots=True)
class CartItemAddedEvent:
    """장바구니 상품 추가 이벤트.

    비로그인 장바구니는 customer_id 가 없다.
    """

    id: str
    type: str
    timestamp: str
    source: str
    version: str
    cart_id: str
    customer_id: str | None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            timestamp=str(data["timestamp"]),
            source=str(data["source"]),
            version=str(data.get("version", "1.0")),
            cart_id=str(data["cart_id"]),
            customer_id=_optional_str(data.get("customer_id")),
        )
