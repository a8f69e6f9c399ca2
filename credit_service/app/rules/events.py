"""규칙 엔진이 처리하는 이벤트 종류와 이벤트 객체.

이벤트 종류는 StoreEvent 열거형으로 고정하고, 종류마다 받을 수 있는 이벤트 객체
타입을 EVENT_TYPES 에 명시한다. 디스패처는 이 표로 잘못된 조합을 거부한다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum

from ..models.checkout import CheckoutCreditUsage
from ..models.credit_account import CreditAccount
from ..models.order import Cart, Order


class StoreEvent(StrEnum):
    CREDIT_ACCOUNT_ADD_AMOUNT = "credit_account.add_amount"
    ORDER_BEFORE_PAYMENT = "order.before_payment"
    ORDER_UPDATE_STATUS = "order.update_status"
    COUPON_CONSUME = "coupon.consume"
    CART_ADD_ITEM = "cart.add_item"


class DispatchedEvent:
    """디스패치되는 모든 이벤트의 베이스. 리스너가 이후 리스너 실행을 멈출 수 있다."""

    propagation_stopped: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass
class CreditAccountEvent(DispatchedEvent):
    """잔액 변경 요청. amount 는 부호 있는 금액이다."""

    customer_id: str
    amount: Decimal
    order_id: str | None = None
    who_did_it: str | None = None
    # add_amount 리스너가 반영 후의 계정을 채운다.
    credit_account: CreditAccount | None = None


@dataclass
class OrderEvent(DispatchedEvent):
    order: Order
    checkout: CheckoutCreditUsage = field(default_factory=CheckoutCreditUsage)


@dataclass
class CouponConsumeEvent(DispatchedEvent):
    code: str
    checkout: CheckoutCreditUsage = field(default_factory=CheckoutCreditUsage)
    customer_id: str | None = None


@dataclass
class CartEvent(DispatchedEvent):
    cart: Cart


EVENT_TYPES: dict[StoreEvent, type[DispatchedEvent]] = {
    StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT: CreditAccountEvent,
    StoreEvent.ORDER_BEFORE_PAYMENT: OrderEvent,
    StoreEvent.ORDER_UPDATE_STATUS: OrderEvent,
    StoreEvent.COUPON_CONSUME: CouponConsumeEvent,
    StoreEvent.CART_ADD_ITEM: CartEvent,
}
