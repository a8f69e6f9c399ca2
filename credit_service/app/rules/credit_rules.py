"""크레딧 계정 규칙.

주문/장바구니/쿠폰 이벤트에 반응해 잔액과 이력, 만료 타이머를 갱신한다.
잔액을 바꾸는 경로는 모두 CREDIT_ACCOUNT_ADD_AMOUNT 이벤트를 거친다.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Mapping

from ..config import CreditAccountConfig
from ..exceptions import CouponCreditConflictError
from ..i18n import COUPON_CREDIT_CONFLICT, CUSTOMER_ACTOR, CatalogTranslator, Translator
from ..repositories.interfaces import (
    CreditAccountExpirationRepositoryInterface,
    CreditAccountRepositoryInterface,
    CreditAmountHistoryRepositoryInterface,
)
from .dispatcher import EventDispatcher
from .events import (
    CartEvent,
    CouponConsumeEvent,
    CreditAccountEvent,
    OrderEvent,
    StoreEvent,
)


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreditRules:
    """크레딧 계정 이벤트 리스너 묶음.

    EventDispatcher.add_subscriber() 로 등록하며, 이벤트별 실행 순서는
    subscribed_events() 의 priority 로 정해진다.
    """

    def __init__(
        self,
        *,
        dispatcher: EventDispatcher,
        account_repo: CreditAccountRepositoryInterface,
        history_repo: CreditAmountHistoryRepositoryInterface,
        expiration_repo: CreditAccountExpirationRepositoryInterface,
        config: CreditAccountConfig,
        translator: Translator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._dispatcher = dispatcher
        self._account_repo = account_repo
        self._history_repo = history_repo
        self._expiration_repo = expiration_repo
        self._config = config
        self._translator = translator or CatalogTranslator()
        self._clock = clock

    @classmethod
    def subscribed_events(cls) -> Mapping[StoreEvent, list[tuple[str, int]]]:
        return {
            StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT: [
                ("add_amount", 128),
                ("update_or_create_expiration", 64),
            ],
            StoreEvent.ORDER_BEFORE_PAYMENT: [("verify_credit_usage", 128)],
            StoreEvent.ORDER_UPDATE_STATUS: [("update_credit_on_cancel", 0)],
            StoreEvent.COUPON_CONSUME: [("verify_coupon", 140)],
            StoreEvent.CART_ADD_ITEM: [("check_credit_expiration", 10)],
        }

    # 잔액 변경 ---------------------------------------------------------------
    def add_amount(self, event: CreditAccountEvent) -> None:
        """잔액에 event.amount 를 더하고 이력을 남긴다. 음수 잔액도 허용한다."""
        account = self._account_repo.add_amount(
            customer_id=event.customer_id,
            amount=event.amount,
            order_id=event.order_id,
            who_did_it=event.who_did_it,
            now=self._clock(),
        )
        event.credit_account = account

        logger.info(
            "credit amount added customer_id=%s amount=%s balance=%s order_id=%s",
            event.customer_id,
            event.amount,
            account.amount,
            event.order_id,
            extra={
                "event_kind": StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT.value,
                "customer_id": event.customer_id,
                "order_id": event.order_id,
                "amount": event.amount,
            },
        )

    def update_or_create_expiration(self, event: CreditAccountEvent) -> None:
        """양수 지급이면 계정 만료 타이머를 지금부터 다시 시작한다."""
        if not self._config.expiration_enabled or event.amount <= 0:
            return

        account = event.credit_account
        if account is None or account.id is None:
            logger.warning(
                "no credit account on event, skipping expiration customer_id=%s",
                event.customer_id,
            )
            return

        self._expiration_repo.restart(
            credit_account_id=account.id,
            customer_id=account.customer_id,
            start=self._clock(),
            delay_months=self._config.expiration_delay,
        )

    # 체크아웃 ---------------------------------------------------------------
    def verify_credit_usage(self, event: OrderEvent) -> None:
        """결제 직전, 체크아웃에서 선택한 크레딧 사용분을 주문에 차감한다."""
        checkout = event.checkout
        if not checkout.used:
            return

        order = event.order
        credit_event = CreditAccountEvent(
            customer_id=order.customer_id,
            amount=-checkout.amount,
            order_id=order.id,
            who_did_it=self._translator.trans(CUSTOMER_ACTOR),
        )
        self._dispatcher.dispatch(StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT, credit_event)

        # 같은 체크아웃에서 두 번 차감되지 않도록 초기화한다.
        checkout.reset()

    def verify_coupon(self, event: CouponConsumeEvent) -> None:
        """크레딧을 사용 중인 체크아웃에는 쿠폰을 적용할 수 없다."""
        if not event.checkout.used:
            return

        event.stop_propagation()
        logger.info(
            "coupon rejected while credit is used code=%s customer_id=%s",
            event.code,
            event.customer_id,
            extra={
                "event_kind": StoreEvent.COUPON_CONSUME.value,
                "customer_id": event.customer_id,
            },
        )
        raise CouponCreditConflictError(self._translator.trans(COUPON_CREDIT_CONFLICT))

    # 주문 취소 ---------------------------------------------------------------
    def update_credit_on_cancel(self, event: OrderEvent) -> None:
        """취소된 주문에 연결된 크레딧 이력을 하나씩 반대 금액으로 되돌린다."""
        order = event.order
        if not order.is_cancelled():
            return

        # 되돌리기 전에 목록을 확정해, 이번에 추가되는 환원 이력은 다시 환원하지 않는다.
        entries = list(self._history_repo.list_by_order_id(order.id))
        logger.info(
            "reverting %d credit entries for cancelled order_id=%s",
            len(entries),
            order.id,
            extra={
                "event_kind": StoreEvent.ORDER_UPDATE_STATUS.value,
                "customer_id": order.customer_id,
                "order_id": order.id,
            },
        )

        for entry in entries:
            credit_event = CreditAccountEvent(
                customer_id=order.customer_id,
                amount=-entry.amount,
                order_id=order.id,
            )
            self._dispatcher.dispatch(
                StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT, credit_event
            )

    # 만료 -------------------------------------------------------------------
    def check_credit_expiration(self, event: CartEvent) -> None:
        """장바구니 상품 추가 시점에 만료된 잔액을 0 으로 만들고 타이머를 지운다."""
        customer_id = event.cart.customer_id
        if customer_id is None:
            return

        expiration = self._expiration_repo.find_by_customer_id(customer_id)
        if expiration is None:
            return

        if not expiration.is_expired(self._clock()):
            return

        account = self._account_repo.find_by_customer_id(customer_id)
        if account is None:
            logger.warning(
                "expiration record without credit account customer_id=%s expiration_id=%s",
                customer_id,
                expiration.id,
            )
            return

        delay = expiration.expiration_delay
        if account.amount != Decimal("0"):
            credit_event = CreditAccountEvent(
                customer_id=customer_id,
                amount=-account.amount,
                who_did_it=f"Expiration {delay} months",
            )
            self._dispatcher.dispatch(
                StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT, credit_event
            )

        if expiration.id is not None:
            self._expiration_repo.delete(expiration.id)

        logger.info(
            "credit expired customer_id=%s amount=%s delay_months=%d",
            customer_id,
            account.amount,
            delay,
            extra={
                "event_kind": StoreEvent.CART_ADD_ITEM.value,
                "customer_id": customer_id,
                "amount": -account.amount,
            },
        )
