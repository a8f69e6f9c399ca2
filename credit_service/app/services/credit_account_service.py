"""크레딧 계정 서비스.

API/컨슈머가 호출하는 진입점. 잔액을 바꾸는 모든 요청은 EventDispatcher 를 거쳐
CreditRules 에 전달되고, 조회는 레포지토리를 직접 사용한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fastapi import Depends
from pymongo.database import Database

from common.eventbus.config import is_kafka_enabled
from common.eventbus.kafka import get_kafka_event_bus
from common.mongo.client import get_database

from ..config import AppConfig, load_config
from ..i18n import Translator
from ..models.checkout import CheckoutCreditUsage
from ..models.credit_account import (
    CreditAccount,
    CreditAccountExpiration,
    CreditAmountHistory,
)
from ..models.order import Cart, Order
from ..repositories.credit_account_repository import (
    CreditAccountExpirationRepository,
    CreditAccountRepository,
    CreditAmountHistoryRepository,
)
from ..repositories.interfaces import (
    CreditAccountExpirationRepositoryInterface,
    CreditAccountRepositoryInterface,
    CreditAmountHistoryRepositoryInterface,
)
from ..rules.credit_rules import CreditRules
from ..rules.dispatcher import EventDispatcher
from ..rules.events import (
    CartEvent,
    CouponConsumeEvent,
    CreditAccountEvent,
    OrderEvent,
    StoreEvent,
)
from .credit_event_publisher import CreditAccountEventPublisher, EventPublisher


@dataclass(slots=True)
class CreditAccountSummary:
    account: CreditAccount
    expiration: CreditAccountExpiration | None


class CreditAccountService:
    """크레딧 계정 관련 비즈니스 진입점."""

    def __init__(
        self,
        dispatcher: EventDispatcher,
        account_repo: CreditAccountRepositoryInterface,
        history_repo: CreditAmountHistoryRepositoryInterface,
        expiration_repo: CreditAccountExpirationRepositoryInterface,
    ) -> None:
        self._dispatcher = dispatcher
        self._account_repo = account_repo
        self._history_repo = history_repo
        self._expiration_repo = expiration_repo

    def add_amount(
        self,
        customer_id: str,
        amount: Decimal,
        order_id: str | None = None,
        who_did_it: str | None = None,
    ) -> CreditAccount:
        """잔액 변경 요청. 반영 후의 계정을 반환한다."""
        event = self._dispatcher.dispatch(
            StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT,
            CreditAccountEvent(
                customer_id=customer_id,
                amount=amount,
                order_id=order_id,
                who_did_it=who_did_it,
            ),
        )
        assert event.credit_account is not None  # add_amount 리스너가 항상 채운다.
        return event.credit_account

    def get_summary(self, customer_id: str) -> CreditAccountSummary | None:
        account = self._account_repo.find_by_customer_id(customer_id)
        if account is None:
            return None
        return CreditAccountSummary(
            account=account,
            expiration=self._expiration_repo.find_by_customer_id(customer_id),
        )

    def get_history(
        self, customer_id: str, page: int = 1, page_size: int = 20
    ) -> tuple[list[CreditAmountHistory], int]:
        return self._history_repo.list_by_customer(customer_id, page, page_size)

    def before_payment(
        self, order: Order, checkout: CheckoutCreditUsage
    ) -> CheckoutCreditUsage:
        """결제 직전 훅. 차감 후 초기화된 checkout 을 그대로 돌려준다."""
        self._dispatcher.dispatch(
            StoreEvent.ORDER_BEFORE_PAYMENT, OrderEvent(order=order, checkout=checkout)
        )
        return checkout

    def consume_coupon(
        self, code: str, checkout: CheckoutCreditUsage, customer_id: str | None = None
    ) -> None:
        """쿠폰 적용 전 훅. 크레딧 사용 중이면 CouponCreditConflictError."""
        self._dispatcher.dispatch(
            StoreEvent.COUPON_CONSUME,
            CouponConsumeEvent(code=code, checkout=checkout, customer_id=customer_id),
        )

    def update_order_status(self, order: Order) -> None:
        self._dispatcher.dispatch(StoreEvent.ORDER_UPDATE_STATUS, OrderEvent(order=order))

    def add_cart_item(self, cart: Cart) -> None:
        self._dispatcher.dispatch(StoreEvent.CART_ADD_ITEM, CartEvent(cart=cart))


def build_credit_account_service(
    database: Database,
    config: AppConfig,
    *,
    bus: EventPublisher | None = None,
    translator: Translator | None = None,
) -> CreditAccountService:
    """Mongo 레포지토리와 규칙 엔진을 조립한다. bus 가 있으면 잔액 변경을 발행한다."""

    account_repo = CreditAccountRepository(
        database, use_transactions=config.mongo_transactions
    )
    history_repo = CreditAmountHistoryRepository(database)
    expiration_repo = CreditAccountExpirationRepository(database)

    dispatcher = EventDispatcher()
    dispatcher.add_subscriber(
        CreditRules(
            dispatcher=dispatcher,
            account_repo=account_repo,
            history_repo=history_repo,
            expiration_repo=expiration_repo,
            config=config.credit,
            translator=translator,
        )
    )
    if bus is not None:
        dispatcher.add_subscriber(CreditAccountEventPublisher(bus))

    return CreditAccountService(
        dispatcher=dispatcher,
        account_repo=account_repo,
        history_repo=history_repo,
        expiration_repo=expiration_repo,
    )


def get_credit_account_service(
    db: Database = Depends(get_database),
) -> CreditAccountService:
    """FastAPI DI용 CreditAccountService 팩토리 (요청마다 조립)."""
    bus = get_kafka_event_bus() if is_kafka_enabled() else None
    return build_credit_account_service(db, load_config(), bus=bus)
