from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

import pytest

from credit_service.app.config import CreditAccountConfig
from credit_service.app.i18n import CatalogTranslator
from credit_service.app.models.credit_account import (
    CreditAccount,
    CreditAccountExpiration,
    CreditAmountHistory,
)
from credit_service.app.rules.credit_rules import CreditRules
from credit_service.app.rules.dispatcher import EventDispatcher
from credit_service.app.services.credit_account_service import CreditAccountService


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@dataclass
class InMemoryCreditStore:
    accounts: dict[str, CreditAccount] = field(default_factory=dict)
    history: list[CreditAmountHistory] = field(default_factory=list)
    expirations: dict[str, CreditAccountExpiration] = field(default_factory=dict)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"


class FakeCreditAccountRepository:
    def __init__(self, store: InMemoryCreditStore) -> None:
        self._store = store

    def find_by_customer_id(self, customer_id: str) -> CreditAccount | None:
        return self._store.accounts.get(customer_id)

    def add_amount(
        self,
        customer_id: str,
        amount: Decimal,
        order_id: str | None,
        who_did_it: str | None,
        now: datetime,
    ) -> CreditAccount:
        account = self._store.accounts.get(customer_id)
        if account is None:
            account = CreditAccount(
                id=self._store.next_id("account"),
                customer_id=customer_id,
                amount=Decimal("0"),
                created_at=now,
                updated_at=now,
            )
        account = account.model_copy(
            update={"amount": account.amount + amount, "updated_at": now}
        )
        self._store.accounts[customer_id] = account
        self._store.history.append(
            CreditAmountHistory(
                id=self._store.next_id("history"),
                credit_account_id=account.id,
                customer_id=customer_id,
                amount=amount,
                order_id=order_id,
                who_did_it=who_did_it,
                created_at=now,
                updated_at=now,
            )
        )
        return account


class FakeCreditAmountHistoryRepository:
    def __init__(self, store: InMemoryCreditStore) -> None:
        self._store = store

    def list_by_order_id(self, order_id: str) -> list[CreditAmountHistory]:
        return [entry for entry in self._store.history if entry.order_id == order_id]

    def list_by_customer(
        self, customer_id: str, page: int, page_size: int
    ) -> tuple[list[CreditAmountHistory], int]:
        entries = [
            entry
            for entry in reversed(self._store.history)
            if entry.customer_id == customer_id
        ]
        start = (page - 1) * page_size
        return entries[start : start + page_size], len(entries)


class FakeCreditAccountExpirationRepository:
    def __init__(self, store: InMemoryCreditStore) -> None:
        self._store = store

    def find_by_customer_id(self, customer_id: str) -> CreditAccountExpiration | None:
        for expiration in self._store.expirations.values():
            if expiration.customer_id == customer_id:
                return expiration
        return None

    def restart(
        self,
        credit_account_id: str,
        customer_id: str,
        start: datetime,
        delay_months: int,
    ) -> CreditAccountExpiration:
        existing = self._store.expirations.get(credit_account_id)
        expiration = CreditAccountExpiration(
            id=existing.id if existing else self._store.next_id("expiration"),
            credit_account_id=credit_account_id,
            customer_id=customer_id,
            expiration_start=start,
            expiration_delay=delay_months,
            created_at=existing.created_at if existing else start,
            updated_at=start,
        )
        self._store.expirations[credit_account_id] = expiration
        return expiration

    def delete(self, expiration_id: str) -> bool:
        for key, expiration in list(self._store.expirations.items()):
            if expiration.id == expiration_id:
                del self._store.expirations[key]
                return True
        return False


@dataclass
class CreditEngineFixture:
    service: CreditAccountService
    dispatcher: EventDispatcher
    store: InMemoryCreditStore
    clock: FakeClock
    config: CreditAccountConfig


@pytest.fixture
def start_time() -> datetime:
    return datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def build_engine(
    start_time: datetime,
) -> Callable[..., CreditEngineFixture]:
    def _build(
        *,
        expiration_enabled: bool = False,
        expiration_delay: int = 18,
        catalog: dict[str, str] | None = None,
    ) -> CreditEngineFixture:
        store = InMemoryCreditStore()
        clock = FakeClock(start_time)
        config = CreditAccountConfig(
            expiration_enabled=expiration_enabled,
            expiration_delay=expiration_delay,
        )
        account_repo = FakeCreditAccountRepository(store)
        history_repo = FakeCreditAmountHistoryRepository(store)
        expiration_repo = FakeCreditAccountExpirationRepository(store)

        dispatcher = EventDispatcher()
        dispatcher.add_subscriber(
            CreditRules(
                dispatcher=dispatcher,
                account_repo=account_repo,
                history_repo=history_repo,
                expiration_repo=expiration_repo,
                config=config,
                translator=CatalogTranslator(catalog),
                clock=clock,
            )
        )
        service = CreditAccountService(
            dispatcher=dispatcher,
            account_repo=account_repo,
            history_repo=history_repo,
            expiration_repo=expiration_repo,
        )
        return CreditEngineFixture(
            service=service,
            dispatcher=dispatcher,
            store=store,
            clock=clock,
            config=config,
        )

    return _build


@pytest.fixture
def engine(build_engine: Callable[..., CreditEngineFixture]) -> CreditEngineFixture:
    return build_engine()
