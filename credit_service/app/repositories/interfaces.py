from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from ..models.credit_account import (
    CreditAccount,
    CreditAccountExpiration,
    CreditAmountHistory,
)


class CreditAccountRepositoryInterface(Protocol):
    """CreditAccountRepository 가 따라야 할 최소한의 계약.

    - 고객당 계정은 하나이며, 첫 add_amount 에서 잔액 0 으로 생성된다.
    - add_amount 는 잔액 증감과 이력 추가를 하나의 논리 연산으로 처리한다.
    """

    def find_by_customer_id(
        self, customer_id: str
    ) -> CreditAccount | None:  # pragma: no cover - Protocol
        ...

    def add_amount(
        self,
        customer_id: str,
        amount: Decimal,
        order_id: str | None,
        who_did_it: str | None,
        now: datetime,
    ) -> CreditAccount:  # pragma: no cover - Protocol
        """반영 후의 계정을 반환한다."""
        ...


class CreditAmountHistoryRepositoryInterface(Protocol):
    """잔액 변경 이력 조회 계약. 이력 추가는 add_amount 만 수행한다."""

    def list_by_order_id(
        self, order_id: str
    ) -> list[CreditAmountHistory]:  # pragma: no cover - Protocol
        """주문에 연결된 이력을 기록 순서대로 반환한다."""
        ...

    def list_by_customer(
        self, customer_id: str, page: int, page_size: int
    ) -> tuple[list[CreditAmountHistory], int]:  # pragma: no cover - Protocol
        ...


class CreditAccountExpirationRepositoryInterface(Protocol):
    """계정 만료 레코드 계약. 계정당 레코드는 최대 하나다."""

    def find_by_customer_id(
        self, customer_id: str
    ) -> CreditAccountExpiration | None:  # pragma: no cover - Protocol
        ...

    def restart(
        self,
        credit_account_id: str,
        customer_id: str,
        start: datetime,
        delay_months: int,
    ) -> CreditAccountExpiration:  # pragma: no cover - Protocol
        """레코드를 찾거나 만들고 시작 시점/기간을 덮어쓴다."""
        ...

    def delete(self, expiration_id: str) -> bool:  # pragma: no cover - Protocol
        ...
