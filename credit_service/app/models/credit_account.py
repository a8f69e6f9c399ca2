"""크레딧 계정 도메인 모델.

고객당 하나의 계정(CreditAccount)이 잔액을 들고, 잔액을 바꾼 모든 거래는
CreditAmountHistory 로 남는다. 잔액은 항상 이력 금액의 합과 같다.
만료는 거래 단위가 아니라 계정 단위(CreditAccountExpiration)로 관리한다.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel


class CreditAccount(BaseModel):
    """고객별 크레딧 잔액."""

    id: str | None = None
    customer_id: str
    amount: Decimal  # 음수 가능 (이미 사용한 크레딧의 취소/만료 환원)
    created_at: datetime
    updated_at: datetime


class CreditAmountHistory(BaseModel):
    """잔액 변경 이력 (append-only)."""

    id: str | None = None
    credit_account_id: str | None
    customer_id: str
    amount: Decimal  # 양수: 지급, 음수: 차감
    order_id: str | None = None
    who_did_it: str | None = None  # 변경 주체 라벨 ("Customer", "Expiration 18 months" 등)
    created_at: datetime
    updated_at: datetime


class CreditAccountExpiration(BaseModel):
    """계정 잔액 전체의 만료 타이머."""

    id: str | None = None
    credit_account_id: str
    customer_id: str
    expiration_start: datetime
    expiration_delay: int  # 개월 수
    created_at: datetime
    updated_at: datetime

    def expires_at(self) -> datetime:
        """만료 시점 = 시작 시점 + delay 개월.

        월말 시작은 대상 월의 마지막 날로 맞춘다 (1/31 + 1개월 -> 2/28 또는 2/29).
        """
        return self.expiration_start + relativedelta(months=self.expiration_delay)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at()
