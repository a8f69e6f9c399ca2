"""크레딧 계정 관련 이벤트 정의."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Self


class CreditAccountEventType:
    """크레딧 계정 이벤트 타입 상수."""

    AMOUNT_ADDED = "credit_account.amount_added"


@dataclass(slots=True)
class CreditAmountAddedEvent:
    """크레딧 잔액 변경 이벤트.

    지급/차감/취소 환원/만료 등 잔액이 바뀔 때마다 발행된다.
    amount, balance 는 정밀도 손실을 막기 위해 10진 문자열로 싣는다.
    """

    id: str
    type: str
    timestamp: str
    source: str
    version: str
    customer_id: str
    credit_account_id: str | None
    amount: str
    balance: str
    order_id: str | None
    who_did_it: str | None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        order_id = data.get("order_id")
        who_did_it = data.get("who_did_it")
        credit_account_id = data.get("credit_account_id")
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            timestamp=str(data["timestamp"]),
            source=str(data["source"]),
            version=str(data.get("version", "1.0")),
            customer_id=str(data["customer_id"]),
            credit_account_id=(
                str(credit_account_id) if credit_account_id is not None else None
            ),
            amount=str(data["amount"]),
            balance=str(data["balance"]),
            order_id=str(order_id) if order_id is not None else None,
            who_did_it=str(who_did_it) if who_did_it is not None else None,
        )
