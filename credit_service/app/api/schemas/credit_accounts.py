from __future__ import annotations

from pydantic import BaseModel, Field

from common.types.amount import AmountStr
from common.types.datetime import UtcDateTime


class CreditExpirationResponse(BaseModel):
    """계정 잔액 만료 정보."""

    expiration_start: UtcDateTime
    expiration_delay: int
    expires_at: UtcDateTime


class CreditAccountResponse(BaseModel):
    """고객 크레딧 잔액."""

    customer_id: str
    amount: AmountStr
    expiration: CreditExpirationResponse | None = None


class AddAmountRequest(BaseModel):
    """잔액 변경 요청. 음수면 차감."""

    amount: AmountStr = Field(..., description="부호 있는 금액")
    order_id: str | None = None
    who_did_it: str | None = None


class CreditHistoryResponse(BaseModel):
    id: str | None
    amount: AmountStr
    order_id: str | None
    who_did_it: str | None
    created_at: UtcDateTime
