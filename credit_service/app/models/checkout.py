"""체크아웃 중 크레딧 사용 의사.

체크아웃 UI 가 "크레딧 사용"을 선택하면 used/amount 가 채워지고, 결제 직전
규칙 엔진이 이를 원장에 반영한 뒤 초기화한다. 세션 저장소와는
creditAccount.used / creditAccount.amount 키로 주고받는다.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, MutableMapping


SESSION_USED_KEY = "creditAccount.used"
SESSION_AMOUNT_KEY = "creditAccount.amount"


@dataclass(slots=True)
class CheckoutCreditUsage:
    used: bool = False
    amount: Decimal = Decimal("0")

    @classmethod
    def from_session(cls, session: Mapping[str, Any]) -> "CheckoutCreditUsage":
        """세션 값(0/1, 숫자 또는 숫자 문자열)을 읽는다. 없거나 깨진 값은 미사용으로 본다."""
        used = str(session.get(SESSION_USED_KEY, 0)).strip() in {"1", "True", "true"}
        raw_amount = session.get(SESSION_AMOUNT_KEY, 0)
        try:
            amount = Decimal(str(raw_amount if raw_amount is not None else 0))
        except InvalidOperation:
            amount = Decimal("0")
        return cls(used=used, amount=amount)

    def write_to_session(self, session: MutableMapping[str, Any]) -> None:
        session[SESSION_USED_KEY] = 1 if self.used else 0
        session[SESSION_AMOUNT_KEY] = self.amount

    def reset(self) -> None:
        self.used = False
        self.amount = Decimal("0")
