"""규칙 엔진이 사용자에게 노출하는 문구의 번역 경계.

번역 카탈로그 자체는 상점 프론트가 소유하며, 여기서는 메시지 키를 받아
번역된 문자열을 돌려주는 계약만 정의한다.
"""

from __future__ import annotations

from typing import Mapping, Protocol


CUSTOMER_ACTOR = "Customer"
COUPON_CREDIT_CONFLICT = "You can't use both coupon and credit"


class Translator(Protocol):
    def trans(self, message: str) -> str:  # pragma: no cover - Protocol
        ...


class CatalogTranslator:
    """메시지 키 -> 번역 문자열 dict 기반 번역기. 없는 키는 원문을 그대로 쓴다."""

    def __init__(self, catalog: Mapping[str, str] | None = None) -> None:
        self._catalog = dict(catalog or {})

    def trans(self, message: str) -> str:
        return self._catalog.get(message, message)
