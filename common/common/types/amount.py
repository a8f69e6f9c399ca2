from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic.functional_serializers import PlainSerializer


def serialize_decimal_to_str(value: Decimal) -> str:
    """금액을 지수 표기 없는 10진 문자열로 직렬화한다 (예: Decimal('5E+1') -> '50')."""
    return format(value, "f")


# JSON 응답에서 float 변환으로 인한 오차 없이 금액을 내보낸다.
AmountStr = Annotated[
    Decimal,
    PlainSerializer(
        serialize_decimal_to_str,
        return_type=str,
        when_used="json",
    ),
]
