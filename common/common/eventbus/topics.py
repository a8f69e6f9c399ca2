from __future__ import annotations

from .core import Topic


# credit_service 가 발행하는 잔액 변경 이벤트
TOPIC_CREDIT_ACCOUNT = Topic("credit-account.credit")
# 주문/장바구니 서비스가 발행하고 credit_service 가 구독하는 이벤트
TOPIC_ORDER = Topic("credit-account.order")

ALL_TOPICS: list[Topic] = [
    TOPIC_CREDIT_ACCOUNT,
    TOPIC_ORDER,
]
