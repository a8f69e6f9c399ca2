from __future__ import annotations

import uuid
from typing import Any, Mapping

from .core import Event, clamp_max_retry


def new_json_event(
    payload: Mapping[str, Any],
    *,
    max_retry: int | None = None,
    event_id: str | None = None,
) -> Event:
    """도메인 이벤트 dict 를 Kafka 봉투(Event)로 감싼다.

    event_id 가 없으면 uuid4 를 발급한다. Decimal 같은 값은 KafkaEventBus 의
    JSON 인코딩 단계에서 문자열로 바뀐다.
    """
    return Event(
        id=event_id or str(uuid.uuid4()),
        payload=dict(payload),
        retry=0,
        max_retry=clamp_max_retry(max_retry),
    )
