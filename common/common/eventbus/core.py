from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# 재시도 토픽 단계별 대기 시간(초). 단계 수가 곧 최대 재시도 횟수다.
RetryDelays: list[float] = [
    30.0,
    120.0,
    600.0,
    1800.0,
]


class MaxRetryExceededError(Exception):
    """재시도 단계를 모두 소진했을 때 발생한다."""


@dataclass(slots=True)
class Event:
    """Kafka 로 주고받는 봉투(envelope).

    payload 에는 도메인 이벤트를 dict 로 담고, JSON 인코딩/디코딩은 KafkaEventBus 가 맡는다.
    """

    id: str
    payload: Any
    retry: int = 0
    max_retry: int = 0
    last_error: str | None = None

    def __post_init__(self) -> None:
        self.max_retry = clamp_max_retry(self.max_retry)


def clamp_max_retry(value: int | None) -> int:
    """1..len(RetryDelays) 범위를 벗어난 max_retry 는 최대값으로 맞춘다."""

    if value is None or value <= 0 or value > len(RetryDelays):
        return len(RetryDelays)
    return value


@dataclass(frozen=True, slots=True)
class Topic:
    base: str

    def dlq(self) -> str:
        return f"{self.base}.dlq"

    def get_retry_topic(self, retry_count: int) -> str:
        if retry_count <= 0 or retry_count > len(RetryDelays):
            raise MaxRetryExceededError()
        return f"{self.base}.retry.{retry_count}"
