from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict
from typing import Any, Callable, Optional

from confluent_kafka import Consumer, KafkaError, Producer

from .config import get_brokers
from .core import Event, MaxRetryExceededError, Topic, clamp_max_retry

logger = logging.getLogger(__name__)


class KafkaEventBus:
    """Kafka 기반 EventBus.

    - publish: Event 봉투를 JSON 으로 인코딩해 발행한다.
    - subscribe: 핸들러 실패 시 retry 토픽으로, 재시도 소진 시 DLQ 로 보낸 뒤 커밋한다.
    """

    def __init__(self, brokers: str) -> None:
        self._producer = Producer({"bootstrap.servers": brokers})
        self._brokers = brokers

    def close(self) -> None:
        self._producer.flush()

    # 발행 -----------------------------------------------------------------
    def publish(self, topic: str, event: Event) -> None:
        # Decimal 금액 등은 문자열로 직렬화된다.
        payload = json.dumps(asdict(event), ensure_ascii=False, default=str).encode(
            "utf-8"
        )

        def _delivery_callback(err, msg) -> None:  # type: ignore[no-untyped-def]
            if err is not None:
                logger.error("failed to deliver message to %s: %s", msg.topic(), err)

        self._producer.produce(
            topic=topic,
            value=payload,
            key=event.id.encode("utf-8"),
            callback=_delivery_callback,
        )
        self._producer.poll(0)

    # 구독 -----------------------------------------------------------------
    def subscribe(
        self,
        group_id: str,
        topic: Topic,
        handler: Callable[[Event], None],
        *,
        poll_timeout: float = 0.1,
        stop_flag: list[bool] | None = None,
    ) -> None:
        consumer = Consumer(
            {
                "bootstrap.servers": self._brokers,
                "group.id": group_id,
                "auto.offset.reset": "earliest",
                "enable.auto.commit": False,
            }
        )
        consumer.subscribe([topic.base])

        try:
            logger.info(
                "Kafka consumer started. group_id=%s topic=%s", group_id, topic.base
            )
            while True:
                if stop_flag and stop_flag[0]:
                    break

                msg = consumer.poll(poll_timeout)
                if msg is None:
                    continue
                if msg.error():
                    if msg.error().code() == KafkaError._PARTITION_EOF:
                        continue
                    logger.error("consumer error: %s", msg.error())
                    continue

                try:
                    raw = json.loads(msg.value())
                except Exception as exc:  # noqa: BLE001
                    # 복구할 수 없는 메시지는 건너뛰고 커밋한다.
                    logger.error(
                        "invalid event payload on topic %s: %s", msg.topic(), exc
                    )
                    consumer.commit(message=msg, asynchronous=False)
                    continue

                evt = self._decode_event(raw)

                try:
                    handler(evt)
                except Exception as exc:  # noqa: BLE001
                    if not self._route_failure(topic, evt, exc):
                        continue  # 재발행 실패: 커밋하지 않고 다시 처리한다.

                try:
                    consumer.commit(message=msg, asynchronous=False)
                except Exception as exc:  # noqa: BLE001
                    logger.error("offset commit error: %s", exc)
        finally:
            consumer.close()

    # 내부 util -------------------------------------------------------------
    def _route_failure(self, topic: Topic, evt: Event, exc: Exception) -> bool:
        """실패한 이벤트를 다음 retry 토픽이나 DLQ 로 보낸다. 재발행 성공 여부를 반환한다."""
        evt.last_error = str(exc)
        next_retry = evt.retry + 1
        try:
            target = topic.get_retry_topic(next_retry)
        except MaxRetryExceededError:
            target = topic.dlq()
            logger.error(
                "event %s exceeded max retry, sending to DLQ %s: %s",
                evt.id,
                target,
                exc,
            )
        else:
            evt.retry = next_retry
            logger.warning(
                "event %s failed, scheduling retry %d/%d to %s",
                evt.id,
                evt.retry,
                evt.max_retry,
                target,
            )

        try:
            self.publish(target, evt)
        except Exception as pub_exc:  # noqa: BLE001
            logger.error("failed to publish event %s to %s: %s", evt.id, target, pub_exc)
            return False
        return True

    @staticmethod
    def _decode_event(raw: dict[str, Any]) -> Event:
        return Event(
            id=str(raw.get("id", "")),
            payload=raw.get("payload"),
            retry=int(raw.get("retry", 0)),
            max_retry=clamp_max_retry(int(raw.get("max_retry", 0))),
            last_error=raw.get("last_error"),
        )


_bus: Optional[KafkaEventBus] = None
_bus_lock = threading.Lock()


def get_kafka_event_bus() -> KafkaEventBus:
    """프로세스 전역 KafkaEventBus 싱글톤 (발행 전용 producer 공유)."""

    global _bus

    if _bus is not None:
        return _bus

    with _bus_lock:
        if _bus is None:
            _bus = KafkaEventBus(get_brokers())
        return _bus
