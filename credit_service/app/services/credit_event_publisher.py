"""잔액 변경 이벤트를 Kafka 로 발행하는 리스너."""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Mapping, Protocol

from common.eventbus.core import Event
from common.eventbus.helpers import new_json_event
from common.eventbus.topics import TOPIC_CREDIT_ACCOUNT
from common.events.credit import CreditAccountEventType, CreditAmountAddedEvent
from common.types.amount import serialize_decimal_to_str

from ..rules.events import CreditAccountEvent, StoreEvent


logger = logging.getLogger(__name__)


EVENT_SOURCE = "credit-service"


class EventPublisher(Protocol):
    def publish(self, topic: str, event: Event) -> None:  # pragma: no cover - Protocol
        ...


class CreditAccountEventPublisher:
    """add_amount 이후(priority 0)에 credit_account.amount_added 를 발행한다.

    발행 실패는 로그만 남기고 체크아웃 흐름으로 전파하지 않는다.
    """

    def __init__(self, bus: EventPublisher) -> None:
        self._bus = bus

    @classmethod
    def subscribed_events(cls) -> Mapping[StoreEvent, list[tuple[str, int]]]:
        return {StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT: [("publish_amount_added", 0)]}

    def publish_amount_added(self, event: CreditAccountEvent) -> None:
        account = event.credit_account
        if account is None:
            return

        event_id = str(uuid.uuid4())
        payload = CreditAmountAddedEvent(
            id=event_id,
            type=CreditAccountEventType.AMOUNT_ADDED,
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=EVENT_SOURCE,
            version="1.0",
            customer_id=event.customer_id,
            credit_account_id=account.id,
            amount=serialize_decimal_to_str(event.amount),
            balance=serialize_decimal_to_str(account.amount),
            order_id=event.order_id,
            who_did_it=event.who_did_it,
        )
        wrapped = new_json_event(payload=asdict(payload), event_id=event_id)

        try:
            self._bus.publish(TOPIC_CREDIT_ACCOUNT.base, wrapped)
        except Exception:  # noqa: BLE001
            logger.exception(
                "failed to publish credit_account.amount_added customer_id=%s",
                event.customer_id,
            )
