"""주문/장바구니 이벤트 컨슈머.

다른 서비스가 발행한 order.status_updated / cart.item_added 를 받아
규칙 엔진의 ORDER_UPDATE_STATUS / CART_ADD_ITEM 으로 전달한다.
"""

from __future__ import annotations

import logging
import signal
from typing import List

from common.eventbus.config import get_brokers, get_group_id
from common.eventbus.core import Event
from common.eventbus.kafka import KafkaEventBus, get_kafka_event_bus
from common.eventbus.topics import TOPIC_ORDER
from common.events.order import (
    CartItemAddedEvent,
    OrderEventType,
    OrderStatusUpdatedEvent,
)
from common.logger import setup_logger
from common.mongo.client import get_database

from ..config import load_config
from ..models.order import Cart, Order, OrderStatus
from ..services.credit_account_service import (
    CreditAccountService,
    build_credit_account_service,
)


logger = logging.getLogger(__name__)


def _handle_event(evt: Event, *, service: CreditAccountService) -> None:
    payload = evt.payload
    if not isinstance(payload, dict):
        logger.error("unexpected payload type for event %s: %r", evt.id, type(payload))
        return

    event_type = str(payload.get("type", ""))

    if event_type == OrderEventType.ORDER_STATUS_UPDATED:
        _handle_order_status_updated(payload, service)
    elif event_type == OrderEventType.CART_ITEM_ADDED:
        _handle_cart_item_added(payload, service)
    else:
        logger.debug("ignoring order event type=%s id=%s", event_type, evt.id)


def _handle_order_status_updated(payload: dict, service: CreditAccountService) -> None:
    try:
        event = OrderStatusUpdatedEvent.from_dict(payload)
    except Exception:
        logger.exception("failed to decode OrderStatusUpdatedEvent payload=%r", payload)
        raise

    if event.status not in {status.value for status in OrderStatus}:
        # 주문 서비스 쪽 상태가 늘어날 수 있다. 취소가 아니면 규칙이 할 일은 없다.
        logger.debug(
            "unknown order status=%s order_id=%s, passing through",
            event.status,
            event.order_id,
        )

    logger.info(
        "handling order.status_updated id=%s order_id=%s status=%s",
        event.id,
        event.order_id,
        event.status,
    )
    service.update_order_status(
        Order(id=event.order_id, customer_id=event.customer_id, status=event.status)
    )


def _handle_cart_item_added(payload: dict, service: CreditAccountService) -> None:
    try:
        event = CartItemAddedEvent.from_dict(payload)
    except Exception:
        logger.exception("failed to decode CartItemAddedEvent payload=%r", payload)
        raise

    logger.debug(
        "handling cart.item_added id=%s cart_id=%s customer_id=%s",
        event.id,
        event.cart_id,
        event.customer_id,
    )
    service.add_cart_item(Cart(id=event.cart_id, customer_id=event.customer_id))


def run_order_events_consumer(stop_flag: List[bool]) -> None:
    """주문 이벤트 구독 루프. stop_flag[0] 이 True 가 되면 종료한다."""
    logger.info("order-events-consumer starting up")

    service = build_credit_account_service(
        get_database(), load_config(), bus=get_kafka_event_bus()
    )

    brokers = get_brokers()
    group_id = get_group_id() + "-order"

    bus = KafkaEventBus(brokers)

    try:
        logger.info("subscribing to topic=%s group_id=%s", TOPIC_ORDER.base, group_id)
        bus.subscribe(
            group_id=group_id,
            topic=TOPIC_ORDER,
            handler=lambda evt: _handle_event(evt, service=service),
            stop_flag=stop_flag,
        )
    finally:
        bus.close()
        logger.info("order-events-consumer stopped")


def main() -> None:
    """단독 프로세스로 실행할 때 사용하는 엔트리 포인트."""

    setup_logger(name="credit-service-order-consumer")

    stop_flag: List[bool] = [False]

    def _signal_handler(signum, frame) -> None:  # type: ignore[unused-argument]
        logger.info("received signal %s, shutting down order-events-consumer...", signum)
        stop_flag[0] = True

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    run_order_events_consumer(stop_flag)


if __name__ == "__main__":  # pragma: no cover
    main()
