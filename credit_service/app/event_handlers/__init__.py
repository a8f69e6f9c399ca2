"""이벤트 핸들러 패키지."""

from .order_events_consumer import run_order_events_consumer

__all__ = ["run_order_events_consumer"]
