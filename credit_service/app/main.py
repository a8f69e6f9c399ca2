from __future__ import annotations

import logging
import os
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI

from common.eventbus.config import is_kafka_enabled
from common.logger import setup_logger

from .api.health import router as health_router
from .api.v1 import api_router
from .event_handlers import run_order_events_consumer


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
    """Kafka 가 설정되어 있으면 주문 이벤트 컨슈머 스레드를 함께 띄운다."""

    if not is_kafka_enabled():
        logger.info("KAFKA_BOOTSTRAP_SERVERS not set, order-events-consumer disabled")
        yield
        return

    stop_flag = [False]
    consumer_thread = threading.Thread(
        target=run_order_events_consumer,
        args=(stop_flag,),
        name="order-events-consumer",
        daemon=True,
    )
    consumer_thread.start()

    try:
        yield
    finally:
        stop_flag[0] = True
        consumer_thread.join(timeout=10.0)


def create_app() -> FastAPI:
    setup_logger(name="credit-service")
    app = FastAPI(
        title="Credit Account Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def main() -> None:
    import uvicorn

    port = int(os.getenv("CREDIT_SERVICE_PORT", "8003"))
    uvicorn.run(
        "credit_service.app.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
