from __future__ import annotations

import logging
import threading
from typing import Optional, cast

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from .config import get_mongo_db_name, get_mongo_uri


logger = logging.getLogger(__name__)


CREDIT_ACCOUNTS_COLLECTION = "credit_accounts"
CREDIT_AMOUNT_HISTORY_COLLECTION = "credit_amount_history"
CREDIT_ACCOUNT_EXPIRATIONS_COLLECTION = "credit_account_expirations"


_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


def get_client() -> MongoClient:
    """전역 MongoClient 싱글톤을 반환한다.

    - MONGO_URI 로 접속하고 ping 으로 연결을 확인한다.
    - MONGO_DB_NAME 이 없으면 URI 의 기본 DB 를 사용하며, 그것도 없으면 실패한다.
    - credit 관련 컬렉션 인덱스를 최초 1회 보장한다.
    """

    global _client, _db

    if _client is not None:
        return _client

    with _lock:
        if _client is not None:
            return _client

        uri = get_mongo_uri()
        client = MongoClient(uri, tz_aware=True)

        try:
            client.admin.command("ping")
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(f"failed to connect to MongoDB: {exc}") from exc

        db_name = get_mongo_db_name()
        try:
            if db_name:
                db = client[db_name]
            else:
                db = client.get_default_database()
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(
                "MongoDB database name must be specified via MONGO_DB_NAME or in MONGO_URI (mongodb://.../db_name)",
            ) from exc

        try:
            ensure_indexes(db)
        except Exception as exc:  # noqa: BLE001
            logger.error("failed to ensure MongoDB indexes: %s", exc)
            client.close()
            raise

        _client = client
        _db = db

        safe_db = cast(Database, _db)
        logger.info("MongoDB connected and indexes ensured (db=%s)", safe_db.name)
        return _client


def get_database() -> Database:
    """전역 기본 Database 객체를 반환한다."""

    global _db

    if _db is None:
        get_client()
    assert _db is not None  # get_client 가 실패했다면 이미 예외가 발생했다.
    return _db


def ensure_indexes(db: Database) -> None:
    """credit 컬렉션 인덱스를 생성한다. 이미 있으면 Mongo 가 무시하므로 idempotent 하다."""

    accounts = db[CREDIT_ACCOUNTS_COLLECTION]

    # 고객당 계정은 하나
    accounts.create_index(
        [("customer_id", ASCENDING)],
        name="uniq_customer_id",
        unique=True,
    )

    history = db[CREDIT_AMOUNT_HISTORY_COLLECTION]

    # 주문 취소 시 해당 주문의 이력 조회
    history.create_index(
        [("order_id", ASCENDING)],
        name="idx_order_id",
    )

    # 고객별 이력 페이지 조회 (최신순)
    history.create_index(
        [("customer_id", ASCENDING), ("created_at", DESCENDING), ("_id", DESCENDING)],
        name="idx_customer_created_at",
    )

    expirations = db[CREDIT_ACCOUNT_EXPIRATIONS_COLLECTION]

    # 계정당 만료 레코드는 최대 하나
    expirations.create_index(
        [("credit_account_id", ASCENDING)],
        name="uniq_credit_account_id",
        unique=True,
    )

    expirations.create_index(
        [("customer_id", ASCENDING)],
        name="idx_customer_id",
    )
