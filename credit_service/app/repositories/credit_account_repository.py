"""크레딧 계정 레포지토리 구현체 (MongoDB).

- credit_accounts: 고객당 잔액 1건
- credit_amount_history: 잔액 변경 이력 (append-only)
- credit_account_expirations: 계정당 만료 타이머 최대 1건
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from pymongo import ReturnDocument
from pymongo.client_session import ClientSession
from pymongo.database import Database

from common.mongo.client import (
    CREDIT_ACCOUNT_EXPIRATIONS_COLLECTION,
    CREDIT_ACCOUNTS_COLLECTION,
    CREDIT_AMOUNT_HISTORY_COLLECTION,
)
from common.mongo.types import to_decimal128, to_object_id

from .documents.credit_account_document import (
    CreditAccountDocument,
    CreditAccountExpirationDocument,
    CreditAmountHistoryDocument,
)
from .interfaces import (
    CreditAccountExpirationRepositoryInterface,
    CreditAccountRepositoryInterface,
    CreditAmountHistoryRepositoryInterface,
)
from ..models.credit_account import (
    CreditAccount,
    CreditAccountExpiration,
    CreditAmountHistory,
)


logger = logging.getLogger(__name__)


class CreditAccountRepository(CreditAccountRepositoryInterface):
    """credit_accounts 컬렉션 접근 레이어. 이력 추가도 여기서 함께 처리한다."""

    def __init__(self, database: Database, *, use_transactions: bool = False) -> None:
        self._db = database
        self._col = database[CREDIT_ACCOUNTS_COLLECTION]
        self._history_col = database[CREDIT_AMOUNT_HISTORY_COLLECTION]
        self._use_transactions = use_transactions

    def find_by_customer_id(self, customer_id: str) -> CreditAccount | None:
        doc = self._col.find_one({"customer_id": customer_id})
        if not doc:
            return None
        return CreditAccountDocument.model_validate(doc).to_domain()

    def add_amount(
        self,
        customer_id: str,
        amount: Decimal,
        order_id: str | None,
        who_did_it: str | None,
        now: datetime,
    ) -> CreditAccount:
        """잔액에 amount 를 더하고 이력 1건을 남긴다.

        잔액은 $inc upsert 로 원자적으로 갱신된다 (계정이 없으면 0 에서 시작).
        use_transactions=True 이면 잔액 갱신과 이력 insert 를 한 트랜잭션으로 묶고,
        아니면 이력 insert 실패 시 잔액을 반대 금액으로 되돌린 뒤 예외를 다시 올린다.
        """

        def _apply(session: ClientSession | None) -> CreditAccount:
            doc = self._col.find_one_and_update(
                {"customer_id": customer_id},
                {
                    "$inc": {"amount": to_decimal128(amount)},
                    "$set": {"updated_at": now},
                    "$setOnInsert": {"created_at": now},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
                session=session,
            )
            account = CreditAccountDocument.model_validate(doc).to_domain()

            entry = CreditAmountHistoryDocument.from_domain(
                CreditAmountHistory(
                    credit_account_id=account.id,
                    customer_id=customer_id,
                    amount=amount,
                    order_id=order_id,
                    who_did_it=who_did_it,
                    created_at=now,
                    updated_at=now,
                )
            )
            try:
                self._history_col.insert_one(entry.to_mongo_record(), session=session)
            except Exception:
                if session is None:
                    # 트랜잭션이 없으면 잔액 증가분을 직접 되돌린다.
                    logger.exception(
                        "history insert failed, reverting balance customer_id=%s amount=%s",
                        customer_id,
                        amount,
                    )
                    self._col.update_one(
                        {"customer_id": customer_id},
                        {"$inc": {"amount": to_decimal128(-amount)}},
                    )
                raise
            return account

        if not self._use_transactions:
            return _apply(None)

        with self._db.client.start_session() as session:
            return session.with_transaction(_apply)


class CreditAmountHistoryRepository(CreditAmountHistoryRepositoryInterface):
    """credit_amount_history 컬렉션 조회 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database[CREDIT_AMOUNT_HISTORY_COLLECTION]

    def list_by_order_id(self, order_id: str) -> list[CreditAmountHistory]:
        cursor = self._col.find(
            {"order_id": order_id},
            sort=[("created_at", 1), ("_id", 1)],
        )
        return [
            CreditAmountHistoryDocument.model_validate(doc).to_domain()
            for doc in cursor
        ]

    def list_by_customer(
        self, customer_id: str, page: int, page_size: int
    ) -> tuple[list[CreditAmountHistory], int]:
        """고객의 잔액 변경 이력을 최신순으로 페이지 조회한다. page 는 1 부터."""
        skip = (page - 1) * page_size

        total = self._col.count_documents({"customer_id": customer_id})
        cursor = self._col.find(
            {"customer_id": customer_id},
            sort=[("created_at", -1), ("_id", -1)],
            skip=skip,
            limit=page_size,
        )

        items = [
            CreditAmountHistoryDocument.model_validate(raw).to_domain()
            for raw in cursor
        ]
        return items, total


class CreditAccountExpirationRepository(CreditAccountExpirationRepositoryInterface):
    """credit_account_expirations 컬렉션 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database[CREDIT_ACCOUNT_EXPIRATIONS_COLLECTION]

    def find_by_customer_id(self, customer_id: str) -> CreditAccountExpiration | None:
        doc = self._col.find_one({"customer_id": customer_id})
        if not doc:
            return None
        return CreditAccountExpirationDocument.model_validate(doc).to_domain()

    def restart(
        self,
        credit_account_id: str,
        customer_id: str,
        start: datetime,
        delay_months: int,
    ) -> CreditAccountExpiration:
        doc = self._col.find_one_and_update(
            {"credit_account_id": credit_account_id},
            {
                "$set": {
                    "customer_id": customer_id,
                    "expiration_start": start,
                    "expiration_delay": delay_months,
                    "updated_at": start,
                },
                "$setOnInsert": {"created_at": start},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return CreditAccountExpirationDocument.model_validate(doc).to_domain()

    def delete(self, expiration_id: str) -> bool:
        result = self._col.delete_one({"_id": to_object_id(expiration_id)})
        if result.deleted_count == 0:
            logger.debug("credit account expiration already gone id=%s", expiration_id)
        return result.deleted_count == 1
