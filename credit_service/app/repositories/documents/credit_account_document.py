"""크레딧 계정 MongoDB 도큐먼트.

금액은 Decimal128 로 저장되며, 읽을 때 MongoDecimal 이 Decimal 로 되돌린다.
"""

from __future__ import annotations

from datetime import datetime

from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    MongoDecimal,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.credit_account import (
    CreditAccount,
    CreditAccountExpiration,
    CreditAmountHistory,
)


class CreditAccountDocument(BaseDocument):
    """credit_accounts 컬렉션 도큐먼트."""

    customer_id: str
    amount: MongoDecimal

    def to_domain(self) -> CreditAccount:
        return CreditAccount(
            id=from_object_id(self.id),
            customer_id=self.customer_id,
            amount=self.amount,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CreditAmountHistoryDocument(BaseDocument):
    """credit_amount_history 컬렉션 도큐먼트."""

    credit_account_id: str | None = None
    customer_id: str
    amount: MongoDecimal
    order_id: str | None = None
    who_did_it: str | None = None

    @classmethod
    def from_domain(cls, entry: CreditAmountHistory) -> "CreditAmountHistoryDocument":
        data = build_document_data_from_domain(entry)
        # 새 이력은 Mongo 가 _id 를 발급한다.
        data.pop("id", None)
        return cls.model_validate(data)

    def to_domain(self) -> CreditAmountHistory:
        return CreditAmountHistory(
            id=from_object_id(self.id),
            credit_account_id=self.credit_account_id,
            customer_id=self.customer_id,
            amount=self.amount,
            order_id=self.order_id,
            who_did_it=self.who_did_it,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CreditAccountExpirationDocument(BaseDocument):
    """credit_account_expirations 컬렉션 도큐먼트."""

    credit_account_id: str
    customer_id: str
    expiration_start: MongoDateTime
    expiration_delay: int

    def to_domain(self) -> CreditAccountExpiration:
        expiration_start: datetime = self.expiration_start
        return CreditAccountExpiration(
            id=from_object_id(self.id),
            credit_account_id=self.credit_account_id,
            customer_id=self.customer_id,
            expiration_start=expiration_start,
            expiration_delay=self.expiration_delay,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
