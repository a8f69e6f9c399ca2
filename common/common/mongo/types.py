from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from bson import ObjectId
from bson.decimal128 import Decimal128
from pydantic import BaseModel, ConfigDict, Field
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated


def ensure_utc_datetime(value: datetime) -> datetime:
    """naive datetime 은 UTC 로 간주하고, aware datetime 은 UTC 로 변환한다.

    pymongo 는 기본적으로 tzinfo 없는 datetime 을 돌려주므로 읽는 쪽에서 보정한다.
    """

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_object_id(value: Any) -> ObjectId:
    """str / ObjectId 를 ObjectId 로 변환한다."""

    if isinstance(value, ObjectId):
        return value
    if value is None:
        raise TypeError("ObjectId cannot be None")
    return ObjectId(str(value))


def from_object_id(value: Optional[ObjectId]) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def to_decimal(value: Any) -> Decimal:
    """Decimal128 / int / float / str 금액 값을 Decimal 로 정규화한다.

    float 는 이진 오차를 피하기 위해 str() 을 거쳐 변환한다.
    """

    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_decimal128(value: Decimal | int | str) -> Decimal128:
    """금액을 Mongo 저장용 Decimal128 로 변환한다."""

    return Decimal128(to_decimal(value))


PyObjectId = Annotated[ObjectId, BeforeValidator(to_object_id)]
MongoDateTime = Annotated[datetime, BeforeValidator(ensure_utc_datetime)]
MongoDecimal = Annotated[Decimal, BeforeValidator(to_decimal)]


class BaseDocument(BaseModel):
    """MongoDB 도큐먼트 공통 베이스 모델.

    - ObjectId, Decimal128 같은 bson 타입을 허용한다.
    - _id <-> id alias 로 직렬화/역직렬화한다.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    created_at: MongoDateTime
    updated_at: MongoDateTime

    def to_mongo_record(self) -> dict[str, Any]:
        """insert 에 사용할 dict 로 직렬화한다.

        - by_alias=True 로 id 를 _id 로 내보낸다.
        - exclude_none=True 로 _id=None 을 빼서 Mongo 가 ObjectId 를 발급하게 한다.
        - Decimal 필드는 Decimal128 로 바꾼다 (bson 은 Decimal 을 인코딩하지 못한다).
        """

        record = self.model_dump(by_alias=True, exclude_none=True)
        for key, value in record.items():
            if isinstance(value, Decimal):
                record[key] = to_decimal128(value)
        return record


def build_document_data_from_domain(domain_model: BaseModel) -> dict[str, Any]:
    """도메인 Pydantic 모델을 도큐먼트 생성용 dict 로 변환한다.

    created_at / updated_at 은 도메인 모델에 모두 존재한다는 전제를 따른다.
    """

    return domain_model.model_dump(by_alias=True)
