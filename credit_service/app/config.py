from __future__ import annotations

import os
from dataclasses import dataclass, field


CREDIT_ACCOUNT_EXPIRATION_ENABLED = "CREDIT_ACCOUNT_EXPIRATION_ENABLED"
CREDIT_ACCOUNT_EXPIRATION_DELAY = "CREDIT_ACCOUNT_EXPIRATION_DELAY"
CREDIT_ACCOUNT_MONGO_TRANSACTIONS = "CREDIT_ACCOUNT_MONGO_TRANSACTIONS"

DEFAULT_EXPIRATION_DELAY_MONTHS = 18

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(slots=True)
class CreditAccountConfig:
    """크레딧 규칙 엔진 설정.

    프로세스 시작 시 한 번 로드해 CreditRules 생성자에 주입한다.
    """

    expiration_enabled: bool = False
    expiration_delay: int = DEFAULT_EXPIRATION_DELAY_MONTHS  # 개월


@dataclass(slots=True)
class AppConfig:
    """credit-service 전체 설정 루트."""

    credit: CreditAccountConfig = field(default_factory=CreditAccountConfig)
    # 잔액 $inc 와 이력 insert 를 Mongo 트랜잭션으로 묶을지 여부 (replica set 필요)
    mongo_transactions: bool = False


def _read_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise RuntimeError(f"{name} must be a boolean value, got: {raw!r}")


def load_credit_account_config() -> CreditAccountConfig:
    expiration_enabled = _read_bool(CREDIT_ACCOUNT_EXPIRATION_ENABLED, False)

    delay_raw = os.getenv(CREDIT_ACCOUNT_EXPIRATION_DELAY, "").strip()
    if not delay_raw:
        expiration_delay = DEFAULT_EXPIRATION_DELAY_MONTHS
    else:
        try:
            expiration_delay = int(delay_raw)
        except ValueError as exc:  # noqa: TRY003
            raise RuntimeError(
                f"{CREDIT_ACCOUNT_EXPIRATION_DELAY} must be an integer value, got: {delay_raw!r}"
            ) from exc
        if expiration_delay <= 0:
            raise RuntimeError(
                f"{CREDIT_ACCOUNT_EXPIRATION_DELAY} must be a positive number of months, got: {expiration_delay}"
            )

    return CreditAccountConfig(
        expiration_enabled=expiration_enabled,
        expiration_delay=expiration_delay,
    )


def load_config() -> AppConfig:
    """credit-service 설정을 환경 변수에서 로드한다."""

    return AppConfig(
        credit=load_credit_account_config(),
        mongo_transactions=_read_bool(CREDIT_ACCOUNT_MONGO_TRANSACTIONS, False),
    )
