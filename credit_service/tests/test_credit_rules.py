from __future__ import annotations

import json
import logging
from datetime import timedelta
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta

from common.logger import JsonFormatter

from credit_service.app.exceptions import CouponCreditConflictError
from credit_service.app.models.checkout import (
    SESSION_AMOUNT_KEY,
    SESSION_USED_KEY,
    CheckoutCreditUsage,
)
from credit_service.app.models.credit_account import CreditAccountExpiration
from credit_service.app.models.order import Cart, Order, OrderStatus
from credit_service.app.rules.events import StoreEvent


def test_balance_is_sum_of_amounts_and_history_keeps_event_order(engine) -> None:
    amounts = [Decimal("100"), Decimal("-30.50"), Decimal("12.25"), Decimal("-200")]

    for amount in amounts:
        engine.service.add_amount("customer-1", amount, who_did_it="admin")

    account = engine.store.accounts["customer-1"]
    assert account.amount == sum(amounts)
    assert account.amount == Decimal("-118.25")  # 음수 잔액 허용
    assert [entry.amount for entry in engine.store.history] == amounts
    assert all(entry.credit_account_id == account.id for entry in engine.store.history)


def test_add_amount_returns_account_for_lower_priority_listeners(engine) -> None:
    seen: list[Decimal] = []
    engine.dispatcher.add_listener(
        StoreEvent.CREDIT_ACCOUNT_ADD_AMOUNT,
        lambda event: seen.append(event.credit_account.amount),
        priority=0,
    )

    engine.service.add_amount("customer-1", Decimal("40"))
    engine.service.add_amount("customer-1", Decimal("2"))

    assert seen == [Decimal("40"), Decimal("42")]


def test_positive_grant_restarts_expiration_clock(build_engine) -> None:
    engine = build_engine(expiration_enabled=True, expiration_delay=6)
    engine.service.add_amount("customer-1", Decimal("10"))

    engine.clock.advance(timedelta(days=40))
    engine.config.expiration_delay = 9
    engine.service.add_amount("customer-1", Decimal("1"))

    assert len(engine.store.expirations) == 1
    expiration = next(iter(engine.store.expirations.values()))
    assert expiration.expiration_start == engine.clock.now
    assert expiration.expiration_delay == 9


def test_debit_does_not_touch_expiration(build_engine) -> None:
    engine = build_engine(expiration_enabled=True, expiration_delay=6)
    engine.service.add_amount("customer-1", Decimal("10"))
    started_at = engine.clock.now

    engine.clock.advance(timedelta(days=3))
    engine.service.add_amount("customer-1", Decimal("-5"))

    expiration = next(iter(engine.store.expirations.values()))
    assert expiration.expiration_start == started_at


def test_expiration_is_not_tracked_when_disabled(engine) -> None:
    engine.service.add_amount("customer-1", Decimal("10"))

    assert engine.store.expirations == {}


def test_coupon_is_rejected_while_credit_is_used(engine) -> None:
    engine.service.add_amount("customer-1", Decimal("100"))
    history_before = list(engine.store.history)
    later_listener_calls: list[str] = []
    engine.dispatcher.add_listener(
        StoreEvent.COUPON_CONSUME,
        lambda event: later_listener_calls.append(event.code),
        priority=0,
    )
    checkout = CheckoutCreditUsage(used=True, amount=Decimal("50"))

    with pytest.raises(CouponCreditConflictError) as exc_info:
        engine.service.consume_coupon("WELCOME10", checkout, customer_id="customer-1")

    assert str(exc_info.value) == "You can't use both coupon and credit"
    assert later_listener_calls == []
    assert engine.store.history == history_before
    assert engine.store.accounts["customer-1"].amount == Decimal("100")
    assert checkout.used is True


def test_coupon_conflict_message_is_translated(build_engine) -> None:
    engine = build_engine(
        catalog={"You can't use both coupon and credit": "쿠폰과 크레딧은 함께 사용할 수 없습니다."}
    )

    with pytest.raises(CouponCreditConflictError, match="함께 사용할 수 없습니다"):
        engine.service.consume_coupon(
            "WELCOME10", CheckoutCreditUsage(used=True, amount=Decimal("1"))
        )


def test_coupon_is_accepted_without_credit_usage(engine) -> None:
    later_listener_calls: list[str] = []
    engine.dispatcher.add_listener(
        StoreEvent.COUPON_CONSUME,
        lambda event: later_listener_calls.append(event.code),
    )

    engine.service.consume_coupon("WELCOME10", CheckoutCreditUsage())

    assert later_listener_calls == ["WELCOME10"]


def test_payment_debits_checkout_credit_once_and_resets_usage(engine) -> None:
    engine.service.add_amount("customer-1", Decimal("100"))
    session = {SESSION_USED_KEY: 1, SESSION_AMOUNT_KEY: "50"}
    checkout = CheckoutCreditUsage.from_session(session)
    order = Order(id="order-1", customer_id="customer-1")

    engine.service.before_payment(order, checkout)
    checkout.write_to_session(session)
    # 같은 체크아웃으로 다시 호출돼도 차감되지 않는다.
    engine.service.before_payment(order, checkout)

    order_entries = [e for e in engine.store.history if e.order_id == "order-1"]
    assert len(order_entries) == 1
    assert order_entries[0].amount == Decimal("-50")
    assert order_entries[0].who_did_it == "Customer"
    assert engine.store.accounts["customer-1"].amount == Decimal("50")
    assert session == {SESSION_USED_KEY: 0, SESSION_AMOUNT_KEY: 0}


def test_payment_actor_label_is_translated(build_engine) -> None:
    engine = build_engine(catalog={"Customer": "고객"})

    engine.service.before_payment(
        Order(id="order-1", customer_id="customer-1"),
        CheckoutCreditUsage(used=True, amount=Decimal("5")),
    )

    assert engine.store.history[0].who_did_it == "고객"


def test_payment_without_credit_usage_is_noop(engine) -> None:
    engine.service.before_payment(
        Order(id="order-1", customer_id="customer-1"), CheckoutCreditUsage()
    )

    assert engine.store.history == []
    assert engine.store.accounts == {}


def test_cancelled_order_reverts_each_credit_entry(engine) -> None:
    engine.service.add_amount("customer-1", Decimal("500"))
    engine.service.add_amount("customer-1", Decimal("100"), order_id="order-1")
    engine.service.add_amount("customer-1", Decimal("-30"), order_id="order-1")
    engine.service.add_amount("customer-1", Decimal("7"), order_id="order-2")

    engine.service.update_order_status(
        Order(id="order-1", customer_id="customer-1", status=OrderStatus.CANCELED)
    )

    order_amounts = [e.amount for e in engine.store.history if e.order_id == "order-1"]
    assert order_amounts == [
        Decimal("100"),
        Decimal("-30"),
        Decimal("-100"),
        Decimal("30"),
    ]
    assert sum(order_amounts) == Decimal("0")
    assert engine.store.accounts["customer-1"].amount == Decimal("507")


def test_status_change_other_than_cancel_is_ignored(engine) -> None:
    engine.service.add_amount("customer-1", Decimal("100"), order_id="order-1")

    engine.service.update_order_status(
        Order(id="order-1", customer_id="customer-1", status=OrderStatus.PAID)
    )

    assert len(engine.store.history) == 1


def test_lapsed_credit_is_wiped_on_cart_addition(build_engine) -> None:
    engine = build_engine(expiration_enabled=True, expiration_delay=3)
    started_at = engine.clock.now
    engine.service.add_amount("customer-1", Decimal("80"))
    cart = Cart(id="cart-1", customer_id="customer-1")

    engine.clock.now = started_at + relativedelta(months=3) + timedelta(seconds=1)
    engine.service.add_cart_item(cart)

    assert len(engine.store.history) == 2
    expired_entry = engine.store.history[-1]
    assert expired_entry.amount == Decimal("-80")
    assert expired_entry.who_did_it == "Expiration 3 months"
    assert engine.store.accounts["customer-1"].amount == Decimal("0")
    assert engine.store.expirations == {}

    engine.service.add_cart_item(cart)

    assert len(engine.store.history) == 2


def test_credit_before_expiration_instant_is_kept(build_engine) -> None:
    engine = build_engine(expiration_enabled=True, expiration_delay=3)
    started_at = engine.clock.now
    engine.service.add_amount("customer-1", Decimal("80"))

    engine.clock.now = started_at + relativedelta(months=3)
    engine.service.add_cart_item(Cart(id="cart-1", customer_id="customer-1"))

    assert engine.store.accounts["customer-1"].amount == Decimal("80")
    assert len(engine.store.expirations) == 1


def test_anonymous_cart_is_ignored(build_engine) -> None:
    engine = build_engine(expiration_enabled=True, expiration_delay=3)
    engine.service.add_amount("customer-1", Decimal("80"))
    engine.clock.advance(timedelta(days=400))

    engine.service.add_cart_item(Cart(id="cart-1"))

    assert engine.store.accounts["customer-1"].amount == Decimal("80")


def test_expiration_without_account_does_not_crash(engine, start_time) -> None:
    engine.store.expirations["account-missing"] = CreditAccountExpiration(
        id="expiration-1",
        credit_account_id="account-missing",
        customer_id="customer-1",
        expiration_start=start_time - relativedelta(months=20),
        expiration_delay=18,
        created_at=start_time,
        updated_at=start_time,
    )

    engine.service.add_cart_item(Cart(id="cart-1", customer_id="customer-1"))

    assert engine.store.history == []
    assert "account-missing" in engine.store.expirations


def test_lapsed_negative_balance_is_brought_back_to_zero(build_engine) -> None:
    engine = build_engine(expiration_enabled=True, expiration_delay=3)
    started_at = engine.clock.now
    engine.service.add_amount("customer-1", Decimal("10"))
    engine.service.add_amount("customer-1", Decimal("-30"), order_id="order-1")

    engine.clock.now = started_at + relativedelta(months=4)
    engine.service.add_cart_item(Cart(id="cart-1", customer_id="customer-1"))

    expired_entry = engine.store.history[-1]
    assert expired_entry.amount == Decimal("20")
    assert expired_entry.who_did_it == "Expiration 3 months"
    assert engine.store.accounts["customer-1"].amount == Decimal("0")
    # 양수 환원이 타이머를 다시 걸지만 같은 레코드라 함께 지워진다.
    assert engine.store.expirations == {}


def test_lapsed_zero_balance_only_clears_expiration(build_engine) -> None:
    engine = build_engine(expiration_enabled=True, expiration_delay=3)
    started_at = engine.clock.now
    engine.service.add_amount("customer-1", Decimal("10"))
    engine.service.add_amount("customer-1", Decimal("-10"), order_id="order-1")

    engine.clock.now = started_at + relativedelta(months=3) + timedelta(seconds=1)
    engine.service.add_cart_item(Cart(id="cart-1", customer_id="customer-1"))

    assert len(engine.store.history) == 2
    assert engine.store.accounts["customer-1"].amount == Decimal("0")
    assert engine.store.expirations == {}


def test_balance_change_log_carries_structured_fields(engine, caplog) -> None:
    caplog.set_level(logging.INFO, logger="credit_service.app.rules.credit_rules")

    engine.service.add_amount("customer-1", Decimal("42"), order_id="order-1")

    record = next(r for r in caplog.records if r.getMessage().startswith("credit amount added"))
    payload = json.loads(JsonFormatter().format(record))
    assert payload["event_kind"] == "credit_account.add_amount"
    assert payload["customer_id"] == "customer-1"
    assert payload["order_id"] == "order-1"
    assert payload["amount"] == "42"
