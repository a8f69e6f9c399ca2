from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from credit_service.app.main import create_app
from credit_service.app.services.credit_account_service import (
    get_credit_account_service,
)


@pytest.fixture
def client(build_engine, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("KAFKA_BOOTSTRAP_SERVERS", raising=False)
    engine = build_engine(expiration_enabled=True, expiration_delay=18)
    app = create_app()
    app.dependency_overrides[get_credit_account_service] = lambda: engine.service
    with TestClient(app) as test_client:
        yield test_client, engine


def test_get_unknown_account_returns_404(client) -> None:
    test_client, _ = client

    response = test_client.get("/api/v1/credit-accounts/customer-1")

    assert response.status_code == 404


def test_add_amount_returns_balance_and_expiration(client) -> None:
    test_client, engine = client

    response = test_client.post(
        "/api/v1/credit-accounts/customer-1/amount",
        json={"amount": "120.00", "who_did_it": "admin"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["customer_id"] == "customer-1"
    assert body["amount"] == "120.00"
    assert body["expiration"]["expiration_delay"] == 18
    assert body["expiration"]["expires_at"] == "2025-07-15T09:30:00+00:00"
    assert engine.store.history[0].who_did_it == "admin"


def test_history_is_paginated_newest_first(client) -> None:
    test_client, engine = client
    for amount in ("10", "20", "30"):
        engine.service.add_amount("customer-1", Decimal(amount))

    response = test_client.get(
        "/api/v1/credit-accounts/customer-1/history", params={"page_size": 2}
    )

    body = response.json()
    assert body["total"] == 3
    assert [item["amount"] for item in body["items"]] == ["30", "20"]


def test_before_payment_returns_cleared_checkout(client) -> None:
    test_client, engine = client
    engine.service.add_amount("customer-1", Decimal("100"))

    response = test_client.post(
        "/api/v1/checkout/before-payment",
        json={
            "order_id": "order-1",
            "customer_id": "customer-1",
            "checkout": {"used": True, "amount": "50"},
        },
    )

    assert response.status_code == 200
    assert response.json() == {"used": False, "amount": "0"}
    assert engine.store.accounts["customer-1"].amount == Decimal("50")


def test_coupon_with_credit_in_use_returns_conflict(client) -> None:
    test_client, _ = client

    response = test_client.post(
        "/api/v1/checkout/coupon",
        json={"code": "WELCOME10", "checkout": {"used": True, "amount": "50"}},
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "coupon_credit_conflict"


@pytest.mark.parametrize("params", [{"page": 0}, {"page_size": 500}, {"page_size": 0}])
def test_history_rejects_out_of_range_paging(client, params) -> None:
    test_client, _ = client

    response = test_client.get(
        "/api/v1/credit-accounts/customer-1/history", params=params
    )

    assert response.status_code == 422


def test_history_echoes_requested_page(client) -> None:
    test_client, engine = client
    for amount in ("10", "20", "30"):
        engine.service.add_amount("customer-1", Decimal(amount))

    response = test_client.get(
        "/api/v1/credit-accounts/customer-1/history",
        params={"page": 2, "page_size": 2},
    )

    body = response.json()
    assert body["page"] == 2
    assert body["page_size"] == 2
    assert [item["amount"] for item in body["items"]] == ["10"]
