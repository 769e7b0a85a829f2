import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.exceptions import TransientError
from app.services.payments import SimulatedPaymentGateway
from app.services.repo.json_repo import JSONOrderRepo


def _fill_cart(client):
    matches = client.get("/api/v1/recipes/recipe-1/resolve", params={"servings": 8}).json()["matches"]
    return client.post("/api/v1/cart/items", json=matches).json()


def test_checkout_creates_order_and_empties_cart(client):
    cart = _fill_cart(client)
    resp = client.post("/api/v1/orders/checkout")
    assert resp.status_code == 201
    order = resp.json()
    assert order["status"] == "pending"
    assert order["transaction_id"].startswith("TXN-")
    assert order["cart_snapshot"]["total"] == cart["total"]

    assert client.get("/api/v1/cart").json()["items"] == []
    assert [o["id"] for o in client.get("/api/v1/orders").json()] == [order["id"]]
    assert client.get(f"/api/v1/orders/{order['id']}").json()["invoice_no"] == order["invoice_no"]


def test_checkout_of_empty_cart_is_rejected(client):
    resp = client.post("/api/v1/orders/checkout")
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "EMPTY_CART"


def test_status_changes_and_cancel_rules(client):
    _fill_cart(client)
    order_id = client.post("/api/v1/orders/checkout").json()["id"]

    resp = client.patch(f"/api/v1/orders/{order_id}/status", json={"status": "delivered"})
    assert resp.json()["status"] == "delivered"

    resp = client.post(f"/api/v1/orders/{order_id}/cancel")
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "ORDER_ALREADY_DELIVERED"

    assert client.post("/api/v1/orders/order-404/cancel").status_code == 404


def test_declined_payment_keeps_the_cart(client, monkeypatch):
    _fill_cart(client)
    monkeypatch.setenv("PAYMENT_DECLINE_RATE", "1")
    declined = TestClient(create_app())

    resp = declined.post("/api/v1/orders/checkout")
    assert resp.status_code == 402
    assert resp.json()["detail"]["code"] == "PAYMENT_DECLINED"
    assert declined.get("/api/v1/cart").json()["items"] != []
    assert [o["status"] for o in declined.get("/api/v1/orders").json()] == ["cancelled"]


@pytest.fixture
def charges(monkeypatch):
    """Transaction ids of every successful charge made during the test."""
    made = []
    real = SimulatedPaymentGateway.process

    def counting(self, cart):
        result = real(self, cart)
        if result.success:
            made.append(result.transaction_id)
        return result

    monkeypatch.setattr(SimulatedPaymentGateway, "process", counting)
    return made


def test_order_store_outage_charges_nothing(client, monkeypatch, charges):
    cart = _fill_cart(client)

    outage = {"on": True}
    real_create = JSONOrderRepo.create

    def flaky(self, *args, **kwargs):
        if outage["on"]:
            raise TransientError("orders down", code="CREATE_ORDER_FAILED")
        return real_create(self, *args, **kwargs)

    monkeypatch.setattr(JSONOrderRepo, "create", flaky)
    assert client.post("/api/v1/orders/checkout").status_code == 503
    assert client.post("/api/v1/orders/checkout").status_code == 503
    assert charges == []
    assert client.get("/api/v1/cart").json()["items"] == cart["items"]

    outage["on"] = False
    assert client.post("/api/v1/orders/checkout").status_code == 201
    assert len(charges) == 1


def test_retry_after_unconfirmed_payment_does_not_charge_again(client, monkeypatch, charges):
    _fill_cart(client)

    def down(self, *args, **kwargs):
        raise TransientError("orders down", code="CONFIRM_PAYMENT_FAILED")

    monkeypatch.setattr(JSONOrderRepo, "confirm_payment", down)
    assert client.post("/api/v1/orders/checkout").status_code == 503
    assert len(charges) == 1

    resp = client.post("/api/v1/orders/checkout")
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "EMPTY_CART"
    assert len(charges) == 1
    assert [o["status"] for o in client.get("/api/v1/orders").json()] == ["awaiting_payment"]


def test_transient_failures_surface_as_503_after_retries(client, monkeypatch):
    monkeypatch.setenv("FAULT_ERROR_RATE", "1")
    flaky = TestClient(create_app())
    resp = flaky.get("/api/v1/recipes/recipe-1")
    assert resp.status_code == 503
    assert resp.json()["detail"]["retryable"] is True


def test_health(client):
    assert client.get("/healthz").json() == {"status": "ok"}
