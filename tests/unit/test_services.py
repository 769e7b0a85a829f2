import random

import pytest

from app.config import Settings
from app.core.cart import add_item, empty_cart
from app.core.models import CartItem, Product
from app.services.exceptions import ErrorKind, NotFoundError, TransientError, ValidationError
from app.services.faults import FaultInjector
from app.services.payments import DECLINED, INSUFFICIENT_FUNDS, SimulatedPaymentGateway
from app.services.retry import with_retry


def _cart():
    p = Product(id="p", supplier_type="retail", brand="b", spec="s", unit="g", pack_size=1, price=1000)
    return add_item(empty_cart(), CartItem.for_product(p, 1))


def test_with_retry_recovers_from_transient_errors():
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise TransientError("boom")
        return "ok"

    assert with_retry(flaky, max_retries=3, initial_delay=0) == "ok"
    assert len(calls) == 3


def test_with_retry_gives_up_after_last_attempt():
    calls = []

    def always_down():
        calls.append(1)
        raise TransientError("down")

    with pytest.raises(TransientError):
        with_retry(always_down, max_retries=2, initial_delay=0)
    assert len(calls) == 2


def test_non_transient_errors_are_not_retried():
    calls = []

    def missing():
        calls.append(1)
        raise NotFoundError("nope")

    with pytest.raises(NotFoundError):
        with_retry(missing, max_retries=5, initial_delay=0)
    assert len(calls) == 1


def test_error_kinds_and_payload():
    err = TransientError("network", code="GET_PRODUCT_FAILED")
    assert err.retryable
    assert err.to_dict() == {"kind": "transient", "code": "GET_PRODUCT_FAILED", "message": "network", "retryable": True}
    assert NotFoundError("x").kind is ErrorKind.NOT_FOUND
    assert not NotFoundError("x").retryable


def test_fault_injector_respects_rate():
    FaultInjector(Settings(fault_error_rate=0.0)).check("get_product")
    with pytest.raises(TransientError) as exc:
        FaultInjector(Settings(fault_error_rate=1.0)).check("get_product")
    assert exc.value.code == "GET_PRODUCT_FAILED"


def test_payment_succeeds_by_default():
    result = SimulatedPaymentGateway(Settings()).process(_cart())
    assert result.success
    assert result.transaction_id.startswith("TXN-")


def test_payment_declines_are_values_not_errors():
    declined = SimulatedPaymentGateway(Settings(payment_decline_rate=1.0)).process(_cart())
    assert (declined.success, declined.error) == (False, DECLINED)

    broke = SimulatedPaymentGateway(Settings(payment_insufficient_funds_rate=1.0),
                                    rng=random.Random(0)).process(_cart())
    assert (broke.success, broke.error) == (False, INSUFFICIENT_FUNDS)


def test_payment_rejects_empty_cart():
    with pytest.raises(ValidationError):
        SimulatedPaymentGateway(Settings()).process(empty_cart())
