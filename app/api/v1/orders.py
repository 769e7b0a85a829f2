from __future__ import annotations

import logging
import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.api.v1.deps import (
    call, get_cart_repo, get_event_repo, get_order_repo, get_payments, get_settings, get_store_id, http_error,
)
from app.config import Settings
from app.core import cart as carts
from app.core.models import Cart, DomainEvent, Order, OrderStatus
from app.services.exceptions import RepoError, ServiceError, ValidationError
from app.services.metrics import MetricsLogger
from app.services.payments import SimulatedPaymentGateway
from app.services.repo.json_repo import JSONCartRepo, JSONEventRepo, JSONOrderRepo

log = logging.getLogger("app.orders")

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


class StatusUpdate(BaseModel):
    status: OrderStatus


def _log_event(events: JSONEventRepo, payload: dict) -> None:
    try:
        events.append(DomainEvent(type="order", payload=payload))
    except RepoError:
        pass


def _roll_back(cart_repo: JSONCartRepo, order_repo: JSONOrderRepo, settings: Settings,
               store_id: str, cart: Cart, order_id: str) -> None:
    """Put the cart back and cancel the unpaid order."""
    try:
        call(settings, lambda: cart_repo.save(store_id, cart))
        call(settings, lambda: order_repo.cancel(order_id))
    except HTTPException as e:
        log.error("rollback of order %s for store %s failed: %s", order_id, store_id, e.detail)


@router.post("/checkout", response_model=Order, status_code=status.HTTP_201_CREATED)
def checkout(
    store_id: str = Depends(get_store_id),
    cart_repo: JSONCartRepo = Depends(get_cart_repo),
    order_repo: JSONOrderRepo = Depends(get_order_repo),
    payments: SimulatedPaymentGateway = Depends(get_payments),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    """
    Turn the store's cart into a paid order.

    The order is recorded as awaiting payment and the cart is emptied before the
    card is charged. A failure up to that point charges nothing; once charged, a
    repeated request finds an empty cart rather than paying twice. A decline
    (402) or a failed payment call puts the cart back and cancels the order.
    """
    t0 = time.perf_counter()
    cart = call(settings, lambda: cart_repo.load(store_id))
    if not cart.items:
        raise http_error(ValidationError("Cannot pay for an empty cart", code="EMPTY_CART"))

    order = call(settings, lambda: order_repo.create(store_id, cart, status="awaiting_payment"))
    try:
        call(settings, lambda: cart_repo.save(store_id, carts.clear(cart)))
    except HTTPException:
        _roll_back(cart_repo, order_repo, settings, store_id, cart, order.id)
        raise

    try:
        payment = payments.process(cart)
    except ServiceError as e:
        _roll_back(cart_repo, order_repo, settings, store_id, cart, order.id)
        raise http_error(e)
    if not payment.success:
        log.info("checkout declined for store %s: %s", store_id, payment.error)
        _roll_back(cart_repo, order_repo, settings, store_id, cart, order.id)
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED,
                            detail={"kind": "business_rule", "code": "PAYMENT_DECLINED",
                                    "message": payment.error, "retryable": False})

    try:
        order = call(settings, lambda: order_repo.confirm_payment(order.id, payment.transaction_id))
    except HTTPException:
        # charged; left awaiting_payment for reconciliation
        log.error("order %s paid as %s but not confirmed", order.id, payment.transaction_id)
        raise
    _log_event(events, {"action": "create", "id": order.id, "total": cart.total})
    MetricsLogger(settings).log_latency(
        name="checkout",
        duration_ms=(time.perf_counter() - t0) * 1000.0,
        extra={"lines": len(cart.items)},
        store_id=store_id,
    )
    return order


@router.get("", response_model=List[Order])
def list_orders(store_id: str = Depends(get_store_id), repo: JSONOrderRepo = Depends(get_order_repo),
                settings: Settings = Depends(get_settings)):
    return call(settings, lambda: repo.list(store_id))


@router.get("/{order_id}", response_model=Order)
def get_order(order_id: str, repo: JSONOrderRepo = Depends(get_order_repo),
              settings: Settings = Depends(get_settings)):
    return call(settings, lambda: repo.get(order_id))


@router.patch("/{order_id}/status", response_model=Order)
def update_order_status(
    order_id: str,
    body: StatusUpdate,
    repo: JSONOrderRepo = Depends(get_order_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    order = call(settings, lambda: repo.update_status(order_id, body.status))
    _log_event(events, {"action": "status", "id": order_id, "status": body.status})
    return order


@router.post("/{order_id}/cancel", response_model=Order)
def cancel_order(
    order_id: str,
    repo: JSONOrderRepo = Depends(get_order_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    order = call(settings, lambda: repo.cancel(order_id))
    _log_event(events, {"action": "cancel", "id": order_id})
    return order
