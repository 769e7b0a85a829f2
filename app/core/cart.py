# app/core/cart.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence

from .models import Cart, CartItem, CartTotals

DEFAULT_TAX_RATE = 0.1
DEFAULT_SHIPPING_FEE = 3000


def aggregate(
    items: Iterable[CartItem],
    tax_rate: float = DEFAULT_TAX_RATE,
    shipping_fee: float = DEFAULT_SHIPPING_FEE,
) -> CartTotals:
    """
    Roll line subtotals up into cart totals.

    tax is rounded half-up to a whole currency unit; shipping is a flat fee.
    """
    subtotal = sum((Decimal(str(i.subtotal)) for i in items), Decimal(0))
    tax = (subtotal * Decimal(str(tax_rate))).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    fee = Decimal(str(shipping_fee))
    return CartTotals(
        subtotal=float(subtotal),
        tax=float(tax),
        shipping_fee=float(fee),
        total=float(subtotal + tax + fee),
    )


def _with_items(
    cart: Cart,
    items: List[CartItem],
    tax_rate: float,
    shipping_fee: Optional[float],
) -> Cart:
    fee = cart.shipping_fee if shipping_fee is None else shipping_fee
    totals = aggregate(items, tax_rate=tax_rate, shipping_fee=fee)
    return cart.model_copy(update={"items": items, **totals.model_dump()})


def empty_cart(shipping_fee: float = DEFAULT_SHIPPING_FEE) -> Cart:
    return Cart(items=[], subtotal=0, tax=0, shipping_fee=shipping_fee, total=shipping_fee)


def merge_items(current: Sequence[CartItem], incoming: Iterable[CartItem]) -> List[CartItem]:
    """
    Merge `incoming` lines into `current`.

    Same product_id => quantity_packs are **summed** and the line subtotal is
    recomputed from the line's unit price. New products are appended, so the
    result keeps insertion order.
    """
    idx: dict[str, CartItem] = {}
    for it in current:
        idx[it.product_id] = it.model_copy()

    for inc in incoming:
        existing = idx.get(inc.product_id)
        if existing is None:
            idx[inc.product_id] = inc.model_copy()
            continue
        packs = existing.quantity_packs + inc.quantity_packs
        idx[inc.product_id] = existing.model_copy(
            update={"quantity_packs": packs, "subtotal": packs * existing.unit_price}
        )
    return list(idx.values())


def add_items(
    cart: Cart,
    incoming: Iterable[CartItem],
    tax_rate: float = DEFAULT_TAX_RATE,
    shipping_fee: Optional[float] = None,
) -> Cart:
    """Returns a **new** Cart with `incoming` merged in and totals recomputed."""
    return _with_items(cart, merge_items(cart.items, incoming), tax_rate, shipping_fee)


def add_item(cart: Cart, item: CartItem, tax_rate: float = DEFAULT_TAX_RATE,
             shipping_fee: Optional[float] = None) -> Cart:
    return add_items(cart, [item], tax_rate=tax_rate, shipping_fee=shipping_fee)


def update_quantity(cart: Cart, product_id: str, quantity_packs: int,
                    tax_rate: float = DEFAULT_TAX_RATE) -> Cart:
    """Set a line's pack count. Zero or less removes the line."""
    if quantity_packs <= 0:
        return remove_item(cart, product_id, tax_rate=tax_rate)
    items = [
        it.model_copy(update={"quantity_packs": quantity_packs, "subtotal": quantity_packs * it.unit_price})
        if it.product_id == product_id else it
        for it in cart.items
    ]
    return _with_items(cart, items, tax_rate, None)


def remove_item(cart: Cart, product_id: str, tax_rate: float = DEFAULT_TAX_RATE) -> Cart:
    items = [it for it in cart.items if it.product_id != product_id]
    return _with_items(cart, items, tax_rate, None)


def clear(cart: Cart) -> Cart:
    return empty_cart(cart.shipping_fee)


def set_delivery_date(cart: Cart, delivery_date: Optional[str]) -> Cart:
    return cart.model_copy(update={"delivery_date": delivery_date})


def set_memo(cart: Cart, memo: Optional[str]) -> Cart:
    return cart.model_copy(update={"memo": memo})
