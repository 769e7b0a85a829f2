from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.v1.deps import (
    call, get_cart_repo, get_catalog_repo, get_event_repo, get_settings, get_store_id,
)
from app.config import Settings
from app.core import cart as carts
from app.core.models import Cart, DomainEvent, MatchResult
from app.core.pipeline import cart_items_from_matches
from app.services.exceptions import RepoError
from app.services.repo.json_repo import JSONCartRepo, JSONCatalogRepo, JSONEventRepo

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])

# ---- Models ------------------------------------------------------------------

class QuantityUpdate(BaseModel):
    quantity_packs: int


class DeliveryUpdate(BaseModel):
    delivery_date: Optional[str] = None


class MemoUpdate(BaseModel):
    memo: Optional[str] = None

# ---- Helpers -----------------------------------------------------------------

def _save(repo: JSONCartRepo, events: JSONEventRepo, settings: Settings,
          store_id: str, cart: Cart, action: str) -> Cart:
    call(settings, lambda: repo.save(store_id, cart))
    try:
        events.append(DomainEvent(type="cart", payload={
            "action": action, "store_id": store_id, "lines": len(cart.items), "total": cart.total,
        }))
    except RepoError:
        pass
    return cart

# ---- Routes ------------------------------------------------------------------

@router.get("", response_model=Cart)
def get_cart(store_id: str = Depends(get_store_id), repo: JSONCartRepo = Depends(get_cart_repo),
             settings: Settings = Depends(get_settings)):
    return call(settings, lambda: repo.load(store_id))


@router.post("/items", response_model=Cart)
def add_match_results(
    results: List[MatchResult],
    store_id: str = Depends(get_store_id),
    repo: JSONCartRepo = Depends(get_cart_repo),
    catalog: JSONCatalogRepo = Depends(get_catalog_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    """Add the selected product of every match result; repeated products merge into one line."""
    products = call(settings, catalog.all)
    current = call(settings, lambda: repo.load(store_id))
    incoming = cart_items_from_matches(results, products)
    updated = carts.add_items(current, incoming, tax_rate=settings.tax_rate)
    return _save(repo, events, settings, store_id, updated, "add")


@router.patch("/items/{product_id}", response_model=Cart)
def update_item_quantity(
    product_id: str,
    body: QuantityUpdate,
    store_id: str = Depends(get_store_id),
    repo: JSONCartRepo = Depends(get_cart_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    current = call(settings, lambda: repo.load(store_id))
    updated = carts.update_quantity(current, product_id, body.quantity_packs, tax_rate=settings.tax_rate)
    return _save(repo, events, settings, store_id, updated, "update_quantity")


@router.delete("/items/{product_id}", response_model=Cart)
def remove_item(
    product_id: str,
    store_id: str = Depends(get_store_id),
    repo: JSONCartRepo = Depends(get_cart_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    current = call(settings, lambda: repo.load(store_id))
    updated = carts.remove_item(current, product_id, tax_rate=settings.tax_rate)
    return _save(repo, events, settings, store_id, updated, "remove")


@router.delete("", response_model=Cart)
def clear_cart(
    store_id: str = Depends(get_store_id),
    repo: JSONCartRepo = Depends(get_cart_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    current = call(settings, lambda: repo.load(store_id))
    return _save(repo, events, settings, store_id, carts.clear(current), "clear")


@router.put("/delivery", response_model=Cart)
def set_delivery_date(
    body: DeliveryUpdate,
    store_id: str = Depends(get_store_id),
    repo: JSONCartRepo = Depends(get_cart_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    current = call(settings, lambda: repo.load(store_id))
    return _save(repo, events, settings, store_id, carts.set_delivery_date(current, body.delivery_date), "delivery")


@router.put("/memo", response_model=Cart)
def set_memo(
    body: MemoUpdate,
    store_id: str = Depends(get_store_id),
    repo: JSONCartRepo = Depends(get_cart_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    current = call(settings, lambda: repo.load(store_id))
    return _save(repo, events, settings, store_id, carts.set_memo(current, body.memo), "memo")
