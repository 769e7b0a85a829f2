# app/core/pipeline.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .matching import DEFAULT_POLICY, ScoringPolicy, rank_candidates, score_product, search_terms
from .models import CartItem, MatchResult, Product, ScaledItem
from .quantity import packs_for, resolve
from .units import normalize, to_product_base
from app.services.exceptions import NotFoundError, ValidationError

log = logging.getLogger("app.pipeline")

NO_MATCH_WARNING = "no match"


def _resolve_for_product(item: ScaledItem, product: Product):
    """Quantity resolution with recipe and product amounts in the same base unit."""
    needed = normalize(item.scaled_qty, item.unit, item.name).qty
    moq = to_product_base(product.moq, product.unit).qty
    pack = to_product_base(product.pack_size, product.unit).qty
    return resolve(needed, moq, pack)


def resolve_ingredient(
    item: ScaledItem,
    catalog: Sequence[Product],
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> MatchResult:
    ranked = rank_candidates(item, catalog, policy)
    if not ranked:
        log.debug("no catalog match for %s", item.name)
        return MatchResult(
            ingredient_name=item.name,
            candidates=[],
            effective_qty=item.scaled_qty,
            warning=NO_MATCH_WARNING,
        )

    best = ranked[0].product
    res = _resolve_for_product(item, best)
    return MatchResult(
        ingredient_name=item.name,
        candidates=[c.product for c in ranked],
        selected_product_id=best.id,
        effective_qty=res.effective_qty,
        quantity_packs=res.quantity_packs or None,
        warning=res.warning,
        reason=ranked[0].reason,
    )


def resolve_ingredients(
    items: Sequence[ScaledItem],
    catalog: Sequence[Product],
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> List[MatchResult]:
    """One MatchResult per ingredient, in recipe order. Ingredients do not affect each other."""
    results = [resolve_ingredient(it, catalog, policy) for it in items]
    unmatched = sum(1 for r in results if not r.candidates)
    log.info("resolved %d ingredients (%d unmatched)", len(results), unmatched)
    return results


def select_product(
    results: Sequence[MatchResult],
    items: Sequence[ScaledItem],
    ingredient_name: str,
    product_id: str,
) -> List[MatchResult]:
    """
    Reassign the selected product of one ingredient and re-resolve its quantity.
    The product must be one of that ingredient's candidates.
    """
    by_name: Dict[str, ScaledItem] = {it.name: it for it in items}
    item = by_name.get(ingredient_name)
    if item is None:
        raise NotFoundError(f"Ingredient not found: {ingredient_name}", code="INGREDIENT_NOT_FOUND")

    out: List[MatchResult] = []
    found = False
    for r in results:
        if r.ingredient_name != ingredient_name:
            out.append(r)
            continue
        product = next((p for p in r.candidates if p.id == product_id), None)
        if product is None:
            raise ValidationError(
                f"Product {product_id} is not a candidate for {ingredient_name}", code="NOT_A_CANDIDATE"
            )
        res = _resolve_for_product(item, product)
        out.append(r.model_copy(update={
            "selected_product_id": product.id,
            "effective_qty": res.effective_qty,
            "quantity_packs": res.quantity_packs or None,
            "warning": res.warning,
            "reason": score_product(product, search_terms(item))[1],
        }))
        found = True

    if not found:
        raise NotFoundError(f"No match result for {ingredient_name}", code="INGREDIENT_NOT_FOUND")
    return out


def cart_items_from_matches(results: Sequence[MatchResult], catalog: Sequence[Product]) -> List[CartItem]:
    """
    CartItems for every result that has a selection. Results without a
    selection, or whose product left the catalog, are skipped.
    """
    by_id: Dict[str, Product] = {p.id: p for p in catalog}
    items: List[CartItem] = []
    for r in results:
        if not r.selected_product_id or not r.candidates:
            continue
        product: Optional[Product] = by_id.get(r.selected_product_id)
        if product is None:
            log.warning("selected product %s for %s is not in the catalog", r.selected_product_id, r.ingredient_name)
            continue
        packs = packs_for(r.effective_qty, to_product_base(product.pack_size, product.unit).qty)
        items.append(CartItem.for_product(product, packs))
    return items
