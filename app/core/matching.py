# app/core/matching.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import Product, ScaledItem, SupplierType
from .units import compatible_product_units, normalize


@dataclass(frozen=True)
class ScoringPolicy:
    """
    Weights used to rank catalog products for an ingredient.
    These are business policy values; tests pin the current magnitudes.
    """
    exact_spec: int = 100
    spec_contains: int = 50
    brand_contains: int = 30
    category_contains: int = 20
    supplier_bonus: Dict[SupplierType, int] = field(default_factory=lambda: {
        SupplierType.CONTRACT: 10,
        SupplierType.WHOLESALE: 5,
        SupplierType.RETAIL: 0,
    })
    max_candidates: int = 5


DEFAULT_POLICY = ScoringPolicy()


@dataclass(frozen=True)
class MatchCandidate:
    product: Product
    score: int
    reason: str


def search_terms(ingredient: ScaledItem) -> List[str]:
    """Name plus alternative names, case-folded, de-duplicated in order."""
    terms = [ingredient.name, *ingredient.alt_names]
    folded = (t.strip().casefold() for t in terms)
    return list(dict.fromkeys(t for t in folded if t))


def score_product(product: Product, terms: Iterable[str], policy: ScoringPolicy = DEFAULT_POLICY) -> Tuple[int, str]:
    """
    Text score of `product` against `terms`, plus the supplier bonus.
    Each term contributes its strongest clause only; terms add up.
    Products with no textual hit score 0 regardless of supplier.
    """
    spec = product.spec.casefold()
    brand = product.brand.casefold()
    category = (product.category or "").casefold()

    score = 0
    reasons: List[str] = []
    for term in terms:
        if spec == term:
            score += policy.exact_spec
            reasons.append(f"exact:{term}")
        elif term in spec:
            score += policy.spec_contains
            reasons.append(f"spec:{term}")
        elif term in brand:
            score += policy.brand_contains
            reasons.append(f"brand:{term}")
        elif category and term in category:
            score += policy.category_contains
            reasons.append(f"category:{term}")

    if score == 0:
        return 0, "no_match"

    score += policy.supplier_bonus.get(product.supplier_type, 0)
    reasons.append(f"supplier:{product.supplier_type.value}")
    return score, "+".join(reasons)


def rank_candidates(
    ingredient: ScaledItem,
    catalog: Sequence[Product],
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> List[MatchCandidate]:
    """Scored, unit-compatible candidates, best first, capped at policy.max_candidates."""
    std_unit = normalize(ingredient.scaled_qty, ingredient.unit, ingredient.name).unit
    allowed = compatible_product_units(std_unit, spoon_origin=ingredient.unit.is_spoon)
    terms = search_terms(ingredient)

    scored: List[MatchCandidate] = []
    for product in catalog:
        score, reason = score_product(product, terms, policy)
        if score <= 0:
            continue
        if product.unit not in allowed:
            continue
        scored.append(MatchCandidate(product=product, score=score, reason=reason))

    # stable: full ties keep catalog order
    scored.sort(key=lambda c: (-c.score, c.product.supplier_type.rank))
    return scored[: policy.max_candidates]


def match(ingredient: ScaledItem, catalog: Sequence[Product], policy: ScoringPolicy = DEFAULT_POLICY) -> List[Product]:
    """Best-first products for `ingredient`. Empty list means no match."""
    return [c.product for c in rank_candidates(ingredient, catalog, policy)]
