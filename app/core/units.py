# app/core/units.py
from __future__ import annotations

from decimal import Decimal
from typing import Dict, NamedTuple, Optional, Union

from app.core.models import ProductUnit, StdUnit, Unit
from app.services.exceptions import ValidationError

# Generic volumetric constants, ml per spoon.
SPOON_ML: Dict[Unit, float] = {
    Unit.TABLESPOON: 15.0,
    Unit.TEASPOON: 5.0,
}

# Grams per spoon for ingredients whose density is known. Keyed by exact name.
SPOON_WEIGHT_OVERRIDES: Dict[str, Dict[Unit, float]] = {
    "고춧가루": {Unit.TABLESPOON: 7.0, Unit.TEASPOON: 2.5},
    "된장": {Unit.TABLESPOON: 18.0, Unit.TEASPOON: 6.0},
    "고추장": {Unit.TABLESPOON: 19.0, Unit.TEASPOON: 6.5},
    "설탕": {Unit.TABLESPOON: 12.0, Unit.TEASPOON: 4.0},
    "소금": {Unit.TABLESPOON: 18.0, Unit.TEASPOON: 6.0},
    "다진마늘": {Unit.TABLESPOON: 15.0, Unit.TEASPOON: 5.0},
}

_PRODUCT_TO_STD: Dict[ProductUnit, tuple[float, StdUnit]] = {
    ProductUnit.G: (1.0, StdUnit.G),
    ProductUnit.KG: (1000.0, StdUnit.G),
    ProductUnit.ML: (1.0, StdUnit.ML),
    ProductUnit.L: (1000.0, StdUnit.ML),
    ProductUnit.COUNT: (1.0, StdUnit.COUNT),
}


class StdQuantity(NamedTuple):
    qty: float
    unit: Union[StdUnit, str]


def _times(qty: float, factor: float) -> float:
    # 1.2 * 18 must stay 21.6, not 21.599999999999998
    return float(Decimal(str(qty)) * Decimal(str(factor)))


def _coerce_unit(unit: Union[Unit, str]) -> Union[Unit, str]:
    if isinstance(unit, Unit):
        return unit
    try:
        return Unit(unit)
    except ValueError:
        return unit


def normalize(qty: float, unit: Union[Unit, str], ingredient_name: Optional[str] = None) -> StdQuantity:
    """
    Convert a recipe quantity to a standard unit (g, ml or count).

    - g / ml / count are returned as-is.
    - Spoons use the per-ingredient gram table when the name is listed, else the
      generic ml constant.
    - Anything else is returned unchanged.
    """
    if qty < 0:
        raise ValidationError(f"Quantity must be non-negative, got {qty}", code="NEGATIVE_QUANTITY")

    u = _coerce_unit(unit)
    if u == Unit.G:
        return StdQuantity(qty, StdUnit.G)
    if u == Unit.ML:
        return StdQuantity(qty, StdUnit.ML)
    if u == Unit.COUNT:
        return StdQuantity(qty, StdUnit.COUNT)
    if isinstance(u, Unit) and u.is_spoon:
        override = SPOON_WEIGHT_OVERRIDES.get(ingredient_name or "")
        if override and u in override:
            return StdQuantity(_times(qty, override[u]), StdUnit.G)
        return StdQuantity(_times(qty, SPOON_ML[u]), StdUnit.ML)
    return StdQuantity(qty, unit)


def to_product_base(qty: float, unit: Union[ProductUnit, str]) -> StdQuantity:
    """Express a product-side amount (pack size, MOQ) in g / ml / count."""
    try:
        factor, std = _PRODUCT_TO_STD[ProductUnit(unit)]
    except ValueError:
        return StdQuantity(qty, unit)
    return StdQuantity(_times(qty, factor), std)


def compatible_product_units(std_unit: Union[StdUnit, str], spoon_origin: bool = False) -> frozenset:
    """Product units that can satisfy an ingredient measured in `std_unit`."""
    allowed = {
        StdUnit.G: {ProductUnit.G, ProductUnit.KG},
        StdUnit.ML: {ProductUnit.ML, ProductUnit.L},
        StdUnit.COUNT: {ProductUnit.COUNT},
    }.get(std_unit, set())
    if spoon_origin:
        allowed = allowed | {ProductUnit.G, ProductUnit.ML}
    return frozenset(allowed)
