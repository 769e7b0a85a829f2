# app/core/scaling.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from .models import Recipe, ScaledItem
from .units import normalize
from app.services.exceptions import ValidationError


def round_half_up(value, places: int = 2) -> float:
    """Round like a cashier: 0.005 -> 0.01, never to even."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    quant = Decimal(1).scaleb(-places)
    return float(value.quantize(quant, rounding=ROUND_HALF_UP))


def scale(recipe: Recipe, target_servings: int) -> List[ScaledItem]:
    """
    Scale every ingredient of `recipe` to `target_servings`.

    Returns a fresh list on every call; nothing is cached on the recipe.
    """
    if target_servings < 1:
        raise ValidationError(f"Servings must be at least 1, got {target_servings}", code="INVALID_SERVINGS")
    if recipe.base_servings < 1:
        raise ValidationError(f"Recipe {recipe.id} has invalid base servings {recipe.base_servings}",
                              code="INVALID_BASE_SERVINGS")

    ratio = Decimal(target_servings) / Decimal(recipe.base_servings)
    scaled: List[ScaledItem] = []
    for item in recipe.items:
        qty = round_half_up(Decimal(str(item.base_qty)) * ratio)
        std = normalize(qty, item.unit, item.name)
        scaled.append(ScaledItem(**item.model_dump(), scaled_qty=qty, std_unit=std.unit))
    return scaled
