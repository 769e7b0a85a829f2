# app/core/quantity.py
from __future__ import annotations

import math
from decimal import Decimal
from typing import Literal, NamedTuple, Optional

from app.services.exceptions import ValidationError

MOQ_WARNING = "MOQ-adjusted"
OVERAGE_WARNING = "overage"

WarningKind = Literal["moq_adjusted", "overage"]


class Resolution(NamedTuple):
    effective_qty: float
    quantity_packs: int
    warning: Optional[str] = None
    warning_kind: Optional[WarningKind] = None


def _dec(x: float) -> Decimal:
    return Decimal(str(x))


def _fmt(x: Decimal) -> str:
    # 600.0 -> "600", 0.25 -> "0.25"
    return format(x.normalize(), "f")


def resolve(scaled_qty: float, moq: float, pack_size: float) -> Resolution:
    """
    Purchasable quantity for `scaled_qty` given a product's MOQ and pack size.

    The result is the smallest whole number of packs covering max(scaled_qty, moq).
    When the MOQ forced the amount up, the warning is the MOQ message; otherwise
    any rounding up to the pack size is reported as an overage.
    """
    if pack_size <= 0:
        raise ValidationError(f"Pack size must be positive, got {pack_size}", code="INVALID_PACK_SIZE")
    if scaled_qty < 0:
        raise ValidationError(f"Quantity must be non-negative, got {scaled_qty}", code="NEGATIVE_QUANTITY")
    if moq < 0:
        raise ValidationError(f"MOQ must be non-negative, got {moq}", code="NEGATIVE_MOQ")

    needed, min_order, pack = _dec(scaled_qty), _dec(moq), _dec(pack_size)
    min_qty = max(needed, min_order)
    packs = int(math.ceil(min_qty / pack))
    effective = pack * packs

    if needed < min_order:
        return Resolution(float(effective), packs, MOQ_WARNING, "moq_adjusted")
    if effective > needed:
        excess = effective - needed
        return Resolution(float(effective), packs, f"{OVERAGE_WARNING}: {_fmt(excess)}", "overage")
    return Resolution(float(effective), packs)


def packs_for(effective_qty: float, pack_size: float) -> int:
    """Whole packs needed to hold `effective_qty`; never less than one."""
    if pack_size <= 0:
        raise ValidationError(f"Pack size must be positive, got {pack_size}", code="INVALID_PACK_SIZE")
    return max(1, int(math.ceil(_dec(effective_qty) / _dec(pack_size))))
