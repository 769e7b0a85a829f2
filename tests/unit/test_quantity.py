from decimal import Decimal

import pytest

from app.core.models import Product, ScaledItem
from app.core.pipeline import resolve_ingredient
from app.core.quantity import MOQ_WARNING, packs_for, resolve
from app.services.exceptions import ValidationError


def test_moq_forces_a_full_pack():
    res = resolve(400, 500, 1000)
    assert res.effective_qty == 1000
    assert res.quantity_packs == 1
    assert res.warning == "MOQ-adjusted"
    assert res.warning_kind == "moq_adjusted"


def test_pack_rounding_reports_the_overage():
    res = resolve(450, 100, 300)
    assert (res.effective_qty, res.quantity_packs) == (600, 2)
    assert res.warning == "overage: 150"
    assert res.warning_kind == "overage"


def test_exact_fit_has_no_warning():
    res = resolve(600, 100, 300)
    assert (res.effective_qty, res.quantity_packs, res.warning) == (600, 2, None)


def test_moq_message_wins_over_overage():
    # below MOQ and the MOQ itself is not a pack multiple
    res = resolve(50, 100, 30)
    assert (res.effective_qty, res.quantity_packs) == (120, 4)
    assert res.warning == MOQ_WARNING


def test_fractional_packs_do_not_drift():
    assert resolve(0.3, 0, 0.1) == (0.3, 3, None, None)
    assert resolve(0.25, 0, 0.1).warning == "overage: 0.05"


def test_spoon_conversion_keeps_overage_text_exact():
    salt = ScaledItem(name="소금", base_qty=1.2, unit="tablespoon", scaled_qty=1.2, std_unit="g")
    bag = Product(id="salt", supplier_type="retail", brand="한주", spec="소금", unit="g",
                  pack_size=500, moq=0, price=1500)
    result = resolve_ingredient(salt, [bag])
    assert result.effective_qty == 500
    assert result.warning == "overage: 478.4"


@pytest.mark.parametrize("scaled,moq,pack", [
    (0, 0, 5), (1, 0, 5), (5, 0, 5), (12.5, 3, 2.5), (99, 100, 7), (1000, 10, 333), (0.01, 0, 1000),
])
def test_effective_qty_is_a_pack_multiple_covering_need_and_moq(scaled, moq, pack):
    res = resolve(scaled, moq, pack)
    assert res.effective_qty >= max(scaled, moq)
    assert Decimal(str(res.effective_qty)) % Decimal(str(pack)) == 0
    assert res.effective_qty == pytest.approx(res.quantity_packs * pack)
    if scaled < moq:
        assert res.warning == MOQ_WARNING


@pytest.mark.parametrize("scaled,moq,pack", [(10, 0, 0), (10, 0, -1), (-1, 0, 5), (10, -1, 5)])
def test_invalid_inputs_fail_fast(scaled, moq, pack):
    with pytest.raises(ValidationError):
        resolve(scaled, moq, pack)


def test_packs_for_never_returns_zero():
    assert packs_for(0, 10) == 1
    assert packs_for(25, 10) == 3
    assert packs_for(30, 10) == 3
