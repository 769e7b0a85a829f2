import pytest

from app.core.models import ProductUnit, StdUnit
from app.core.units import compatible_product_units, normalize, to_product_base
from app.services.exceptions import ValidationError


@pytest.mark.parametrize("qty,unit", [(250, "g"), (0.5, "ml"), (3, "count")])
def test_standard_units_pass_through(qty, unit):
    assert normalize(qty, unit) == (qty, unit)


def test_count_is_not_converted_to_mass():
    assert normalize(2, "count", "대파") == (2, StdUnit.COUNT)


def test_spoons_use_generic_volume_without_override():
    assert normalize(2, "tablespoon", "올리브오일") == (30, StdUnit.ML)
    assert normalize(3, "teaspoon") == (15, StdUnit.ML)


def test_spoons_use_ingredient_weight_override():
    assert normalize(2, "tablespoon", "고춧가루") == (14, StdUnit.G)
    assert normalize(2, "teaspoon", "고춧가루") == (5, StdUnit.G)


def test_fractional_spoons_convert_without_float_noise():
    assert normalize(1.2, "tablespoon", "소금").qty == 21.6
    assert normalize(0.1, "teaspoon").qty == 0.5
    assert to_product_base(1.1, "kg").qty == 1100


def test_override_lookup_is_by_exact_name():
    assert normalize(1, "tablespoon", "고춧가루 ").unit == StdUnit.ML


def test_unknown_unit_is_a_no_op():
    assert normalize(2, "cup", "우유") == (2, "cup")


def test_negative_quantity_is_rejected():
    with pytest.raises(ValidationError):
        normalize(-1, "g")


def test_to_product_base_converts_kg_and_litres():
    assert to_product_base(2, "kg") == (2000, StdUnit.G)
    assert to_product_base(1.5, "L") == (1500, StdUnit.ML)
    assert to_product_base(4, "count") == (4, StdUnit.COUNT)


def test_compatibility_table():
    assert compatible_product_units(StdUnit.G) == {ProductUnit.G, ProductUnit.KG}
    assert compatible_product_units(StdUnit.ML) == {ProductUnit.ML, ProductUnit.L}
    assert compatible_product_units(StdUnit.COUNT) == {ProductUnit.COUNT}
    assert compatible_product_units(StdUnit.ML, spoon_origin=True) == {ProductUnit.ML, ProductUnit.L, ProductUnit.G}
