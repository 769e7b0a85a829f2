import pytest

from app.core.models import Recipe, RecipeItem, StdUnit
from app.core.scaling import round_half_up, scale
from app.services.exceptions import ValidationError


def _recipe(base_servings=4, items=None):
    return Recipe(
        id="r1",
        store_id="store-1",
        name="김치찌개",
        base_servings=base_servings,
        items=items or [
            RecipeItem(name="돼지고기", base_qty=200, unit="g", alt_names=["돼지목살"]),
            RecipeItem(name="두부", base_qty=1, unit="count"),
            RecipeItem(name="고춧가루", base_qty=2, unit="tablespoon"),
            RecipeItem(name="올리브오일", base_qty=2, unit="tablespoon"),
        ],
    )


def test_doubling_servings_doubles_quantities():
    out = scale(_recipe(), 8)
    assert out[0].scaled_qty == 400
    assert out[0].std_unit == StdUnit.G
    assert out[0].alt_names == ["돼지목살"]
    assert out[1].scaled_qty == 2


def test_scaled_qty_matches_formula_for_every_serving_count():
    r = _recipe()
    for s in range(1, 13):
        for item, scaled in zip(r.items, scale(r, s)):
            assert scaled.scaled_qty == round(item.base_qty * s / r.base_servings, 2)


def test_two_decimal_rounding():
    r = _recipe(base_servings=3, items=[
        RecipeItem(name="a", base_qty=1, unit="g"),
        RecipeItem(name="b", base_qty=2, unit="g"),
    ])
    assert [i.scaled_qty for i in scale(r, 1)] == [0.33, 0.67]


def test_rounding_is_half_up():
    r = _recipe(base_servings=1, items=[RecipeItem(name="a", base_qty=0.125, unit="g")])
    assert scale(r, 1)[0].scaled_qty == 0.13
    assert round_half_up(2.675) == 2.68


def test_std_unit_follows_normalizer():
    out = scale(_recipe(), 4)
    assert out[1].std_unit == StdUnit.COUNT
    assert out[2].std_unit == StdUnit.G   # weight override
    assert out[3].std_unit == StdUnit.ML  # generic spoon volume
    # the recipe quantity itself stays in the recipe's unit
    assert out[2].scaled_qty == 2


def test_scaling_is_repeatable_and_does_not_touch_the_recipe():
    r = _recipe()
    first = scale(r, 6)
    second = scale(r, 6)
    assert first == second
    assert first is not second
    assert [i.base_qty for i in r.items] == [200, 1, 2, 2]


def test_non_positive_servings_fail_fast():
    with pytest.raises(ValidationError):
        scale(_recipe(), 0)


def test_zero_base_servings_fail_fast():
    r = Recipe.model_construct(id="bad", store_id="s", name="x", category="", base_servings=0, items=[])
    with pytest.raises(ValidationError):
        scale(r, 2)
