"""Sample data written to empty JSON stores on first use."""
from __future__ import annotations

SEED_RECIPES = [
    {
        "id": "recipe-1",
        "store_id": "store-1",
        "name": "김치찌개",
        "category": "한식",
        "base_servings": 4,
        "items": [
            {"name": "돼지고기", "base_qty": 200, "unit": "g", "alt_names": ["돼지목살", "목살", "삼겹살"]},
            {"name": "김치", "base_qty": 300, "unit": "g", "alt_names": ["신김치", "묵은지"]},
            {"name": "두부", "base_qty": 1, "unit": "count", "alt_names": ["연두부", "부드러운두부"]},
            {"name": "대파", "base_qty": 2, "unit": "count", "alt_names": ["파"]},
            {"name": "고춧가루", "base_qty": 2, "unit": "tablespoon", "alt_names": ["고추가루"]},
            {"name": "된장", "base_qty": 1, "unit": "tablespoon", "alt_names": []},
        ],
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
    },
    {
        "id": "recipe-2",
        "store_id": "store-1",
        "name": "파스타",
        "category": "양식",
        "base_servings": 2,
        "items": [
            {"name": "스파게티면", "base_qty": 200, "unit": "g", "alt_names": ["파스타면", "면"]},
            {"name": "토마토소스", "base_qty": 200, "unit": "ml", "alt_names": ["마리나라소스"]},
            {"name": "올리브오일", "base_qty": 2, "unit": "tablespoon", "alt_names": ["엑스트라버진오일"]},
            {"name": "마늘", "base_qty": 3, "unit": "count", "alt_names": ["다진마늘"]},
            {"name": "파마산치즈", "base_qty": 50, "unit": "g", "alt_names": ["치즈"]},
        ],
        "created_at": "2024-01-02T00:00:00Z",
        "updated_at": "2024-01-02T00:00:00Z",
    },
]


def _p(pid, supplier, brand, spec, unit, pack, moq, price, lead, category):
    return {
        "id": pid, "supplier_type": supplier, "brand": brand, "spec": spec, "unit": unit,
        "pack_size": pack, "moq": moq, "price": price, "lead_time_days": lead, "category": category,
    }


SEED_PRODUCTS = [
    # pork
    _p("prod-1", "contract", "농협", "목살", "g", 1000, 500, 12000, 1, "육류"),
    _p("prod-2", "wholesale", "CJ", "목살", "g", 500, 200, 7000, 2, "육류"),
    _p("prod-3", "retail", "이마트", "목살", "g", 300, 100, 4500, 0, "육류"),
    # kimchi
    _p("prod-4", "contract", "종가집", "포기김치", "g", 2000, 1000, 15000, 1, "김치"),
    _p("prod-5", "wholesale", "풀무원", "포기김치", "g", 1000, 500, 8000, 2, "김치"),
    # tofu
    _p("prod-6", "wholesale", "대림", "연두부", "count", 20, 10, 15000, 1, "두부"),
    _p("prod-7", "retail", "이마트", "연두부", "count", 4, 1, 3000, 0, "두부"),
    # green onion
    _p("prod-8", "wholesale", "농산물직거래", "대파", "count", 50, 20, 25000, 1, "채소"),
    _p("prod-9", "retail", "이마트", "대파", "count", 5, 1, 2500, 0, "채소"),
    # chili powder
    _p("prod-10", "wholesale", "청정원", "고춧가루", "g", 1000, 500, 8000, 2, "조미료"),
    _p("prod-11", "retail", "청정원", "고춧가루", "g", 200, 100, 2000, 0, "조미료"),
    # soybean paste
    _p("prod-12", "wholesale", "청정원", "된장", "g", 2000, 1000, 12000, 2, "조미료"),
    _p("prod-13", "retail", "청정원", "된장", "g", 500, 200, 3500, 0, "조미료"),
]
