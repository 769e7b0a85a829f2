from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.api.v1.deps import call, get_catalog_repo, get_settings, http_error
from app.config import Settings
from app.core.matching import ScoringPolicy
from app.core.models import MatchResult, Product, ScaledItem, SupplierType
from app.core.pipeline import resolve_ingredients, select_product
from app.services.exceptions import ServiceError
from app.services.repo.json_repo import JSONCatalogRepo

router = APIRouter(prefix="/api/v1/catalog", tags=["catalog"])

# ---- Models ------------------------------------------------------------------

class SelectRequest(BaseModel):
    items: List[ScaledItem]
    results: List[MatchResult]
    ingredient_name: str
    product_id: str

# ---- Routes ------------------------------------------------------------------

@router.get("/products", response_model=List[Product])
def search_products(
    q: str = Query("", description="Space-separated terms matched against brand, spec and category"),
    category: Optional[str] = None,
    supplier_type: Optional[SupplierType] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    repo: JSONCatalogRepo = Depends(get_catalog_repo),
    settings: Settings = Depends(get_settings),
):
    return call(settings, lambda: repo.search(q, category, supplier_type, min_price, max_price))


@router.get("/products/{product_id}", response_model=Product)
def get_product(product_id: str, repo: JSONCatalogRepo = Depends(get_catalog_repo),
                settings: Settings = Depends(get_settings)):
    return call(settings, lambda: repo.get(product_id))


@router.get("/categories", response_model=List[str])
def list_categories(repo: JSONCatalogRepo = Depends(get_catalog_repo), settings: Settings = Depends(get_settings)):
    return call(settings, repo.categories)


@router.get("/supplier-types", response_model=List[SupplierType])
def list_supplier_types(repo: JSONCatalogRepo = Depends(get_catalog_repo)):
    return repo.supplier_types()


@router.post("/match", response_model=List[MatchResult])
def match_ingredients(
    items: List[ScaledItem],
    repo: JSONCatalogRepo = Depends(get_catalog_repo),
    settings: Settings = Depends(get_settings),
):
    products = call(settings, repo.all)
    try:
        return resolve_ingredients(items, products, ScoringPolicy(max_candidates=settings.max_candidates))
    except ServiceError as e:
        raise http_error(e)


@router.post("/match/select", response_model=List[MatchResult])
def reassign_product(body: SelectRequest):
    try:
        return select_product(body.results, body.items, body.ingredient_name, body.product_id)
    except ServiceError as e:
        raise http_error(e)
