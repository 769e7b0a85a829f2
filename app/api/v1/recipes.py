from __future__ import annotations

import time
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from app.api.v1.deps import (
    call, get_catalog_repo, get_event_repo, get_recipe_repo, get_settings, get_store_id, http_error,
)
from app.config import Settings
from app.core.matching import ScoringPolicy
from app.core.models import DomainEvent, MatchResult, Recipe, RecipeBody, RecipeDraft, RecipeUpdate, ScaledItem
from app.core.pipeline import resolve_ingredients
from app.core.scaling import scale
from app.services.exceptions import RepoError, ServiceError
from app.services.metrics import MetricsLogger
from app.services.repo.json_repo import JSONCatalogRepo, JSONEventRepo, JSONRecipeRepo

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])

# ---- Models ------------------------------------------------------------------

class ImportRequest(BaseModel):
    store_id: Optional[str] = None
    recipes: List[RecipeBody]


class ResolveResponse(BaseModel):
    recipe_id: str
    servings: int
    items: List[ScaledItem]
    matches: List[MatchResult]


def _log_event(events: JSONEventRepo, payload: dict) -> None:
    # best-effort; the recipe change already succeeded
    try:
        events.append(DomainEvent(type="recipe", payload=payload))
    except RepoError:
        pass


def _scaled(recipe: Recipe, servings: Optional[int]) -> List[ScaledItem]:
    try:
        return scale(recipe, recipe.base_servings if servings is None else servings)
    except ServiceError as e:
        raise http_error(e)

# ---- Routes ------------------------------------------------------------------

@router.get("", response_model=List[Recipe])
def list_recipes(
    store_id: str = Depends(get_store_id),
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    settings: Settings = Depends(get_settings),
):
    return call(settings, lambda: repo.list(store_id))


@router.post("", response_model=Recipe, status_code=status.HTTP_201_CREATED)
def create_recipe(
    body: RecipeBody,
    store_id: str = Depends(get_store_id),
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    draft = RecipeDraft(**body.model_dump(), store_id=store_id)
    recipe = call(settings, lambda: repo.create(draft))
    _log_event(events, {"action": "create", "id": recipe.id})
    return recipe


@router.post("/import", response_model=List[Recipe], status_code=status.HTTP_201_CREATED)
def import_recipes(
    body: ImportRequest,
    store_id: str = Depends(get_store_id),
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    target = body.store_id or store_id
    imported = call(settings, lambda: repo.import_many(target, body.recipes))
    _log_event(events, {"action": "import", "count": len(imported), "store_id": target})
    return imported


@router.get("/{recipe_id}", response_model=Recipe)
def get_recipe(recipe_id: str, repo: JSONRecipeRepo = Depends(get_recipe_repo),
               settings: Settings = Depends(get_settings)):
    return call(settings, lambda: repo.get(recipe_id))


@router.put("/{recipe_id}", response_model=Recipe)
def update_recipe(
    recipe_id: str,
    updates: RecipeUpdate,
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    recipe = call(settings, lambda: repo.update(recipe_id, updates))
    _log_event(events, {"action": "update", "id": recipe_id})
    return recipe


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: str,
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    events: JSONEventRepo = Depends(get_event_repo),
    settings: Settings = Depends(get_settings),
):
    call(settings, lambda: repo.delete(recipe_id))
    _log_event(events, {"action": "delete", "id": recipe_id})
    return {"ok": True}


@router.get("/{recipe_id}/scale", response_model=List[ScaledItem])
def scale_recipe(
    recipe_id: str,
    servings: Optional[int] = Query(None, description="Target servings; defaults to the recipe's base servings"),
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    settings: Settings = Depends(get_settings),
):
    recipe = call(settings, lambda: repo.get(recipe_id))
    return _scaled(recipe, servings)


@router.get("/{recipe_id}/resolve", response_model=ResolveResponse)
def resolve_recipe(
    recipe_id: str,
    servings: Optional[int] = Query(None),
    repo: JSONRecipeRepo = Depends(get_recipe_repo),
    catalog: JSONCatalogRepo = Depends(get_catalog_repo),
    settings: Settings = Depends(get_settings),
):
    """Scale the recipe and match every ingredient against the current catalog."""
    recipe = call(settings, lambda: repo.get(recipe_id))
    products = call(settings, catalog.all)

    t0 = time.perf_counter()
    items = _scaled(recipe, servings)
    try:
        matches = resolve_ingredients(items, products, ScoringPolicy(max_candidates=settings.max_candidates))
    except ServiceError as e:
        raise http_error(e)
    dt_ms = (time.perf_counter() - t0) * 1000.0

    MetricsLogger(settings).log_latency(
        name="resolve_recipe",
        duration_ms=dt_ms,
        extra={"recipe_id": recipe_id, "ingredients": len(items), "catalog": len(products)},
        store_id=recipe.store_id,
    )
    return ResolveResponse(recipe_id=recipe.id, servings=recipe.base_servings if servings is None else servings,
                           items=items, matches=matches)
