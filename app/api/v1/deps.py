from __future__ import annotations

from typing import Callable, Optional, TypeVar

from fastapi import Depends, Header, HTTPException

from app.config import Settings
from app.services.exceptions import ErrorKind, ServiceError
from app.services.payments import SimulatedPaymentGateway
from app.services.repo.json_repo import (
    JSONCartRepo, JSONCatalogRepo, JSONEventRepo, JSONOrderRepo, JSONRecipeRepo,
)
from app.services.retry import with_retry

T = TypeVar("T")

_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 422,
    ErrorKind.BUSINESS_RULE: 409,
    ErrorKind.TRANSIENT: 503,
    ErrorKind.STORAGE: 500,
}

# ---- DI helpers --------------------------------------------------------------

def get_settings() -> Settings:
    return Settings()

def get_recipe_repo(settings: Settings = Depends(get_settings)) -> JSONRecipeRepo:
    return JSONRecipeRepo(settings)

def get_catalog_repo(settings: Settings = Depends(get_settings)) -> JSONCatalogRepo:
    return JSONCatalogRepo(settings)

def get_cart_repo(settings: Settings = Depends(get_settings)) -> JSONCartRepo:
    return JSONCartRepo(settings)

def get_order_repo(settings: Settings = Depends(get_settings)) -> JSONOrderRepo:
    return JSONOrderRepo(settings)

def get_event_repo(settings: Settings = Depends(get_settings)) -> JSONEventRepo:
    return JSONEventRepo(settings)

def get_payments(settings: Settings = Depends(get_settings)) -> SimulatedPaymentGateway:
    return SimulatedPaymentGateway(settings)

def get_store_id(
    x_store_id: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    return x_store_id or settings.default_store_id

# ---- Error translation -------------------------------------------------------

def http_error(err: ServiceError) -> HTTPException:
    return HTTPException(status_code=_STATUS.get(err.kind, 500), detail=err.to_dict())


def call(settings: Settings, fn: Callable[[], T]) -> T:
    """Run a collaborator call with retries; map service errors to HTTP errors."""
    try:
        return with_retry(fn, settings.retry_attempts, settings.retry_initial_delay)
    except ServiceError as e:
        raise http_error(e)
