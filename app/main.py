from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings
from app.api.v1.cart import router as cart_router
from app.api.v1.catalog import router as catalog_router
from app.api.v1.orders import router as orders_router
from app.api.v1.recipes import router as recipes_router

log = logging.getLogger("app")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure data dir exists so repos can write
    settings = Settings()
    os.makedirs(settings.data_dir, exist_ok=True)
    log.info("data dir ready at %s", settings.data_dir)
    yield

def create_app() -> FastAPI:
    settings = Settings()
    _configure_logging(settings.log_level)
    app = FastAPI(title="Recipe-to-Order API", version="1.0", lifespan=lifespan)

    # CORS (narrow it down in .env via CORS_ALLOW_ORIGINS if you want)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(recipes_router)
    app.include_router(catalog_router)
    app.include_router(cart_router)
    app.include_router(orders_router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz():
        return {"status": "ready"}

    return app

app = create_app()
