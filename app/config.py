from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List
from dotenv import load_dotenv
load_dotenv()  # populates os.environ from .env


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage
    data_dir: str = Field("data")
    recipes_file: str = Field("data/recipes.json")
    catalog_file: str = Field("data/catalog.json")
    carts_file: str = Field("data/carts.json")
    orders_file: str = Field("data/orders.json")
    events_file: str = Field("data/events.jsonl")

    # Pricing
    tax_rate: float = Field(0.1, ge=0)
    shipping_fee: float = Field(3000, ge=0)

    # Matching
    max_candidates: int = Field(5, ge=1, le=5)

    default_store_id: str = Field("store-1")

    # Simulated collaborator behaviour (0 disables)
    fault_error_rate: float = Field(0.0, ge=0, le=1)
    fault_latency_ms: int = Field(0, ge=0)
    payment_decline_rate: float = Field(0.0, ge=0, le=1)
    payment_insufficient_funds_rate: float = Field(0.0, ge=0, le=1)

    # Caller-side retry of transient failures
    retry_attempts: int = Field(3, ge=1)
    retry_initial_delay: float = Field(0.05, ge=0)

    log_level: str = Field("INFO")

    # CORS
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://127.0.0.1:3000"])
