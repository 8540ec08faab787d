from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic_settings import BaseSettings

DEFAULT_CATALOG = Path(__file__).parent / "data" / "products.yaml"


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    app_title: str = "Meowth Fashion Storefront API"
    version: str = "1.0.0"
    api_base_url: str = "http://localhost:8000"
    host: str = "127.0.0.1"
    port: int = 8000
    catalog_path: str = ""
    session_header: str = "sessionid"
    featured_limit: int = 8
    free_shipping_threshold: float = 75.0
    flat_shipping_rate: float = 9.99
    log_level: str = "INFO"

    class Config:
        env_prefix = "STOREFRONT_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields from .env file

    def resolved_catalog_path(self) -> Path:
        return Path(self.catalog_path) if self.catalog_path else DEFAULT_CATALOG


def load_settings(**overrides: Any) -> Settings:
    """Provide a fresh settings object, optionally overriding fields."""

    return Settings(**overrides)


def load_catalog(path: str | Path = DEFAULT_CATALOG) -> List[Dict[str, Any]]:
    """Load seed product records from YAML.

    The file holds a top-level ``products`` list; each entry is a mapping of
    product fields in snake_case.
    """

    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Product catalog not found at {cfg_path}")

    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if "products" not in data:
        raise ValueError("Catalog file must contain a 'products' list.")

    for record in data["products"]:
        if "name" not in record or "price" not in record:
            raise ValueError(f"Catalog entry {record!r} must have 'name' and 'price' fields.")

    return data["products"]


settings = load_settings()
