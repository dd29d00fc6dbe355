# bundle_deals/core/settings.py
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_PRICING_CONFIG = PACKAGE_ROOT / "config" / "pricing" / "v1.yaml"


class Settings(BaseSettings):
    # === General ===
    app_env: str = "local"  # local | development | production

    # === Pricing ===
    pricing_config_path: str = Field(
        str(DEFAULT_PRICING_CONFIG),
        description="YAML file with size categories, unit prices and bundle tiers",
    )
    discount_mode: Literal["product", "order"] = "product"

    # === Logging ===
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_prefix="BUNDLE_DEALS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton Settings instance with simple env overrides."""
    s = Settings()

    env = os.getenv("ENVIRONMENT", s.app_env).lower()
    if env == "production":
        s.log_level = "WARNING"
    elif env == "development":
        s.log_level = "DEBUG"

    return s
