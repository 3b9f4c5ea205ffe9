"""Runtime settings, read from the environment (prefix ``STOCKLEDGER_``)
or a ``.env`` file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOCKLEDGER_",
        env_file=".env",
        extra="ignore",
    )

    data_dir: Path = Path("data")

    # Oversell: when False, issues/adjusts that would go below zero are rejected.
    allow_negative_stock: bool = True
    lock_timeout_seconds: float = 5.0

    # Resolved once; item lookup falls back to barcode only when enabled.
    barcode_lookup_enabled: bool = True

    currency: str = "INR"
    log_level: str = "INFO"
    log_json: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
