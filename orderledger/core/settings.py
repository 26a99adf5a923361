from __future__ import annotations

import json
from typing import Annotated, Any, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Env values for these are split by _split_list rather than JSON-decoded
StrList = Annotated[List[str], NoDecode]


def _split_list(value: Any) -> List[str]:
    """Accept a JSON array or a comma-separated string; empty means ["*"]."""
    if isinstance(value, str) and value.strip().startswith("["):
        value = json.loads(value)
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple)):
        items = [str(part) for part in value]
    else:
        items = []
    return items or ["*"]


class AppSettings(BaseSettings):
    """
    Service-level settings: API metadata, CORS, startup switches, the document
    store backend and maintenance limits.

    Database connection details live in orderledger.db.config.Settings.
    """

    APP_NAME: str = Field(default="Order Ledger API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for a material-delivery order tracker. "
            "Provides profit reconciliation, dashboard statistics and financial maintenance."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    CORS_ORIGINS: StrList = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: StrList = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: StrList = Field(default_factory=lambda: ["*"])

    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="Run Alembic 'upgrade head' at startup (postgres backend only).",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="Seed demo orders and ledger entries once the store is open.",
    )

    DOCUMENT_STORE_BACKEND: Literal["postgres", "memory"] = Field(
        default="postgres",
        description="'postgres' keeps documents in the documents table; 'memory' is process-local.",
    )
    CLEAR_BATCH_SIZE: int = Field(
        default=450,
        ge=1,
        le=450,
        description="Writes per committed batch during financial maintenance sweeps.",
    )

    LOG_LEVEL: str = Field(default="INFO", description="Root log level name")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", "CORS_ALLOW_METHODS", "CORS_ALLOW_HEADERS", mode="before")
    @classmethod
    def _parse_lists(cls, v):
        return _split_list(v)


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    Not cached, so tests can change the environment between calls.
    """
    return AppSettings()
