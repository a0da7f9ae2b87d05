"""
Configuration for the tax-lot engine (default method and base currency).
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

from taxlotiq.constants import DEFAULT_BASE_CURRENCY
from taxlotiq.models import AccountingMethod

DEFAULT_METHOD_ENV_VAR = "TAXLOT_DEFAULT_METHOD"
BASE_CURRENCY_ENV_VAR = "TAXLOT_BASE_CURRENCY"


class EngineConfig(BaseModel):
    """Engine-wide defaults applied when a request leaves them unspecified."""

    default_method: AccountingMethod = AccountingMethod.FIFO
    default_base_currency: str = Field(default=DEFAULT_BASE_CURRENCY, min_length=1)

    @field_validator("default_method", mode="before")
    @classmethod
    def normalize_method(cls, value: object) -> object:
        """Accept method names in any case."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("default_base_currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: object) -> object:
        """Store currency codes upper-cased; blank values fail the length check."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from `TAXLOT_*` environment variables."""
        overrides: dict[str, str] = {}
        method = os.getenv(DEFAULT_METHOD_ENV_VAR)
        if method:
            overrides["default_method"] = method
        currency = os.getenv(BASE_CURRENCY_ENV_VAR)
        if currency:
            overrides["default_base_currency"] = currency
        return cls.model_validate(overrides)


# Singleton for global access
_config = EngineConfig()


def get_config() -> EngineConfig:
    """Get the current global configuration."""
    return _config


def set_config(config: EngineConfig) -> None:
    """Replace the global configuration."""
    global _config  # noqa: PLW0603 - intentional singleton for CLI state
    _config = config
