"""
Configuration Management for the Split Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The balance engine itself takes no configuration; everything below is
consumed by the validator, the storage backends and the ledger service.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Main ledger settings.

    Loads configuration from ``SPLITLEDGER_*`` environment variables
    and the .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPLITLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    debug_mode: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    # Storage
    data_dir: Path = Field(
        default=Path(".splitledger"),
        description="Directory the JSON file store writes to"
    )
    storage_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a file read/write before giving up"
    )

    # Validation thresholds
    share_tolerance: float = Field(
        default=0.01,
        ge=0.0,
        le=1.0,
        description="Allowed gap between share sum and expense amount"
    )
    min_group_size: int = Field(
        default=2,
        ge=1,
        description="Users cannot be removed below this group size"
    )

    # Display
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Display currency used until the user picks one"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get ledger settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
