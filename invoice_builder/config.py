"""Application settings.

Every field can be overridden with an ``INVOICER_`` environment variable,
e.g. ``INVOICER_DRAFT_EXPIRATION_HOURS=48``.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="INVOICER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Drafts
    draft_expiration_hours: float = Field(
        default=24,
        gt=0,
        description="Drafts older than this are discarded on load",
    )
    draft_max_size: int = Field(
        default=1024 * 1024,
        gt=0,
        description="Largest serialized draft accepted, in characters",
    )
    autosave_debounce_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Minimum gap between two autosave writes",
    )
    storage_dir: Optional[Path] = Field(
        default=None,
        description="Directory for on-device drafts; in-memory store when unset",
    )

    # Export
    export_delay_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Pause before PDF generation so the spinner can paint",
    )
    page_size: Literal["A4", "LETTER"] = Field(default="A4", description="PDF page size")

    # Form defaults
    default_currency: str = Field(default="USD", description="Currency of a new invoice")
    default_payment_terms: str = Field(default="net_30", description="Payment terms of a new invoice")


def get_settings() -> Settings:
    """Build a settings instance from the environment."""
    return Settings()
