"""
Skin Age Service Configuration
==============================
Pydantic settings loaded from environment variables (prefix ``SKINAGE_``)
or a local ``.env`` file.

Clinical thresholds and zone weights are deliberately NOT here: they are
fixed constants of the scoring model (see classifier.py / zones.py).
"""

import logging
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SKINAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = Field(default="INFO", description="Root log level.")

    # -------------------------------------------------------------------------
    # Service
    # -------------------------------------------------------------------------
    HOST: str = Field(default="0.0.0.0", description="API bind address.")
    PORT: int = Field(default=8000, description="API port.")
    ALLOWED_CONTENT_TYPES: List[str] = Field(
        default=["image/jpeg", "image/png", "image/webp"],
        description="Upload content types accepted by /analyze.",
    )

    # -------------------------------------------------------------------------
    # Prediction
    # -------------------------------------------------------------------------
    DEFAULT_PREDICTION_YEARS: List[int] = Field(
        default=[5, 10, 15, 20],
        description="Year offsets projected when the caller does not pass any.",
    )


# Global settings instance
settings = Settings()


def configure_logging(level: str = None) -> None:
    """Configure root logging. Call once from process entry points only."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
