"""
Configuration management for Deck Press.

Uses Pydantic for type-safe, validated configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class DeckPressSettings(BaseSettings):
    """Main configuration for Deck Press.

    Settings can be overridden via:
    1. Environment variables (prefixed with DP_)
    2. .env file in project root
    3. Programmatic overrides

    Example:
        export DP_REQUEST_DELAY_SECONDS=0.25
        export DP_LOG_LEVEL=DEBUG
    """

    # === Catalog ===
    api_base_url: str = Field(
        default="https://api.scryfall.com", description="Card catalog API base URL"
    )
    user_agent: str = Field(
        default="DeckPress/1.0", description="User-Agent sent with every request"
    )
    request_delay_seconds: float = Field(
        default=0.1,
        ge=0.0,
        le=10.0,
        description="Fixed delay between sequential catalog requests (seconds)",
    )

    # === HTTP ===
    http_timeout: float = Field(
        default=30.0, gt=0, le=300, description="HTTP request timeout in seconds"
    )

    # === Images ===
    preferred_image_size: Literal["normal", "large", "png"] = Field(
        default="normal", description="Catalog image size used for exports"
    )
    archive_image_quality: int = Field(
        default=95, ge=1, le=100, description="JPEG quality for archive entries"
    )
    document_image_quality: int = Field(
        default=92, ge=1, le=100, description="JPEG quality for document cells"
    )

    # === Output ===
    default_print_format: Literal["3x3", "4x4", "3x6"] = Field(
        default="3x3", description="Print format used when none is requested"
    )
    output_dir: Path = Field(default=Path("."), description="Where artifacts are saved")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_rotation: str = Field(default="10 MB", description="Log file rotation size")
    log_retention: str = Field(
        default="10 days", description="Log file retention period"
    )
    log_to_file: bool = Field(default=True, description="Enable file logging")
    logs_dir: Path = Field(default=Path("logs"), description="Log files directory")

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended directly."""
        return v.rstrip("/")

    model_config = {
        "env_prefix": "DP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Global settings instance
settings = DeckPressSettings()


def reload_settings() -> DeckPressSettings:
    """Reload settings from environment and .env file.

    Useful for testing or runtime configuration changes.
    """
    global settings
    settings = DeckPressSettings()
    return settings
