"""Application settings and configuration."""

import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REFERTRACK_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "refertrack"
    env: str = "development"
    log_level: str = "INFO"
    log_format: str = "console"  # console or json
    allowed_origins: str = "http://localhost:3000"

    # Database
    database_url: str = "sqlite:///./refertrack.db"

    # Password hashing
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Referral codes
    referral_code_length: int = Field(default=8, ge=4, le=32)
    referral_code_max_attempts: int = Field(default=5, ge=1)


# Global settings instance
settings = Settings()

# ── Sanity checks ────────────────────────────────────────────────────
if settings.env == "production" and settings.bcrypt_rounds < 10:
    print(
        "\n❌  FATAL: REFERTRACK_BCRYPT_ROUNDS is too low for production (min 10).\n",
        file=sys.stderr,
    )
    sys.exit(1)
