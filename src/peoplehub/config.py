"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, PostgresDsn, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Key generation command for documentation (split for line length)
KEY_GEN_CMD = (
    'python -c "import secrets,base64;'
    'print(base64.urlsafe_b64encode(secrets.token_bytes(32)).decode())"'
)


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "PeopleHub Core"
    debug: bool = False
    environment: Literal["development", "staging", "production", "test"] = "development"
    log_level: str = "INFO"

    # Database (required - no default for security)
    database_url: PostgresDsn = Field(
        description="PostgreSQL connection URL. Must be set via environment variable."
    )
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Security - Encryption of sensitive columns (national id)
    encryption_key: str = Field(default="", description=f"Generate with: {KEY_GEN_CMD}")
    # Legacy keys for decryption during key rotation (comma-separated, oldest to newest)
    encryption_key_legacy: str = ""

    # Booking engine
    booking_max_attempts: int = Field(default=3, ge=1, le=10)
    booking_retry_base_delay: float = Field(default=0.05, ge=0)  # seconds, doubled per attempt
    booking_transaction_timeout_seconds: float = Field(default=10.0, gt=0)

    # Notifications
    notification_webhook_url: str | None = None
    notification_timeout: float = 5.0
    notification_max_retries: int = 3

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings for safety requirements."""
        if self.environment == "production" and self.debug:
            raise ValueError("DEBUG mode cannot be enabled in production environment.")

        url = str(self.database_url)
        if not url.startswith(("postgresql://", "postgres://")):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL URL starting with 'postgresql://' or 'postgres://'"
            )

        if self.environment == "production" and not self.encryption_key:
            raise ValueError(f"ENCRYPTION_KEY is required in production. Generate with: {KEY_GEN_CMD}")

        return self

    @property
    def async_database_url(self) -> str:
        """Get async database URL for SQLAlchemy with asyncpg.

        Converts sslmode parameter to ssl for asyncpg compatibility.
        """
        url = str(self.database_url)
        url = url.replace("postgres://", "postgresql://", 1)
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        url = url.replace("sslmode=", "ssl=")
        return url

    @property
    def encryption_key_legacy_list(self) -> list[str]:
        """Get legacy encryption keys as a list."""
        return [key.strip() for key in self.encryption_key_legacy.split(",") if key.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
