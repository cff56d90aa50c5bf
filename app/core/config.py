"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (Google Sheets credentials, limits, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Google Sheets
    GOOGLE_SHEETS_ID: Optional[str] = Field(
        default=None,
        description="ID of the spreadsheet that stores the ledger"
    )
    GOOGLE_CLIENT_EMAIL: Optional[str] = Field(
        default=None,
        description="Service account email"
    )
    GOOGLE_PRIVATE_KEY: Optional[str] = Field(
        default=None,
        description="Service account private key (\\n escapes allowed)"
    )
    GOOGLE_CREDENTIALS_PATH: Optional[str] = Field(
        default=None,
        description="Path to a service account JSON file (alternative to email/key)"
    )
    SHEETS_CACHE_TTL_SECONDS: int = Field(
        default=300,
        description="How long an opened spreadsheet handle is reused"
    )
    SHEETS_MAX_RETRIES: int = Field(
        default=3,
        description="Attempts per Sheets API call before giving up"
    )

    # Worksheet names
    INCOMES_SHEET_NAME: str = "ingresos"
    EXPENSES_SHEET_NAME: str = "gastos"
    PARTNERS_SHEET_NAME: str = "parejas"
    USERS_SHEET_NAME: str = "usuarios"

    # Ledger rules
    MIN_AMOUNT: int = Field(
        default=1,
        description="Smallest accepted amount (inclusive)"
    )
    MAX_AMOUNT: int = Field(
        default=100_000_000,
        description="Largest accepted amount (inclusive)"
    )
    DEFAULT_SHARE_PERCENTAGE: int = Field(
        default=50,
        description="Share of a shared expense owed by each party"
    )
    TIMEZONE: str = Field(
        default="America/Argentina/Buenos_Aires",
        description="Timezone used for record timestamps and month filtering"
    )

    # Session Management
    SESSION_TIMEOUT_MINUTES: int = Field(
        default=60,
        description="Idle sessions older than this are evicted"
    )
    SESSION_SWEEP_INTERVAL_SECONDS: int = Field(
        default=300,
        description="How often the idle-session sweeper runs"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("GOOGLE_PRIVATE_KEY")
    @classmethod
    def restore_key_newlines(cls, v):
        """Keys pasted into .env files usually carry literal \\n sequences."""
        if v:
            return v.replace("\\n", "\n")
        return v

    @field_validator("MAX_AMOUNT")
    @classmethod
    def validate_amount_bounds(cls, v, info: ValidationInfo):
        """Ensure the amount range is not empty."""
        minimum = info.data.get("MIN_AMOUNT", 1)
        if v < minimum:
            raise ValueError("MAX_AMOUNT must be greater than or equal to MIN_AMOUNT")
        return v

    @field_validator("DEFAULT_SHARE_PERCENTAGE")
    @classmethod
    def validate_share(cls, v):
        if not 0 < v <= 100:
            raise ValueError("DEFAULT_SHARE_PERCENTAGE must be between 1 and 100")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def has_sheets_credentials(self) -> bool:
        """Whether enough settings exist to authenticate against Google."""
        if not self.GOOGLE_SHEETS_ID:
            return False
        if self.GOOGLE_CREDENTIALS_PATH:
            return True
        return bool(self.GOOGLE_CLIENT_EMAIL and self.GOOGLE_PRIVATE_KEY)


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.GOOGLE_SHEETS_ID:
        errors.append("GOOGLE_SHEETS_ID is required")

    if not settings.GOOGLE_CREDENTIALS_PATH and not (
        settings.GOOGLE_CLIENT_EMAIL and settings.GOOGLE_PRIVATE_KEY
    ):
        errors.append(
            "GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY (or GOOGLE_CREDENTIALS_PATH) are required"
        )

    # Outside production a missing spreadsheet only disables persistence
    if errors and settings.is_production:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return not errors
