from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator, model_validator
from datetime import datetime
from typing import Annotated, Any, ClassVar
from zoneinfo import ZoneInfo
import json
from pathlib import Path
import os


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # JWT configuration (provide a fallback for local development)
    SECRET_KEY: str = "fallback_secret_for_dev_only"
    ALGORITHM: str = "HS256"
    # Tokens are valid for a week, matching what church admins are used to
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Database URL
    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'venue_hiring.db'}"

    # Retry policy for transient "database is locked" errors
    DB_BUSY_RETRIES: int = 3
    DB_BUSY_BACKOFF_SECONDS: float = 0.05

    # CORS origins; the validator below parses JSON or comma lists itself
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:3000"]
    CORS_ALLOW_ALL: bool = False

    FRONTEND_URL: str = "http://localhost:3000"

    # SMTP email settings. Leave SMTP_HOST empty to log emails instead.
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "noreply@churchvenue.co.za"
    SMTP_FROM_NAME: str = "Church Venue"

    # Operating hours for venues, evaluated in BUSINESS_TIMEZONE
    BUSINESS_TIMEZONE: str = "Africa/Johannesburg"
    BUSINESS_OPEN_HOUR: int = 7
    BUSINESS_CLOSE_HOUR: int = 18

    DEFAULT_CURRENCY: str = "ZAR"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", str(BASE_DIR.parent / ".env")),
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("SMTP_HOST", "SMTP_FROM", "FRONTEND_URL", mode="before")
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def check_business_hours(self) -> "Settings":
        if not 0 <= self.BUSINESS_OPEN_HOUR < self.BUSINESS_CLOSE_HOUR <= 24:
            raise ValueError("BUSINESS_OPEN_HOUR must be before BUSINESS_CLOSE_HOUR")
        return self

    @model_validator(mode="after")
    def allow_all_if_requested(self) -> "Settings":
        if self.CORS_ALLOW_ALL:
            self.CORS_ORIGINS = ["*"]
        return self


def load_settings() -> "Settings":
    return Settings()


settings = load_settings()


def business_now() -> datetime:
    """Current wall-clock time in BUSINESS_TIMEZONE, naive."""
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE)).replace(tzinfo=None)
