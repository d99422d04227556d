"""Application configuration settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "swasthya"

    # Application
    APP_NAME: str = "Swasthya Clinic Booking"
    API_PREFIX: str = "/api"
    PORT: int = 8000
    FRONTEND_URL: str = "http://localhost:3000"

    # CORS
    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000"]'

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

    # JWT
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Email (SMTP)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "Swasthya <noreply@swasthya.com.np>"
    EMAILS_ENABLED: bool = False

    # Local wall clock used for "today" and the same-day booking cutoff.
    # None means the server's local time.
    TIMEZONE: Optional[str] = None

    # Booking
    BOOKING_CUTOFF_MINUTES: int = 15
    WALK_IN_SLOT_MINUTES: int = 30
    # Days past an appointment date before its slot reservations and token
    # counter are removed by TTL
    DAILY_RECORD_RETENTION_DAYS: int = 2

    # Family members per account
    MAX_FAMILY_MEMBERS: int = 10

    # Phone OTP
    OTP_EXPIRE_MINUTES: int = 10
    OTP_MAX_ATTEMPTS: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from JSON string."""
        try:
            return json.loads(self.BACKEND_CORS_ORIGINS)
        except (ValueError, TypeError):
            return ["http://localhost:3000"]


settings = Settings()
