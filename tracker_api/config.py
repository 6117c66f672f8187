from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Safe defaults; override via environment or .env file
    APP_NAME: str = "Job Tracker API"
    APP_ENV: str = "dev"
    API_PREFIX: str = "/api"
    CORS_ALLOW_ORIGINS: str = "*"  # comma-separated
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "postgresql+psycopg2://postgres:postgres@db:5432/postgres"

    JWT_SECRET_KEY: str = "dev-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Reminder scan + notification retention
    SCHEDULER_ENABLED: bool = True
    REMINDER_SCAN_INTERVAL_SECONDS: int = 60
    NOTIFICATION_PURGE_INTERVAL_MINUTES: int = 60
    NOTIFICATION_RETENTION_DAYS: int = 15
    NOTIFICATION_LIST_LIMIT: int = 300

    # Password reset
    RESET_CODE_TTL_MINUTES: int = 60
    RESET_MAX_ATTEMPTS_PER_HOUR: int = 3

    # Outbound mail; an empty SMTP_HOST disables delivery
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    MAIL_FROM: str = '"JobTracker Support" <no-reply@jobtracker.com>'
    FRONTEND_URL: str = "http://localhost:5173"

    EMAIL_CHECK_DELIVERABILITY: bool = False
    DISPOSABLE_EMAIL_DOMAINS: List[str] = Field(
        default_factory=lambda: [
            "mailinator.com",
            "10minutemail.com",
            "guerrillamail.com",
            "tempmail.com",
            "yopmail.com",
            "trashmail.com",
        ]
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]


settings = Settings()
