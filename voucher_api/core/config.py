# voucher_api/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    APP_NAME: str = "Voucher API"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    PORT: int = 3333

    # DB (required)
    DATABASE_URL: str = Field(...)  # e.g. postgresql+psycopg2://... or sqlite://
    DB_CREATE_ALL: bool = True

    # JWT (required secret)
    JWT_SECRET: str = Field(...)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    CORS_ORIGINS: list[str] = ["*"]

    # Object storage for agency logos; upload is disabled while unset
    STORAGE_URL: str | None = None
    STORAGE_SERVICE_KEY: str | None = None
    STORAGE_BUCKET: str = "agency-logos"
    STORAGE_TIMEOUT_SECONDS: int = 20
    LOGO_MAX_BYTES: int = 7 * 1024 * 1024  # 7 MiB

    # Rate limits
    LOGIN_RATE_LIMIT: int = 10
    LOGIN_RATE_WINDOW_SECONDS: int = 15 * 60
    PUBLIC_RATE_LIMIT: int = 60
    PUBLIC_RATE_WINDOW_SECONDS: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def storage_configured(self) -> bool:
        return bool(self.STORAGE_URL and self.STORAGE_SERVICE_KEY)


settings = Settings()
