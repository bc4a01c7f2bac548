from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SERVICE_NAME: str = "workout-log-service"
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str | None = None

    WORKOUT_LOG_DATABASE_URL: str = "sqlite+aiosqlite:///./workout_log.db"
    DATABASE_ECHO: bool = False

    # "header": trust X-User-Id from an upstream gateway; "firebase": verify ID tokens here
    AUTH_MODE: Literal["header", "firebase"] = "header"
    USER_ID_HEADER: str = "X-User-Id"
    SESSION_COOKIE_NAME: str = "session"
    SIGN_IN_URL: str = "/sign-in"
    FIREBASE_CREDENTIALS_BASE64: str | None = None
    FIREBASE_PROJECT_ID: str | None = None
    FIREBASE_CHECK_REVOKED: bool = False

    CORS_ORIGINS: str = "*"
    ENABLE_METRICS: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
