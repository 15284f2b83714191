import logging

from pydantic_settings import BaseSettings
from functools import lru_cache
from fastapi import Depends
from typing_extensions import Annotated

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "change-me-jwt-secret"


class Settings(BaseSettings):
    app_name: str = "To-Do List API"
    app_version: str = "1.0.0"
    environment: str = "development"

    database_url: str = "sqlite+aiosqlite:///./todo.db"
    sql_echo: bool = False

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60  # access token lifetime
    bcrypt_rounds: int = 10

    log_level: str = "INFO"
    log_json: bool = True
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()


SettingsDep = Annotated[Settings, Depends(get_settings)]


def warn_insecure_defaults(settings: Settings) -> bool:
    """Log a warning when the default JWT secret is used outside development."""
    if settings.environment != "development" and settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning(
            f"JWT_SECRET is still the default value in the {settings.environment!r} "
            "environment; set a real secret"
        )
        return True
    return False
