import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_JWT_SECRET_KEY = "change-me"


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    database_url: str = "sqlite:///./pandoragym.db"
    sql_echo: bool = False

    jwt_secret_key: str = DEFAULT_JWT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7

    cors_allow_origins: tuple[str, ...] = ("*",)

    service_name: str = "pandoragym-api"
    version: str = "1.0.0"

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        app_env=os.getenv("APP_ENV", "development"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./pandoragym.db"),
        sql_echo=_get_bool(os.getenv("SQL_ECHO"), default=False),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET_KEY),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", str(60 * 24 * 7))),
        cors_allow_origins=tuple(_get_list(os.getenv("CORS_ALLOW_ORIGINS"), default=["*"])),
    )


def validate_runtime_config(settings: Settings) -> None:
    if settings.is_production and settings.jwt_secret_key == DEFAULT_JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
