# Fichier: academy/core/config.py
from pydantic_settings import BaseSettings
from typing import List
from pydantic import ValidationError, field_validator
import sys

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./academy_local.db"
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8000",
        "http://127.0.0.1:5173",
    ]

    ENVIRONMENT: str = "development"

    # La clé secrète pour signer les JWTs.
    SECRET_KEY: str

    # --- Auth configuration ---
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORD_MIN_LENGTH: int = 6

    # --- Règles de progression ---
    EXAM_MAX_ATTEMPTS: int = 3
    DEFAULT_PASSING_SCORE: int = 80

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    # Données de démonstration (formation d'arbitrage + administrateur)
    SEED_DEMO_DATA: bool = True
    DEFAULT_ADMIN_EMAIL: str = "admin@ligue.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin-password"

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Ensure Postgres URLs always use the asyncpg driver.

        Managed Postgres providers still expose database URLs using the legacy
        ``postgres://`` scheme, which SQLAlchemy no longer accepts. Those URLs
        (and ``postgresql://`` / psycopg variants) are upgraded to
        ``postgresql+asyncpg://`` so the async engine used by the back office
        boots correctly. SQLite and other backends are left untouched.
        """

        if not isinstance(value, str):
            return value

        if "+asyncpg" in value:
            return value

        replacements = {
            "postgres://": "postgresql+asyncpg://",
            "postgresql://": "postgresql+asyncpg://",
            "postgresql+psycopg2://": "postgresql+asyncpg://",
            "postgresql+psycopg://": "postgresql+asyncpg://",
        }

        for prefix, target in replacements.items():
            if value.startswith(prefix):
                return target + value[len(prefix) :]

        return value

    @field_validator("EXAM_MAX_ATTEMPTS", "PASSWORD_MIN_LENGTH")
    @classmethod
    def _strictly_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @field_validator("DEFAULT_PASSING_SCORE")
    @classmethod
    def _percentage(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError("must be between 0 and 100")
        return value


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Pretty-print missing or invalid environment variables.

    The exception bubbles up during module import, which makes the faulty
    variable hard to spot; the structured error payload is printed before the
    exception is re-raised.
    """

    header = "Configuration error while loading environment variables:"
    print(header, file=sys.stderr)

    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Unknown validation error")
        type_name = error.get("type")
        hint_parts = [message]
        if type_name:
            hint_parts.append(f"(type={type_name})")
        print(f"  - {location}: {' '.join(hint_parts)}", file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
