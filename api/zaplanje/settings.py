"""Centralized environment-driven settings.

Keep this module lightweight: stdlib only, no app imports, to avoid circular deps.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import quote_plus


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _list_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def get_database_url() -> str:
    """Get the database URL, either verbatim or assembled from DB_* parts."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    db_user = os.getenv("DB_USER")
    db_pass = os.getenv("DB_PASSWORD")
    db_name = os.getenv("DB_DATABASE")
    db_host = os.getenv("DB_HOST", "db")
    db_port = os.getenv("DB_PORT", "5432")

    if db_user and db_pass and db_name:
        # URL-encode the password in case it contains special characters
        encoded_pass = quote_plus(db_pass)
        return f"postgresql+psycopg://{db_user}:{encoded_pass}@{db_host}:{db_port}/{db_name}"

    raise RuntimeError(
        "DATABASE_URL must be set, or DB_USER, DB_PASSWORD, and DB_DATABASE must all be set."
    )


# Delay before a loaded post counts as viewed. Bounces shorter than this are not recorded.
VIEW_RECORD_DELAY_SECONDS: float = _float_env("VIEW_RECORD_DELAY_SECONDS", 2.0)

# PostgreSQL text search configuration used for ranking.
SEARCH_TEXT_CONFIG: str = os.getenv("SEARCH_TEXT_CONFIG", "serbian")

# Average reading speed used for reading-time estimates.
READING_WORDS_PER_MINUTE: int = _int_env("READING_WORDS_PER_MINUTE", 200)


@dataclass
class Settings:
    """Server-side settings resolved once at startup."""

    database_url: str
    log_level: str = "INFO"
    search_text_config: str = SEARCH_TEXT_CONFIG
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000", "http://localhost"])
    jwt_secret_key: str | None = None
    jwt_algorithm: str = "HS256"
    run_migrations: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=get_database_url(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            search_text_config=SEARCH_TEXT_CONFIG,
            cors_origins=_list_env("CORS_ORIGINS", "http://localhost:3000,http://localhost"),
            jwt_secret_key=os.getenv("JWT_SECRET_KEY"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            run_migrations=os.getenv("RUN_MIGRATIONS", "1") not in ("0", "false", "False"),
        )
