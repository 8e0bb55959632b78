"""
Configuration helpers for the chirpy backend.

Routers and services receive a Settings object instead of reading os.environ
directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_BANNED_WORDS = ("kerfuffle", "sharbert", "fornax")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    db_path: str
    jwt_secret: str
    jwt_issuer: str
    access_token_ttl_seconds: int
    refresh_token_ttl_days: int
    chirp_max_length: int
    banned_words: tuple[str, ...]
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _words(value: str | None) -> tuple[str, ...]:
        if value is None:
            return DEFAULT_BANNED_WORDS
        return tuple(w.strip().lower() for w in value.split(",") if w.strip())

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        db_path=os.getenv("CHIRPY_DB_PATH", "database.json"),
        jwt_secret=os.getenv("JWT_SECRET", ""),
        jwt_issuer=os.getenv("JWT_ISSUER", "chirpy"),
        access_token_ttl_seconds=_int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", "3600"), 3600),
        refresh_token_ttl_days=_int(os.getenv("REFRESH_TOKEN_TTL_DAYS", "60"), 60),
        chirp_max_length=_int(os.getenv("CHIRP_MAX_LENGTH", "140"), 140),
        banned_words=_words(os.getenv("BANNED_WORDS")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
