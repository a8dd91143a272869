"""Application settings loaded from environment variables.

One frozen dataclass for the whole service. Read it once at startup with
``Settings.from_env()`` and pass it to ``create_app``; tests build their own
instance directly.
"""

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Service-wide settings."""

    database_url: str = "sqlite+aiosqlite:///./todo.db"
    pool_size: int = 20
    max_overflow: int = 10
    echo_sql: bool = False

    cors_origins: tuple[str, ...] = field(
        default=("http://localhost:3000", "http://localhost:3001")
    )
    debug: bool = False
    log_level: str = "INFO"

    # 0 disables the response cache
    cache_ttl_seconds: int = 300

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        Example: DATABASE_URL=postgresql+asyncpg://localhost/tasks
        """
        defaults = cls()
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            pool_size=_env_int("DB_POOL_SIZE", defaults.pool_size),
            max_overflow=_env_int("DB_MAX_OVERFLOW", defaults.max_overflow),
            echo_sql=_env_bool("DB_ECHO", defaults.echo_sql),
            cors_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                if origins
                else defaults.cors_origins
            ),
            debug=_env_bool("DEBUG", defaults.debug),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            cache_ttl_seconds=_env_int("CACHE_TTL_SECONDS", defaults.cache_ttl_seconds),
        )
