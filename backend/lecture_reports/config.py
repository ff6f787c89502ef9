"""
Application configuration from environment variables.
Loads .env from the backend directory so the secret and database URL are found regardless of cwd.
"""
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-in-production"

# .env next to backend/ (parent of lecture_reports/); loaded explicitly so values are set even when run from repo root
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    from dotenv import load_dotenv
    load_dotenv(_ENV_FILE, override=False)
else:
    # Fallback: try backend/.env relative to cwd (e.g. when running from repo root)
    import os
    _cwd_env = Path(os.getcwd()) / "backend" / ".env"
    if _cwd_env.exists():
        from dotenv import load_dotenv
        load_dotenv(_cwd_env, override=False)


class Settings(BaseSettings):
    """Load and validate config from env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Any SQLAlchemy URL: sqlite for local runs, mysql+pymysql:// or postgresql+psycopg:// in deployment
    database_url: str = "sqlite:///./lecture_reports.db"
    # Fixed-size pool; when exhausted, storage calls wait up to db_pool_timeout seconds
    db_pool_size: int = 10
    db_pool_timeout: int = 30

    # Environment: set ENV=production in production; used to enforce SECRET_KEY.
    env: str = ""

    # JWT. Tokens are stateless; expiry is the only invalidation.
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    # CORS: comma-separated origins
    cors_origins: str = "http://localhost:3000"

    # Faculties are reference data; these are inserted when the table is empty at startup.
    seed_faculties: str = "Faculty of Information and Communication Technology,Faculty of Business,Faculty of Design"

    log_level: str = "INFO"
    # Echo SQL statements
    debug: bool = False

    @field_validator("db_pool_size")
    @classmethod
    def _pool_size_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("db_pool_size must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        return (self.env or "").strip().lower() == "production"

    @property
    def faculty_names(self) -> list[str]:
        return [n.strip() for n in self.seed_faculties.split(",") if n.strip()]


@lru_cache
def get_settings() -> Settings:
    """Process settings. Also used as a FastAPI dependency so tests can override it."""
    return Settings()


settings = get_settings()
