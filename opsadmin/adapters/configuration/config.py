# opsadmin/adapters/configuration/config.py

from functools import lru_cache
from logging import getLevelName
from typing import Annotated, List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_AUDIT_SKIP_PREFIXES = [
    "/api/v1/auth/login",
    "/api/v1/docs",
    "/healthz",
    "/health",
    "/metrics",
    "/api/v1/audit-logs",
]


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"

    # Environment
    ENVIRONMENT: str = "development"  # "development", "production", "testing"
    DEBUG: bool = False

    # Database
    DB_DRIVER: str = "asyncpg"
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Auth
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Audit trail
    AUDIT_SKIP_PREFIXES: Annotated[List[str], NoDecode] = list(DEFAULT_AUDIT_SKIP_PREFIXES)
    AUDIT_READ_REQUESTS: bool = True
    TRUST_PROXY_HEADERS: bool = False

    # Bootstrap data
    SEED_ON_STARTUP: bool = False
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "Admin@12345"
    ADMIN_NAME: str = "Administrator"

    @field_validator("DATABASE_URL", mode="before")
    def assemble_db_url(cls, value, info):
        if value:
            return value

        data = info.data
        if not data.get("POSTGRES_HOST"):
            return "sqlite+aiosqlite:///./opsadmin.db"

        return (
            f"postgresql+{data.get('DB_DRIVER', 'asyncpg')}://"
            f"{data['POSTGRES_USER']}:{data['POSTGRES_PASSWORD']}"
            f"@{data['POSTGRES_HOST']}:{data.get('POSTGRES_PORT', 5432)}/{data['POSTGRES_DB']}"
        )

    @field_validator("AUDIT_SKIP_PREFIXES", mode="before")
    def assemble_skip_prefixes(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Accept a CSV string ('a,b,c'), a JSON list string or a list.
        """
        if isinstance(v, str):
            if v.startswith("["):
                import json
                return json.loads(v)
            return [prefix.strip() for prefix in v.split(",") if prefix.strip()]
        if isinstance(v, list):
            return v
        raise ValueError(f"Invalid AUDIT_SKIP_PREFIXES: {v!r}")

    @field_validator("LOG_LEVEL", mode="before")
    def validate_log_level(cls, v: str) -> str:
        """Make sure the value is a known logging level."""
        lvl = v.upper()
        if not isinstance(getLevelName(lvl), int):
            raise ValueError(f"Invalid LOG_LEVEL: {v!r}")
        return lvl

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
