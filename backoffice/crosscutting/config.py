"""
Name: Back Office Settings

Responsibilities:
  - Typed configuration read from environment / .env (pydantic-settings)
  - Fail fast on unsafe production setups (weak JWT secret, no database,
    dev superadmin seed enabled)
  - Decide where repositories live (memory vs PostgreSQL)

Collaborators:
  - api/main.py: CORS, DB pool sizing, lifespan validation
  - container.py: storage selection and module catalog override
  - identity/tokens.py: JWT secret and TTL
  - crosscutting/logger.py: log level and format

Notes:
  - Singleton via lru_cache; tests call get_settings.cache_clear()
  - Empty DATABASE_URL or APP_ENV=test => in-memory repositories
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_WEAK_SECRETS = frozenset({"dev-secret", "changeme", "change-me", "secret", "password"})
_MIN_PRODUCTION_SECRET_LEN = 32


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "development"
    database_url: str = ""

    # HTTP
    allowed_origins: str = "http://localhost:3000"
    metrics_require_auth: bool = False

    # Logs
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = True

    # Access tokens
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = Field(default=30, gt=0)

    # JSON file replacing the built-in module catalog (empty => built-in)
    module_catalog_path: str = ""

    # psycopg_pool
    db_pool_min_size: int = Field(default=2, ge=0)
    db_pool_max_size: int = Field(default=10, ge=1)
    db_statement_timeout_ms: int = Field(default=30_000, ge=0)

    # Local bootstrap of a superadmin account
    dev_seed_superadmin: bool = False
    dev_seed_superadmin_email: str = "superadmin@local"
    dev_seed_superadmin_password: str = "superadmin"

    @model_validator(mode="before")
    @classmethod
    def _normalize_log_level(cls, data):
        if isinstance(data, dict):
            for key in ("log_level", "LOG_LEVEL"):
                if isinstance(data.get(key), str):
                    data[key] = data[key].strip().upper()
        return data

    @model_validator(mode="after")
    def _check_consistency(self):
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError("DB_POOL_MIN_SIZE must be <= DB_POOL_MAX_SIZE")
        if self.is_production():
            self._check_production()
        return self

    def _check_production(self) -> None:
        secret = self.jwt_secret.strip()
        if secret in _WEAK_SECRETS or len(secret) < _MIN_PRODUCTION_SECRET_LEN:
            raise ValueError(
                f"JWT_SECRET must be a non-default value of at least "
                f"{_MIN_PRODUCTION_SECRET_LEN} characters in production"
            )
        if not self.database_url.strip():
            raise ValueError("DATABASE_URL is required in production")
        if self.dev_seed_superadmin:
            raise ValueError("DEV_SEED_SUPERADMIN must be disabled in production")

    def get_allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def is_test(self) -> bool:
        return self.app_env.strip().lower() in {"test", "testing", "ci"}

    def uses_in_memory_storage(self) -> bool:
        return self.is_test() or not self.database_url.strip()


@lru_cache
def get_settings() -> Settings:
    return Settings()
