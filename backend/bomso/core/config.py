import os
import sys
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_WEAK_SECRETS = {"", "replace-me", "local-dev-secret", "BILLAN2026", "admin"}
STORAGE_BACKENDS = {"file", "redis", "database"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "BOMSO Admin API"
    app_env: str = "local"
    api_prefix: str = "/api"

    admin_password: str = "BILLAN2026"
    jwt_secret: str = "local-dev-secret"
    jwt_algorithm: str = "HS256"
    jwt_access_ttl_seconds: int = 43200

    storage_backend: str = "file"
    data_file_path: str = "./data/bomso.json"
    redis_url: str = "redis://localhost:6379/0"
    redis_key: str = "bomso:dataset"
    database_url: str = "sqlite:///./bomso.db"
    storage_timeout_seconds: float = 5.0
    storage_conflict_retries: int = 2

    log_level: str = "INFO"
    cors_allow_origins: str = "*"
    max_request_body_bytes: int = 5_000_000
    metrics_enabled: bool = True
    static_dir: str = "public"

    @model_validator(mode="after")
    def validate_guardrails(self) -> "Settings":
        if self.storage_backend.lower() not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of: {', '.join(sorted(STORAGE_BACKENDS))}")
        if self.storage_conflict_retries < 0:
            raise ValueError("STORAGE_CONFLICT_RETRIES must not be negative.")
        if not self.admin_password.strip():
            raise ValueError("ADMIN_PASSWORD is required and must not be empty.")

        if self.app_env.lower() != "production":
            return self

        if self.jwt_secret in _WEAK_SECRETS or len(self.jwt_secret) < 32:
            raise ValueError("Production requires JWT_SECRET with at least 32 characters.")
        if self.admin_password in _WEAK_SECRETS:
            raise ValueError("Production forbids the default ADMIN_PASSWORD.")
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    app_env = os.getenv("APP_ENV", "").lower()
    is_pytest_runtime = "pytest" in sys.modules
    if app_env == "test" or (not app_env and is_pytest_runtime):
        def _env_or_default(name: str, default: str) -> str:
            value = os.getenv(name)
            if value is None:
                return default
            stripped = value.strip()
            return stripped if stripped else default

        return Settings(
            app_env="test",
            admin_password=_env_or_default("ADMIN_PASSWORD", "test-admin-password"),
            jwt_secret=_env_or_default("JWT_SECRET", "test-secret-key"),
            storage_backend="file",
            data_file_path=_env_or_default("DATA_FILE_PATH", "./data/bomso-test.json"),
            metrics_enabled=True,
        )
    return Settings()
