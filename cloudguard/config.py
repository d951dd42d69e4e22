"""Runtime configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Attributes
    ----------
    app_name : str
        Human-readable service name reported by the health check.
    storage_backend : {"memory", "database"}
        Alert repository implementation to wire into the application.
    database_url : str
        SQLAlchemy database URL used by the ``database`` backend.
    max_audit_logs : int
        Capacity of the in-memory audit log.
    log_level : str
        Root logging level applied at startup.
    host : str
        Interface the server binds to.
    port : int
        TCP port the server listens on.
    """

    model_config = SettingsConfigDict(env_prefix="CLOUDGUARD_", extra="ignore")

    app_name: str = "CloudGuard Alert Management System"
    storage_backend: Literal["memory", "database"] = "memory"
    database_url: str = "sqlite+aiosqlite:///./cloudguard.db"
    max_audit_logs: int = Field(default=1000, ge=1)
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings.

    Returns
    -------
    Settings
        Cached settings instance.
    """
    return Settings()
