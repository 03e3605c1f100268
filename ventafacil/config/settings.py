"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local ledger storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "ventafacil.db"

    # SQLite settings
    pool_size: int = 2
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class ServerStorageSettings(BaseSettings):
    """Backend of record storage configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "ventafacil_server.db"

    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class RemoteSettings(BaseSettings):
    """Remote sale service (backend) client configuration."""

    model_config = SettingsConfigDict(env_prefix="REMOTE_")

    base_url: str = "http://localhost:5000/api"
    api_token: SecretStr | None = None
    timeout: float = 10.0
    health_timeout: float = 3.0  # reachability probe


class SyncSettings(BaseSettings):
    """Sync engine configuration."""

    model_config = SettingsConfigDict(env_prefix="SYNC_")

    enabled: bool = True
    sync_after_commit: bool = True
    interval_seconds: float = 0.0  # 0 disables the periodic trigger


class PosSettings(BaseSettings):
    """Checkout defaults."""

    model_config = SettingsConfigDict(env_prefix="POS_")

    default_payment_method: str = "efectivo"


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # Bearer token -> user id. Tokens are issued elsewhere.
    tokens: dict[str, int] = {}


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "VentaFacil POS"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    server_storage: ServerStorageSettings = Field(default_factory=ServerStorageSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    pos: PosSettings = Field(default_factory=PosSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
