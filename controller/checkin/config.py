"""Central configuration for the check-in controller service."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = ROOT_DIR / ".env"


# ============================================================
# Nested Configuration Classes
# ============================================================

class ScanSettings(BaseModel):
    """QR scanning configuration."""
    cooldown_ms: int = Field(1500, ge=0, description="Window in which repeated reads of the same code are ignored (ms)")


class StorageSettings(BaseModel):
    """Persisted session storage."""
    directory: Path = Field(ROOT_DIR / "var", description="Directory holding the persisted session file")
    filename: str = Field("session.json", description="Session file name")

    @property
    def path(self) -> Path:
        return Path(self.directory).expanduser() / self.filename


class PerformanceSettings(BaseModel):
    """Queue tuning."""
    ui_event_queue_size: int = Field(16, ge=1, description="Max buffered UI events per subscriber")


class Settings(BaseSettings):
    """Environment-driven settings for the check-in controller."""

    # Remote event-management API
    api_base_url: str = Field("http://localhost:8000/api/v1", description="Event API base URL")
    http_timeout_seconds: float = Field(15.0, gt=0, description="Timeout per API request (seconds)")

    # Controller HTTP Server
    controller_host: str = Field("0.0.0.0", description="Host interface for local FastAPI server")
    controller_port: int = Field(5000, description="Port for FastAPI server")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_directory: Path = Field(ROOT_DIR / "logs", description="Log directory path")
    log_retention_days: int = Field(14, description="Number of log files to retain")

    # Nested Configuration Objects
    scan: ScanSettings = Field(default_factory=ScanSettings, description="Scanner settings")
    storage: StorageSettings = Field(default_factory=StorageSettings, description="Session storage settings")
    performance: PerformanceSettings = Field(default_factory=PerformanceSettings, description="Performance tuning")

    @field_validator("api_base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value: object) -> object:
        if isinstance(value, str):
            parsed = value.strip().rstrip("/")
            if not parsed:
                raise ValueError("API_BASE_URL must not be empty")
            return parsed
        return value

    model_config = SettingsConfigDict(
        env_file=str(DEFAULT_ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings(override_env_file: Optional[Path] = None) -> Settings:
    """Cached Settings instance; accepts optional env override for tests."""

    if override_env_file:
        return Settings(_env_file=str(override_env_file))
    return Settings()
