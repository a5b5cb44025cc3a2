from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Local dev: load from .env automatically.
    # In production: inject real env vars instead.
    model_config = SettingsConfigDict(env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8")

    # Env vars:
    # - GNS_API_BASE_URL: alias registry serving GET /aliases?check= and POST /aliases/{handle}/reserve
    # - GNS_API_TIMEOUT_SECONDS (optional)
    # - HANDLE_DEBOUNCE_MS (optional): quiet period before an availability check is sent
    # - LOG_LEVEL (optional)
    gns_api_base_url: str = Field(default="http://localhost:8000", validation_alias="GNS_API_BASE_URL")
    gns_api_timeout_seconds: float = Field(default=10.0, validation_alias="GNS_API_TIMEOUT_SECONDS")

    handle_debounce_ms: int = Field(default=500, ge=0, validation_alias="HANDLE_DEBOUNCE_MS")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def debounce_seconds(self) -> float:
        return self.handle_debounce_ms / 1000.0

    def model_post_init(self, __context):  # type: ignore[override]
        # Tolerate values pasted with a trailing slash; the client appends paths itself.
        self.gns_api_base_url = (self.gns_api_base_url or "").strip().rstrip("/")
        self.log_level = (self.log_level or "INFO").strip().upper()


def get_settings() -> Settings:
    """Load settings from environment.

    Keep this as the single canonical constructor for Settings(). FastAPI
    dependencies and tests can override/monkeypatch this function.
    """
    return Settings()
