"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CACHE_KEY_SEED = "v2022.4.12.0"


class ApiRequestSettings(BaseSettings):
    """Process-wide configuration for outbound API requests.

    Supplied once at application start and threaded through the pipeline,
    cache, log file and tapper constructors.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_REQUEST_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    # In the rare event that you change *what* we cache, change this.
    cache_key_seed: str = Field(default=DEFAULT_CACHE_KEY_SEED, min_length=1)
    cache_store_path: Path = Field(
        default=Path("storage/cache/api-request.sqlite3"),
        description="SQLite file backing the response cache",
    )
    logs_storage_path: Path = Field(
        default=Path("storage/api-logs"),
        description="Root folder for request/outcome log artifacts",
    )
    tapper_data_path: Path = Field(
        default=Path("tests/data"),
        description="Folder holding canned response bodies for HttpTapper",
    )
    interesting_response_headers: list[str] = Field(
        default_factory=lambda: ["x-ciq-request-id"],
        description="Response headers copied into log artifacts",
    )


def get_settings() -> ApiRequestSettings:
    """Get a settings instance."""
    return ApiRequestSettings()
