from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Grok endpoints
    base_url: str = Field("https://grok.com", alias="GROK_BASE_URL")
    upload_url: str = Field(
        "https://grok.com/rest/app-chat/upload-file",
        alias="GROK_UPLOAD_URL",
        description="Upload endpoint; only overridden for local testing or a reverse proxy.",
    )

    # Protocol headers
    user_agent: str = Field(
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36",
        alias="GROK_USER_AGENT",
    )
    x_statsig_id: Optional[str] = Field(default=None, alias="GROK_X_STATSIG_ID")
    dynamic_statsig: bool = Field(
        True,
        alias="GROK_DYNAMIC_STATSIG",
        description="Generate a fresh x-statsig-id per request instead of using GROK_X_STATSIG_ID.",
    )

    # Session
    cookie: Optional[str] = Field(default=None, alias="GROK_COOKIE", description="Session cookie header value.")

    # HTTP transport
    proxy_url: Optional[str] = Field(default=None, alias="GROK_PROXY_URL")
    request_timeout: Optional[float] = Field(
        default=None,
        alias="GROK_REQUEST_TIMEOUT",
        description="Seconds; unset means no timeout, the caller imposes its own deadline.",
    )

    # Local upload cache
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
