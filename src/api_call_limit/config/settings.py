from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .urls import DOCUMENT_CREATE_URL


class AppConfig(BaseSettings):
    """Application configuration with automatic environment variable loading.

    All settings can be overridden via environment variables with the API_CALL_LIMIT_ prefix.
    For example:
        - API_CALL_LIMIT_AUTH_TOKEN=eyJhbGciOi...
        - API_CALL_LIMIT_REQUEST_LIMIT=10
        - API_CALL_LIMIT_WINDOW_SECONDS=5

    Alternatively, settings can be provided programmatically when creating the Container:
        container = Container()
        container.config.from_pydantic(AppConfig(request_limit=10))
    """

    model_config = SettingsConfigDict(
        env_prefix="API_CALL_LIMIT_",
        case_sensitive=False,
        extra="forbid",
    )

    api_url: str = Field(
        default=DOCUMENT_CREATE_URL,
        description="Endpoint that receives document creation requests",
    )

    auth_token: Optional[str] = Field(
        default=None,
        description="Bearer token used when a call does not pass its own credentials",
    )

    request_limit: int = Field(
        default=3,
        ge=1,
        description="Maximum number of requests admitted per window",
    )

    window_seconds: float = Field(
        default=1.0,
        gt=0,
        allow_inf_nan=False,
        description="Length of the fixed rate window in seconds; permits are reset to full at this period",
    )

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        allow_inf_nan=False,
        description="HTTP request timeout in seconds",
    )

    max_workers: int = Field(
        default=30,
        ge=1,
        description="Worker threads used for batch submission",
    )

    acquire_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        description="Give up waiting for a permit after this many seconds. If None, waits indefinitely",
    )
