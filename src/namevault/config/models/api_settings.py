"""Remote API configuration model.

This module contains the configuration model for the remote resolve
service: base URL, timeout and rate limiting.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from namevault.shared.constants import NetworkConfig


class APISettings(BaseModel):
    """Remote resolve API configuration.

    Authentication is out of scope; the endpoint is public.
    """

    base_url: str = Field(
        default=NetworkConfig.DEFAULT_BASE_URL,
        description="Base URL the profile endpoints are appended to",
    )
    timeout: float = Field(
        default=NetworkConfig.DEFAULT_TIMEOUT,
        gt=0,
        description="Total request timeout in seconds",
    )
    rate_limit_rps: float = Field(
        default=NetworkConfig.DEFAULT_RATE_LIMIT,
        gt=0,
        description="Requests allowed per rate_limit_period",
    )
    rate_limit_period: float = Field(
        default=NetworkConfig.DEFAULT_RATE_PERIOD,
        gt=0,
        description="Rate limit window in seconds",
    )
    user_agent: str = Field(
        default=NetworkConfig.USER_AGENT,
        description="User-Agent header sent with every request",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize base_url so endpoints can be appended directly."""
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            msg = f"base_url must be an http(s) URL, got: {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")


__all__ = ["APISettings"]
