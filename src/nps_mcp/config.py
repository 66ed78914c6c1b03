"""Configuration management."""

import logging
import sys
from functools import cache

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .consts import (
    DEFAULT_MFA_CODE,
    MFA_PROMPT_TIMEOUT_SECONDS,
    REFRESH_URL_PATH,
    SIGNIN_2FA_URL_PATH,
    SIGNIN_URL_PATH,
    VERSION_URL_PATH,
)


class Config(BaseSettings):
    """Configuration with computed API endpoints.

    Credentials are read from ``NPS_*`` environment variables (or a local
    ``.env`` file). Which of them are populated decides the authentication
    strategy; see ``strategies.select_strategy``.
    """

    model_config = SettingsConfigDict(
        env_prefix="NPS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )
    url: str = Field(
        default="https://localhost:6500",
        description="Base URL of the NPS server",
    )
    username: str | None = Field(default=None, description="Login username")
    password: str | None = Field(default=None, description="Login password")
    mfa_code: str = Field(
        default=DEFAULT_MFA_CODE, description="Static one-time code for interactive auth"
    )
    mfa_prompt: bool = Field(
        default=False, description="Prompt for the one-time code on the terminal"
    )
    mfa_timeout_seconds: float = Field(
        default=MFA_PROMPT_TIMEOUT_SECONDS,
        gt=0,
        le=600,
        description="How long the terminal prompt waits for a code",
    )
    api_key: str | None = Field(default=None, description="Application user API key")
    token: str | None = Field(default=None, description="Pre-supplied bearer token")
    auth_strategy: str | None = Field(
        default=None, description="Explicit strategy override"
    )
    tls_reject: bool = Field(
        default=False, description="Enforce TLS certificate validation"
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
        description="Logging level",
    )
    timeout_seconds: int = Field(
        default=30, gt=0, le=300, description="HTTP request timeout in seconds"
    )

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @computed_field
    @property
    def signin_url(self) -> str:
        """URL for the first sign-in step."""
        return f"{self.url}{SIGNIN_URL_PATH}"

    @computed_field
    @property
    def signin_2fa_url(self) -> str:
        """URL for the one-time code step."""
        return f"{self.url}{SIGNIN_2FA_URL_PATH}"

    @computed_field
    @property
    def refresh_url(self) -> str:
        """URL for refreshing a bearer token."""
        return f"{self.url}{REFRESH_URL_PATH}"

    @computed_field
    @property
    def version_url(self) -> str:
        """URL of the lightweight authenticated probe."""
        return f"{self.url}{VERSION_URL_PATH}"

    def __repr__(self) -> str:
        return f"Config(url='{self.url}', log_level='{self.log_level}')"


@cache
def get_config() -> Config:
    """Get a cached Config instance."""
    return Config()


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure logging for the entire application.

    Logs go to stderr; stdout carries the MCP stdio protocol.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,  # Override any existing configuration
    )
    return logging.getLogger("nps-mcp")
