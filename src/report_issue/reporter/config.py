"""Configuration for report-issue.

Configuration is loaded from environment variables only. The tool runs inside
arbitrary project checkouts, so a `.env` file in the working directory is
never read: it could redirect the stored token to another host.

Credentials are deliberately *not* configured here: they come from the git
credential helper (see `report_issue.reporter.credentials`). The only
credential-related setting is the `BOXEN_GITHUB_LOGIN` username fallback.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GITHUB_BASE_URL = "https://api.github.com"
DEFAULT_GITHUB_HOST = "github.com"


def credential_host_for(base_url: str) -> str:
    """Return the git credential host matching a GitHub API base URL.

    `https://api.github.com` maps to `github.com`; GitHub Enterprise
    (`https://ghe.example.com/api/v3`) maps to its own hostname.
    """

    hostname = (urlparse(base_url).hostname or "").lower()
    if hostname == "api.github.com":
        return DEFAULT_GITHUB_HOST
    return hostname


class ReporterSettings(BaseSettings):
    """Settings for the issue reporter.

    Environment variables:
    - BOXEN_GITHUB_LOGIN         (optional username fallback)
    - GITHUB_BASE_URL            (optional)
    - GIT                        (optional)
    - REPORT_ISSUE_HTTP_TIMEOUT  (optional)
    - LOG_LEVEL                  (optional)

    The credential helper is always queried for the host of GITHUB_BASE_URL,
    so a token is only ever sent to the host it was stored for.
    """

    github_login: str = Field(
        default="",
        validation_alias="BOXEN_GITHUB_LOGIN",
        description="GitHub username used when the credential helper does not return one",
    )
    github_base_url: str = Field(
        default=DEFAULT_GITHUB_BASE_URL,
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    git_executable: str = Field(
        default="git",
        validation_alias="GIT",
        description="git binary used for credential and config lookups",
    )
    http_timeout: float | None = Field(
        default=None,
        validation_alias="REPORT_ISSUE_HTTP_TIMEOUT",
        description="Per-request timeout in seconds (unset means wait indefinitely)",
    )

    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=None,
        extra="ignore",
    )

    @field_validator("github_base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        normalized = value.strip().rstrip("/")
        parsed = urlparse(normalized)
        if parsed.scheme != "https" or not parsed.hostname:
            raise ValueError("GITHUB_BASE_URL must be an https:// URL")
        return normalized

    @field_validator("github_login", "git_executable")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @field_validator("http_timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("REPORT_ISSUE_HTTP_TIMEOUT must be a positive number of seconds")
        return value

    @property
    def github_host(self) -> str:
        """Host the git credential helper is queried for."""

        return credential_host_for(self.github_base_url)
