"""Minimal GitHub REST client.

Only what the reporter needs: authenticated GET/POST over HTTPS and a response
check that turns non-2xx responses into `GitHubApiError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any
from urllib.parse import urlparse

import requests

from report_issue import __version__
from report_issue.reporter.config import DEFAULT_GITHUB_BASE_URL
from report_issue.reporter.credentials import Credentials

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = frozenset({"GET", "POST"})


@dataclass(frozen=True, slots=True)
class Issue:
    """The parts of a GitHub issue the reporter consumes."""

    url: str
    comments_url: str
    html_url: str
    number: int | None = None
    title: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Issue:
        url = data.get("url")
        comments_url = data.get("comments_url")
        if not isinstance(url, str) or not url.strip():
            raise ValueError("Unexpected issue response: missing url")
        if not isinstance(comments_url, str) or not comments_url.strip():
            raise ValueError("Unexpected issue response: missing comments_url")

        html_url = data.get("html_url")
        number = data.get("number")
        title = data.get("title")
        return cls(
            url=url,
            comments_url=comments_url,
            html_url=html_url if isinstance(html_url, str) else "",
            number=number if isinstance(number, int) else None,
            title=title if isinstance(title, str) else "",
        )


class GitHubApiError(Exception):
    """Raised when GitHub answers with a non-2xx status."""

    def __init__(self, action: str, status_code: int, message: str | None = None) -> None:
        self.action = action
        self.status_code = status_code
        self.message = message
        super().__init__(f"failed to {action}")

    def __str__(self) -> str:
        lines = [f"Error: failed to {self.action}!"]
        if self.message is not None:
            lines.append("--")
            lines.append(f"{self.status_code}: {self.message}")
        return "\n".join(lines)


class GitHubClient:
    """Authenticated HTTPS client for the GitHub REST API."""

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str = DEFAULT_GITHUB_BASE_URL,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not credentials.username:
            raise ValueError("GitHub username is required")
        if not credentials.password:
            raise ValueError("GitHub password is required")

        self._credentials = credentials
        self._rest_base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = (credentials.username, credentials.password)
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "User-Agent": f"report-issue/{__version__}",
            }
        )

    @property
    def username(self) -> str:
        """Return the authenticated username."""

        return self._credentials.username

    def repo_url(self, *, repository: str, path: str = "") -> str:
        path = path.lstrip("/")
        base = f"{self._rest_base_url}/repos/{repository.strip().strip('/')}"
        return f"{base}/{path}" if path else base

    def request(
        self, method: str, url: str, body: dict[str, Any] | None = None
    ) -> requests.Response:
        """Send an authenticated request.

        Raises:
            ValueError: For methods other than GET/POST or non-HTTPS URLs.
            requests.RequestException: On network failure (never retried).
        """

        verb = method.upper()
        if verb not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        if urlparse(url).scheme != "https":
            raise ValueError(f"Refusing to send credentials over a non-HTTPS URL: {url}")

        logger.debug("GitHub request", extra={"method": verb, "url": url})
        if verb == "POST":
            return self._session.post(url, json=body, timeout=self._timeout)
        return self._session.get(url, timeout=self._timeout)

    def check(self, response: requests.Response, action: str) -> None:
        """Raise `GitHubApiError` unless the response has a 2xx status."""

        if 200 <= response.status_code < 300:
            return

        message: str | None = None
        text = response.text
        if text.strip():
            try:
                payload = response.json()
            except ValueError:
                message = text.strip()
            else:
                raw = payload.get("message") if isinstance(payload, dict) else None
                message = raw if isinstance(raw, str) else text.strip()

        logger.error(
            "GitHub request failed",
            extra={"action": action, "status_code": response.status_code, "detail": message},
        )
        raise GitHubApiError(action, response.status_code, message)

    def close(self) -> None:
        """Close the underlying HTTP session."""

        self._session.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
