"""Test configuration and fixtures."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

import pytest
import requests
from requests.adapters import BaseAdapter

from report_issue.reporter.credentials import Credentials
from report_issue.reporter.github.client import GitHubClient

API = "https://api.github.com"
REPOSITORY = "octo-org/octo-repo"


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None

    def json(self) -> Any:
        assert self.body is not None
        return json.loads(self.body.decode("utf-8"))


class RecordingAdapter(BaseAdapter):
    """Transport adapter that records requests and replays canned responses.

    Responses are matched on (method, url); unmatched requests get a 404.
    Nothing leaves the process.
    """

    def __init__(self) -> None:
        super().__init__()
        self.requests: list[RecordedRequest] = []
        self._routes: dict[tuple[str, str], tuple[int, Any]] = {}

    def add(self, method: str, url: str, *, status: int = 200, json_body: Any = None) -> None:
        self._routes[(method.upper(), url)] = (status, json_body)

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        body = request.body
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.requests.append(
            RecordedRequest(
                method=request.method or "",
                url=request.url or "",
                headers=dict(request.headers),
                body=body,
            )
        )

        status, payload = self._routes.get(
            ((request.method or "").upper(), request.url or ""),
            (404, {"message": "Not Found"}),
        )
        response = requests.Response()
        response.status_code = status
        response.url = request.url or ""
        response.request = request
        response._content = b"" if payload is None else json.dumps(payload).encode("utf-8")
        response.encoding = "utf-8"
        return response

    def close(self) -> None:
        pass

    def posts(self) -> list[RecordedRequest]:
        return [r for r in self.requests if r.method == "POST"]


def _issue_payload(number: int, *, repository: str = REPOSITORY) -> dict[str, Any]:
    url = f"{API}/repos/{repository}/issues/{number}"
    return {
        "number": number,
        "title": f"Issue {number}",
        "url": url,
        "comments_url": f"{url}/comments",
        "html_url": f"https://github.com/{repository}/issues/{number}",
        "state": "open",
    }


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="alice", password="token123")


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def session(adapter: RecordingAdapter) -> requests.Session:
    s = requests.Session()
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


@pytest.fixture
def github(credentials: Credentials, session: requests.Session) -> Iterator[GitHubClient]:
    client = GitHubClient(credentials, base_url=API, session=session)
    yield client
    client.close()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Keep developer environment variables and .env files out of the tests."""

    for name in (
        "BOXEN_GITHUB_LOGIN",
        "GITHUB_BASE_URL",
        "GIT",
        "REPORT_ISSUE_HTTP_TIMEOUT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_issue() -> Callable[..., dict[str, Any]]:
    """Build an issue JSON object as returned by the GitHub REST API."""

    return _issue_payload


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """`configure_logging` replaces root handlers; put pytest's back afterwards."""

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
