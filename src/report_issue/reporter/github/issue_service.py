"""Issue operations used by the reporter.

Each operation sends one request and routes the response through
`GitHubClient.check` before returning.
"""

from __future__ import annotations

import logging
from typing import Any

from report_issue.reporter.github.client import GitHubClient, Issue

logger = logging.getLogger(__name__)

CLOSED_STATE_PAYLOAD: dict[str, Any] = {"state": "closed"}


class IssueService:
    """List, create, comment on and close issues."""

    def __init__(self, *, github: GitHubClient) -> None:
        self._github = github

    def list_open_issues(self, repository: str) -> list[Issue]:
        """Return the open issues in `repository` created by the authenticated user.

        Results are returned in API order; only the first page is fetched.
        """

        url = self._github.repo_url(repository=repository, path="issues?filter=created")
        response = self._github.request("GET", url)
        self._github.check(response, f"get issues ({url})")

        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError("Unexpected issues response: expected a JSON array")

        if not all(isinstance(item, dict) for item in payload):
            raise ValueError("Unexpected issues response: expected an array of objects")
        issues = [Issue.from_api(item) for item in payload]
        logger.info(
            "Fetched open issues",
            extra={"repository": repository, "count": len(issues)},
        )
        return issues

    def create_issue(self, repository: str, *, title: str, body: str) -> Issue:
        url = self._github.repo_url(repository=repository, path="issues")
        payload = {"title": title, "body": body.rstrip()}

        logger.info("Creating issue", extra={"repository": repository, "title": title})
        response = self._github.request("POST", url, payload)
        self._github.check(response, f"create issue ({url})")

        issue = Issue.from_api(response.json())
        logger.info("Issue created", extra={"number": issue.number, "html_url": issue.html_url})
        return issue

    def comment_issue(self, issue: Issue, body: str) -> None:
        payload = {"body": body.rstrip()}

        response = self._github.request("POST", issue.comments_url, payload)
        self._github.check(response, f"create comment ({issue.comments_url})")
        logger.info("Commented on issue", extra={"number": issue.number, "url": issue.url})

    def close_issue(self, issue: Issue) -> None:
        response = self._github.request("POST", issue.url, CLOSED_STATE_PAYLOAD)
        self._github.check(response, f"close issue ({issue.url})")
        logger.info("Issue closed", extra={"number": issue.number, "url": issue.url})
