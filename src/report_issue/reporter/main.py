"""CLI entrypoint for report-issue.

Usage:
    report-issue [--close] <owner/repo> <message> [<STDIN piped body>]

Without `--close` the piped body is reported as a failure: a new issue is
opened, or the body is added as a comment to the issue that is already open.
With `--close` every open issue is marked as succeeded and closed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Literal, NoReturn, TextIO

import requests
from pydantic import ValidationError

from report_issue import __version__
from report_issue.reporter.config import ReporterSettings
from report_issue.reporter.credentials import CredentialsError, resolve_credentials
from report_issue.reporter.github.client import GitHubApiError, GitHubClient, Issue
from report_issue.reporter.github.issue_service import IssueService
from report_issue.reporter.logging import configure_logging

logger = logging.getLogger(__name__)

USAGE = "Usage: report-issue [--close] <owner/repo> <message> [<STDIN piped body>]"


class UsageError(Exception):
    """Raised for invalid command-line usage."""


@dataclass(frozen=True, slots=True)
class Invocation:
    """Parsed command-line arguments plus the piped body."""

    close: bool
    repository: str
    message: str
    body: str | None = None


@dataclass(frozen=True, slots=True)
class ReportOutcome:
    """What a report did to the repository."""

    action: Literal["created", "commented", "closed"]
    issues: list[Issue] = field(default_factory=list)


class _ArgumentParser(argparse.ArgumentParser):
    # argparse exits with status 2; usage errors here must exit 1.
    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="report-issue",
        description="Report a command's failure or success as a GitHub issue",
        epilog="Without --close, the issue/comment body must be piped over STDIN.",
    )
    parser.add_argument("--version", action="version", version=f"report-issue {__version__}")
    parser.add_argument(
        "--close",
        action="store_true",
        help="Comment 'Succeeded at <message>.' on every open issue and close it",
    )
    parser.add_argument(
        "repository",
        nargs="?",
        default="",
        help="Target repository in the form 'owner/repo'",
    )
    parser.add_argument(
        "message",
        nargs="?",
        default="",
        help="Short description of what was run, e.g. 'build'",
    )
    return parser


def _normalize_repository(value: str) -> str:
    repository = value.strip().strip("/")
    owner, sep, name = repository.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise UsageError(f"repository must be in the form 'owner/repo', got {value!r}")
    return repository


def _positional_argv(argv: list[str] | None) -> list[str]:
    """Pull out `--close`; everything else is positional, even `-Werror`.

    `-h`/`--help`/`--version` are only honoured as the first argument.
    """

    raw = list(sys.argv[1:] if argv is None else argv)
    close = "--close" in raw
    rest = [arg for arg in raw if arg != "--close"]
    if rest and rest[0] in {"-h", "--help", "--version"}:
        return raw
    if "--" in rest:
        rest.remove("--")
    return (["--close"] if close else []) + ["--", *rest]


def parse_invocation(argv: list[str] | None, *, stdin: TextIO) -> Invocation:
    """Parse arguments and, unless closing, read the body from `stdin`.

    Raises:
        UsageError: If an argument is missing or the body is not piped.
    """

    args = build_parser().parse_args(_positional_argv(argv))

    if not args.repository.strip() or not args.message.strip():
        raise UsageError("a repository and a message are required")
    repository = _normalize_repository(args.repository)

    if args.close:
        return Invocation(close=True, repository=repository, message=args.message)

    if stdin.isatty():
        raise UsageError("the issue/comment body should be piped over STDIN!")
    return Invocation(
        close=False,
        repository=repository,
        message=args.message,
        body=stdin.read(),
    )


def report(invocation: Invocation, *, service: IssueService, username: str) -> ReportOutcome:
    """Create, comment on or close issues for one invocation."""

    open_issues = service.list_open_issues(invocation.repository)

    if invocation.close:
        comment = f"Succeeded at {invocation.message}."
        # One at a time: a failure leaves the remaining issues open.
        for issue in open_issues:
            service.comment_issue(issue, comment)
            service.close_issue(issue)
        return ReportOutcome(action="closed", issues=open_issues)

    body = invocation.body or ""
    if open_issues:
        # API order; GitHub lists newest first by default.
        issue = open_issues[0]
        service.comment_issue(issue, body)
        return ReportOutcome(action="commented", issues=[issue])

    title = f"{invocation.message} failed for {username}"
    issue = service.create_issue(invocation.repository, title=title, body=body)
    return ReportOutcome(action="created", issues=[issue])


def main(argv: list[str] | None = None, *, stdin: TextIO | None = None) -> int:
    try:
        invocation = parse_invocation(argv, stdin=stdin if stdin is not None else sys.stdin)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 1

    try:
        settings = ReporterSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your environment):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 1

    configure_logging(settings.log_level)

    try:
        credentials = resolve_credentials(
            fallback_login=settings.github_login,
            host=settings.github_host,
            git=settings.git_executable,
        )

        with GitHubClient(
            credentials,
            base_url=settings.github_base_url,
            timeout=settings.http_timeout,
        ) as github:
            service = IssueService(github=github)
            outcome = report(invocation, service=service, username=credentials.username)

    except (CredentialsError, GitHubApiError) as e:
        print(str(e), file=sys.stderr)
        return 1

    except requests.RequestException as e:
        logger.exception("GitHub request failed", extra={"repository": invocation.repository})
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.exception("Command failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if outcome.action == "created":
        print(f"Created issue: {outcome.issues[0].html_url}")
    elif outcome.action == "commented":
        print(f"Commented on issue: {outcome.issues[0].html_url}")
    else:
        logger.info(
            "Closed open issues",
            extra={"repository": invocation.repository, "count": len(outcome.issues)},
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
