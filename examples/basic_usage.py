#!/usr/bin/env python3
"""Programmatic reporting example.

Runs a command and reports its outcome to a GitHub repository using the
reporter components directly:

* load settings from the environment / `.env`
* resolve credentials from the git credential helper
* open/comment on an issue if the command fails, close open issues if it succeeds

Usage:
    python examples/basic_usage.py owner/repo -- make test
"""

from __future__ import annotations

import argparse
import subprocess
from typing import Sequence

from report_issue.reporter.config import ReporterSettings
from report_issue.reporter.credentials import resolve_credentials
from report_issue.reporter.github.client import GitHubClient
from report_issue.reporter.github.issue_service import IssueService
from report_issue.reporter.logging import configure_logging
from report_issue.reporter.main import Invocation, report


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a command and report its outcome.")
    parser.add_argument("repo", help='Target repository in the form "owner/repo"')
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Command to run")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    command = [part for part in args.command if part != "--"]
    if not command:
        print("No command given")
        return 1

    settings = ReporterSettings()
    configure_logging(settings.log_level)

    result = subprocess.run(command, capture_output=True, text=True)
    message = " ".join(command)

    credentials = resolve_credentials(
        fallback_login=settings.github_login,
        host=settings.github_host,
        git=settings.git_executable,
    )
    with GitHubClient(credentials, base_url=settings.github_base_url) as github:
        invocation = Invocation(
            close=result.returncode == 0,
            repository=args.repo,
            message=message,
            body=None if result.returncode == 0 else result.stdout + result.stderr,
        )
        service = IssueService(github=github)
        outcome = report(invocation, service=service, username=credentials.username)

    for issue in outcome.issues:
        print(f"{outcome.action}: {issue.html_url}")
    return result.returncode


if __name__ == "__main__":
    raise SystemExit(main())
