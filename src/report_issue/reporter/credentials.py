"""GitHub credential lookup.

Credentials are never configured directly. They are resolved, in order, from:

1. the git credential helper (`git credential fill` for https://github.com)
2. `BOXEN_GITHUB_LOGIN` (username only)
3. `git config github.user` (username only)
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field

from report_issue.reporter.config import DEFAULT_GITHUB_HOST

logger = logging.getLogger(__name__)

SETUP_URL = "https://strap.githubapp.com"


@dataclass(frozen=True, slots=True)
class Credentials:
    """HTTPS credentials for the GitHub API."""

    username: str
    password: str = field(repr=False)


class CredentialsError(Exception):
    """Raised when a username or password cannot be resolved."""

    def __init__(self, missing: str) -> None:
        self.missing = missing
        super().__init__(
            f"Error: your GitHub {missing} is not set! Set it by running Strap:\n  {SETUP_URL}"
        )


def parse_credential_output(output: str) -> dict[str, str]:
    """Parse `key=value` lines as printed by `git credential fill`.

    Lines without a `=` are ignored. Later keys win, matching git's own
    behaviour for repeated attributes.
    """

    values: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key:
            values[key] = value.rstrip("\r")
    return values


def _run_git(args: list[str], *, git: str, stdin: str | None = None) -> str:
    """Run git and return stdout, or "" if git is unavailable or fails."""

    try:
        result = subprocess.run(
            [git, *args],
            input=stdin,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        logger.debug("git could not be run", extra={"git_args": args, "error": str(e)})
        return ""

    if result.returncode != 0:
        logger.debug(
            "git exited with a non-zero status",
            extra={"git_args": args, "returncode": result.returncode},
        )
        return ""
    return result.stdout


def fill_credentials(
    *, host: str = DEFAULT_GITHUB_HOST, protocol: str = "https", git: str = "git"
) -> dict[str, str]:
    """Ask the git credential helper for the stored credentials of a host."""

    query = f"protocol={protocol}\nhost={host}\n\n"
    output = _run_git(["credential", "fill"], git=git, stdin=query)
    return parse_credential_output(output)


def configured_github_user(*, git: str = "git") -> str:
    """Return `git config github.user`, or "" when unset."""

    return _run_git(["config", "github.user"], git=git).strip()


def resolve_credentials(
    *,
    fallback_login: str = "",
    host: str = DEFAULT_GITHUB_HOST,
    git: str = "git",
) -> Credentials:
    """Resolve the GitHub username and password/token.

    Args:
        fallback_login: Username to use when the credential helper has none
            (normally `BOXEN_GITHUB_LOGIN`).
        host: Host the credential helper is queried for.
        git: git executable.

    Raises:
        CredentialsError: If the username or the password is still empty.
    """

    filled = fill_credentials(host=host, git=git)

    username = filled.get("username", "").strip()
    source = "credential-helper"
    if not username and fallback_login.strip():
        username = fallback_login.strip()
        source = "BOXEN_GITHUB_LOGIN"
    if not username:
        username = configured_github_user(git=git)
        source = "github.user"

    if not username:
        raise CredentialsError("username")

    password = filled.get("password", "")
    if not password:
        raise CredentialsError("password")

    logger.debug("Resolved GitHub credentials", extra={"username": username, "source": source})
    return Credentials(username=username, password=password)
