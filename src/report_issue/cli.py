"""Console entrypoint for `report-issue`.

The command itself is implemented in `report_issue.reporter.main`.
"""

from __future__ import annotations

from report_issue.reporter.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
