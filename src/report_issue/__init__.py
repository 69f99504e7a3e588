"""report-issue.

Reports the outcome of another command as a GitHub issue:
- failures open an issue (or comment on the one already open)
- `--close` marks every open issue as succeeded and closes it
"""

__version__ = "0.1.0"

from report_issue.reporter.config import ReporterSettings

__all__ = ["__version__", "ReporterSettings"]
