"""
Error types raised by the report pipeline.
"""


class ReportError(Exception):
    """Base class for every failure that aborts a report run."""


class ConfigError(ReportError):
    """Settings file is unreadable or holds invalid values."""


class DirectoryError(ReportError):
    """Organizations account listing failed."""


class CostQueryError(ReportError):
    """Cost Explorer query failed or returned an unusable page."""


class FormatError(ReportError):
    """Report table could not be rendered."""


class NotifyError(ReportError):
    """Slack payload could not be serialized or delivered."""
