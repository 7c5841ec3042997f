"""Error taxonomy shared by the loader, renderer, emitters and CLI.

Startup errors (:class:`ConfigError`, :class:`ParseError`) end the process.
Per-finding errors (:class:`RenderError`, :class:`DedupError`,
:class:`EmitError`) abandon a single emission and are counted by the driver.
"""

from __future__ import annotations


class ReporterError(Exception):
    """Base class for every error raised by clair-reporter."""


class ConfigError(ReporterError):
    """Invalid CLI values, field configuration or tracker project setup."""


class ParseError(ReporterError):
    """Unreadable or malformed scanner report / team directory."""


class RenderError(ReporterError):
    """A field template could not be evaluated against a finding."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"rendering value of {field!r} as template failed: {message}")
        self.field = field


class DedupError(ReporterError):
    """The duplicate search against the tracker failed."""


class EmitError(ReporterError):
    """Issue creation, user lookup or assignment failed.

    ``issue_key`` is set once the issue exists, so a later failure still
    names the ticket that was left behind.
    """

    def __init__(self, stage: str, message: str, *, issue_key: str | None = None) -> None:
        text = f"{stage} failed: {message}"
        if issue_key:
            text = f"{text} (issue {issue_key} was created)"
        super().__init__(text)
        self.stage = stage
        self.issue_key = issue_key
