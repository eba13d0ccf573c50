"""Diagnostics channel for issues that are recovered locally.

A dropped corner or a skipped material does not stop a conversion; it is
logged as a warning and collected so the step output can report it.
"""

from __future__ import annotations

import logging

from .contracts import Issue, IssueKind

logger = logging.getLogger(__name__)


class Diagnostics:
    """Collects :class:`Issue` records and mirrors each one to the log."""

    def __init__(self, log: logging.Logger | None = None):
        self.issues: list[Issue] = []
        self._log = log or logger

    def report(self, kind: IssueKind, subject: str, message: str) -> Issue:
        issue = Issue(kind=kind, subject=subject, message=message)
        self.issues.append(issue)
        self._log.warning(f"[{kind.value}] {subject}: {message}")
        return issue

    def count(self, kind: IssueKind) -> int:
        return sum(1 for issue in self.issues if issue.kind == kind)

    def __len__(self) -> int:
        return len(self.issues)

    def __iter__(self):
        return iter(self.issues)
