"""Tests for the diagnostics channel."""

import logging

from polyobj.core.contracts import IssueKind
from polyobj.core.diagnostics import Diagnostics


class TestDiagnostics:
    def test_report_collects_and_logs(self, caplog):
        diagnostics = Diagnostics()
        with caplog.at_level(logging.WARNING):
            issue = diagnostics.report(IssueKind.INVALID_CORNER_INDEX, "Crate", "corner 3 dropped")
        assert issue.subject == "Crate"
        assert diagnostics.issues == [issue]
        assert "[invalid_corner_index] Crate: corner 3 dropped" in caplog.text

    def test_custom_logger(self, caplog):
        log = logging.getLogger("polyobj.test")
        with caplog.at_level(logging.WARNING):
            Diagnostics(log).report(IssueKind.TRUNCATED_FACE, "Roof", "skipped")
        assert caplog.records[-1].name == "polyobj.test"

    def test_count_and_iter(self):
        diagnostics = Diagnostics()
        diagnostics.report(IssueKind.INVALID_CORNER_INDEX, "a", "x")
        diagnostics.report(IssueKind.INVALID_CORNER_INDEX, "a", "y")
        diagnostics.report(IssueKind.UNSUPPORTED_MATERIAL, "m", "z")
        assert len(diagnostics) == 3
        assert diagnostics.count(IssueKind.INVALID_CORNER_INDEX) == 2
        assert diagnostics.count(IssueKind.TRUNCATED_FACE) == 0
        assert [i.message for i in diagnostics] == ["x", "y", "z"]
