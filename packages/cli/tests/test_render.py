"""Tests for the rich renderables."""

import io

from rich.console import Console

from adolens_cli.render import print_review
from adolens_core.findings import ReviewFinding, Severity
from adolens_core.session import ReviewState, ReviewStatus


def _render(state):
    buffer = io.StringIO()
    print_review(Console(file=buffer, width=100, color_system=None), state)
    return buffer.getvalue()


def test_severity_summary_most_severe_first():
    state = ReviewState(
        status=ReviewStatus.DONE,
        reviews=(
            ReviewFinding("a.ts", Severity.NIT, "spacing"),
            ReviewFinding("a.ts", Severity.MINOR, "naming"),
            ReviewFinding("b.ts", Severity.BLOCKER, "sql injection"),
        ),
        progress=100,
        last_message="Review completed for 2 files with 3 feedback items",
    )
    output = _render(state)
    assert output.index("BLOCKER: 1") < output.index("MINOR: 1") < output.index("NIT: 1")
    assert "MAJOR" not in output


def test_findings_grouped_by_file_in_reported_order():
    state = ReviewState(
        status=ReviewStatus.DONE,
        reviews=(
            ReviewFinding("b.ts", Severity.MINOR, "first"),
            ReviewFinding("a.ts", Severity.MAJOR, "second"),
            ReviewFinding("b.ts", Severity.NIT, "third"),
        ),
        progress=100,
    )
    output = _render(state)
    assert output.index("b.ts") < output.index("a.ts")
    assert output.index("first") < output.index("third") < output.index("second")


def test_no_findings():
    output = _render(ReviewState(status=ReviewStatus.DONE, progress=100, last_message="done"))
    assert "No issues found." in output
