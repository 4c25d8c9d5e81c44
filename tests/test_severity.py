"""Tests for ort/severity.py"""

import click
import pytest

from ort.models import OrtIssue, RuleViolation, Severity
from ort.severity import SeverityStats, conclude_severity_stats


def _issues(*severities: Severity) -> list[OrtIssue]:
    return [OrtIssue(message=f"issue {i}", severity=s) for i, s in enumerate(severities)]


@pytest.fixture
def stats() -> SeverityStats:
    return SeverityStats.from_issues(
        _issues(Severity.ERROR, Severity.WARNING),
        _issues(Severity.ERROR, Severity.ERROR, Severity.HINT),
    )


# ---------------------------------------------------------------------------
# Severity ordering
# ---------------------------------------------------------------------------

def test_severity_total_order():
    assert Severity.HINT < Severity.WARNING < Severity.ERROR
    assert Severity.ERROR >= Severity.ERROR
    assert sorted([Severity.ERROR, Severity.HINT, Severity.WARNING]) == [
        Severity.HINT, Severity.WARNING, Severity.ERROR,
    ]


def test_severity_parse_is_case_insensitive():
    assert Severity.parse("warning") is Severity.WARNING
    with pytest.raises(ValueError, match="FATAL"):
        Severity.parse("FATAL")


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------

def test_counts_per_severity(stats):
    assert stats.get_resolved_count(Severity.ERROR) == 1
    assert stats.get_resolved_count(Severity.WARNING) == 1
    assert stats.get_unresolved_count(Severity.ERROR) == 2
    assert stats.get_unresolved_count(Severity.HINT) == 1


def test_absent_severity_counts_as_zero(stats):
    assert stats.get_resolved_count(Severity.HINT) == 0
    assert stats.get_unresolved_count(Severity.WARNING) == 0


def test_empty_input():
    empty = SeverityStats.from_issues([], [])
    for severity in Severity:
        assert empty.get_resolved_count(severity) == 0
        assert empty.get_unresolved_count(severity) == 0
        assert empty.get_unresolved_count_with_threshold(severity) == 0


def test_unresolved_count_with_threshold(stats):
    assert stats.get_unresolved_count_with_threshold(Severity.ERROR) == 2
    assert stats.get_unresolved_count_with_threshold(Severity.WARNING) == 2
    assert stats.get_unresolved_count_with_threshold(Severity.HINT) == 3


def test_threshold_count_does_not_increase_with_threshold(stats):
    counts = [stats.get_unresolved_count_with_threshold(s) for s in (Severity.HINT, Severity.WARNING, Severity.ERROR)]
    assert counts == sorted(counts, reverse=True)


def test_from_rule_violations():
    def violation(severity):
        return RuleViolation(rule="R", message="m", severity=severity)

    stats = SeverityStats.from_rule_violations([violation(Severity.HINT)], [violation(Severity.WARNING)])
    assert stats.get_resolved_count(Severity.HINT) == 1
    assert stats.get_unresolved_count_with_threshold(Severity.WARNING) == 1


# ---------------------------------------------------------------------------
# conclude_severity_stats
# ---------------------------------------------------------------------------

def test_conclude_prints_counts_and_returns_below_threshold(stats, capsys):
    conclude_severity_stats(SeverityStats.from_issues([], _issues(Severity.HINT)), Severity.WARNING, 2)

    out = capsys.readouterr().out
    assert "Found 0 resolved error(s), 0 resolved warning(s), 0 resolved hint(s)." in out
    assert "Found 0 unresolved error(s), 0 unresolved warning(s), 1 unresolved hint(s)." in out
    assert "threshold" not in out


def test_conclude_raises_exit_with_status_code(stats, capsys):
    with pytest.raises(click.exceptions.Exit) as exc_info:
        conclude_severity_stats(stats, Severity.WARNING, 7)

    assert exc_info.value.exit_code == 7
    out = capsys.readouterr().out
    assert "Found 1 resolved error(s), 1 resolved warning(s), 0 resolved hint(s)." in out
    assert "Found 2 unresolved error(s), 0 unresolved warning(s), 1 unresolved hint(s)." in out
    assert "There are 2 issue(s) with a severity equal to or greater than the WARNING threshold." in out


def test_conclude_exit_runs_cleanup_up_the_stack(stats):
    cleaned_up = []

    def command():
        try:
            conclude_severity_stats(stats, Severity.ERROR, 2)
        finally:
            cleaned_up.append(True)

    with pytest.raises(click.exceptions.Exit):
        command()
    assert cleaned_up == [True]
