"""Severity statistics for issues and rule violations.

Usage:
    stats = SeverityStats.from_issues(resolved, unresolved)
    conclude_severity_stats(stats, Severity.WARNING, severe_status_code=2)
"""

from collections import Counter
from collections.abc import Iterable

import click

from ort.models import OrtIssue, RuleViolation, Severity


class SeverityStats:
    """Resolved and unresolved occurrence counts per severity."""

    def __init__(self, resolved_counts: dict[Severity, int], unresolved_counts: dict[Severity, int]) -> None:
        self._resolved_counts = dict(resolved_counts)
        self._unresolved_counts = dict(unresolved_counts)

    @classmethod
    def from_issues(cls, resolved_issues: Iterable[OrtIssue], unresolved_issues: Iterable[OrtIssue]) -> "SeverityStats":
        return cls(_count(resolved_issues), _count(unresolved_issues))

    @classmethod
    def from_rule_violations(
        cls,
        resolved_violations: Iterable[RuleViolation],
        unresolved_violations: Iterable[RuleViolation],
    ) -> "SeverityStats":
        return cls(_count(resolved_violations), _count(unresolved_violations))

    def get_resolved_count(self, severity: Severity) -> int:
        return self._resolved_counts.get(severity, 0)

    def get_unresolved_count(self, severity: Severity) -> int:
        return self._unresolved_counts.get(severity, 0)

    def get_unresolved_count_with_threshold(self, threshold: Severity) -> int:
        """Count all unresolved occurrences with a severity of at least *threshold*."""
        return sum(count for severity, count in self._unresolved_counts.items() if severity >= threshold)


def _count(items: Iterable[OrtIssue | RuleViolation]) -> dict[Severity, int]:
    return dict(Counter(item.severity for item in items))


def conclude_severity_stats(stats: SeverityStats, threshold: Severity, severe_status_code: int) -> None:
    """Print the resolved and unresolved counts of *stats*.

    If there are unresolved occurrences at or above *threshold*, print a note
    and raise ``click.exceptions.Exit`` with *severe_status_code*.
    """
    click.echo(
        f"Found {stats.get_resolved_count(Severity.ERROR)} resolved error(s), "
        f"{stats.get_resolved_count(Severity.WARNING)} resolved warning(s), "
        f"{stats.get_resolved_count(Severity.HINT)} resolved hint(s)."
    )
    click.echo(
        f"Found {stats.get_unresolved_count(Severity.ERROR)} unresolved error(s), "
        f"{stats.get_unresolved_count(Severity.WARNING)} unresolved warning(s), "
        f"{stats.get_unresolved_count(Severity.HINT)} unresolved hint(s)."
    )

    severe_count = stats.get_unresolved_count_with_threshold(threshold)
    if severe_count > 0:
        click.echo(
            f"There are {severe_count} issue(s) with a severity equal to or greater than "
            f"the {threshold.name} threshold."
        )
        raise click.exceptions.Exit(severe_status_code)
