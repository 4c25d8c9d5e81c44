"""Data models for ORT result files.

Contains the dataclasses used to read, query and write an analysis result:
    - Severity, OrtIssue, RuleViolation
    - Project, Package, Vulnerability, AdvisorResult
    - Resolutions
    - OrtResult          (analyzer / scanner / advisor / evaluator sections)

Usage:
    result = read_ort_result(Path("analyzer-result.yml"))
    resolved, unresolved = result.partition_issues("analyzer")
    write_ort_result(result, Path("out/analyzer-result.json"))
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from ort.utils import OrtError

STAGES = ("analyzer", "scanner", "advisor")

YAML_SUFFIXES = (".yml", ".yaml")
JSON_SUFFIXES = (".json",)


class ResultFileError(OrtError):
    """Raised when an ORT result file cannot be read or written."""


# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------

class Severity(Enum):
    """Severity of an issue or rule violation, ordered HINT < WARNING < ERROR."""

    HINT = "HINT"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        if isinstance(value, Severity):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            names = ", ".join(s.name for s in _SEVERITY_ORDER)
            raise ValueError(f"Invalid severity '{value}', expected one of: {names}") from None

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = [Severity.HINT, Severity.WARNING, Severity.ERROR]


# ---------------------------------------------------------------------------
# Issues and violations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrtIssue:
    message: str
    severity: Severity = Severity.ERROR
    source: str = ""
    timestamp: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "OrtIssue":
        return cls(
            message=str(raw.get("message", "")),
            severity=Severity.parse(raw.get("severity", "ERROR")),
            source=str(raw.get("source", "")),
            timestamp=raw.get("timestamp"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "message": self.message,
            "severity": self.severity.value,
            "source": self.source,
        }
        if self.timestamp:
            data["timestamp"] = self.timestamp
        return data


@dataclass(frozen=True)
class RuleViolation:
    rule: str
    message: str
    severity: Severity = Severity.ERROR
    pkg: str | None = None
    license: str | None = None
    how_to_fix: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "RuleViolation":
        return cls(
            rule=str(raw.get("rule", "")),
            message=str(raw.get("message", "")),
            severity=Severity.parse(raw.get("severity", "ERROR")),
            pkg=raw.get("pkg"),
            license=raw.get("license"),
            how_to_fix=str(raw.get("how_to_fix", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "pkg": self.pkg,
            "license": self.license,
            "severity": self.severity.value,
            "message": self.message,
            "how_to_fix": self.how_to_fix,
        }


# ---------------------------------------------------------------------------
# Resolutions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Resolution:
    """Marks every item whose message fully matches *message* as resolved."""

    message: str
    reason: str = ""
    comment: str = ""

    def matches(self, message: str) -> bool:
        return re.fullmatch(self.message, message, flags=re.DOTALL) is not None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Resolution":
        message = str(raw.get("message", ""))
        try:
            re.compile(message, flags=re.DOTALL)
        except re.error as exc:
            raise ValueError(f"Invalid resolution pattern '{message}': {exc}") from exc

        return cls(
            message=message,
            reason=str(raw.get("reason", "")),
            comment=str(raw.get("comment", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "reason": self.reason, "comment": self.comment}


@dataclass(frozen=True)
class Resolutions:
    issues: list[Resolution] = field(default_factory=list)
    rule_violations: list[Resolution] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "Resolutions":
        raw = raw or {}
        return cls(
            issues=[Resolution.from_dict(r) for r in raw.get("issues") or []],
            rule_violations=[Resolution.from_dict(r) for r in raw.get("rule_violations") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.issues:
            data["issues"] = [r.to_dict() for r in self.issues]
        if self.rule_violations:
            data["rule_violations"] = [r.to_dict() for r in self.rule_violations]
        return data


# ---------------------------------------------------------------------------
# Projects, packages and vulnerabilities
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Project:
    id: str
    definition_file_path: str = ""
    declared_licenses: list[str] = field(default_factory=list)
    homepage_url: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Project":
        return cls(
            id=str(raw["id"]),
            definition_file_path=str(raw.get("definition_file_path", "")),
            declared_licenses=list(raw.get("declared_licenses") or []),
            homepage_url=str(raw.get("homepage_url", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "definition_file_path": self.definition_file_path,
            "declared_licenses": list(self.declared_licenses),
            "homepage_url": self.homepage_url,
        }


@dataclass(frozen=True)
class Package:
    id: str
    declared_licenses: list[str] = field(default_factory=list)
    concluded_license: str | None = None
    description: str = ""
    homepage_url: str = ""

    @property
    def effective_license(self) -> str:
        """The concluded license if there is one, the declared licenses otherwise."""
        if self.concluded_license:
            return self.concluded_license
        return " AND ".join(self.declared_licenses) or "NOASSERTION"

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Package":
        return cls(
            id=str(raw["id"]),
            declared_licenses=list(raw.get("declared_licenses") or []),
            concluded_license=raw.get("concluded_license"),
            description=str(raw.get("description", "")),
            homepage_url=str(raw.get("homepage_url", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "declared_licenses": list(self.declared_licenses),
            "description": self.description,
            "homepage_url": self.homepage_url,
        }
        if self.concluded_license:
            data["concluded_license"] = self.concluded_license
        return data


@dataclass(frozen=True)
class Vulnerability:
    id: str
    summary: str = ""
    description: str = ""
    references: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Vulnerability":
        return cls(
            id=str(raw["id"]),
            summary=str(raw.get("summary", "")),
            description=str(raw.get("description", "")),
            references=[dict(r) for r in raw.get("references") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "description": self.description,
            "references": [dict(r) for r in self.references],
        }


@dataclass(frozen=True)
class AdvisorResult:
    advisor: str
    vulnerabilities: list[Vulnerability] = field(default_factory=list)
    issues: list[OrtIssue] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AdvisorResult":
        advisor = raw.get("advisor") or {}
        name = advisor.get("name", "") if isinstance(advisor, dict) else str(advisor)
        summary = raw.get("summary") or {}
        return cls(
            advisor=name,
            vulnerabilities=[Vulnerability.from_dict(v) for v in raw.get("vulnerabilities") or []],
            issues=[OrtIssue.from_dict(i) for i in summary.get("issues") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "advisor": {"name": self.advisor},
            "summary": {"issues": [i.to_dict() for i in self.issues]},
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
        }


# ---------------------------------------------------------------------------
# Result sections
# ---------------------------------------------------------------------------

def _issues_from_dict(raw: dict[str, Any] | None) -> dict[str, list[OrtIssue]]:
    return {str(k): [OrtIssue.from_dict(i) for i in v or []] for k, v in (raw or {}).items()}


def _issues_to_dict(issues: dict[str, list[OrtIssue]]) -> dict[str, Any]:
    return {k: [i.to_dict() for i in v] for k, v in issues.items()}


@dataclass(frozen=True)
class AnalyzerRun:
    projects: list[Project] = field(default_factory=list)
    packages: list[Package] = field(default_factory=list)
    issues: dict[str, list[OrtIssue]] = field(default_factory=dict)
    start_time: str | None = None
    end_time: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AnalyzerRun":
        result = raw.get("result") or {}
        return cls(
            projects=[Project.from_dict(p) for p in result.get("projects") or []],
            packages=[Package.from_dict(p) for p in result.get("packages") or []],
            issues=_issues_from_dict(result.get("issues")),
            start_time=raw.get("start_time"),
            end_time=raw.get("end_time"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "result": {
                "projects": [p.to_dict() for p in self.projects],
                "packages": [p.to_dict() for p in self.packages],
                "issues": _issues_to_dict(self.issues),
            },
        }


@dataclass(frozen=True)
class ScannerRun:
    issues: dict[str, list[OrtIssue]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ScannerRun":
        return cls(issues=_issues_from_dict(raw.get("issues")))

    def to_dict(self) -> dict[str, Any]:
        return {"issues": _issues_to_dict(self.issues)}


@dataclass(frozen=True)
class AdvisorRun:
    results: dict[str, list[AdvisorResult]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AdvisorRun":
        results = (raw.get("results") or {}).get("advisor_results") or {}
        return cls(results={str(k): [AdvisorResult.from_dict(r) for r in v or []] for k, v in results.items()})

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": {
                "advisor_results": {k: [r.to_dict() for r in v] for k, v in self.results.items()},
            },
        }


@dataclass(frozen=True)
class EvaluatorRun:
    violations: list[RuleViolation] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "EvaluatorRun":
        return cls(violations=[RuleViolation.from_dict(v) for v in raw.get("violations") or []])

    def to_dict(self) -> dict[str, Any]:
        return {"violations": [v.to_dict() for v in self.violations]}


# ---------------------------------------------------------------------------
# OrtResult
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrtResult:
    """The analysis-result bundle passed between the pipeline stages."""

    repository: dict[str, Any] = field(default_factory=dict)
    resolutions: Resolutions = field(default_factory=Resolutions)
    analyzer: AnalyzerRun | None = None
    scanner: ScannerRun | None = None
    advisor: AdvisorRun | None = None
    evaluator: EvaluatorRun | None = None
    labels: dict[str, str] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def projects(self) -> list[Project]:
        return sorted(self.analyzer.projects, key=lambda p: p.id) if self.analyzer else []

    @property
    def packages(self) -> list[Package]:
        return sorted(self.analyzer.packages, key=lambda p: p.id) if self.analyzer else []

    @property
    def rule_violations(self) -> list[RuleViolation]:
        return list(self.evaluator.violations) if self.evaluator else []

    def get_advisor_results(self) -> dict[str, list[AdvisorResult]]:
        """Return the advisor results per package id, empty if the advisor did not run."""
        return dict(self.advisor.results) if self.advisor else {}

    def get_vulnerabilities(self) -> dict[str, list[Vulnerability]]:
        """Return the vulnerabilities per package id, omitting packages without any."""
        vulnerabilities: dict[str, list[Vulnerability]] = {}
        for pkg_id, results in sorted(self.get_advisor_results().items()):
            found = [v for r in results for v in r.vulnerabilities]
            if found:
                vulnerabilities[pkg_id] = found
        return vulnerabilities

    def collect_issues(self, stage: str | None = None) -> dict[str, list[OrtIssue]]:
        """Return the issues per id for *stage*, or for all stages if *stage* is None."""
        if stage is not None and stage not in STAGES:
            raise ValueError(f"Unknown stage '{stage}', expected one of: {', '.join(STAGES)}")

        collected: dict[str, list[OrtIssue]] = {}

        def add(issues: dict[str, list[OrtIssue]]) -> None:
            for key, values in issues.items():
                if values:
                    collected.setdefault(key, []).extend(values)

        if stage in (None, "analyzer") and self.analyzer:
            add(self.analyzer.issues)
        if stage in (None, "scanner") and self.scanner:
            add(self.scanner.issues)
        if stage in (None, "advisor") and self.advisor:
            add({k: [i for r in v for i in r.issues] for k, v in self.advisor.results.items()})

        return collected

    def is_resolved(self, item: OrtIssue | RuleViolation) -> bool:
        if isinstance(item, RuleViolation):
            candidates = self.resolutions.rule_violations
        else:
            candidates = self.resolutions.issues
        return any(r.matches(item.message) for r in candidates)

    def partition_issues(self, stage: str | None = None) -> tuple[list[OrtIssue], list[OrtIssue]]:
        """Split the issues of *stage* into (resolved, unresolved)."""
        resolved: list[OrtIssue] = []
        unresolved: list[OrtIssue] = []
        for issues in self.collect_issues(stage).values():
            for issue in issues:
                (resolved if self.is_resolved(issue) else unresolved).append(issue)
        return resolved, unresolved

    def partition_rule_violations(self) -> tuple[list[RuleViolation], list[RuleViolation]]:
        resolved = [v for v in self.rule_violations if self.is_resolved(v)]
        unresolved = [v for v in self.rule_violations if not self.is_resolved(v)]
        return resolved, unresolved

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "OrtResult":
        repository = dict(raw.get("repository") or {})
        config = repository.get("config") or {}
        return cls(
            repository=repository,
            resolutions=Resolutions.from_dict(config.get("resolutions")),
            analyzer=AnalyzerRun.from_dict(raw["analyzer"]) if raw.get("analyzer") else None,
            scanner=ScannerRun.from_dict(raw["scanner"]) if raw.get("scanner") else None,
            advisor=AdvisorRun.from_dict(raw["advisor"]) if raw.get("advisor") else None,
            evaluator=EvaluatorRun.from_dict(raw["evaluator"]) if raw.get("evaluator") else None,
            labels={str(k): str(v) for k, v in (raw.get("labels") or {}).items()},
        )

    def to_dict(self) -> dict[str, Any]:
        repository = dict(self.repository)
        resolutions = self.resolutions.to_dict()
        if resolutions:
            repository["config"] = {**(repository.get("config") or {}), "resolutions": resolutions}

        data: dict[str, Any] = {"repository": repository}
        for name in ("analyzer", "scanner", "advisor", "evaluator"):
            section = getattr(self, name)
            if section is not None:
                data[name] = section.to_dict()
        if self.labels:
            data["labels"] = dict(self.labels)
        return data


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def read_ort_result(path: Path) -> OrtResult:
    """Read an ORT result from a YAML or JSON file.

    Raises:
        ResultFileError: if the file is missing, cannot be parsed or has an
                         unsupported extension.
    """
    path = Path(path)
    if not path.is_file():
        raise ResultFileError(f"ORT result file not found: '{path}'")

    suffix = path.suffix.lower()
    try:
        with path.open(encoding="utf-8") as f:
            if suffix in YAML_SUFFIXES:
                raw = yaml.safe_load(f)
            elif suffix in JSON_SUFFIXES:
                raw = json.load(f)
            else:
                raise ResultFileError(f"Unsupported ORT result file extension '{path.suffix}' for '{path}'.")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ResultFileError(f"Failed to parse '{path}': {exc}") from exc

    if not isinstance(raw, dict):
        raise ResultFileError(f"'{path}' must contain a mapping at the top level.")

    try:
        return OrtResult.from_dict(raw)
    except (KeyError, ValueError, TypeError, AttributeError) as exc:
        raise ResultFileError(f"Invalid ORT result in '{path}': {exc}") from exc


def write_ort_result(result: OrtResult, path: Path) -> Path:
    path = Path(path)
    suffix = path.suffix.lower()
    data = result.to_dict()

    if suffix in YAML_SUFFIXES:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    elif suffix in JSON_SUFFIXES:
        text = json.dumps(data, indent=2, ensure_ascii=False)
    else:
        raise ResultFileError(f"Unsupported ORT result file extension '{path.suffix}' for '{path}'.")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
