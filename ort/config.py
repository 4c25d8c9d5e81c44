"""Configuration loading and validation.

Usage:
    config = load({"ort.severeIssueThreshold": "ERROR"}, Path("config.yml"))
    config.severe_issue_threshold            # Severity.ERROR
    config.reporter_options("AsciiDocTemplate")
    dump(config)                             # active configuration as YAML
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ort.models import Severity
from ort.utils import OrtError

logger = logging.getLogger(__name__)

DEFAULT_LICENSE_FILE_PATTERNS = (
    "LICENSE*",
    "LICENCE*",
    "COPYING*",
    "COPYRIGHT",
    "NOTICE",
    "UNLICENSE",
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(OrtError):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrtConfiguration:
    severe_issue_threshold: Severity = Severity.WARNING
    severe_rule_violation_threshold: Severity = Severity.WARNING
    license_file_patterns: tuple[str, ...] = DEFAULT_LICENSE_FILE_PATTERNS
    clearly_defined_server: str = "production"
    raw: dict[str, Any] = field(default_factory=dict)

    def section(self, *keys: str) -> dict[str, Any]:
        """Return the nested mapping below ``ort.<keys...>``, empty if absent."""
        node: Any = self.raw.get("ort") or {}
        for key in keys:
            if not isinstance(node, Mapping):
                return {}
            node = node.get(key) or {}
        return dict(node) if isinstance(node, Mapping) else {}

    def reporter_options(self, reporter_name: str) -> dict[str, str]:
        options = self.section("reporter", "options", reporter_name)
        return {str(k): str(v) for k, v in options.items()}


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(overrides: Mapping[str, str] | None = None, config_file: Path | None = None) -> OrtConfiguration:
    """Load the configuration from *config_file* and apply *overrides* on top.

    Override keys are dotted paths into the YAML tree (``ort.scanner.x``);
    override values always win over file values. A *config_file* that does
    not exist yields the built-in defaults.

    Raises:
        ConfigError: if the file is malformed or a value is invalid.
    """
    raw: dict[str, Any] = {}

    if config_file is not None and Path(config_file).is_file():
        raw = _read_file(Path(config_file))
        logger.info("Using configuration file '%s'.", config_file)
    elif config_file is not None:
        logger.info("Configuration file '%s' not found, using defaults.", config_file)

    for key, value in (overrides or {}).items():
        _apply_override(raw, key, value)

    return _from_raw(raw)


def parse_overrides(entries: list[str] | tuple[str, ...]) -> dict[str, str]:
    """Turn ``key=value`` strings into a mapping, later entries winning.

    Raises:
        ConfigError: if an entry has no ``=`` or an empty key.
    """
    overrides: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"Invalid configuration override '{entry}', expected 'key=value'.")
        overrides[key.strip()] = value
    return overrides


def _read_file(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Unable to read '{path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")
    return raw


def _apply_override(raw: dict[str, Any], key: str, value: str) -> None:
    parts = [p for p in key.split(".") if p]
    if not parts:
        raise ConfigError(f"Invalid configuration override key '{key}'.")

    node = raw
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def _from_raw(raw: dict[str, Any]) -> OrtConfiguration:
    ort = raw.get("ort") or {}
    if not isinstance(ort, dict):
        raise ConfigError("'ort' must be a mapping.")

    errors: list[str] = []

    def severity(key: str) -> Severity:
        value = ort.get(key)
        if value is None:
            return Severity.WARNING
        try:
            return Severity.parse(value)
        except ValueError as exc:
            errors.append(f"  - 'ort.{key}': {exc}")
            return Severity.WARNING

    issue_threshold = severity("severeIssueThreshold")
    violation_threshold = severity("severeRuleViolationThreshold")

    patterns = ort.get("licenseFilePatterns", DEFAULT_LICENSE_FILE_PATTERNS)
    if isinstance(patterns, str):
        patterns = [p.strip() for p in patterns.split(",") if p.strip()]
    if not isinstance(patterns, (list, tuple)):
        errors.append("  - 'ort.licenseFilePatterns' must be a list of glob patterns")
        patterns = DEFAULT_LICENSE_FILE_PATTERNS

    server = (ort.get("clearlyDefined") or {}).get("server", "production")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))

    return OrtConfiguration(
        severe_issue_threshold=issue_threshold,
        severe_rule_violation_threshold=violation_threshold,
        license_file_patterns=tuple(str(p) for p in patterns),
        clearly_defined_server=str(server),
        raw=raw,
    )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def dump(config: OrtConfiguration) -> str:
    """Return the active configuration as YAML, including resolved defaults."""
    raw = {key: value for key, value in config.raw.items()}
    ort = dict(raw.get("ort") or {})
    ort["severeIssueThreshold"] = config.severe_issue_threshold.name
    ort["severeRuleViolationThreshold"] = config.severe_rule_violation_threshold.name
    ort["licenseFilePatterns"] = list(config.license_file_patterns)
    raw["ort"] = ort
    return yaml.safe_dump(raw, sort_keys=False)


TEMPLATE = """\
ort:
  # Issues and rule violations at or above these severities make the
  # analyzer, scanner, advisor and evaluator exit with status 2.
  severeIssueThreshold: WARNING
  severeRuleViolationThreshold: WARNING

  licenseFilePatterns:
    - "LICENSE*"
    - "LICENCE*"
    - "COPYING*"
    - "COPYRIGHT"
    - "NOTICE"
    - "UNLICENSE"

  clearlyDefined:
    server: production          # production, development or localhost

  reporter:
    options:
      AsciiDocTemplate:
        backend: pdf
        # pdf-theme.path: "/path/to/theme.yml"
"""
