"""Reporter interface and the exceptions raised while generating reports."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ort.config import OrtConfiguration
from ort.models import OrtResult
from ort.utils import OrtError


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ReporterError(OrtError):
    """Base exception for report generation errors."""


class TemplateError(ReporterError):
    """Raised when a report template cannot be found or rendered."""


class ThemeNotFoundError(ReporterError):
    """Raised when the configured PDF theme file does not exist."""


class ConversionError(ReporterError):
    """Raised when the external document converter fails for a file."""


class OutputFileExistsError(ReporterError):
    """Raised when a report would replace an existing file."""


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReporterInput:
    """Everything a reporter may use; treated as read-only."""

    ort_result: OrtResult
    config: OrtConfiguration = field(default_factory=OrtConfiguration)
    force_overwrite: bool = False


class Reporter(ABC):
    """A plugin that turns an ORT result into one or more report files."""

    #: Name used to select the reporter on the command line and in the config.
    name: str = ""

    def output_files(self, input: ReporterInput, output_dir: Path, options: Mapping[str, str]) -> list[Path]:
        """Return the files ``generate_report`` will write, empty if not known in advance."""
        return []

    @abstractmethod
    def generate_report(self, input: ReporterInput, output_dir: Path, options: Mapping[str, str]) -> list[Path]:
        """Write the report(s) for *input* to *output_dir* and return the created files."""
