"""Report plugins.

Reporters turn an ORT result into report files. Use ``get_reporter`` to look
one up by its (case-insensitive) name.
"""

from ort.reporter.base import (
    ConversionError,
    OutputFileExistsError,
    Reporter,
    ReporterError,
    ReporterInput,
    TemplateError,
    ThemeNotFoundError,
)
from ort.reporter.asciidoc import AsciiDocTemplateReporter

# Registry of reporters, in the order they are listed in help output
_reporters: dict[str, type[Reporter]] = {
    cls.name.lower(): cls for cls in (AsciiDocTemplateReporter,)
}


def reporter_names() -> list[str]:
    return [cls.name for cls in _reporters.values()]


def get_reporter(name: str) -> Reporter:
    """Return a new instance of the reporter called *name*.

    Raises:
        ReporterError: if there is no such reporter.
    """
    try:
        return _reporters[name.lower()]()
    except KeyError:
        available = ", ".join(reporter_names())
        raise ReporterError(f"Unknown reporter '{name}'. Available reporters: {available}") from None


__all__ = [
    "AsciiDocTemplateReporter",
    "ConversionError",
    "OutputFileExistsError",
    "Reporter",
    "ReporterError",
    "ReporterInput",
    "TemplateError",
    "ThemeNotFoundError",
    "get_reporter",
    "reporter_names",
]
