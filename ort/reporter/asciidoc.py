"""A reporter that renders AsciiDoc templates and converts them with Asciidoctor.

For every selected template an intermediate AsciiDoc file is rendered into a
temporary directory, which is then converted by the external ``asciidoctor``
executable (with ``asciidoctor-pdf`` for PDF output). If no template is
selected, the "disclosure_document" template is used, plus the
"vulnerability_report" template when the result contains advisor data.

Supported options:
    template.id     comma-separated ids of built-in templates
    template.path   comma-separated paths to user template files
    backend         Asciidoctor backend, like "html". Defaults to "pdf". The
                    fake "adoc" backend keeps the AsciiDoc files unconverted.
    pdf-theme.path  path to an Asciidoctor PDF theme, only used with "pdf"
"""

import logging
import shutil
import subprocess  # nosec B404
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ort.environment import ORT_NAME, expand_tilde
from ort.reporter.base import (
    ConversionError,
    OutputFileExistsError,
    Reporter,
    ReporterInput,
    ThemeNotFoundError,
)
from ort.reporter.template_processor import OPTION_TEMPLATE_ID, OPTION_TEMPLATE_PATH, TemplateProcessor

logger = logging.getLogger(__name__)

ASCII_DOC_FILE_PREFIX = "AsciiDoc_"
ASCII_DOC_FILE_EXTENSION = "adoc"
ASCII_DOC_TEMPLATE_DIRECTORY = "asciidoc"

DISCLOSURE_TEMPLATE_ID = "disclosure_document"
VULNERABILITY_TEMPLATE_ID = "vulnerability_report"

OPTION_BACKEND = "backend"
OPTION_PDF_THEME_PATH = "pdf-theme.path"

BACKEND_PDF = "pdf"

KNOWN_OPTIONS = (OPTION_TEMPLATE_ID, OPTION_TEMPLATE_PATH, OPTION_BACKEND, OPTION_PDF_THEME_PATH)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AsciiDocTemplateOptions:
    backend: str = BACKEND_PDF
    template_options: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def keeps_asciidoc(self) -> bool:
        return self.backend.lower() == ASCII_DOC_FILE_EXTENSION

    @classmethod
    def parse(cls, options: Mapping[str, str], input: ReporterInput) -> "AsciiDocTemplateOptions":
        """Validate *options* and apply the defaults.

        Unknown keys are logged and ignored.

        Raises:
            ThemeNotFoundError: if the pdf backend is used with a theme path
                                that is not a file.
        """
        unknown = sorted(set(options) - set(KNOWN_OPTIONS))
        if unknown:
            logger.warning(
                "Ignoring unknown AsciiDocTemplate option(s): %s. Supported options: %s.",
                ", ".join(unknown),
                ", ".join(KNOWN_OPTIONS),
            )

        backend = options.get(OPTION_BACKEND) or BACKEND_PDF
        attributes: dict[str, str] = {}

        theme_path = options.get(OPTION_PDF_THEME_PATH)
        if backend.lower() == BACKEND_PDF and theme_path:
            theme_file = Path(expand_tilde(theme_path))
            if not theme_file.is_file():
                raise ThemeNotFoundError(f"Could not find pdf-theme file at '{theme_file.absolute()}'.")
            attributes["pdf-theme"] = str(theme_file.absolute())

        template_options = {
            key: options[key] for key in (OPTION_TEMPLATE_ID, OPTION_TEMPLATE_PATH) if options.get(key)
        }
        if OPTION_TEMPLATE_PATH not in template_options and OPTION_TEMPLATE_ID not in template_options:
            template_ids = [DISCLOSURE_TEMPLATE_ID]
            if input.ort_result.get_advisor_results():
                template_ids.append(VULNERABILITY_TEMPLATE_ID)
            template_options[OPTION_TEMPLATE_ID] = ",".join(template_ids)

        return cls(backend=backend, template_options=template_options, attributes=attributes)


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------

class AsciidoctorConverter:
    """Runs the external ``asciidoctor`` executable on single files."""

    def __init__(self, executable: str = "asciidoctor") -> None:
        self.executable = executable

    def build_command(self, source: Path, target: Path, backend: str, attributes: Mapping[str, str]) -> list[str]:
        command = [self.executable]
        if backend.lower() == BACKEND_PDF:
            command += ["-r", "asciidoctor-pdf"]
        command += ["-b", backend.lower(), "-S", "unsafe", "-o", str(target)]
        for key, value in attributes.items():
            command += ["-a", f"{key}={value}"]
        command.append(str(source))
        return command

    def convert_file(self, source: Path, target: Path, backend: str, attributes: Mapping[str, str] | None = None) -> None:
        """Convert *source* into *target* using *backend*.

        Raises:
            ConversionError: if the executable is missing or exits with an error.
        """
        command = self.build_command(source, target, backend, attributes or {})
        logger.debug("Running: %s", " ".join(command))

        try:
            subprocess.run(command, capture_output=True, text=True, check=True)  # nosec B603
        except FileNotFoundError as exc:
            raise ConversionError(
                f"Unable to convert '{source.name}' to '{target.name}': "
                f"the '{self.executable}' executable was not found."
            ) from exc
        except subprocess.CalledProcessError as exc:
            details = (exc.stderr or exc.stdout or "").strip()[:500]
            raise ConversionError(
                f"Unable to convert '{source.name}' to '{target.name}' with the '{backend}' backend "
                f"(exit code {exc.returncode}): {details}"
            ) from exc


# ---------------------------------------------------------------------------
# Reporter
# ---------------------------------------------------------------------------

class AsciiDocTemplateReporter(Reporter):
    name = "AsciiDocTemplate"

    def __init__(self, converter: AsciidoctorConverter | None = None) -> None:
        self.template_processor = TemplateProcessor(
            ASCII_DOC_FILE_PREFIX,
            ASCII_DOC_FILE_EXTENSION,
            ASCII_DOC_TEMPLATE_DIRECTORY,
        )
        self.converter = converter or AsciidoctorConverter()

    def output_files(self, input: ReporterInput, output_dir: Path, options: Mapping[str, str]) -> list[Path]:
        return self._planned_files(AsciiDocTemplateOptions.parse(options, input), Path(output_dir))

    def generate_report(self, input: ReporterInput, output_dir: Path, options: Mapping[str, str]) -> list[Path]:
        """Render and convert the selected templates into *output_dir*.

        Raises:
            OutputFileExistsError: if an output file exists and
                                   ``input.force_overwrite`` is not set.
        """
        parsed = AsciiDocTemplateOptions.parse(options, input)
        output_dir = Path(output_dir)

        if not input.force_overwrite:
            existing = [str(f) for f in self._planned_files(parsed, output_dir) if f.exists()]
            if existing:
                raise OutputFileExistsError(f"The output file(s) {', '.join(existing)} exist already.")

        output_dir.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix=f"{ORT_NAME}-asciidoc") as temp_dir:
            asciidoc_files = self.template_processor.process_templates(input, Path(temp_dir), parsed.template_options)

            if parsed.keeps_asciidoc:
                return [self._copy(file, output_dir) for file in asciidoc_files]

            return [self._convert(file, output_dir, parsed) for file in asciidoc_files]

    def _planned_files(self, parsed: AsciiDocTemplateOptions, output_dir: Path) -> list[Path]:
        extension = ASCII_DOC_FILE_EXTENSION if parsed.keeps_asciidoc else parsed.backend
        return [
            output_dir / f"{stem}.{extension}"
            for stem in self.template_processor.output_stems(parsed.template_options)
        ]

    @staticmethod
    def _copy(file: Path, output_dir: Path) -> Path:
        output_file = output_dir / file.name
        shutil.copyfile(file, output_file)
        return output_file

    def _convert(self, file: Path, output_dir: Path, parsed: AsciiDocTemplateOptions) -> Path:
        output_file = output_dir / f"{file.stem}.{parsed.backend}"
        logger.info("Converting '%s' to '%s'.", file.name, output_file)

        self.converter.convert_file(file, output_file, parsed.backend, parsed.attributes)
        file.unlink()
        return output_file
