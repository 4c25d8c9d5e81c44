"""Render Jinja2 report templates against an ORT result.

Templates are selected through two options:
    template.id    comma-separated ids of templates shipped in ``templates/<dir>``
    template.path  comma-separated paths to user-provided template files

Every template yields one file ``<prefix><id or file stem>.<extension>``. A
user template stem that already ends in ``.<extension>`` loses that suffix.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jinja2

from ort.environment import expand_tilde
from ort.reporter.base import ReporterInput, TemplateError

logger = logging.getLogger(__name__)

OPTION_TEMPLATE_ID = "template.id"
OPTION_TEMPLATE_PATH = "template.path"

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
TEMPLATE_SUFFIX = ".j2"


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _make_environment(template_dir: Path) -> jinja2.Environment:
    # AsciiDoc is not markup that needs HTML escaping
    return jinja2.Environment(  # nosec B701
        loader=jinja2.FileSystemLoader(str(template_dir)),
        autoescape=False,
        undefined=jinja2.StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class TemplateProcessor:
    """Renders built-in and user templates into files of one format."""

    def __init__(self, file_prefix: str, file_extension: str, template_directory: str) -> None:
        self.file_prefix = file_prefix
        self.file_extension = file_extension
        self.template_dir = TEMPLATES_DIR / template_directory

    def builtin_template_ids(self) -> list[str]:
        suffix = f".{self.file_extension}{TEMPLATE_SUFFIX}"
        if not self.template_dir.is_dir():
            return []
        return sorted(p.name[: -len(suffix)] for p in self.template_dir.iterdir() if p.name.endswith(suffix))

    def output_stems(self, options: Mapping[str, str]) -> list[str]:
        """Return the output file names, without extension, in rendering order.

        Raises:
            TemplateError: as ``process_templates`` does for invalid options.
        """
        template_ids, template_paths = self._select_templates(options)
        return [f"{self.file_prefix}{template_id}" for template_id in template_ids] + [
            f"{self.file_prefix}{self._user_template_stem(path)}" for path in template_paths
        ]

    def process_templates(self, input: ReporterInput, output_dir: Path, options: Mapping[str, str]) -> list[Path]:
        """Render all selected templates into *output_dir*.

        Built-in templates are rendered before user templates, each group in
        the order given in the options.

        Raises:
            TemplateError: if no template is selected, a template id is
                           unknown, a template path is not a file, or
                           rendering fails.
        """
        template_ids, template_paths = self._select_templates(options)

        context = self.build_context(input)
        output_files: list[Path] = []

        builtin_env = _make_environment(self.template_dir)
        for template_id in template_ids:
            template_name = f"{template_id}.{self.file_extension}{TEMPLATE_SUFFIX}"
            output_file = output_dir / f"{self.file_prefix}{template_id}.{self.file_extension}"
            output_files.append(self._render(builtin_env, template_name, context, output_file))

        for template_path in template_paths:
            env = _make_environment(template_path.parent)
            stem = self._user_template_stem(template_path)
            output_file = output_dir / f"{self.file_prefix}{stem}.{self.file_extension}"
            output_files.append(self._render(env, template_path.name, context, output_file))

        return output_files

    def _user_template_stem(self, template_path: Path) -> str:
        # "custom.adoc.j2" and "custom.j2" both yield "custom"
        stem = template_path.stem
        extension = f".{self.file_extension}"
        if stem.endswith(extension) and len(stem) > len(extension):
            stem = stem[: -len(extension)]
        return stem

    def _select_templates(self, options: Mapping[str, str]) -> tuple[list[str], list[Path]]:
        template_ids = _split(options.get(OPTION_TEMPLATE_ID))
        template_paths = [Path(expand_tilde(p)) for p in _split(options.get(OPTION_TEMPLATE_PATH))]

        if not template_ids and not template_paths:
            raise TemplateError(
                f"Neither the '{OPTION_TEMPLATE_ID}' nor the '{OPTION_TEMPLATE_PATH}' option is set."
            )

        known_ids = self.builtin_template_ids()
        unknown_ids = [t for t in template_ids if t not in known_ids]
        if unknown_ids:
            raise TemplateError(
                f"Unknown template id(s): {', '.join(unknown_ids)}. "
                f"Available template ids: {', '.join(known_ids) or '(none)'}"
            )

        missing_paths = [p for p in template_paths if not p.is_file()]
        if missing_paths:
            raise TemplateError(
                "Template file(s) not found: " + ", ".join(f"'{p.absolute()}'" for p in missing_paths)
            )

        return template_ids, template_paths

    @staticmethod
    def build_context(input: ReporterInput) -> dict[str, Any]:
        result = input.ort_result
        resolved_violations, unresolved_violations = result.partition_rule_violations()
        return {
            "ort_result": result,
            "projects": result.projects,
            "packages": result.packages,
            "vulnerabilities": result.get_vulnerabilities(),
            "rule_violations": unresolved_violations,
            "resolved_rule_violations": resolved_violations,
            "labels": result.labels,
        }

    @staticmethod
    def _render(env: jinja2.Environment, template_name: str, context: dict[str, Any], output_file: Path) -> Path:
        logger.info("Rendering template '%s' to '%s'.", template_name, output_file)
        try:
            text = env.get_template(template_name).render(**context)
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Failed to render template '{template_name}': {exc}") from exc

        output_file.write_text(text, encoding="utf-8")
        return output_file
