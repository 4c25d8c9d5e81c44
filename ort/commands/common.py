"""Helpers shared by the subcommands."""

import logging
import time
from pathlib import Path

import click

from ort.config import OrtConfiguration
from ort.engines import get_engine
from ort.models import OrtResult, read_ort_result, write_ort_result
from ort.options import GlobalOptions
from ort.severity import SeverityStats, conclude_severity_stats
from ort.utils import PERFORMANCE, OrtError

logger = logging.getLogger(__name__)

#: Exit status when issues or rule violations reach the configured threshold.
SEVERE_STATUS_CODE = 2

OUTPUT_FORMATS = {"YAML": "yml", "JSON": "json"}

output_formats_option = click.option(
    "-f",
    "--output-formats",
    "output_formats",
    multiple=True,
    default=("YAML",),
    show_default=True,
    type=click.Choice(list(OUTPUT_FORMATS), case_sensitive=False),
    help="The data format(s) used for the result file(s), repeat for several formats.",
)

ort_file_option = click.option(
    "-i",
    "--ort-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="An ORT result file to use.",
)


def global_options(ctx: click.Context) -> GlobalOptions:
    """Return the options published by the root command, or defaults."""
    options = ctx.find_object(GlobalOptions)
    return options if options is not None else GlobalOptions(OrtConfiguration())


# ---------------------------------------------------------------------------
# Result files
# ---------------------------------------------------------------------------

def output_files(output_dir: Path, basename: str, formats: tuple[str, ...]) -> list[Path]:
    extensions = dict.fromkeys(OUTPUT_FORMATS[f.upper()] for f in formats)
    return [output_dir / f"{basename}.{ext}" for ext in extensions]


def check_output_files(files: list[Path], force_overwrite: bool) -> None:
    """Refuse to run if any of *files* exists, unless overwriting is allowed."""
    if force_overwrite:
        return

    existing = [str(f) for f in files if f.exists()]
    if existing:
        raise click.UsageError(f"None of the output files {', '.join(existing)} must exist yet.")


def read_result(path: Path) -> OrtResult:
    logger.info("Reading ORT result from '%s'.", path)
    return read_ort_result(path)


def write_results(result: OrtResult, files: list[Path]) -> None:
    for file in files:
        click.echo(f"Writing result to '{file}'.")
        write_ort_result(result, file)


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------

def run_engine(name: str, **kwargs):
    """Look up the engine *name*, call it with *kwargs* and log the duration."""
    engine = get_engine(name)

    start = time.perf_counter()
    result = engine(**kwargs)
    logger.log(PERFORMANCE, "The %s took %.2f s.", name, time.perf_counter() - start)

    return result


def run_result_engine(name: str, **kwargs) -> OrtResult:
    result = run_engine(name, **kwargs)
    if not isinstance(result, OrtResult):
        raise OrtError(f"The '{name}' engine returned {type(result).__name__}, expected an OrtResult.")
    return result


# ---------------------------------------------------------------------------
# Severity conclusion
# ---------------------------------------------------------------------------

def conclude_issues(result: OrtResult, stage: str, config: OrtConfiguration) -> None:
    resolved, unresolved = result.partition_issues(stage)
    stats = SeverityStats.from_issues(resolved, unresolved)
    conclude_severity_stats(stats, config.severe_issue_threshold, SEVERE_STATUS_CODE)


def conclude_rule_violations(result: OrtResult, config: OrtConfiguration) -> None:
    resolved, unresolved = result.partition_rule_violations()
    stats = SeverityStats.from_rule_violations(resolved, unresolved)
    conclude_severity_stats(stats, config.severe_rule_violation_threshold, SEVERE_STATUS_CODE)
