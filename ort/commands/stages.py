"""Subcommands for the pipeline stages that are carried out by engines.

Commands:
    advisor       look up security vulnerabilities of the found packages
    analyzer      determine the dependencies of a project
    downloader    fetch the source code of projects or packages
    evaluator     evaluate policy rules against a result
    notifier      send notifications about a result
    scanner       scan the source code for license findings

Engines are called with keyword arguments; see ``ort.engines``.
"""

import logging
from pathlib import Path

import click

from ort.commands.common import (
    check_output_files,
    conclude_issues,
    conclude_rule_violations,
    global_options,
    ort_file_option,
    output_files,
    output_formats_option,
    read_result,
    run_engine,
    run_result_engine,
    write_results,
)
from ort.environment import ort_config_directory
from ort.options import FileType, describe_group_type, group_type_from_options

logger = logging.getLogger(__name__)

DEFAULT_RULES_FILENAME = "evaluator.rules"


# ---------------------------------------------------------------------------
# advisor
# ---------------------------------------------------------------------------

@click.command("advisor")
@ort_file_option
@click.option("-o", "--output-dir", required=True, type=click.Path(file_okay=False, path_type=Path),
              help="The directory to write the advisor result to.")
@output_formats_option
@click.option("-a", "--advisors", required=True,
              help="The comma-separated advisors to use, like 'OSV,VulnerableCode'.")
@click.pass_context
def advisor_command(ctx: click.Context, ort_file: Path, output_dir: Path,
                    output_formats: tuple[str, ...], advisors: str) -> None:
    """Check dependencies for security vulnerabilities."""
    options = global_options(ctx)
    files = output_files(output_dir, "advisor-result", output_formats)
    check_output_files(files, options.force_overwrite)

    advisor_names = [name.strip() for name in advisors.split(",") if name.strip()]
    ort_result = read_result(ort_file)
    result = run_result_engine("advisor", ort_result=ort_result, advisors=advisor_names, config=options.config)

    write_results(result, files)
    conclude_issues(result, "advisor", options.config)


# ---------------------------------------------------------------------------
# analyzer
# ---------------------------------------------------------------------------

@click.command("analyzer")
@click.option("-i", "--input-dir", required=True, type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="The project directory to analyze.")
@click.option("-o", "--output-dir", required=True, type=click.Path(file_okay=False, path_type=Path),
              help="The directory to write the analyzer result to.")
@output_formats_option
@click.pass_context
def analyzer_command(ctx: click.Context, input_dir: Path, output_dir: Path,
                     output_formats: tuple[str, ...]) -> None:
    """Determine dependencies of a software project."""
    options = global_options(ctx)
    files = output_files(output_dir, "analyzer-result", output_formats)
    check_output_files(files, options.force_overwrite)

    click.echo(f"The analyzer is started for '{input_dir.resolve()}'.")
    result = run_result_engine("analyzer", input_dir=input_dir.resolve(), config=options.config)

    write_results(result, files)
    conclude_issues(result, "analyzer", options.config)


# ---------------------------------------------------------------------------
# downloader
# ---------------------------------------------------------------------------

@click.command("downloader")
@click.option("-i", "--ort-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
              help="An ORT result file whose packages are downloaded. Excludes '--project-url'.")
@click.option("--project-url", default=None,
              help="A VCS or archive URL of a project to download. Excludes '--ort-file'.")
@click.option("-o", "--output-dir", required=True, type=click.Path(file_okay=False, path_type=Path),
              help="The directory to download the source code to.")
@click.pass_context
def downloader_command(ctx: click.Context, ort_file: Path | None, project_url: str | None,
                       output_dir: Path) -> None:
    """Fetch source code from a remote location."""
    options = global_options(ctx)

    try:
        source = group_type_from_options(ort_file, project_url, "--ort-file", "--project-url")
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc
    if source is None:
        raise click.UsageError("Either '--ort-file' or '--project-url' must be given.")

    logger.info("Downloading from %s.", describe_group_type(source))
    ort_result = read_result(source.file) if isinstance(source, FileType) else None
    project = None if isinstance(source, FileType) else source.string

    downloaded = run_engine("downloader", ort_result=ort_result, project_url=project,
                            output_dir=output_dir, config=options.config)

    for path in downloaded or []:
        click.echo(f"Downloaded to '{path}'.")


# ---------------------------------------------------------------------------
# evaluator
# ---------------------------------------------------------------------------

@click.command("evaluator")
@ort_file_option
@click.option("-o", "--output-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="The directory to write the evaluation result to. If omitted, no result file is written.")
@output_formats_option
@click.option("--rules-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
              help="The file containing the rules to evaluate. Excludes '--rules-resource'. "
                   f"[default: $ORT_CONFIG_DIR/{DEFAULT_RULES_FILENAME}]")
@click.option("--rules-resource", default=None,
              help="The name of a resource containing the rules to evaluate. Excludes '--rules-file'.")
@click.pass_context
def evaluator_command(ctx: click.Context, ort_file: Path, output_dir: Path | None,
                      output_formats: tuple[str, ...], rules_file: Path | None,
                      rules_resource: str | None) -> None:
    """Evaluate ORT result files against policy rules."""
    options = global_options(ctx)

    try:
        rules = group_type_from_options(rules_file, rules_resource, "--rules-file", "--rules-resource")
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc
    if rules is None:
        rules = FileType(ort_config_directory() / DEFAULT_RULES_FILENAME)

    files = output_files(output_dir, "evaluation-result", output_formats) if output_dir else []
    check_output_files(files, options.force_overwrite)

    logger.info("Evaluating rules from %s.", describe_group_type(rules))
    ort_result = read_result(ort_file)
    result = run_result_engine("evaluator", ort_result=ort_result, rules=rules, config=options.config)

    write_results(result, files)
    conclude_rule_violations(result, options.config)


# ---------------------------------------------------------------------------
# notifier
# ---------------------------------------------------------------------------

@click.command("notifier")
@ort_file_option
@click.option("--notifications-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
              help="The file describing which notifications to send.")
@click.pass_context
def notifier_command(ctx: click.Context, ort_file: Path, notifications_file: Path | None) -> None:
    """Create notifications based on an ORT result."""
    options = global_options(ctx)
    ort_result = read_result(ort_file)
    run_engine("notifier", ort_result=ort_result, notifications_file=notifications_file, config=options.config)


# ---------------------------------------------------------------------------
# scanner
# ---------------------------------------------------------------------------

@click.command("scanner")
@ort_file_option
@click.option("-o", "--output-dir", required=True, type=click.Path(file_okay=False, path_type=Path),
              help="The directory to write the scan result to.")
@output_formats_option
@click.pass_context
def scanner_command(ctx: click.Context, ort_file: Path, output_dir: Path,
                    output_formats: tuple[str, ...]) -> None:
    """Run external license / copyright scanners."""
    options = global_options(ctx)
    files = output_files(output_dir, "scan-result", output_formats)
    check_output_files(files, options.force_overwrite)

    ort_result = read_result(ort_file)
    result = run_result_engine("scanner", ort_result=ort_result, config=options.config)

    write_results(result, files)
    conclude_issues(result, "scanner", options.config)
