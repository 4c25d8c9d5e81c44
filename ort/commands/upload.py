"""Subcommands that upload data to external services.

Commands:
    upload-curations            submit package curations to ClearlyDefined
    upload-result-to-postgres   store an ORT result in a PostgreSQL table (engine)
    upload-result-to-sw360      create SW360 projects and releases (engine)
"""

from pathlib import Path

import click

from ort.clearly_defined import (
    ClearlyDefinedClient,
    ClearlyDefinedError,
    CurationError,
    read_curations,
    server_url,
    to_contribution_patch,
)
from ort.commands.common import global_options, ort_file_option, read_result, run_engine


# ---------------------------------------------------------------------------
# upload-curations
# ---------------------------------------------------------------------------

@click.command("upload-curations")
@click.option("-i", "--input-file", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="The file with package curations to upload.")
@click.option("-s", "--server", default=None,
              help="The ClearlyDefined server: production, development, localhost or a URL. "
                   "[default: 'ort.clearlyDefined.server' from the configuration]")
@click.pass_context
def upload_curations_command(ctx: click.Context, input_file: Path, server: str | None) -> None:
    """Upload ORT package curations to ClearlyDefined."""
    options = global_options(ctx)
    try:
        url = server_url(server or options.config.clearly_defined_server)
    except ClearlyDefinedError as exc:
        raise click.BadParameter(str(exc), param_hint="'--server'") from exc

    curations = read_curations(input_file)
    client = ClearlyDefinedClient(url)

    uploaded = 0
    for curation in curations:
        try:
            response = client.put_curations(to_contribution_patch(curation))
        except (CurationError, ClearlyDefinedError) as exc:
            click.echo(f"Failed to upload the curation for '{curation.id}': {exc}", err=True)
            continue

        uploaded += 1
        click.echo(f"Uploaded the curation for '{curation.id}': {response.get('url', '(no pull request URL)')}")

    click.echo(f"Uploaded {uploaded} of {len(curations)} curation(s) to '{url}'.")
    if uploaded != len(curations):
        raise click.exceptions.Exit(1)


# ---------------------------------------------------------------------------
# upload-result-to-postgres
# ---------------------------------------------------------------------------

@click.command("upload-result-to-postgres")
@ort_file_option
@click.option("--table-name", required=True, help="The name of the table to upload the result to.")
@click.option("--column-name", default="result", show_default=True,
              help="The name of the JSONB column to store the result in.")
@click.option("--create-table", is_flag=True, default=False,
              help="Create the table if it does not exist yet.")
@click.pass_context
def upload_result_to_postgres_command(ctx: click.Context, ort_file: Path, table_name: str,
                                      column_name: str, create_table: bool) -> None:
    """Upload an ORT result to a PostgreSQL database."""
    options = global_options(ctx)
    run_engine("upload-result-to-postgres", ort_result=read_result(ort_file), table_name=table_name,
               column_name=column_name, create_table=create_table, config=options.config)
    click.echo(f"Uploaded '{ort_file}' to table '{table_name}'.")


# ---------------------------------------------------------------------------
# upload-result-to-sw360
# ---------------------------------------------------------------------------

@click.command("upload-result-to-sw360")
@ort_file_option
@click.option("--attach-sources", is_flag=True, default=False,
              help="Download the sources of each package and attach them to the SW360 release.")
@click.pass_context
def upload_result_to_sw360_command(ctx: click.Context, ort_file: Path, attach_sources: bool) -> None:
    """Upload an ORT result to SW360."""
    options = global_options(ctx)
    run_engine("upload-result-to-sw360", ort_result=read_result(ort_file), attach_sources=attach_sources,
               config=options.config)
    click.echo(f"Uploaded '{ort_file}' to SW360.")
