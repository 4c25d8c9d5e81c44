"""Subcommands of the ``ort`` command, in the order they are registered."""

from ort.commands.config import config_command
from ort.commands.reporter import reporter_command
from ort.commands.requirements import requirements_command
from ort.commands.stages import (
    advisor_command,
    analyzer_command,
    downloader_command,
    evaluator_command,
    notifier_command,
    scanner_command,
)
from ort.commands.upload import (
    upload_curations_command,
    upload_result_to_postgres_command,
    upload_result_to_sw360_command,
)

COMMANDS = [
    advisor_command,
    analyzer_command,
    config_command,
    downloader_command,
    evaluator_command,
    notifier_command,
    reporter_command,
    requirements_command,
    scanner_command,
    upload_curations_command,
    upload_result_to_postgres_command,
    upload_result_to_sw360_command,
]
