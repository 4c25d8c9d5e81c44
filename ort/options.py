"""Option types shared between the root command and its subcommands."""

from dataclasses import dataclass
from pathlib import Path

import click

from ort.config import OrtConfiguration


@dataclass(frozen=True)
class GlobalOptions:
    """Options of the root command made available to every subcommand."""

    config: OrtConfiguration
    force_overwrite: bool = False


# ---------------------------------------------------------------------------
# Mutually exclusive options of different types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileType:
    file: Path


@dataclass(frozen=True)
class StringType:
    string: str


GroupType = FileType | StringType


def group_type_from_options(file: Path | None, string: str | None, file_option: str, string_option: str) -> GroupType | None:
    """Build a GroupType from two mutually exclusive option values.

    Raises:
        ValueError: if both values are given.
    """
    if file is not None and string is not None:
        raise ValueError(f"Options '{file_option}' and '{string_option}' are mutually exclusive.")
    if file is not None:
        return FileType(Path(file))
    if string is not None:
        return StringType(string)
    return None


def describe_group_type(value: GroupType) -> str:
    if isinstance(value, FileType):
        return f"file '{value.file}'"
    if isinstance(value, StringType):
        return f"resource '{value.string}'"
    raise TypeError(f"Unexpected option type {type(value).__name__}")


# ---------------------------------------------------------------------------
# Error output switch
# ---------------------------------------------------------------------------

#: Key in ``click.Context.meta``; the mapping is shared by all contexts of one invocation.
PRINT_STACK_TRACE_KEY = "ort.print_stack_trace"


def print_stack_trace(ctx: click.Context) -> bool:
    return bool(ctx.meta.get(PRINT_STACK_TRACE_KEY, False))
