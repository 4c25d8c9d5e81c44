"""Shared helpers: the exception base class, log levels and error output.

Usage:
    configure_logging(PERFORMANCE)         # set the process wide log level
    show_error(exc, print_stack_trace)     # short message or full traceback
"""

import logging
import sys
import traceback

import click

#: Between INFO and WARNING: timing output without the chatter of INFO.
PERFORMANCE = 25
logging.addLevelName(PERFORMANCE, "PERFORMANCE")

LOG_FORMAT = "%(asctime)s %(levelname)-11s %(name)s - %(message)s"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class OrtError(Exception):
    """Base exception for all errors raised by this package."""


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def install_log_handler() -> None:
    """Attach a stderr handler to the root logger unless one exists already."""
    logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)


def configure_logging(level: int) -> None:
    logging.getLogger().setLevel(level)


# ---------------------------------------------------------------------------
# Error output
# ---------------------------------------------------------------------------

def format_error(exc: BaseException, print_stack_trace: bool = False) -> str:
    """Return the text shown to the user for *exc*.

    With *print_stack_trace* the complete traceback (including chained causes)
    is returned, otherwise a single ``ExceptionType: message`` line.
    """
    if print_stack_trace:
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip()
    return f"{type(exc).__name__}: {exc}"


def show_error(exc: BaseException, print_stack_trace: bool = False) -> None:
    click.echo(format_error(exc, print_stack_trace), err=True)
