"""
CLI Error Handling
==================

Exit codes and the exception handler shared by all minic commands.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from minic.errors import MiniCError, SourceTooLargeError


class ExitCode(IntEnum):
    """Standard exit codes for the minic tool."""
    SUCCESS = 0
    IO_ERROR = 1         # Missing, unreadable or oversized input
    SOURCE_ERROR = 2     # Lexical or preprocessor errors in the source
    INVALID_ARGS = 3     # Invalid arguments
    INTERNAL_ERROR = 4   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception on stderr and exit with the matching code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, SourceTooLargeError):
        click.echo(str(error), err=True)
        sys.exit(ExitCode.IO_ERROR)

    elif isinstance(error, MiniCError):
        # Already formatted with location and "error:" prefix
        click.echo(str(error), err=True)
        sys.exit(ExitCode.SOURCE_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.IO_ERROR)

    elif isinstance(error, OSError):
        click.echo(f"I/O error: {error}", err=True)
        sys.exit(ExitCode.IO_ERROR)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
