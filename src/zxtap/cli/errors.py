"""
Unified CLI Error Handling
==========================

Provides the diagnostic sink used by zxtapi to report problems, plus
consistent exit codes for every failure.
"""

import sys
import traceback
from dataclasses import dataclass
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    DECODE_ERROR = 1     # Malformed tape, missing block, unsupported datatype
    INVALID_ARGS = 2     # Invalid arguments, settings or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


@dataclass
class Diagnostics:
    """
    Colored error and warning output on stderr.

    Messages are printed as `[ERROR] text` / `[WARNING] text`, with the
    label in red or yellow and the brackets in cyan when color is on.
    """
    color: bool = True

    def _echo(self, text: str) -> None:
        # None lets click strip colors when stderr is not a terminal
        click.echo(text, err=True, color=None if self.color else False)

    def _emit(self, label: str, label_color: str, message: str) -> None:
        prefix = (
            click.style("[", fg="cyan")
            + click.style(label, fg=label_color, bold=True)
            + click.style("]", fg="cyan")
        )
        self._echo(f"{prefix} {message}")

    def error(self, message: str) -> None:
        self._emit("ERROR", "red", message)

    def warning(self, message: str) -> None:
        self._emit("WARNING", "yellow", message)

    def info(self, message: str) -> None:
        self._echo(click.style(message, fg="bright_black"))


def handle_cli_exception(
    error: Exception,
    diagnostics: Diagnostics,
    verbose: bool = False,
) -> NoReturn:
    """
    Unified exception handler for CLI commands.

    Reports the error through `diagnostics`, optionally prints the
    traceback for internal errors, and exits with the matching exit code.

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from zxtap.errors import ConfigError, ZXTapError

    if isinstance(error, ConfigError):
        diagnostics.error(str(error))
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, ZXTapError):
        diagnostics.error(str(error))
        sys.exit(ExitCode.DECODE_ERROR)

    elif isinstance(error, click.BadParameter):
        diagnostics.error(str(error))
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        diagnostics.error(str(error))
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        diagnostics.error(f"Internal error: {error}")
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
