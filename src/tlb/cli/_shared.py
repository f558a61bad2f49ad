"""Shared CLI utilities: exit codes and console helpers."""

from enum import IntEnum
from typing import TYPE_CHECKING, Never

if TYPE_CHECKING:
    from rich.console import Console

__all__ = ["ExitCode", "exit_with_error", "get_error_console"]


class ExitCode(IntEnum):
    """Standard exit codes for TLB CLI commands."""

    SUCCESS = 0
    LOAD_ERROR = 1
    NOT_RUNNING = 2
    PROTOCOL_ERROR = 3
    STARTUP_ERROR = 4
    INTERNAL_ERROR = 5


def get_error_console() -> "Console":
    """Get a Rich console configured for error output to stderr."""
    from rich.console import Console  # noqa: PLC0415

    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: "Console | None" = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Args:
        message: The error message to display.
        code: The exit code to use (defaults to INTERNAL_ERROR).
        console: Optional Rich console for output. If not provided,
            a new stderr console will be created.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    from rich.markup import escape  # noqa: PLC0415

    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    raise SystemExit(code)
