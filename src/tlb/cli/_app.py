"""The command-line interface for TLB."""

from cyclopts import App
from rich.console import Console

from ._commands import register_commands

HELP = "Client runtime for the TLB test load balancer."


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Build the ``tlb`` application.

    Args:
        console: Console for regular output. Writes to stdout if None.
        error_console: Console for errors. Writes to stderr if None.
        exit_on_error: Whether cyclopts exits on parse errors.

    Returns:
        The configured cyclopts application.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name="tlb",
        help=HELP,
        help_on_error=True,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )
    register_commands(app, console, error_console)
    return app


def main() -> None:
    """Default entrypoint for the `tlb` CLI."""
    app = create_app()
    app()


if __name__ == "__main__":
    main()
