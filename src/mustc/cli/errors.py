"""Error reporting for the mustc CLI."""

from typing import NoReturn, Tuple

import typer

from mustc.exceptions import MustcError


def describe_error(error: Exception) -> Tuple[str, int]:
    """Message and exit status for an error raised by a command."""
    if isinstance(error, MustcError):
        return error.message, error.exit_code
    if isinstance(error, OSError) and error.filename is not None:
        return f"{error.strerror or error}: {error.filename}", 1
    return str(error), 1


def handle_error(error: Exception) -> NoReturn:
    """Print the error on stderr and stop the command with its exit status."""
    message, exit_code = describe_error(error)
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=exit_code)
