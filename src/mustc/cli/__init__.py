"""mustc command-line interface."""

from mustc.cli.main import app, typer_app

__all__ = ["app", "typer_app"]
