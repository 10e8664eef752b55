"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler

from mustc.exceptions import ConfigError

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the mustc CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - shows files read and written, suite progress
    - Debug (MUSTC_DEBUG=1): DEBUG level - partial expansion, registrations
    """
    if os.environ.get("MUSTC_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=bool(os.environ.get("MUSTC_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("mustc")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def parse_partial_args(values: Optional[List[str]]) -> Dict[str, Path]:
    """Parse repeated NAME=FILE options into a mapping."""
    partials: Dict[str, Path] = {}
    for value in values or []:
        name, sep, path = value.partition("=")
        if not sep or not name.strip() or not path.strip():
            raise ConfigError(f"Invalid partial '{value}', expected NAME=FILE")
        partials[name.strip()] = Path(path.strip())
    return partials
