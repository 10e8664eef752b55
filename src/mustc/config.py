"""Configuration management for mustc.

Schema of mustc.yaml:
- options: compile options (whitespace_mode, compact_literals)
- backend: target backend name (native or script)
- extended: emit the extended calling convention
- function_name: name of the emitted render function (native backend)
- partials: dict of partial name -> template file
- partials_dir: directory whose *.mustache files are all partials
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from mustc.exceptions import ConfigError

PARTIAL_SUFFIX = ".mustache"


class WhitespaceMode(str, Enum):
    """How literal text is normalized before code emission."""

    PRESERVE = "preserve"
    COLLAPSE = "collapse"
    STANDALONE = "standalone"


class CompileOptions(BaseModel):
    """Options decided once per top-level compile."""

    model_config = {"frozen": True}

    whitespace_mode: WhitespaceMode = Field(
        default=WhitespaceMode.PRESERVE,
        description="Literal whitespace handling for the whole template",
    )
    compact_literals: bool = Field(
        default=False,
        description="Pick string delimiters that minimize emitted size",
    )


class MustcConfig(BaseModel):
    """Main mustc.yaml configuration."""

    options: CompileOptions = Field(default_factory=CompileOptions)
    backend: str = Field(default="native", description="Target backend")
    extended: bool = Field(
        default=False, description="Emit the (context, section) calling convention"
    )
    function_name: str = Field(
        default="render", description="Name of the emitted render function"
    )
    partials: dict[str, Path] = Field(
        default_factory=dict, description="Partial name -> template file"
    )
    partials_dir: Path | None = Field(
        default=None, description="Directory of *.mustache partials"
    )

    def load_partials(self, base_dir: Path | None = None) -> dict[str, str]:
        """Read every configured partial source.

        Files in partials_dir come first; explicit partials override them.
        Relative paths are resolved against base_dir.
        """
        base = base_dir or Path.cwd()
        sources: dict[str, str] = {}

        if self.partials_dir is not None:
            directory = _resolve(self.partials_dir, base)
            if not directory.is_dir():
                raise ConfigError(f"Partials directory not found: {directory}")
            for path in sorted(directory.glob(f"*{PARTIAL_SUFFIX}")):
                sources[path.stem] = path.read_text()

        for name, path in self.partials.items():
            resolved = _resolve(path, base)
            if not resolved.is_file():
                raise ConfigError(f"Partial '{name}' not found: {resolved}")
            sources[name] = resolved.read_text()

        return sources


def _resolve(path: Path, base: Path) -> Path:
    return path if path.is_absolute() else base / path


def load_config(path: Path) -> MustcConfig:
    """Load mustc.yaml from path."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            data: Any = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    try:
        return MustcConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc
