"""mustc Exceptions

Custom exceptions for the Mustache template compiler.
"""

from __future__ import annotations


class MustcError(Exception):
    """Base exception for all mustc errors."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class TemplateSyntaxError(MustcError):
    """Raised when a template (or one of its partials) cannot be parsed.

    Carries the offending fragment and its position so the fault can be
    located in the source template.
    """

    def __init__(
        self,
        message: str,
        fragment: str = "",
        template: str | None = None,
        line: int = 1,
        column: int = 1,
        offset: int = 0,
    ) -> None:
        self.reason = message
        self.fragment = fragment
        self.template = template
        self.line = line
        self.column = column
        self.offset = offset
        super().__init__(self._format())

    def _format(self) -> str:
        where = f"partial '{self.template}'" if self.template else "template"
        text = f"{self.reason} in {where} at line {self.line}, column {self.column}"
        if self.fragment:
            text += f": {self.fragment!r}"
        return text


class UnknownBackendError(MustcError):
    """Raised when a backend name does not match any known backend."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown backend: {name}")


class ConfigError(MustcError):
    """Raised when a mustc.yaml config file is invalid."""

    pass
