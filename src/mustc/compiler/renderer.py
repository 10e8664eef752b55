"""Renderer - converts Program IR to target source text.

Walking the IR is shared; subclasses only supply surface syntax.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import ClassVar, Iterator, List, Optional, Sequence, Set, Tuple

from mustc.ast.node import Name
from mustc.compiler.spec import (
    AppendText,
    AppendValue,
    EnterSection,
    Function,
    Instruction,
    InvokePartial,
    Program,
)


class CodeWriter:
    """Collects indented lines of generated code."""

    def __init__(self, indent: str = "    ", separator: str = "\n"):
        self.indent = indent
        self.separator = separator
        self.lines: List[Tuple[int, str]] = []
        self.level = 0

    def line(self, text: str) -> None:
        self.lines.append((self.level, text))

    @contextmanager
    def block(self) -> Iterator[None]:
        self.level += 1
        try:
            yield
        finally:
            self.level -= 1

    def getvalue(self) -> str:
        return self.separator.join(self.indent * level + text for level, text in self.lines)


class Renderer(ABC):
    """Renders Program IR to source text for one backend."""

    name: ClassVar[str]
    runtime_file: ClassVar[str]
    runtime_class: ClassVar[str] = "MustacheRuntime"
    # Section bodies are emitted where they are used; otherwise the backend
    # defines them up front with render_section_bodies.
    nested_bodies: ClassVar[bool] = True

    def __init__(self, function_name: str = "render"):
        # Only backends that emit a named definition use this
        self.function_name = function_name

    def render(self, program: Program) -> str:
        """Render a Program to source text.

        Args:
            program: The Program IR to render.

        Returns:
            Source text of a single render callable.
        """
        writer = self.writer(program)
        self._render_program(writer, program)
        return writer.getvalue()

    @abstractmethod
    def writer(self, program: Program) -> CodeWriter:
        """Create the code writer for a program."""

    @abstractmethod
    def quote(self, text: str, compact: bool = False) -> str:
        """Quote text as a string literal of the target language."""

    @abstractmethod
    def quote_name(self, name: Name, compact: bool = False) -> str:
        """Quote a name: a string, or a sequence of strings when dotted."""

    @abstractmethod
    def _render_program(self, w: CodeWriter, program: Program) -> None:
        """Emit the outer callable: runtime setup, registrations, body, result."""

    # Instruction syntax

    @abstractmethod
    def append_text(self, quoted: str) -> str: ...

    @abstractmethod
    def append_value(self, quoted_name: str, escape: bool) -> str: ...

    @abstractmethod
    def enter_section(self, inverted: bool, quoted_name: str, body: str) -> str: ...

    @abstractmethod
    def register_partial(self, quoted_key: str, body: str) -> str: ...

    @abstractmethod
    def invoke_partial(self, quoted_key: str) -> str: ...

    @abstractmethod
    def function_header(self, name: str) -> str: ...

    def function_footer(self) -> Optional[str]:
        return None

    def empty_statement(self) -> Optional[str]:
        return None

    # Shared walking

    def render_function(self, w: CodeWriter, fn: Function, compact: bool) -> None:
        w.line(self.function_header(fn.name))
        with w.block():
            self.render_block(w, fn.body, compact)
        footer = self.function_footer()
        if footer is not None:
            w.line(footer)

    def render_block(
        self, w: CodeWriter, instructions: Sequence[Instruction], compact: bool
    ) -> None:
        if not instructions:
            empty = self.empty_statement()
            if empty is not None:
                w.line(empty)
            return

        for instruction in instructions:
            self.render_instruction(w, instruction, compact)

    def render_instruction(
        self, w: CodeWriter, instruction: Instruction, compact: bool
    ) -> None:
        if isinstance(instruction, AppendText):
            w.line(self.append_text(self.quote(instruction.text, compact)))
        elif isinstance(instruction, AppendValue):
            w.line(
                self.append_value(
                    self.quote_name(instruction.name, compact), instruction.escape
                )
            )
        elif isinstance(instruction, EnterSection):
            if self.nested_bodies:
                self.render_function(w, instruction.body, compact)
            w.line(
                self.enter_section(
                    instruction.inverted,
                    self.quote_name(instruction.name, compact),
                    instruction.body.name,
                )
            )
        elif isinstance(instruction, InvokePartial):
            w.line(self.invoke_partial(self.quote(instruction.key, compact)))
        else:
            raise TypeError(f"Unknown instruction: {type(instruction).__name__}")

    def render_registrations(self, w: CodeWriter, program: Program) -> None:
        for key, fn in program.partials.items():
            self.render_function(w, fn, program.compact)
            w.line(self.register_partial(self.quote(key, program.compact), fn.name))

    def render_section_bodies(
        self,
        w: CodeWriter,
        instructions: Sequence[Instruction],
        compact: bool,
        seen: Set[str],
    ) -> None:
        """Define every section body reachable from instructions, innermost first.

        Each body is defined once at the writer's current level, so the depth
        of the emitted code does not grow with section nesting.
        """
        for instruction in instructions:
            if not isinstance(instruction, EnterSection):
                continue
            body = instruction.body
            if body.name in seen:
                continue
            seen.add(body.name)
            self.render_section_bodies(w, body.body, compact, seen)
            self.render_function(w, body, compact)
