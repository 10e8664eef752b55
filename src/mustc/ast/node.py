"""Syntax tree nodes shared by every backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple, Union

from mustc.config import CompileOptions

ROOT_NAME = "#ROOT#"
SELF_NAME = "."


@dataclass(frozen=True)
class Name:
    """A variable, section or partial name.

    Dotted names (``a.b.c``) are split into segments once, at parse time.
    """

    segments: Tuple[str, ...]

    @classmethod
    def parse(cls, text: str) -> "Name":
        if text == SELF_NAME:
            return cls((SELF_NAME,))
        return cls(tuple(text.split(".")))

    @property
    def is_dotted(self) -> bool:
        return len(self.segments) > 1

    @property
    def is_self(self) -> bool:
        return self.segments == (SELF_NAME,)

    @property
    def text(self) -> str:
        return ".".join(self.segments)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Variable:
    name: Name
    escape: bool = True


@dataclass(frozen=True)
class Section:
    """Rendered once per element of a list, or once for any other truthy value."""

    name: Name
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class InvertedSection:
    """Rendered once, only when the named value is falsey."""

    name: Name
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Partial:
    """Reference to a parsed partial stored in the tree's partial table."""

    name: Name
    key: str
    indent: str = ""


@dataclass(frozen=True)
class Root:
    """Implicit outermost section; never inverted and never guarded."""

    children: Tuple["Node", ...] = ()

    @property
    def name(self) -> Name:
        return Name((ROOT_NAME,))


Node = Union[Literal, Variable, Section, InvertedSection, Partial, Root]


@dataclass(frozen=True)
class SyntaxTree:
    """A parsed template plus every partial it (transitively) references."""

    root: Root
    partials: Dict[str, Root] = field(default_factory=dict)
    recursive: FrozenSet[str] = frozenset()
    options: CompileOptions = field(default_factory=CompileOptions)

    def is_recursive(self, key: str) -> bool:
        return key in self.recursive


def format_tree(node: Node, indent: int = 0) -> str:
    """Format a node and its children as an indented tree for debugging."""
    prefix = "  " * indent

    if isinstance(node, Literal):
        preview = node.text if len(node.text) <= 40 else node.text[:40] + "..."
        return f"{prefix}Literal({preview!r})"
    if isinstance(node, Variable):
        flag = "" if node.escape else ", raw"
        return f"{prefix}Variable({node.name}{flag})"
    if isinstance(node, Partial):
        return f"{prefix}Partial({node.name}, key={node.key!r})"
    if isinstance(node, (Section, InvertedSection, Root)):
        lines = [f"{prefix}{type(node).__name__}({node.name})"]
        lines.extend(format_tree(child, indent + 1) for child in node.children)
        return "\n".join(lines)

    raise TypeError(f"Unknown node type: {type(node).__name__}")
