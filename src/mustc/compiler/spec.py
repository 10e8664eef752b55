"""Compiler IR spec - backend-neutral render program representation."""

from dataclasses import dataclass, field
from typing import Dict, List, Union

from mustc.ast.node import Name


@dataclass
class AppendText:
    """Append literal text to the output buffer."""

    text: str


@dataclass
class AppendValue:
    """Resolve a name and append its text, escaped unless told otherwise."""

    name: Name
    escape: bool = True


@dataclass
class EnterSection:
    """Run ``body`` zero or more times depending on the resolved value."""

    inverted: bool
    name: Name
    body: "Function"


@dataclass
class InvokePartial:
    """Call a partial body registered under ``key``."""

    key: str


Instruction = Union[AppendText, AppendValue, EnterSection, InvokePartial]


@dataclass
class Function:
    """A compiled body: a named callable with no parameters."""

    name: str  # e.g., "_s3"
    body: List[Instruction] = field(default_factory=list)


@dataclass
class Program:
    """Complete render program IR.

    - entry: the template's root body
    - partials: registered (recursive) partial bodies, keyed by partial key
    - sections: extended-form entry points, keyed by dotted section name
    """

    entry: Function
    partials: Dict[str, Function] = field(default_factory=dict)
    sections: Dict[str, Function] = field(default_factory=dict)
    extended: bool = False
    compact: bool = False
