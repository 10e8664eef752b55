"""mustc - Mustache template compiler

Compiles Mustache templates into standalone render functions for more than
one target: native Python and browser JavaScript.
"""

from mustc._version import __version__
from mustc.api import compile, compile_to_code, generate, get_runtime_source
from mustc.ast.node import SyntaxTree
from mustc.compiler.backends import NativeBackend, ScriptBackend
from mustc.config import CompileOptions, WhitespaceMode
from mustc.exceptions import MustcError, TemplateSyntaxError, UnknownBackendError
from mustc.loader import load, render_template

__all__ = [
    "__version__",
    # Entry points
    "compile",
    "generate",
    "compile_to_code",
    "get_runtime_source",
    "load",
    "render_template",
    # Types
    "SyntaxTree",
    "CompileOptions",
    "WhitespaceMode",
    "NativeBackend",
    "ScriptBackend",
    # Errors
    "MustcError",
    "TemplateSyntaxError",
    "UnknownBackendError",
]
