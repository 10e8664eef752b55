"""mustc Compiler - transforms Mustache syntax trees to render code."""

from mustc.compiler.compiler import Compiler
from mustc.compiler.renderer import Renderer
from mustc.compiler.spec import Function, Program

__all__ = ["Compiler", "Renderer", "Function", "Program"]
