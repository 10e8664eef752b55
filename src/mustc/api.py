"""Public entry points: compile, generate, get_runtime_source."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Union

from mustc.ast.node import SyntaxTree
from mustc.ast.parser import Parser
from mustc.compiler.backends import get_backend
from mustc.compiler.compiler import Compiler
from mustc.compiler.renderer import Renderer
from mustc.config import CompileOptions
from mustc.runtime import get_runtime_source

log = logging.getLogger(__name__)


def compile(
    template_source: str,
    partials: Optional[Mapping[str, str]] = None,
    options: Optional[CompileOptions] = None,
) -> SyntaxTree:
    """Parse a template and its partials into a SyntaxTree.

    Raises:
        TemplateSyntaxError: The template or a partial is malformed, or a
            partial reference is unknown.
    """
    return Parser(partials=partials, options=options).parse(template_source)


def generate(
    tree: SyntaxTree,
    backend: Union[str, Renderer] = "native",
    extended: bool = False,
    function_name: str = "render",
) -> str:
    """Generate source code for a SyntaxTree.

    Args:
        tree: Parsed template.
        backend: Backend name or Renderer instance.
        extended: Emit ``(context, section=None)`` instead of ``(context)``.
        function_name: Name of the emitted function (native backend).

    Returns:
        Source text of one render callable. It needs the backend's runtime
        source (see get_runtime_source) to run.
    """
    renderer = get_backend(backend, function_name=function_name)
    program = Compiler().compile(tree, extended=extended)
    code = renderer.render(program)
    log.debug(
        "Generated %d bytes of %s code (%d registered partials)",
        len(code),
        renderer.name,
        len(program.partials),
    )
    return code


def compile_to_code(
    template_source: str,
    partials: Optional[Mapping[str, str]] = None,
    options: Optional[CompileOptions] = None,
    backend: Union[str, Renderer] = "native",
    extended: bool = False,
) -> str:
    """Parse and generate in one call."""
    return generate(compile(template_source, partials, options), backend, extended)


__all__ = ["compile", "generate", "compile_to_code", "get_runtime_source"]
