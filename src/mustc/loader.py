"""Loader - turns native generated code into a Python callable."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from mustc import api
from mustc.config import CompileOptions
from mustc.runtime import get_runtime_source

RenderFunction = Callable[..., str]


def load(code: str, function_name: str = "render") -> RenderFunction:
    """Execute native generated code against the native runtime.

    Runtime and template share a fresh namespace, so loaded templates never
    see each other's state.

    Args:
        code: Output of ``generate(tree, "native")``.
        function_name: Name the code was generated with.

    Returns:
        The render callable: ``render(context)`` or, for extended code,
        ``render(context, section=None)``.
    """
    namespace: dict[str, Any] = {"__name__": "mustc_template"}
    exec(compile(get_runtime_source("native"), "mustache_runtime.py", "exec"), namespace)
    exec(compile(code, "<mustc template>", "exec"), namespace)
    return namespace[function_name]


def render_template(
    source: str,
    data: Any,
    partials: Optional[Mapping[str, str]] = None,
    options: Optional[CompileOptions] = None,
) -> str:
    """Compile a template with the native backend and render it once."""
    code = api.generate(api.compile(source, partials, options), "native")
    return load(code)(data)
