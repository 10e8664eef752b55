"""Bundle - runtime and generated code in one standalone module.

Rendered from Jinja2 templates in mustc/templates/:
- bundle.py.j2 for the native backend
- bundle.js.j2 for the script backend
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from jinja2 import Environment, FileSystemLoader

from mustc._version import __version__
from mustc.compiler.backends import get_backend
from mustc.compiler.renderer import Renderer
from mustc.runtime import get_runtime_source

TEMPLATES = {
    "native": "bundle.py.j2",
    "script": "bundle.js.j2",
}


def _get_env() -> Environment:
    templates_dir = Path(__file__).parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        keep_trailing_newline=True,
        autoescape=False,
    )


def bundle(
    code: str,
    backend: Union[str, Renderer] = "native",
    source_name: str = "<string>",
    function_name: str = "render",
) -> str:
    """Wrap generated code and its runtime into one module.

    The native bundle defines ``function_name`` as a module-level function;
    the script bundle binds the function expression to a global variable.
    """
    renderer = get_backend(backend)
    tmpl = _get_env().get_template(TEMPLATES[renderer.name])
    return tmpl.render(
        version=__version__,
        source_name=source_name,
        runtime=get_runtime_source(renderer).rstrip("\n"),
        code=code,
        function_name=function_name,
    )
