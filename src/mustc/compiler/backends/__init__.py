"""Code generation backends.

- native: Python source (runs with mustache_runtime.py)
- script: browser JavaScript source (runs with mustache_runtime.js)
"""

from __future__ import annotations

from typing import Dict, Type, Union

from mustc.compiler.backends.javascript import JavaScriptRenderer
from mustc.compiler.backends.python import PythonRenderer
from mustc.compiler.renderer import Renderer
from mustc.exceptions import UnknownBackendError

NativeBackend = PythonRenderer
ScriptBackend = JavaScriptRenderer

BACKENDS: Dict[str, Type[Renderer]] = {
    "native": PythonRenderer,
    "python": PythonRenderer,
    "script": JavaScriptRenderer,
    "javascript": JavaScriptRenderer,
    "js": JavaScriptRenderer,
}


def get_backend(backend: Union[str, Renderer], **kwargs) -> Renderer:
    """Resolve a backend name (or pass through a Renderer instance)."""
    if isinstance(backend, Renderer):
        return backend

    cls = BACKENDS.get(backend.lower())
    if cls is None:
        raise UnknownBackendError(backend)
    return cls(**kwargs)


__all__ = [
    "BACKENDS",
    "JavaScriptRenderer",
    "NativeBackend",
    "PythonRenderer",
    "ScriptBackend",
    "get_backend",
]
