"""Runtime support libraries, one per backend, shipped as source text."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from typing import Union

from mustc.compiler.backends import get_backend
from mustc.compiler.renderer import Renderer


@lru_cache(maxsize=None)
def _read(filename: str) -> str:
    return resources.files(__name__).joinpath(filename).read_text(encoding="utf-8")


def get_runtime_source(backend: Union[str, Renderer]) -> str:
    """Return the runtime source that generated code for backend runs against.

    Args:
        backend: Backend name ("native", "script", ...) or Renderer instance.

    Returns:
        Runtime source text, to be placed before the generated code.
    """
    return _read(get_backend(backend).runtime_file)
