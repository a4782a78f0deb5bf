"""
Load objects named by "module:attribute" references.
"""

import importlib
from typing import Any


def load_object(ref: str) -> Any:
    """
    Import "package.module:attr" (dotted attribute paths allowed).

    Raises:
        ValueError: If ref is malformed or the object cannot be found
    """
    module_name, sep, attr_path = ref.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Expected 'module:attribute', got {ref!r}")

    try:
        obj = importlib.import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"Cannot import module {module_name!r}: {exc}") from exc

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise ValueError(f"{module_name!r} has no attribute {attr_path!r}") from exc
    return obj
