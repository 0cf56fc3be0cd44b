from __future__ import annotations

import importlib
from typing import Any


class CollaboratorNotConfigured(RuntimeError):
    pass


def load_factory(path: str, setting_name: str) -> Any:
    """Import `module:attribute` and call it to build a collaborator instance."""
    if not path:
        raise CollaboratorNotConfigured(f"{setting_name} is not set")

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise CollaboratorNotConfigured(f"{setting_name} must look like 'package.module:factory', got {path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise CollaboratorNotConfigured(f"{setting_name}: cannot import {module_name!r}") from exc

    try:
        factory = getattr(module, attr)
    except AttributeError as exc:
        raise CollaboratorNotConfigured(f"{setting_name}: {module_name!r} has no attribute {attr!r}") from exc
    return factory()
