"""weathernode — weather tools over REST and the Model Context Protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "1.0.0"

if TYPE_CHECKING:
    from weathernode.server.app import create_app as create_app

_LAZY_EXPORTS = {
    "create_app": "weathernode.server.app",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'weathernode' has no attribute {name!r}")
