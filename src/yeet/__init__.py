"""yeet — stage, commit and push with an AI-written commit message."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from yeet.engine import Engine as Engine

_ENGINE_EXPORTS = {
    "Engine": "yeet.engine",
}


def __getattr__(name: str) -> object:
    module_path = _ENGINE_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'yeet' has no attribute {name!r}")
