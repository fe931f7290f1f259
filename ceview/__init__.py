"""Public package surface for ceview.

Exports ``main`` for programmatic CLI invocation and ``Explorer`` for editor
integrations. Most implementation lives in submodules under ``ceview``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .orchestrator import Explorer


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


def __getattr__(name: str):
    if name == "Explorer":
        from .orchestrator import Explorer as _Explorer

        return _Explorer
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Explorer", "main"]
