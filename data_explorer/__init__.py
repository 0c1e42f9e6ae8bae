"""data_explorer public API proxy.

The submodules are loaded explicitly and the symbols listed in their
``__all__`` are forwarded here, so ``import data_explorer as dx`` gives access
to ``dx.DataExplorer``, ``dx.SeriesSpec``, ``dx.read_dataset`` and friends.
"""

from __future__ import annotations

from typing import Dict

from . import exploration as _exploration
from . import explorer as _explorer
from . import io as _io
from . import series as _series
from . import validation as _validation

__all__ = [  # pyright: ignore[reportUnsupportedDunderAll]
    *getattr(_validation, "__all__", []),
    *getattr(_series, "__all__", []),
    *getattr(_exploration, "__all__", []),
    *getattr(_explorer, "__all__", []),
    *getattr(_io, "__all__", []),
]


def _export(module: object, namespace: Dict[str, object]) -> None:
    """Export all symbols from a module's __all__ into the given namespace.

    Args:
        module: Module object to export from.
        namespace: Dictionary (typically globals()) to populate with exported symbols.
    """
    for name in getattr(module, "__all__", []):
        namespace[name] = getattr(module, name)


_export(_validation, globals())
_export(_series, globals())
_export(_exploration, globals())
_export(_explorer, globals())
_export(_io, globals())
