"""raiz: resolve npm package dependency trees (library, CLI, TUI)."""

from raiz.__version__ import __version__
from raiz.tools import (
    TreeResult,
    analyze_npm_package,
    clamp_max_depth,
    get_npm_dependencies_tree,
    resolve_tree,
)

__all__ = [
    "TreeResult",
    "analyze_npm_package",
    "clamp_max_depth",
    "get_npm_dependencies_tree",
    "resolve_tree",
    "__version__",
]
