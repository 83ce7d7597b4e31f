"""
pkggraph: transitive dependency graph resolution for Go source workspaces.

Typical use:

    env = Environment.from_env()
    loader = GraphLoader(env)
    [pkg] = loader.load_packages(["example.com/app"])
    pkg.deps, pkg.build_id, pkg.deps_errors
"""

from .driver import ListDriver, ListResult
from .loader import Environment, GraphLoader, PackageCache, PatternExpander
from .shared import FatalError, Package, PackageError

__version__ = "0.1.0"

__all__ = [
    "Environment",
    "GraphLoader",
    "PackageCache",
    "PatternExpander",
    "ListDriver",
    "ListResult",
    "Package",
    "PackageError",
    "FatalError",
]
