"""
Package graph loading: environment, search paths, cache, visibility rules,
identity hashing and the recursive loader itself.
"""

from .cache import PackageCache
from .collisions import fold_dup, to_fold
from .environment import Environment, determine_goroot
from .graph_loader import GraphLoader, ImportStack, implicit_imports
from .identity import compute_identity
from .inspector import Inspection, SourceInspector
from .path_resolver import PathResolver, Resolution
from .patterns import PatternExpander, match_pattern, tree_can_match_pattern
from .visibility import VisibilityEnforcer, find_internal, find_vendor

__all__ = [
    "Environment",
    "determine_goroot",
    "GraphLoader",
    "ImportStack",
    "implicit_imports",
    "PackageCache",
    "PathResolver",
    "Resolution",
    "SourceInspector",
    "Inspection",
    "VisibilityEnforcer",
    "find_internal",
    "find_vendor",
    "compute_identity",
    "fold_dup",
    "to_fold",
    "PatternExpander",
    "match_pattern",
    "tree_can_match_pattern",
]
