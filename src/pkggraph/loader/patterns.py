"""
Pattern Expander

Turns command-line arguments into a flat list of package specs:
- no arguments means "."
- "all" and "std" walk the source roots
- "..." is a wildcard, matched against import paths or, for "./" and "../"
  patterns, against directories below the current one
"""

import logging
import os
import posixpath
import re
from typing import Callable, List, Optional, Sequence

from .environment import Environment
from .inspector import SourceInspector
from ..shared.errors import NoGoFilesError
from ..utils.config import (
    BUILTIN_PSEUDO_PACKAGE,
    PATTERN_ALL,
    PATTERN_STD,
    PATTERN_WILDCARD,
    TESTDATA_DIR,
)
from ..utils.paths import clean_import_path, from_slash, has_path_prefix, is_local_import, to_slash

logger = logging.getLogger(__name__)


def match_pattern(pattern: str) -> Callable[[str], bool]:
    """
    Matcher for a limited glob in which "..." means any string.

    As a special case "foo/..." also matches "foo".
    """
    regex = re.escape(pattern).replace(re.escape(PATTERN_WILDCARD), ".*")
    if regex.endswith("/.*"):
        regex = regex[:-len("/.*")] + "(/.*)?"
    compiled = re.compile(f"^{regex}$", re.DOTALL)
    return lambda name: compiled.match(name) is not None


def tree_can_match_pattern(pattern: str) -> Callable[[str], bool]:
    """Matcher telling whether name or anything below it can match pattern."""
    wildcard = False
    index = pattern.find(PATTERN_WILDCARD)
    if index >= 0:
        wildcard = True
        pattern = pattern[:index]

    def can_match(name: str) -> bool:
        return (len(name) <= len(pattern) and has_path_prefix(pattern, name)) or (
            wildcard and name.startswith(pattern)
        )
    return can_match


def clean_args(args: Sequence[str]) -> List[str]:
    """Canonical form of each argument; an empty list means the current directory."""
    if not args:
        return ["."]
    return [clean_import_path(a) for a in args]


def _skipped_dir(elem: str) -> bool:
    # .foo, _foo and testdata trees, but never "." or ".."
    dot = elem.startswith(".") and elem not in (".", "..")
    return dot or elem.startswith("_") or elem == TESTDATA_DIR


class PatternExpander:
    """Expands patterns against the source roots of an Environment."""

    def __init__(self, env: Environment, inspector: Optional[SourceInspector] = None):
        self.env = env
        self.inspector = inspector if inspector is not None else SourceInspector()

    def expand(self, args: Sequence[str]) -> List[str]:
        """Order-preserving expansion of args into package specs"""
        out: List[str] = []
        for arg in clean_args(args):
            if arg in (PATTERN_ALL, PATTERN_STD):
                out.extend(self.all_packages(arg))
            elif PATTERN_WILDCARD in arg:
                if is_local_import(arg):
                    out.extend(self.all_packages_in_fs(arg))
                else:
                    out.extend(self.all_packages(arg))
            else:
                out.append(arg)
        return out

    def all_packages(self, pattern: str) -> List[str]:
        pkgs = self.match_packages(pattern)
        if not pkgs:
            logger.warning(f"{pattern!r} matched no packages")
        return pkgs

    def all_packages_in_fs(self, pattern: str) -> List[str]:
        pkgs = self.match_packages_in_fs(pattern)
        if not pkgs:
            logger.warning(f"{pattern!r} matched no packages")
        return pkgs

    def match_packages(self, pattern: str) -> List[str]:
        """Import paths below the source roots matching pattern (or all / std)."""
        if pattern in (PATTERN_ALL, PATTERN_STD):
            match = lambda name: True
            tree_can_match = lambda name: True
        else:
            match = match_pattern(pattern)
            tree_can_match = tree_can_match_pattern(pattern)

        # builtin exists only for documentation
        have = {BUILTIN_PSEUDO_PACKAGE}
        pkgs: List[str] = []
        for _, src, is_goroot in self.env.src_dirs():
            if pattern == PATTERN_STD and not is_goroot:
                continue
            for dirpath, dirnames, _ in os.walk(src):
                dirnames.sort()
                if dirpath == src:
                    continue
                if _skipped_dir(os.path.basename(dirpath)):
                    dirnames[:] = []
                    continue
                name = to_slash(os.path.relpath(dirpath, src))
                if pattern == PATTERN_STD and ("." in name or name == "cmd"):
                    # Dotted first elements are remote paths, cmd is the command tree
                    dirnames[:] = []
                    continue
                if not tree_can_match(name):
                    dirnames[:] = []
                    continue
                if name in have:
                    continue
                have.add(name)
                if not match(name):
                    continue
                if isinstance(self.inspector.inspect(dirpath).error, NoGoFilesError):
                    continue
                pkgs.append(name)
        return pkgs

    def match_packages_in_fs(self, pattern: str) -> List[str]:
        """Local paths ("./x/...", "../y/...") of package directories matching pattern."""
        index = pattern.find(PATTERN_WILDCARD)
        start = posixpath.split(pattern[:index])[0] or "."
        # normpath drops a leading ./ but keeps ../
        prefix = "./" if pattern.startswith("./") else ""
        match = match_pattern(pattern)

        base = os.path.join(self.env.cwd, from_slash(start))
        pkgs: List[str] = []
        for dirpath, dirnames, _ in os.walk(base):
            dirnames.sort()
            rel = os.path.relpath(dirpath, base)
            path = os.path.normpath(os.path.join(from_slash(start), rel))
            if _skipped_dir(os.path.basename(path)):
                dirnames[:] = []
                continue
            name = prefix + to_slash(path)
            if name == "./.":
                name = "."
            if not match(name):
                continue
            error = self.inspector.inspect(dirpath).error
            if error is not None:
                if not isinstance(error, NoGoFilesError):
                    logger.warning(str(error))
                continue
            pkgs.append(name)
        return pkgs
