"""
Search Path Resolution

Maps an import spec, as written in a source file or on the command line, to
the canonical import identifier and the directory that holds the package.

Precedence, first success wins:
- local spec ("./x", "../x"): relative to the requesting directory
- hierarchical vendor search: <dir>/vendor/<spec> walking up to the source root
- source roots: $GOROOT/src/<spec>, then each $GOPATH/src/<spec> in order
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .cache import PackageCache
from .environment import Environment
from ..shared.errors import ImportPathError, NotFoundError, PackageError
from ..shared.package import Package
from ..utils.config import VENDOR_MARKER
from ..utils.paths import (
    dir_to_import_path,
    from_slash,
    has_file_path_prefix,
    has_subdir,
    is_local_import,
    to_slash,
)

logger = logging.getLogger(__name__)

VENDOR_TREE_LABEL = "vendor tree"
GOROOT_LABEL = "from $GOROOT"
GOPATH_LABEL = "from $GOPATH"


@dataclass
class Resolution:
    """Outcome of resolving one import spec"""
    import_path: str
    directory: str = ""
    root: str = ""
    goroot: bool = False
    local: bool = False
    searched_vendor_dirs: List[str] = field(default_factory=list)
    error: Optional[PackageError] = None

    @property
    def found(self) -> bool:
        return self.error is None and bool(self.directory)


class PathResolver:
    """
    Resolves import specs against an Environment.

    Directory checks go through the PackageCache memo so repeated lookups of
    the same vendor levels stay cheap.
    """

    def __init__(self, env: Environment, cache: Optional[PackageCache] = None):
        self.env = env
        self.cache = cache if cache is not None else PackageCache()

    def identifier_for(self, spec: str, requesting_dir: str,
                       parent: Optional[Package] = None,
                       use_vendor: bool = False) -> Tuple[str, List[str]]:
        """
        Canonical identifier for spec without touching the source roots.

        Returns (identifier, searched vendor dirs); the identifier is the cache
        key and is known before the package directory is located.
        """
        if is_local_import(spec):
            return dir_to_import_path(os.path.normpath(os.path.join(requesting_dir, from_slash(spec)))), []
        if use_vendor:
            identifier, _, searched = self._vendor_search(parent, spec)
            return identifier, searched
        return spec, []

    def resolve(self, spec: str, requesting_dir: str = "",
                parent: Optional[Package] = None,
                use_vendor: bool = False) -> Resolution:
        """
        Resolve spec as seen from requesting_dir / parent.

        Args:
            spec: import path as written
            requesting_dir: directory of the importing package ("" when unknown)
            parent: importing package record (None for entry points)
            use_vendor: apply the hierarchical vendor search

        Returns:
            Resolution; resolution.error holds a NotFoundError or
            ImportPathError when nothing usable was found.
        """
        if not spec:
            return Resolution(import_path=spec, error=ImportPathError('invalid import path: ""'))

        if is_local_import(spec):
            return self._resolve_local(spec, requesting_dir)

        if spec.startswith("/") or os.path.isabs(spec):
            return Resolution(
                import_path=spec,
                error=ImportPathError(f'import "{spec}": cannot import absolute path'),
            )

        identifier, directory, searched = spec, "", []
        if use_vendor:
            identifier, directory, searched = self._vendor_search(parent, spec)
        if directory:
            logger.debug(f"Vendor hit for {spec!r} from {parent.import_path}: {identifier}")
            return Resolution(
                import_path=identifier,
                directory=directory,
                root=parent.root,
                goroot=parent.goroot,
            )

        return self._resolve_in_roots(spec, searched)

    def _resolve_local(self, spec: str, requesting_dir: str) -> Resolution:
        if not requesting_dir:
            return Resolution(
                import_path=spec, local=True,
                error=ImportPathError(f'import "{spec}": import relative to unknown directory'),
            )
        directory = os.path.normpath(os.path.join(requesting_dir, from_slash(spec)))
        resolution = Resolution(import_path=dir_to_import_path(directory), directory=directory, local=True)
        if not self.cache.is_dir(directory):
            resolution.directory = ""
            resolution.error = NotFoundError(spec, local_dir=directory)
            return resolution
        _, root, goroot = self.import_path_for_dir(directory)
        resolution.root = root
        resolution.goroot = goroot
        return resolution

    def _resolve_in_roots(self, spec: str, searched_vendor: List[str]) -> Resolution:
        searched: List[Tuple[str, str]] = [(d, VENDOR_TREE_LABEL) for d in searched_vendor]
        first_existing: Optional[Tuple[str, str, bool]] = None
        for root, src, is_goroot in self.env.src_dirs():
            candidate = os.path.join(src, from_slash(spec))
            searched.append((candidate, GOROOT_LABEL if is_goroot else GOPATH_LABEL))
            if self.cache.has_go_files(candidate):
                return Resolution(
                    import_path=spec, directory=candidate, root=root, goroot=is_goroot,
                    searched_vendor_dirs=list(searched_vendor),
                )
            if first_existing is None and self.cache.is_dir(candidate):
                first_existing = (candidate, root, is_goroot)

        if first_existing is not None:
            # Directory exists but holds no sources; the inspector reports it
            candidate, root, is_goroot = first_existing
            return Resolution(
                import_path=spec, directory=candidate, root=root, goroot=is_goroot,
                searched_vendor_dirs=list(searched_vendor),
            )

        logger.debug(f"Package {spec!r} not found in {len(searched)} locations")
        return Resolution(
            import_path=spec,
            searched_vendor_dirs=list(searched_vendor),
            error=NotFoundError(spec, searched),
        )

    def vendored_import_path(self, parent: Optional[Package], path: str) -> Tuple[str, List[str]]:
        """
        Expansion of path when imported from parent.

        If parent is x/y/z, path may expand to x/y/z/vendor/path,
        x/y/vendor/path, x/vendor/path or vendor/path. Without a hit the path is
        returned unchanged together with every vendor/<path> directory looked at
        (levels without a vendor directory are not listed).
        """
        identifier, _, searched = self._vendor_search(parent, path)
        return identifier, searched

    def _vendor_search(self, parent: Optional[Package], path: str) -> Tuple[str, str, List[str]]:
        """(identifier, vendor directory or "", searched dirs) for path imported from parent"""
        if parent is None or not parent.root or not self.env.vendor_enabled:
            return path, "", []
        directory = os.path.normpath(parent.directory)
        root = os.path.join(parent.root, "src")
        if (not has_file_path_prefix(directory, root) or len(directory) <= len(root)
                or directory[len(root)] != os.sep):
            logger.debug(f"No vendor search for {parent.import_path}: {directory} not below {root}")
            return path, "", []

        # The parent's path below its root, which differs from import_path for
        # command-line-arguments and _/abs/dir packages
        canonical = to_slash(directory[len(root) + 1:])

        vpath = f"{VENDOR_MARKER}/{path}"
        searched: List[str] = []
        for i in range(len(directory), len(root) - 1, -1):
            if i < len(directory) and directory[i] != os.sep:
                continue
            # Checking vendor/ first keeps the searched list to real vendor trees
            if not self.cache.is_dir(os.path.join(directory[:i], VENDOR_MARKER)):
                continue
            target = os.path.join(directory[:i], from_slash(vpath))
            if self.cache.is_dir(target):
                chopped = len(directory) - i
                if chopped == len(canonical) + 1:
                    # Walked all the way up to <root>/src
                    return vpath, target, []
                return canonical[:len(canonical) - chopped] + "/" + vpath, target, []
            searched.append(target)
        return path, "", searched

    def import_path_for_dir(self, directory: str) -> Tuple[str, str, bool]:
        """
        (import path, root, is_goroot) for a directory below a source root.

        Returns ("", "", False) when the directory is outside every root.
        """
        for root, src, is_goroot in self.env.src_dirs():
            rel, ok = has_subdir(src, directory)
            if ok and rel and rel != ".":
                return rel, root, is_goroot
        return "", "", False
