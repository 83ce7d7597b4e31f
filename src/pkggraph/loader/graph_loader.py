"""
Graph Loader

Depth-first, single-threaded construction of the package graph. Each record
moves through LoadState:

    REQUESTED -> RESOLVING -> EXPANDING_IMPORTS -> COLLISION_CHECKED
              -> IDENTITY_COMPUTED -> FINALIZED

with ERRORED reachable from any point. Records are created in the
PackageCache before their imports are loaded; meeting a record that is still
pending is an import cycle.
"""

import functools
import logging
import os
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .cache import PackageCache
from .collisions import fold_dup
from .environment import Environment
from .identity import compute_identity
from .inspector import SourceInspector
from .path_resolver import PathResolver
from .visibility import VisibilityEnforcer, find_vendor
from ..frontend.parser import HeaderParser
from ..shared.errors import (
    CollisionError,
    CrossPathError,
    CycleError,
    FatalError,
    ForeignSourceError,
    ImportPathError,
    PackageError,
)
from ..shared.package import LoadState, Package
from ..shared.source_location import SourceLocation
from ..utils.config import (
    CGO_EXCLUDE,
    CGO_PSEUDO_IMPORT,
    CGO_RUNTIME_PACKAGE,
    CGO_SYSCALL_EXCLUDE,
    FILES_PACKAGE_PATH,
    GO_FILE_EXTENSION,
    RUNTIME_PACKAGE,
    SYSCALL_PACKAGE,
    UNSAFE_PACKAGE,
)
from ..utils.paths import is_local_import

logger = logging.getLogger(__name__)


class ImportStack:
    """Chain of import identifiers from an entry package to the one loading now."""

    def __init__(self, items: Optional[Sequence[str]] = None):
        self._items: List[str] = list(items or [])

    def push(self, identifier: str) -> None:
        self._items.append(identifier)

    def pop(self) -> str:
        return self._items.pop()

    def copy(self) -> List[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def shorter_than(self, other: Sequence[str]) -> bool:
        """Shorter, or of equal length and lexically smaller, than other."""
        if len(self._items) != len(other):
            return len(self._items) < len(other)
        return self._items < list(other)


def implicit_imports(pkg: Package) -> List[str]:
    """Imports every package of this kind needs without declaring them."""
    extra: List[str] = []
    if pkg.uses_cgo and not (pkg.standard and pkg.import_path in CGO_EXCLUDE):
        extra.append(CGO_RUNTIME_PACKAGE)
    if pkg.uses_cgo and not (pkg.standard and pkg.import_path in CGO_SYSCALL_EXCLUDE):
        extra.append(SYSCALL_PACKAGE)
    # Everything depends on runtime, except runtime and unsafe
    if not pkg.standard or pkg.import_path not in (RUNTIME_PACKAGE, UNSAFE_PACKAGE):
        extra.append(RUNTIME_PACKAGE)
    return extra


def _prefer_error(view: Dict[str, Optional[PackageError]], identifier: str,
                  error: Optional[PackageError]) -> None:
    # The same identifier can carry an error or not depending on who imported it
    if identifier not in view or error is not None:
        view[identifier] = error


def _is_vendored(path: str) -> bool:
    return find_vendor(path)[1]


class GraphLoader:
    """
    Loads entry packages and everything they import.

    One instance owns one PackageCache; results stay valid until clear().
    """

    def __init__(self, env: Environment, cache: Optional[PackageCache] = None,
                 parser: Optional[HeaderParser] = None):
        self.env = env
        self.cache = cache if cache is not None else PackageCache()
        self.resolver = PathResolver(env, self.cache)
        self.inspector = SourceInspector(parser or HeaderParser(env.always_false_tags))
        self.enforcer = VisibilityEnforcer(env.enforce_visibility, env.vendor_enabled)
        # identifier -> identifiers of the direct imports that became graph edges
        self.edges: Dict[str, List[str]] = {}

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def load_packages(self, specs: Sequence[str]) -> List[Package]:
        """
        Load every spec (already pattern-expanded) as an entry package.

        Returns one record per spec, erroring ones included.
        """
        if specs and specs[0].endswith(GO_FILE_EXTENSION):
            return [self.load_files_package(specs)]
        stack = ImportStack()
        return [self.load_package(spec, stack) for spec in specs]

    def load_package(self, arg: str, stack: Optional[ImportStack] = None) -> Package:
        """
        Load one command-line argument.

        A local path naming a directory below a source root is loaded by its
        canonical import path.
        """
        stack = stack if stack is not None else ImportStack()
        if is_local_import(arg):
            directory = os.path.normpath(os.path.join(self.env.cwd, arg))
            canonical, _, _ = self.resolver.import_path_for_dir(directory)
            if canonical:
                logger.debug(f"Local argument {arg!r} is {canonical}")
                arg = canonical
        return self.load_import(arg, self.env.cwd, None, stack)

    def load_files_package(self, files: Sequence[str]) -> Package:
        """
        Synthesize the command-line-arguments package from explicit .go files.

        All files must be in one directory. Build constraints are ignored.

        Raises:
            FatalError: a file is missing, is a directory, is not a .go file, or
                the files span several directories
        """
        directory = None
        names: List[str] = []
        for path in files:
            if not path.endswith(GO_FILE_EXTENSION):
                raise FatalError("named files must be .go files")
            full = os.path.join(self.env.cwd, path)
            if not os.path.exists(full):
                raise FatalError(f"stat {path}: no such file or directory")
            if os.path.isdir(full):
                raise FatalError(f"{path} is a directory, should be a Go file")
            parent = os.path.dirname(path) or "."
            if directory is None:
                directory = parent
            elif os.path.normpath(parent) != os.path.normpath(directory):
                raise FatalError(f"named files must all be in one directory; have {directory} and {parent}")
            names.append(os.path.basename(path))

        record = Package(import_path=FILES_PACKAGE_PATH, local=True)
        absolute = os.path.normpath(os.path.join(self.env.cwd, directory or "."))
        locate = functools.partial(self._locate_files, directory=absolute, names=names)
        self._load(record, ImportStack(), locate)
        return record

    # ------------------------------------------------------------------
    # Recursive loading
    # ------------------------------------------------------------------

    def load_import(self, spec: str, src_dir: str, parent: Optional[Package],
                    stack: ImportStack,
                    positions: Optional[List[SourceLocation]] = None,
                    use_vendor: bool = False) -> Package:
        """
        Load the package spec refers to when written in src_dir.

        Returns the cached record when the identifier was seen before; a
        record still pending at that point gets a CycleError.
        """
        identifier, _ = self.resolver.identifier_for(spec, src_dir, parent, use_vendor)
        stack.push(identifier)
        try:
            existing = identifier in self.cache
            record, in_progress = self.cache.get_or_create(identifier)
            if existing:
                return self._reuse(record, stack, in_progress)

            locate = functools.partial(
                self._locate, spec=spec, src_dir=src_dir, parent=parent, use_vendor=use_vendor,
            )
            self._load(record, stack, locate)
            error = record.error
            if error is not None and positions and not error.pos and not error.is_import_cycle:
                error.pos = self._format_position(positions[0])
            return record
        finally:
            stack.pop()

    def _reuse(self, record: Package, stack: ImportStack, in_progress: bool) -> Package:
        if in_progress:
            if record.error is None:
                record.error = CycleError(stack.copy())
                logger.debug(f"Import cycle: {' -> '.join(stack)}")
            record.incomplete = True
        else:
            logger.debug(f"Reusing {record.import_path}")
        error = record.error
        if error is not None and not error.is_import_cycle and stack.shorter_than(error.import_stack):
            error.import_stack = stack.copy()
        return record

    def _load(self, record: Package, stack: ImportStack, locate: Callable[[Package], None]) -> None:
        record.state = LoadState.RESOLVING
        try:
            locate(record)
            self._expand_imports(record, stack)
            if record.error is None:
                self._check_collisions(record)
        except PackageError as e:
            if record.error is None:
                record.error = e if e.import_stack else e.with_stack(stack.copy())

        if record.error is None:
            record.build_id = compute_identity(record, self.cache.get)
            record.state = LoadState.IDENTITY_COMPUTED
        self.cache.finalize(record)

    def _locate(self, record: Package, spec: str, src_dir: str,
                parent: Optional[Package], use_vendor: bool) -> None:
        """Find the directory for spec and fill in record's files and imports."""
        resolution = self.resolver.resolve(spec, src_dir, parent, use_vendor)
        record.local = resolution.local
        if resolution.error is not None:
            raise resolution.error
        record.root = resolution.root
        record.goroot = resolution.goroot
        record.standard = (
            record.goroot and not record.local and "." not in record.import_path
        )
        self._inspect(record, resolution.directory)

        comment = record.import_comment
        if (not record.local and comment and comment != record.import_path
                and not (self.env.vendor_enabled and _is_vendored(record.import_path))):
            raise CrossPathError(
                f'code in directory {record.directory} expects import "{comment}"', record.directory,
            )

    def _locate_files(self, record: Package, directory: str, names: Sequence[str]) -> None:
        _, root, goroot = self.resolver.import_path_for_dir(directory)
        record.root = root
        record.goroot = goroot
        self._inspect(record, directory, only=names, use_all_files=True)

    def _inspect(self, record: Package, directory: str,
                 only: Optional[Sequence[str]] = None, use_all_files: bool = False) -> None:
        inspection = self.inspector.inspect(directory, only, use_all_files)
        inspection.apply(record)
        if inspection.error is not None:
            raise inspection.error

    def _expand_imports(self, record: Package, stack: ImportStack) -> None:
        """
        Load every direct and implicit import of record, in lexical order.

        Fills imports (rewritten to identifiers), deps, deps_errors and the
        dependency view; visibility rules are applied once all imports are in.
        """
        record.state = LoadState.EXPANDING_IMPORTS
        explicit = list(record.imports)
        wanted = sorted({p for p in explicit + implicit_imports(record) if p != CGO_PSEUDO_IMPORT})

        view: Dict[str, Optional[PackageError]] = {}
        resolved: Dict[str, str] = {}
        edges: List[str] = []
        loaded: List[Tuple[str, Package]] = []
        cycle_errors: List[PackageError] = []
        failure: Optional[PackageError] = None

        for path in wanted:
            dep = self.load_import(
                path, record.directory, record, stack,
                record.import_positions.get(path), use_vendor=True,
            )
            resolved[path] = dep.import_path
            if dep.pending:
                # Cycle: no edge, the requester is only incomplete
                record.incomplete = True
                if dep.error is not None:
                    cycle_errors.append(dep.error)
                continue

            if dep.is_program:
                failure = ImportPathError(
                    f'import "{path}" is a program, not an importable package',
                    stack.copy(), pos=self._position(record, path),
                )
            elif dep.local and not record.local:
                failure = ImportPathError(
                    f'local import "{path}" in non-local package',
                    stack.copy(), pos=self._position(record, path),
                )

            edges.append(dep.import_path)
            _prefer_error(view, dep.import_path, dep.error)
            for identifier, error in dep.dep_view.items():
                _prefer_error(view, identifier, error)
            if dep.incomplete:
                record.incomplete = True
            loaded.append((path, dep))
            if failure is not None:
                break

        for path, dep in loaded:
            error = self.enforcer.check(
                record.directory, path, dep, stack.copy() + [dep.import_path],
            )
            if error is not None:
                view[dep.import_path] = error
                record.incomplete = True

        record.imports = [resolved.get(p, p) for p in explicit]
        record.dep_view = view
        record.deps = sorted(view)
        record.deps_errors = [view[d] for d in record.deps if view[d] is not None] + cycle_errors
        self.edges[record.import_path] = edges
        if failure is not None:
            raise failure

    def _check_collisions(self, record: Package) -> None:
        if record.c_files and not record.uses_cgo and not record.uses_swig:
            raise ForeignSourceError(record.c_files)

        dup = fold_dup(record.all_file_names())
        if dup is not None:
            raise CollisionError(dup[0], dup[1], "file name")

        # Only meaningful when nothing below failed
        if not record.deps_errors:
            dup = fold_dup(record.deps)
            if dup is not None:
                raise CollisionError(dup[0], dup[1], "import")
        record.state = LoadState.COLLISION_CHECKED

    # ------------------------------------------------------------------
    # Deferred resolution and traversal
    # ------------------------------------------------------------------

    def load_ignored_imports(self, pkg: Package) -> List[Package]:
        """
        Load the imports of pkg's build-excluded files on demand.

        pkg itself is not modified.
        """
        stack = ImportStack([pkg.import_path])
        loaded: List[Package] = []
        for path in pkg.ignored_imports:
            if path == CGO_PSEUDO_IMPORT:
                continue
            loaded.append(self.load_import(
                path, pkg.directory, pkg, stack, pkg.import_positions.get(path), use_vendor=True,
            ))
        return loaded

    def package_list(self, roots: Sequence[Package]) -> List[Package]:
        """Packages reachable from roots in depth-first post-order."""
        seen = set()
        ordered: List[Package] = []

        def walk(pkg: Package) -> None:
            if pkg.import_path in seen:
                return
            seen.add(pkg.import_path)
            for identifier in self.edges.get(pkg.import_path, []):
                dep = self.cache.get(identifier)
                if dep is not None:
                    walk(dep)
            ordered.append(pkg)

        for root in roots:
            walk(root)
        return ordered

    def records(self) -> List[Package]:
        return self.cache.records()

    def clear(self) -> None:
        self.cache.clear()
        self.edges.clear()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _position(self, record: Package, path: str) -> str:
        positions = record.import_positions.get(path)
        return self._format_position(positions[0]) if positions else ""

    def _format_position(self, location: SourceLocation) -> str:
        # Shorter of the absolute and cwd-relative file names
        name = location.file
        try:
            rel = os.path.relpath(name, self.env.cwd)
        except ValueError:
            rel = name
        if len(rel) < len(name):
            name = rel
        return str(SourceLocation(file=name, line=location.line, column=location.column))
