"""
Package Record

The central entity of the dependency graph. Records live in the PackageCache
keyed by import identifier; edges between records are identifiers, never
object references, so a record can exist as a placeholder before its own
imports are known.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import PackageError
from .source_location import SourceLocation
from ..utils.config import PROGRAM_PACKAGE_NAME


class LoadState(Enum):
    """
    Lifecycle of a record.

    REQUESTED .. IDENTITY_COMPUTED are pending states: a request that finds a
    record in one of them has re-entered a package that is still loading.
    FINALIZED and ERRORED are terminal.
    """
    REQUESTED = "requested"
    RESOLVING = "resolving"
    EXPANDING_IMPORTS = "expanding-imports"
    COLLISION_CHECKED = "collision-checked"
    IDENTITY_COMPUTED = "identity-computed"
    FINALIZED = "finalized"
    ERRORED = "errored"

    @property
    def is_pending(self) -> bool:
        return self not in (LoadState.FINALIZED, LoadState.ERRORED)


# JSON field name, attribute name
_JSON_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("Dir", "directory"),
    ("ImportPath", "import_path"),
    ("ImportComment", "import_comment"),
    ("Name", "name"),
    ("Goroot", "goroot"),
    ("Standard", "standard"),
    ("Local", "local"),
    ("Root", "root"),
    ("BuildID", "build_id"),
    ("GoFiles", "go_files"),
    ("CgoFiles", "cgo_files"),
    ("IgnoredGoFiles", "ignored_go_files"),
    ("InvalidGoFiles", "invalid_go_files"),
    ("CFiles", "c_files"),
    ("CXXFiles", "cxx_files"),
    ("MFiles", "m_files"),
    ("HFiles", "h_files"),
    ("SFiles", "s_files"),
    ("SwigFiles", "swig_files"),
    ("SwigCXXFiles", "swig_cxx_files"),
    ("SysoFiles", "syso_files"),
    ("Imports", "imports"),
    ("Deps", "deps"),
    ("Incomplete", "incomplete"),
    ("TestGoFiles", "test_go_files"),
    ("TestImports", "test_imports"),
    ("XTestGoFiles", "xtest_go_files"),
    ("XTestImports", "xtest_imports"),
    ("IgnoredImports", "ignored_imports"),
)


@dataclass
class Package:
    """
    A single package found in a directory.

    File lists are lexically ordered; a file name appears in exactly one of
    go_files/cgo_files, test_go_files, xtest_go_files and ignored_go_files.
    """
    import_path: str
    directory: str = ""
    name: str = ""
    root: str = ""
    import_comment: str = ""
    goroot: bool = False
    standard: bool = False
    local: bool = False

    go_files: List[str] = field(default_factory=list)
    cgo_files: List[str] = field(default_factory=list)
    ignored_go_files: List[str] = field(default_factory=list)
    invalid_go_files: List[str] = field(default_factory=list)
    test_go_files: List[str] = field(default_factory=list)
    xtest_go_files: List[str] = field(default_factory=list)
    c_files: List[str] = field(default_factory=list)
    cxx_files: List[str] = field(default_factory=list)
    m_files: List[str] = field(default_factory=list)
    h_files: List[str] = field(default_factory=list)
    s_files: List[str] = field(default_factory=list)
    swig_files: List[str] = field(default_factory=list)
    swig_cxx_files: List[str] = field(default_factory=list)
    syso_files: List[str] = field(default_factory=list)

    imports: List[str] = field(default_factory=list)
    test_imports: List[str] = field(default_factory=list)
    xtest_imports: List[str] = field(default_factory=list)
    ignored_imports: List[str] = field(default_factory=list)
    import_positions: Dict[str, List[SourceLocation]] = field(default_factory=dict)

    deps: List[str] = field(default_factory=list)
    build_id: str = ""
    error: Optional[PackageError] = None
    deps_errors: List[PackageError] = field(default_factory=list)
    incomplete: bool = False
    state: LoadState = LoadState.REQUESTED

    # Every transitive dependency -> error recorded for it as seen from here
    dep_view: Dict[str, Optional[PackageError]] = field(default_factory=dict, repr=False)

    @property
    def is_program(self) -> bool:
        return self.name == PROGRAM_PACKAGE_NAME

    @property
    def uses_cgo(self) -> bool:
        return len(self.cgo_files) > 0

    @property
    def uses_swig(self) -> bool:
        return len(self.swig_files) > 0 or len(self.swig_cxx_files) > 0

    @property
    def pending(self) -> bool:
        return self.state.is_pending

    def all_file_names(self) -> List[str]:
        """Every input file of the package, tests and excluded files included."""
        return (
            self.go_files + self.cgo_files + self.ignored_go_files
            + self.c_files + self.cxx_files + self.m_files + self.h_files
            + self.s_files + self.syso_files + self.swig_files + self.swig_cxx_files
            + self.test_go_files + self.xtest_go_files
        )

    def build_input_files(self) -> List[str]:
        """Files compiled into the package (no tests, no excluded files), sorted."""
        return sorted(
            self.go_files + self.cgo_files + self.c_files + self.cxx_files
            + self.m_files + self.h_files + self.s_files + self.syso_files
            + self.swig_files + self.swig_cxx_files
        )

    def to_dict(self) -> Dict[str, object]:
        """Serializable shape; empty and default fields are omitted."""
        out: Dict[str, object] = {}
        for key, attr in _JSON_FIELDS:
            value = getattr(self, attr)
            if value:
                out[key] = list(value) if isinstance(value, list) else value
            if key == "Incomplete" and self.error is not None:
                out["Error"] = self.error.to_dict()
        if self.deps_errors:
            out["DepsErrors"] = [e.to_dict() for e in self.deps_errors]
        return out

    def __str__(self) -> str:
        return self.import_path
