"""
Error Reporting

Per-package errors are tagged exception variants: one class per failure kind,
each carrying structured fields (import stack, searched paths, positions) in
addition to its message. They are raised inside the loader and stored on the
Package record; only FatalError is allowed to escape a run.
"""

import os
import sys
from typing import Dict, List, Optional, Sequence, Tuple

from .source_location import SourceLocation


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set or not a TTY)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get("PKGGRAPH_COLOR", "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    if explicit in ("1", "true", "yes", "always"):
        return True
    return sys.stderr.isatty()

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ============================================================================
# Exception Classes
# ============================================================================

class PackageError(Exception):
    """
    Base exception for an error loading one package (not its dependencies).

    import_stack is the chain of import identifiers from the entry package
    down to the failing one; pos is the "file:line:col" of the offending
    import declaration when known.
    """
    kind = "package"

    def __init__(self, message: str, import_stack: Optional[Sequence[str]] = None, pos: str = ""):
        super().__init__(message)
        self.message = message
        self.import_stack: List[str] = list(import_stack or [])
        self.pos = pos

    @property
    def is_import_cycle(self) -> bool:
        return False

    def with_stack(self, import_stack: Sequence[str]) -> "PackageError":
        self.import_stack = list(import_stack)
        return self

    def __str__(self) -> str:
        if self.pos:
            # Omit import stack. The position is the most useful thing.
            return f"{self.pos}: {self.message}"
        if not self.import_stack:
            return self.message
        return "package " + "\n\timports ".join(self.import_stack) + ": " + self.message

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {}
        if self.import_stack:
            out["ImportStack"] = list(self.import_stack)
        if self.pos:
            out["Pos"] = self.pos
        out["Err"] = self.message
        return out


class NotFoundError(PackageError):
    """No candidate directory resolved. Carries every searched location."""
    kind = "not-found"

    def __init__(self, import_path: str, searched: Sequence[Tuple[str, str]] = (),
                 local_dir: Optional[str] = None):
        self.import_path = import_path
        self.searched: List[Tuple[str, str]] = list(searched)
        self.local_dir = local_dir
        if local_dir is not None:
            message = f'cannot find package "." in:\n\t{local_dir}'
        elif not self.searched:
            message = f'cannot find package "{import_path}"'
        else:
            lines = [f'cannot find package "{import_path}" in any of:']
            for directory, label in self.searched:
                lines.append(f"\t{directory} ({label})")
            message = "\n".join(lines)
        super().__init__(message)

    @property
    def searched_dirs(self) -> List[str]:
        return [directory for directory, _ in self.searched]


class NoGoFilesError(PackageError):
    """The directory exists but holds no eligible source files."""
    kind = "no-go-files"

    def __init__(self, directory: str, excluded_only: bool = False):
        self.directory = directory
        self.excluded_only = excluded_only
        if excluded_only:
            message = f"build constraints exclude all Go files in {directory}"
        else:
            message = f"no buildable Go source files in {directory}"
        super().__init__(message)


class ParseError(PackageError):
    """Malformed package clause or import declaration."""
    kind = "parse"

    def __init__(self, file: str, position: Optional[SourceLocation], message: str):
        self.file = file
        self.position = position
        super().__init__(message, pos=str(position) if position else file)


class CycleError(PackageError):
    """Import cycle; import_stack ends with the re-entered identifier."""
    kind = "cycle"

    def __init__(self, import_stack: Sequence[str]):
        super().__init__("import cycle not allowed", import_stack)

    @property
    def is_import_cycle(self) -> bool:
        return True

    @property
    def chain(self) -> List[str]:
        return list(self.import_stack)

    def __str__(self) -> str:
        # Import cycles deserve special treatment.
        return f"{self.message}\npackage " + "\n\timports ".join(self.import_stack) + "\n"


class VisibilityError(PackageError):
    """Internal or vendor visibility rule violation."""
    kind = "visibility"

    def __init__(self, message: str, rule: str, import_stack: Optional[Sequence[str]] = None):
        self.rule = rule
        super().__init__(message, import_stack)


class CollisionError(PackageError):
    """Two names equal under case folding."""
    kind = "collision"

    def __init__(self, first: str, second: str, what: str = "file name",
                 import_stack: Optional[Sequence[str]] = None):
        self.first = first
        self.second = second
        self.what = what
        super().__init__(f'case-insensitive {what} collision: "{first}" and "{second}"', import_stack)


class CrossPathError(PackageError):
    """Declared import comment disagrees with the path the package was found under."""
    kind = "cross-path"

    def __init__(self, message: str, directory: str = "", import_stack: Optional[Sequence[str]] = None):
        self.directory = directory
        super().__init__(message, import_stack)


class MultiplePackageError(PackageError):
    """Files in one directory declare different package names."""
    kind = "multiple-packages"

    def __init__(self, directory: str, names: Sequence[str], files: Sequence[str]):
        self.directory = directory
        self.names = list(names)
        self.files = list(files)
        message = (
            f"found packages {names[0]} ({files[0]}) and {names[1]} ({files[1]}) in {directory}"
        )
        super().__init__(message)


class ImportPathError(PackageError):
    """Unusable import path: invalid, relative without a base, local misuse or a program."""
    kind = "import-path"


class ForeignSourceError(PackageError):
    """C sources present in a package that uses neither cgo nor SWIG."""
    kind = "foreign-source"

    def __init__(self, files: Sequence[str], import_stack: Optional[Sequence[str]] = None):
        self.files = list(files)
        super().__init__(
            "C source files not allowed when not using cgo or SWIG: " + " ".join(files),
            import_stack,
        )


class FatalError(Exception):
    """
    Error that aborts the whole run (never stored on a package).

    Use this for broken configuration, e.g. an unreadable GOROOT.
    """
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


# ---------------------------------------------------------------------------
# ErrorReporter
# ---------------------------------------------------------------------------

class ErrorReporter:
    """Collects per-package errors for the command line and prints them to stderr."""

    def __init__(self):
        self.errors: List[PackageError] = []

    def report_error(self, error: PackageError) -> None:
        self.errors.append(error)

    def format_error(self, error: PackageError, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _style("can't load package", _BOLD, _RED, color=use_color) + f": {error}"

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        return "\n".join(self.format_error(e, color=color) for e in self.errors)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def print_errors(self) -> None:
        color = _use_color()
        for error in self.errors:
            print(self.format_error(error, color=color), file=sys.stderr)
