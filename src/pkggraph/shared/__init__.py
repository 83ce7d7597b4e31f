"""Shared types: package record, source locations and the error taxonomy."""

from .source_location import SourceLocation
from .package import Package, LoadState
from .errors import (
    PackageError,
    NotFoundError,
    NoGoFilesError,
    ParseError,
    CycleError,
    VisibilityError,
    CollisionError,
    CrossPathError,
    MultiplePackageError,
    ImportPathError,
    ForeignSourceError,
    FatalError,
    ErrorReporter,
)

__all__ = [
    "SourceLocation",
    "Package",
    "LoadState",
    "PackageError",
    "NotFoundError",
    "NoGoFilesError",
    "ParseError",
    "CycleError",
    "VisibilityError",
    "CollisionError",
    "CrossPathError",
    "MultiplePackageError",
    "ImportPathError",
    "ForeignSourceError",
    "FatalError",
    "ErrorReporter",
]
