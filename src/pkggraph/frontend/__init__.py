"""Frontend: lark grammars for Go file headers and build constraints."""

from .parser import HeaderParser, ConstraintParser
from .transformers import FileHeader, ImportSpec, Comment

__all__ = [
    "HeaderParser",
    "ConstraintParser",
    "FileHeader",
    "ImportSpec",
    "Comment",
]
