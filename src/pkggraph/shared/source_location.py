"""
Source Location

Position of an import declaration (or a parse failure) inside a Go file.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Source location.

    - File, line, column (1-based)
    - Immutable (frozen) for hashability
    """
    file: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.line}:{self.column}"
