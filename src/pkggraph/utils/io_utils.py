"""
Centralized file I/O utilities.

- Single place for encoding and BOM handling
- Use Path.read_text() consistently (no raw open/read)
"""

from pathlib import Path
from typing import List, Union

from .config import DEFAULT_FILE_ENCODING, GO_FILE_EXTENSION


def read_source_file(path: Union[Path, str]) -> str:
    """Read source file with standard encoding, dropping a leading BOM."""
    p = Path(path) if not isinstance(path, Path) else path
    text = p.read_text(encoding=DEFAULT_FILE_ENCODING, errors="replace")
    if text.startswith("\ufeff"):
        text = text[1:]
    return text


def list_directory(path: Union[Path, str]) -> List[str]:
    """Names of regular files directly inside path, lexically sorted."""
    p = Path(path) if not isinstance(path, Path) else path
    return sorted(entry.name for entry in p.iterdir() if entry.is_file())


def is_hidden_name(name: str) -> bool:
    """Files and directories starting with '_' or '.' are invisible to the loader."""
    return name.startswith("_") or name.startswith(".")


def has_go_files(path: Union[Path, str]) -> bool:
    """True if path is a directory holding at least one visible .go file."""
    p = Path(path) if not isinstance(path, Path) else path
    try:
        return any(
            name.endswith(GO_FILE_EXTENSION) and not is_hidden_name(name)
            for name in list_directory(p)
        )
    except OSError:
        return False
