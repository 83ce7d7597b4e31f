"""
Path helpers shared by the resolver, the visibility rules and the pattern expander.

Import paths are always '/'-separated; filesystem paths use os.sep. Helpers
here convert between the two and answer prefix questions on whole elements
(so "a/bc" is not under "a/b").
"""

import os
import posixpath
import unicodedata
from typing import Optional, Tuple

from .config import LOCAL_PATH_PREFIX

# Characters that may not appear in an import path
_ILLEGAL_IMPORT_CHARS = "!\"#$%&'()*,:;<=>?[\\]^{|}`\ufffd"


def is_local_import(path: str) -> bool:
    """True for "." / ".." and paths beginning with "./" or "../"."""
    return path in (".", "..") or path.startswith("./") or path.startswith("../")


def to_slash(path: str) -> str:
    return path.replace(os.sep, "/") if os.sep != "/" else path


def from_slash(path: str) -> str:
    return path.replace("/", os.sep) if os.sep != "/" else path


def clean_import_path(path: str) -> str:
    """Canonical form of a command-line argument, preserving a leading './'."""
    path = to_slash(path)
    if path.startswith("./"):
        cleaned = "./" + posixpath.normpath(path)
        return "." if cleaned == "./." else cleaned
    return posixpath.normpath(path)


def _valid_import_char(ch: str) -> str:
    category = unicodedata.category(ch)
    graphic = not category.startswith("C") and category not in ("Zl", "Zp")
    if not graphic or ch.isspace() or ch in _ILLEGAL_IMPORT_CHARS:
        return "_"
    return ch


def dir_to_import_path(directory: str) -> str:
    """
    Pseudo import path for a directory outside every source root.

    /home/gopher/my/pkg -> _/home/gopher/my/pkg ; c:\\x\\y -> _/c_/x/y
    """
    slashed = "".join(_valid_import_char(ch) for ch in to_slash(directory))
    return posixpath.join(LOCAL_PATH_PREFIX, slashed.lstrip("/"))


def has_path_prefix(s: str, prefix: str) -> bool:
    """Reports whether the '/'-separated path s begins with the elements in prefix."""
    if len(s) == len(prefix):
        return s == prefix
    if len(s) > len(prefix):
        if prefix and prefix.endswith("/"):
            return s.startswith(prefix)
        return s[len(prefix)] == "/" and s[:len(prefix)] == prefix
    return False


def has_file_path_prefix(s: str, prefix: str) -> bool:
    """Like has_path_prefix but for native filesystem paths (volume aware)."""
    sv, s = os.path.splitdrive(s)
    pv, prefix = os.path.splitdrive(prefix)
    if sv.upper() != pv.upper():
        return False
    if len(s) == len(prefix):
        return s == prefix
    if len(s) > len(prefix):
        if prefix and prefix.endswith(os.sep):
            return s.startswith(prefix)
        return s[len(prefix)] == os.sep and s[:len(prefix)] == prefix
    return False


def _subdir(root: str, directory: str) -> Optional[str]:
    root = os.path.normpath(root)
    if not root.endswith(os.sep):
        root += os.sep
    directory = os.path.normpath(directory)
    if not directory.startswith(root):
        return None
    return to_slash(directory[len(root):])


def has_subdir(root: str, directory: str) -> Tuple[str, bool]:
    """
    Reports whether directory lies (possibly several levels) below root.

    Returns the '/'-separated remainder. Symlinks are expanded on both sides
    when the literal comparison fails.
    """
    rel = _subdir(root, directory)
    if rel is not None:
        return rel, True
    root_real = os.path.realpath(root)
    dir_real = os.path.realpath(directory)
    for r, d in ((root_real, directory), (root, dir_real), (root_real, dir_real)):
        rel = _subdir(r, d)
        if rel is not None:
            return rel, True
    return "", False

