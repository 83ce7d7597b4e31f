"""
pkggraph utilities package
"""

from .io_utils import read_source_file, list_directory, has_go_files, is_hidden_name
from .paths import (
    is_local_import,
    clean_import_path,
    dir_to_import_path,
    has_path_prefix,
    has_subdir,
)

__all__ = [
    "read_source_file",
    "list_directory",
    "has_go_files",
    "is_hidden_name",
    "is_local_import",
    "clean_import_path",
    "dir_to_import_path",
    "has_path_prefix",
    "has_subdir",
]
