"""
Identity Hasher

A package's build ID is a SHA-1 over the names of its build input files, the
runtime version marker (standard "runtime" only) and the build IDs of every
transitive dependency. It changes when a file is added, removed or renamed,
or when any dependency's ID changes.
"""

import hashlib
import logging
import os
from typing import Callable, Optional

from ..shared.package import Package
from ..utils.config import RUNTIME_PACKAGE, RUNTIME_VERSION_FILE
from ..utils.io_utils import read_source_file

logger = logging.getLogger(__name__)

_ESCAPES = {
    "\a": "\\a", "\b": "\\b", "\f": "\\f", "\n": "\\n",
    "\r": "\\r", "\t": "\\t", "\v": "\\v", "\\": "\\\\", '"': '\\"',
}


def quote(text: str) -> str:
    """Double-quoted literal with backslash escapes for non-printable characters."""
    out = ['"']
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x100:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) < 0x10000:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(f"\\U{ord(ch):08x}")
    out.append('"')
    return "".join(out)


def runtime_version(pkg: Package) -> str:
    """Contents of the runtime version file, "" when it cannot be read."""
    path = os.path.join(pkg.directory, RUNTIME_VERSION_FILE)
    try:
        return read_source_file(path)
    except OSError:
        logger.debug(f"No runtime version file at {path}")
        return ""


def compute_identity(pkg: Package, lookup: Callable[[str], Optional[Package]]) -> str:
    """
    Build ID of pkg.

    Args:
        pkg: record whose deps list is final (sorted identifiers)
        lookup: identifier -> record, used for the dependency build IDs

    Returns:
        hex digest
    """
    h = hashlib.sha1()
    for name in pkg.build_input_files():
        h.update(f"file {name}\n".encode("utf-8", "surrogateescape"))

    if pkg.standard and pkg.import_path == RUNTIME_PACKAGE:
        h.update(f"zversion {quote(runtime_version(pkg))}\n".encode("utf-8", "surrogateescape"))

    for dep in sorted(pkg.deps):
        record = lookup(dep)
        build_id = record.build_id if record is not None else ""
        h.update(f"dep {dep} {build_id}\n".encode("utf-8", "surrogateescape"))

    return h.hexdigest()
