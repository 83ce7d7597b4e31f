"""
Visibility Enforcer

Internal rule: an import path containing the element "internal" may only be
imported by code inside the tree rooted at the parent of that element.

Vendor rule: the same restriction for a non-terminal "vendor" element, and a
vendored package must be imported by its short path, never as x/vendor/y.
"""

import logging
from typing import Optional, Sequence, Tuple

from ..shared.errors import VisibilityError
from ..shared.package import Package
from ..utils.config import INTERNAL_MARKER, VENDOR_MARKER
from ..utils.paths import has_path_prefix, to_slash

logger = logging.getLogger(__name__)

INTERNAL_NOT_ALLOWED = "use of internal package not allowed"
VENDORED_NOT_ALLOWED = "use of vendored package not allowed"


def find_internal(path: str) -> Tuple[int, bool]:
    """
    Index of the final "internal" element of path.

    The final element wins because it is the most restrictive one.
    """
    if path.endswith("/" + INTERNAL_MARKER):
        return len(path) - len(INTERNAL_MARKER), True
    if f"/{INTERNAL_MARKER}/" in path:
        return path.rindex(f"/{INTERNAL_MARKER}/") + 1, True
    if path == INTERNAL_MARKER or path.startswith(INTERNAL_MARKER + "/"):
        return 0, True
    return 0, False


def find_vendor(path: str) -> Tuple[int, bool]:
    """
    Index of the last non-terminal "vendor" element of path.

    "x/vendor" is a package literally named vendor and does not count.
    """
    if f"/{VENDOR_MARKER}/" in path:
        return path.rindex(f"/{VENDOR_MARKER}/") + 1, True
    if path.startswith(VENDOR_MARKER + "/"):
        return 0, True
    return 0, False


def _parent_dir(pkg: Package, index: int) -> Optional[str]:
    # Map the import path prefix before the marker back onto pkg.directory
    if index > 0:
        index -= 1
    truncate_to = index + len(pkg.directory) - len(pkg.import_path)
    if truncate_to < 0 or truncate_to > len(pkg.directory):
        return None
    return pkg.directory[:truncate_to]


class VisibilityEnforcer:
    """Applies the internal and vendor rules to one resolved import at a time."""

    def __init__(self, enabled: bool = True, vendor_enabled: bool = True):
        self.enabled = enabled
        self.vendor_enabled = vendor_enabled

    def check_internal(self, src_dir: str, pkg: Package,
                       import_stack: Sequence[str]) -> Optional[VisibilityError]:
        if not self.enabled or pkg.error is not None or len(import_stack) <= 1:
            return None
        index, ok = find_internal(pkg.import_path)
        if not ok:
            return None
        parent = _parent_dir(pkg, index)
        if parent is None or has_path_prefix(to_slash(src_dir), to_slash(parent)):
            return None
        logger.debug(f"Internal rule rejects {pkg.import_path} from {src_dir}")
        return VisibilityError(INTERNAL_NOT_ALLOWED, "internal", import_stack)

    def check_vendor(self, src_dir: str, written_path: str, pkg: Package,
                     import_stack: Sequence[str]) -> Optional[VisibilityError]:
        if not self.enabled or not self.vendor_enabled or len(import_stack) <= 1:
            return None

        index, ok = find_vendor(pkg.import_path)
        if ok and pkg.error is None:
            parent = _parent_dir(pkg, index)
            if parent is not None and not has_path_prefix(to_slash(src_dir), to_slash(parent)):
                logger.debug(f"Vendor rule rejects {pkg.import_path} from {src_dir}")
                return VisibilityError(VENDORED_NOT_ALLOWED, "vendor", import_stack)

        index, ok = find_vendor(written_path)
        if ok:
            short = written_path[index + len(VENDOR_MARKER) + 1:]
            return VisibilityError(f"must be imported as {short}", "vendor", import_stack)
        return None

    def check(self, src_dir: str, written_path: str, pkg: Package,
              import_stack: Sequence[str], use_vendor: bool = True) -> Optional[VisibilityError]:
        """
        First rule violated by importing pkg (written as written_path) from src_dir.

        import_stack ends with pkg's identifier; a stack of one element is a
        command-line entry point and is always allowed.
        """
        error = self.check_internal(src_dir, pkg, import_stack)
        if error is None and use_vendor:
            error = self.check_vendor(src_dir, written_path, pkg, import_stack)
        return error
