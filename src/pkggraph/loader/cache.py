"""
Package Cache

One table of records keyed by import identifier, owned by a single
GraphLoader run. A record is inserted as a placeholder before its imports are
resolved; finding a pending placeholder on lookup is how cycles are detected.
"""

import logging
import os
from typing import Dict, Iterator, List, Optional, Tuple

from ..shared.package import LoadState, Package
from ..utils.io_utils import has_go_files

logger = logging.getLogger(__name__)


class PackageCache:
    """
    Arena of Package records plus memoized directory checks.

    Lifetime is one resolution run; call clear() to reuse the object.
    """

    def __init__(self):
        self._records: Dict[str, Package] = {}
        self._is_dir: Dict[str, bool] = {}
        self._has_go_files: Dict[str, bool] = {}

    def get_or_create(self, import_path: str) -> Tuple[Package, bool]:
        """
        Return (record, already_in_progress).

        A new record starts in LoadState.REQUESTED and is visible to later
        lookups immediately. already_in_progress is True only for an existing
        record whose load has not finished.
        """
        record = self._records.get(import_path)
        if record is None:
            record = Package(import_path=import_path)
            self._records[import_path] = record
            return record, False
        return record, record.state is not LoadState.REQUESTED and record.pending

    def finalize(self, record: Package) -> Package:
        """Move a record to its terminal state; it must not change afterwards."""
        if record.error is not None:
            record.incomplete = True
            record.state = LoadState.ERRORED
        else:
            record.state = LoadState.FINALIZED
        logger.debug(f"Finalized {record.import_path} ({record.state.value})")
        return record

    def get(self, import_path: str) -> Optional[Package]:
        return self._records.get(import_path)

    def records(self) -> List[Package]:
        """All records, sorted by identifier"""
        return [self._records[k] for k in sorted(self._records)]

    def is_dir(self, path: str) -> bool:
        result = self._is_dir.get(path)
        if result is None:
            result = os.path.isdir(path)
            self._is_dir[path] = result
        return result

    def has_go_files(self, path: str) -> bool:
        result = self._has_go_files.get(path)
        if result is None:
            result = self.is_dir(path) and has_go_files(path)
            self._has_go_files[path] = result
        return result

    def clear(self) -> None:
        self._records.clear()
        self._is_dir.clear()
        self._has_go_files.clear()

    def __contains__(self, import_path: str) -> bool:
        return import_path in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Package]:
        return iter(self.records())
