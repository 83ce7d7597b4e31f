"""
Source Inspector

Lists the files directly inside one directory, classifies them and extracts
each Go file's import declarations. Files excluded by build constraints are
kept (with their imports) so that dependents can resolve them later.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..frontend.parser import HeaderParser
from ..frontend.transformers import FileHeader
from ..shared.errors import (
    CrossPathError,
    MultiplePackageError,
    NoGoFilesError,
    PackageError,
    ParseError,
)
from ..shared.package import Package
from ..shared.source_location import SourceLocation
from ..utils.config import (
    AUXILIARY_EXTENSIONS,
    CGO_PSEUDO_IMPORT,
    GO_FILE_EXTENSION,
    TEST_FILE_SUFFIX,
    XTEST_PACKAGE_SUFFIX,
)
from ..utils.io_utils import is_hidden_name, list_directory, read_source_file

logger = logging.getLogger(__name__)

# Inspection fields copied verbatim onto the package record
_COPIED_FIELDS = (
    "name", "import_comment",
    "go_files", "cgo_files", "ignored_go_files", "invalid_go_files",
    "test_go_files", "xtest_go_files",
    "c_files", "cxx_files", "m_files", "h_files", "s_files",
    "swig_files", "swig_cxx_files", "syso_files",
    "imports", "test_imports", "xtest_imports", "ignored_imports",
)


@dataclass
class Inspection:
    """Result of inspecting one directory"""
    directory: str
    name: str = ""
    import_comment: str = ""

    go_files: List[str] = field(default_factory=list)
    cgo_files: List[str] = field(default_factory=list)
    ignored_go_files: List[str] = field(default_factory=list)
    invalid_go_files: List[str] = field(default_factory=list)
    test_go_files: List[str] = field(default_factory=list)
    xtest_go_files: List[str] = field(default_factory=list)
    c_files: List[str] = field(default_factory=list)
    cxx_files: List[str] = field(default_factory=list)
    m_files: List[str] = field(default_factory=list)
    h_files: List[str] = field(default_factory=list)
    s_files: List[str] = field(default_factory=list)
    swig_files: List[str] = field(default_factory=list)
    swig_cxx_files: List[str] = field(default_factory=list)
    syso_files: List[str] = field(default_factory=list)

    file_imports: Dict[str, List[str]] = field(default_factory=dict)
    imports: List[str] = field(default_factory=list)
    test_imports: List[str] = field(default_factory=list)
    xtest_imports: List[str] = field(default_factory=list)
    ignored_imports: List[str] = field(default_factory=list)
    import_positions: Dict[str, List[SourceLocation]] = field(default_factory=dict)

    parse_errors: List[ParseError] = field(default_factory=list)
    error: Optional[PackageError] = None

    @property
    def has_eligible_files(self) -> bool:
        return bool(self.go_files or self.cgo_files or self.test_go_files or self.xtest_go_files)

    def apply(self, pkg: Package) -> None:
        """Copy file lists, name and imports onto pkg"""
        pkg.directory = self.directory
        for attr in _COPIED_FIELDS:
            value = getattr(self, attr)
            setattr(pkg, attr, list(value) if isinstance(value, list) else value)
        pkg.import_positions = {k: list(v) for k, v in self.import_positions.items()}


class SourceInspector:
    """
    Directory scanner.

    Only the header of each .go file is parsed (see HeaderParser); a file that
    fails to parse does not stop the scan.
    """

    def __init__(self, parser: Optional[HeaderParser] = None):
        self.parser = parser if parser is not None else HeaderParser()

    def inspect(self, directory: str, only: Optional[Sequence[str]] = None,
                use_all_files: bool = False) -> Inspection:
        """
        Inspect directory (non-recursive).

        Args:
            directory: existing directory path
            only: restrict the scan to these file names
            use_all_files: ignore build constraints

        Returns:
            Inspection; inspection.error is set when the directory does not
            form a usable package.
        """
        result = Inspection(directory=directory)
        try:
            names = list_directory(directory)
        except OSError as e:
            result.error = NoGoFilesError(directory)
            logger.debug(f"Cannot list {directory}: {e}")
            return result
        if only is not None:
            wanted = set(only)
            names = [n for n in names if n in wanted]

        imports: Dict[str, List[str]] = {"imports": [], "test_imports": [],
                                         "xtest_imports": [], "ignored_imports": []}
        first_file = ""
        comment_file = ""
        for fname in names:
            if is_hidden_name(fname):
                continue
            ext = os.path.splitext(fname)[1]
            if ext != GO_FILE_EXTENSION:
                target = AUXILIARY_EXTENSIONS.get(ext)
                if target is not None:
                    getattr(result, target).append(fname)
                continue

            path = os.path.join(directory, fname)
            try:
                header = self.parser.parse(read_source_file(path), path)
            except ParseError as e:
                logger.warning(f"Skipping {path}: {e}")
                result.invalid_go_files.append(fname)
                result.parse_errors.append(e)
                continue
            except OSError as e:
                logger.warning(f"Skipping unreadable {path}: {e}")
                result.invalid_go_files.append(fname)
                result.parse_errors.append(ParseError(path, None, f"read error: {e.strerror}"))
                continue

            paths = header.import_paths()
            result.file_imports[fname] = paths

            if header.excluded and not use_all_files:
                result.ignored_go_files.append(fname)
                imports["ignored_imports"].extend(paths)
                continue

            is_test = fname.endswith(TEST_FILE_SUFFIX)
            pkg_name = header.package_name
            is_xtest = is_test and pkg_name.endswith(XTEST_PACKAGE_SUFFIX)
            if is_xtest:
                pkg_name = pkg_name[:-len(XTEST_PACKAGE_SUFFIX)]

            if not result.name:
                result.name = pkg_name
                first_file = fname
            elif pkg_name != result.name and result.error is None:
                result.error = MultiplePackageError(
                    directory, [result.name, pkg_name], [first_file, fname]
                )

            if header.import_comment and not is_test:
                if not result.import_comment:
                    result.import_comment = header.import_comment
                    comment_file = fname
                elif header.import_comment != result.import_comment and result.error is None:
                    result.error = CrossPathError(
                        f'found import comments "{result.import_comment}" ({comment_file}) '
                        f'and "{header.import_comment}" ({fname}) in {directory}',
                        directory,
                    )

            self._record_positions(result, header, path)
            if is_xtest:
                result.xtest_go_files.append(fname)
                imports["xtest_imports"].extend(paths)
            elif is_test:
                result.test_go_files.append(fname)
                imports["test_imports"].extend(paths)
            elif CGO_PSEUDO_IMPORT in paths:
                result.cgo_files.append(fname)
                imports["imports"].extend(paths)
            else:
                result.go_files.append(fname)
                imports["imports"].extend(paths)

        for attr, collected in imports.items():
            setattr(result, attr, sorted(set(collected)))

        if result.error is None:
            if not result.name and result.parse_errors:
                result.error = result.parse_errors[0]
            elif not result.has_eligible_files:
                result.error = NoGoFilesError(directory, excluded_only=bool(result.ignored_go_files))
        return result

    @staticmethod
    def _record_positions(result: Inspection, header: FileHeader, path: str) -> None:
        for spec in header.imports:
            result.import_positions.setdefault(spec.path, []).append(
                SourceLocation(file=path, line=spec.line, column=spec.column)
            )
