"""
List Driver

Orchestrates one run: expand the command-line patterns, load the entry
packages and everything they import, and collect what the reporter needs.
"""

import logging
from typing import List, Optional, Sequence

from .loader.environment import Environment
from .loader.graph_loader import GraphLoader
from .loader.patterns import PatternExpander
from .shared.errors import ErrorReporter
from .shared.package import Package
from .utils.config import GO_FILE_EXTENSION

logger = logging.getLogger(__name__)


class ListResult:
    """Result of one run"""
    def __init__(
        self,
        entries: Optional[List[Package]] = None,
        packages: Optional[List[Package]] = None,
        reporter: Optional[ErrorReporter] = None,
    ):
        self.entries = entries or []
        self.packages = packages or []
        self.reporter = reporter or ErrorReporter()

    @property
    def success(self) -> bool:
        """False when an entry package failed to load itself."""
        return not self.reporter.has_errors()

    def has_errors(self) -> bool:
        return self.reporter.has_errors()


class ListDriver:
    """
    Runs pattern expansion and graph loading for a list of arguments.

    With keep_errors, erroring entry packages are reported alongside the
    others instead of being dropped and counted as failures.
    """

    def __init__(self, env: Environment, loader: Optional[GraphLoader] = None):
        self.env = env
        self.loader = loader if loader is not None else GraphLoader(env)
        self.expander = PatternExpander(env, self.loader.inspector)

    def run(self, args: Sequence[str], keep_errors: bool = False, with_deps: bool = False) -> ListResult:
        if args and args[0].endswith(GO_FILE_EXTENSION):
            specs = list(args)
        else:
            specs = self.expander.expand(args)
        logger.debug(f"Loading {len(specs)} entry package(s)")

        entries = self.loader.load_packages(specs)
        reporter = ErrorReporter()
        if not keep_errors:
            kept = []
            for pkg in entries:
                if pkg.error is not None:
                    reporter.report_error(pkg.error)
                    continue
                kept.append(pkg)
            entries = kept

        packages = self.loader.package_list(entries) if with_deps else list(entries)
        return ListResult(entries=entries, packages=packages, reporter=reporter)
