"""
Reporter

Prints loaded packages: one import path per line, or one indented JSON
object per package using the omit-empty field shape of Package.to_dict().
"""

import json
import sys
from typing import Iterable, List, Optional, TextIO

from ..shared.package import Package


def format_text(packages: Iterable[Package]) -> str:
    return "".join(f"{pkg.import_path}\n" for pkg in packages)


def format_json(packages: Iterable[Package]) -> str:
    chunks: List[str] = []
    for pkg in packages:
        chunks.append(json.dumps(pkg.to_dict(), indent="\t", ensure_ascii=False) + "\n")
    return "".join(chunks)


class PackageReporter:
    """Writes a package list to a stream (stdout by default)."""

    def __init__(self, json_output: bool = False, stream: Optional[TextIO] = None):
        self.json_output = json_output
        self.stream = stream

    def format(self, packages: Iterable[Package]) -> str:
        if self.json_output:
            return format_json(packages)
        return format_text(packages)

    def report(self, packages: Iterable[Package]) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(self.format(packages))
        stream.flush()
