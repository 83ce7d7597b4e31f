"""
Environment Provider

Supplies the standard-library root, the ordered workspace source roots and
the feature switches (vendoring, visibility enforcement) to the loader.
"""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from ..shared.errors import FatalError
from ..utils.config import (
    DEFAULT_ALWAYS_FALSE_TAGS,
    ENV_DISABLED_VALUES,
    ENV_GOPATH,
    ENV_GOROOT,
    ENV_VENDOR_EXPERIMENT,
    ENV_VISIBILITY,
)

logger = logging.getLogger(__name__)


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() not in ENV_DISABLED_VALUES


def extract_var_from_output(name: str, output: str) -> str:
    """
    Pull NAME out of `go env` output.

    Accepts both the Unix form  NAME="value"  and the Windows form  set NAME=value.
    """
    for line in output.splitlines():
        line = line.strip()
        if line.startswith("set "):
            line = line[4:]
        if not line.startswith(name + "="):
            continue
        value = line[len(name) + 1:]
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        return value
    raise ValueError(f"{name} not found in go env output")


def determine_goroot(environ: Optional[Mapping[str, str]] = None) -> str:
    """$GOROOT, else ask the go tool. Raises FatalError when neither works."""
    environ = os.environ if environ is None else environ
    goroot = environ.get(ENV_GOROOT, "")
    if goroot:
        return goroot
    try:
        result = subprocess.run(
            ["go", "env"], capture_output=True, text=True, check=True, timeout=30,
        )
        goroot = extract_var_from_output(ENV_GOROOT, result.stdout)
    except (OSError, subprocess.SubprocessError, ValueError) as e:
        raise FatalError("Unable to determine GOROOT.") from e
    if not goroot:
        raise FatalError("Unable to determine GOROOT.")
    logger.debug(f"GOROOT from go env: {goroot}")
    return goroot


@dataclass
class Environment:
    """
    Loader configuration (GOROOT/GOPATH-style).

    gopath entries are workspace roots searched in order after GOROOT; each
    root keeps its packages under <root>/src.
    """
    goroot: str
    gopath: List[str] = field(default_factory=list)
    cwd: str = field(default_factory=os.getcwd)
    vendor_enabled: bool = True
    enforce_visibility: bool = True
    always_false_tags: Tuple[str, ...] = DEFAULT_ALWAYS_FALSE_TAGS

    def __post_init__(self):
        self.goroot = os.path.abspath(self.goroot)
        self.gopath = [os.path.abspath(p) for p in self.gopath if p]
        self.cwd = os.path.abspath(self.cwd)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 goroot: Optional[str] = None,
                 gopath: Optional[Sequence[str]] = None,
                 cwd: Optional[str] = None) -> "Environment":
        """Build from environment variables; explicit arguments take precedence."""
        environ = os.environ if environ is None else environ
        if goroot is None:
            goroot = determine_goroot(environ)
        if gopath is None:
            gopath = [p for p in environ.get(ENV_GOPATH, "").split(os.pathsep) if p]
        return cls(
            goroot=goroot,
            gopath=list(gopath),
            cwd=cwd or os.getcwd(),
            vendor_enabled=_flag(environ, ENV_VENDOR_EXPERIMENT),
            enforce_visibility=_flag(environ, ENV_VISIBILITY),
        )

    @property
    def goroot_src(self) -> str:
        return os.path.join(self.goroot, "src")

    def src_dirs(self) -> List[Tuple[str, str, bool]]:
        """(root, root/src, is_goroot), GOROOT first then GOPATH entries in order."""
        dirs = [(self.goroot, self.goroot_src, True)]
        for root in self.gopath:
            if root == self.goroot:
                continue
            dirs.append((root, os.path.join(root, "src"), False))
        return dirs

    def validate(self) -> None:
        """Raise FatalError when the standard library cannot be read."""
        src = self.goroot_src
        if not os.path.isdir(src):
            raise FatalError(f"cannot read standard library root {src}: not a directory")
        try:
            os.listdir(src)
        except OSError as e:
            raise FatalError(f"cannot read standard library root {src}: {e.strerror}") from e
