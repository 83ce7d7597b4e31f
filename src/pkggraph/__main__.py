"""CLI entry point: run `pkggraph [flags] [packages]` or `python -m pkggraph ...`."""

import logging
import os
import sys
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    import argparse
    from .driver import ListDriver
    from .loader.environment import Environment
    from .output.reporter import PackageReporter
    from .shared.errors import FatalError

    parser = argparse.ArgumentParser(
        prog="pkggraph",
        description="List Go packages and resolve their transitive dependency graph.",
        allow_abbrev=False,
    )
    parser.add_argument("packages", nargs="*", help="Import paths, ./relative dirs, patterns with ..., all, std or .go files")
    parser.add_argument("-json", dest="json", action="store_true", help="Print one JSON object per package")
    parser.add_argument("-e", dest="keep_errors", action="store_true", help="Report erroring packages instead of failing")
    parser.add_argument("-deps", dest="deps", action="store_true", help="Also list every dependency, post-order")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    parser.add_argument("--goroot", default=None, help="Standard library root (default: $GOROOT or `go env`)")
    parser.add_argument("--gopath", default=None, help=f"Workspace roots separated by {os.pathsep!r} (default: $GOPATH)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    gopath = None
    if args.gopath is not None:
        gopath = [p for p in args.gopath.split(os.pathsep) if p]

    try:
        env = Environment.from_env(goroot=args.goroot, gopath=gopath)
        env.validate()
        result = ListDriver(env).run(args.packages, keep_errors=args.keep_errors, with_deps=args.deps)
    except FatalError as e:
        sys.stderr.write(f"pkggraph: {e}\n")
        return 2

    PackageReporter(json_output=args.json).report(result.packages)
    if result.has_errors():
        result.reporter.print_errors()
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
