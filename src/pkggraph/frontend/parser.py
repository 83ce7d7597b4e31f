"""
Parser

Reads only the header of a Go source file (package clause, imports and the
comments around them) and decides whether build constraints exclude it.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from lark import Lark
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedInput,
    UnexpectedToken,
    VisitError,
)
from lark.lexer import Token

from .transformers import Comment, ConstraintEvaluator, FileHeader, HeaderTransformer, unquote
from ..shared.errors import ParseError
from ..shared.source_location import SourceLocation
from ..utils.config import (
    DEFAULT_ALWAYS_FALSE_TAGS,
    DEFAULT_CONSTRAINT_CACHE_FILE,
    DEFAULT_HEADER_CACHE_FILE,
    GO_BUILD_PREFIX,
    PLUS_BUILD_PREFIX,
)

logger = logging.getLogger(__name__)

_GRAMMAR_DIR = Path(__file__).parent
_IMPORT_COMMENT = re.compile(r'^(?://|/\*)\s*import\s+("(?:[^"\\\n]|\\.)*"|`[^`]*`)')


class ConstraintParser:
    """Evaluates build constraint comments against a set of always-false tags."""

    def __init__(self, false_tags: Iterable[str] = DEFAULT_ALWAYS_FALSE_TAGS,
                 cache_file: str = DEFAULT_CONSTRAINT_CACHE_FILE):
        self.false_tags = tuple(false_tags)
        self.parser = Lark.open(
            _GRAMMAR_DIR / "constraint.lark",
            start="start",
            parser="lalr",
            cache=cache_file,
        )

    def go_build(self, expression: str) -> bool:
        """Value of a //go:build expression"""
        tree = self.parser.parse(expression)
        if isinstance(tree, Token):
            return str(tree) not in self.false_tags
        return ConstraintEvaluator(self.false_tags).transform(tree)

    def plus_build(self, line: str) -> bool:
        """Value of one '// +build' line: space-separated OR of comma-separated ANDs"""
        for option in line.split():
            if all(self._term(term) for term in option.split(",")):
                return True
        return False

    def _term(self, term: str) -> bool:
        if term.startswith("!"):
            return not self._term(term[1:])
        return term not in self.false_tags

    def satisfied(self, comments: List[Comment]) -> bool:
        """
        True unless the leading comments carry a failing constraint.

        A //go:build line takes precedence over every // +build line.
        """
        go_build: Optional[str] = None
        plus_build: List[str] = []
        for comment in comments:
            text = comment.text
            if text.startswith(GO_BUILD_PREFIX) and go_build is None:
                go_build = text[len(GO_BUILD_PREFIX):].strip()
            elif text.startswith("//"):
                body = text[2:].strip()
                if body.startswith(PLUS_BUILD_PREFIX + " ") or body == PLUS_BUILD_PREFIX:
                    plus_build.append(body[len(PLUS_BUILD_PREFIX):])
        if go_build is not None:
            return self.go_build(go_build)
        return all(self.plus_build(line) for line in plus_build)


class HeaderParser:
    """
    Go file header parser.

    Uses a Lark LALR grammar; comments are collected through lexer callbacks
    so that build constraints and the import comment stay available.
    """

    def __init__(self, false_tags: Iterable[str] = DEFAULT_ALWAYS_FALSE_TAGS,
                 cache_file: str = DEFAULT_HEADER_CACHE_FILE):
        self._comments: List[Comment] = []
        self.parser = Lark.open(
            _GRAMMAR_DIR / "header.lark",
            start="start",
            parser="lalr",
            cache=cache_file,
            propagate_positions=True,
            maybe_placeholders=False,
            lexer_callbacks={
                "LINE_COMMENT": self._collect_comment,
                "BLOCK_COMMENT": self._collect_comment,
            },
        )
        self.transformer = HeaderTransformer()
        self.constraints = ConstraintParser(false_tags)

    def _collect_comment(self, token: Token) -> Token:
        self._comments.append(Comment(text=str(token), line=token.line, column=token.column))
        return token

    def parse(self, source: str, source_file: str = "main.go") -> FileHeader:
        """
        Parse the header of source.

        Raises: ParseError on malformed package clause or imports
        """
        self._comments = []
        try:
            tree = self.parser.parse(source)
            header: FileHeader = self.transformer.transform(tree)
        except UnexpectedInput as e:
            raise ParseError(source_file, _error_location(e, source_file), _error_message(e)) from e
        except VisitError as e:
            # Bad string literal inside an import spec
            raise ParseError(source_file, None, f"invalid import path: {e.orig_exc}") from e

        header.comments = self._comments
        self._comments = []
        leading = [c for c in header.comments if c.line < header.package_line]
        try:
            header.excluded = not self.constraints.satisfied(leading)
        except UnexpectedInput as e:
            raise ParseError(source_file, None, f"invalid //go:build line: {_error_message(e)}") from e
        header.import_comment = _import_comment(header)
        return header


def _import_comment(header: FileHeader) -> str:
    for comment in header.comments:
        if comment.line != header.package_line:
            continue
        match = _IMPORT_COMMENT.match(comment.text)
        if match:
            try:
                return unquote(match.group(1))
            except (ValueError, SyntaxError):
                logger.debug(f"Ignoring malformed import comment {comment.text!r}")
    return ""


def _error_location(e: UnexpectedInput, source_file: str) -> Optional[SourceLocation]:
    line = getattr(e, "line", -1)
    column = getattr(e, "column", -1)
    if isinstance(line, int) and line > 0:
        return SourceLocation(file=source_file, line=line, column=max(column, 1))
    return None


def _error_message(e: UnexpectedInput) -> str:
    if isinstance(e, UnexpectedToken):
        if e.token.type == "$END":
            return "syntax error: unexpected EOF"
        return f"syntax error: unexpected {e.token.value!r}"
    if isinstance(e, UnexpectedCharacters):
        return f"syntax error: unexpected character {e.char!r}"
    if isinstance(e, UnexpectedEOF):
        return "syntax error: unexpected EOF"
    return f"syntax error: {e}"
