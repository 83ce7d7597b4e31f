"""
Lark transformers

HeaderTransformer turns a header parse tree into a FileHeader;
ConstraintEvaluator folds a //go:build expression tree to a bool.
"""

import ast
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from lark import Transformer, v_args
from lark.lexer import Token


@dataclass
class ImportSpec:
    """One import declaration: unquoted path, optional alias, 1-based position"""
    path: str
    alias: Optional[str] = None
    line: int = 0
    column: int = 0


@dataclass
class Comment:
    text: str
    line: int
    column: int


@dataclass
class FileHeader:
    """Package clause and imports of one Go source file"""
    package_name: str
    package_line: int
    imports: List[ImportSpec] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    import_comment: str = ""
    excluded: bool = False

    def import_paths(self) -> List[str]:
        """Imported paths de-duplicated, first occurrence order preserved."""
        seen = set()
        out = []
        for spec in self.imports:
            if spec.path not in seen:
                seen.add(spec.path)
                out.append(spec.path)
        return out


def unquote(literal: str) -> str:
    """Unquote a Go interpreted ("...") or raw (`...`) string literal."""
    if literal.startswith("`"):
        return literal[1:-1]
    value = ast.literal_eval(literal)
    if not isinstance(value, str):
        raise ValueError(f"not a string literal: {literal}")
    return value


class HeaderTransformer(Transformer):
    """Converts the header parse tree to a FileHeader"""

    def start(self, children) -> FileHeader:
        name_token: Token = children[0]
        header = FileHeader(package_name=str(name_token), package_line=name_token.line)
        for child in children[1:]:
            if isinstance(child, list):
                header.imports.extend(child)
        return header

    @v_args(inline=True)
    def package_clause(self, name: Token) -> Token:
        return name

    def import_decl(self, specs) -> List[ImportSpec]:
        return list(specs)

    def import_spec(self, children) -> ImportSpec:
        alias: Optional[str] = None
        if len(children) == 2:
            alias = children[0]
        literal: Token = children[-1]
        return ImportSpec(path=unquote(str(literal)), alias=alias, line=literal.line, column=literal.column)

    @v_args(inline=True)
    def alias(self, token: Token) -> str:
        return str(token)

    def body(self, children) -> None:
        return None


class ConstraintEvaluator(Transformer):
    """
    Evaluates a //go:build expression.

    Tags listed as always-false evaluate to False; every other tag is
    considered satisfied.
    """

    def __init__(self, false_tags: Iterable[str]):
        super().__init__()
        self.false_tags: Tuple[str, ...] = tuple(false_tags)

    @v_args(inline=True)
    def tag(self, token: Token) -> bool:
        return str(token) not in self.false_tags

    @v_args(inline=True)
    def negation(self, value: bool) -> bool:
        return not value

    def and_expr(self, values) -> bool:
        return all(values)

    def or_expr(self, values) -> bool:
        return any(values)
