"""
Collision Checker

Detects names that are equal under Unicode simple case folding, e.g. Foo.go
and foo.go, which cannot coexist on a case-insensitive filesystem.
"""

from typing import Dict, Iterable, Optional, Tuple


# Simple-fold pairs whose members both have multi-character full foldings
_SIMPLE_FOLD_PAIRS = {
    "\u1fd3": "\u0390",
    "\u1fe3": "\u03b0",
    "\ufb06": "\ufb05",
}


def _simple_fold(ch: str) -> str:
    # Multi-character foldings (ß -> ss) do not count as simple folds
    if ch in _SIMPLE_FOLD_PAIRS:
        return _SIMPLE_FOLD_PAIRS[ch]
    folded = ch.casefold()
    if len(folded) == 1:
        return folded
    lowered = ch.lower()
    return lowered if len(lowered) == 1 else ch


def to_fold(s: str) -> str:
    """
    Canonical fold: to_fold(s) == to_fold(t) iff s and t are equal under
    simple case folding.
    """
    if s.isascii() and not any("A" <= c <= "Z" for c in s):
        return s
    return "".join(_simple_fold(ch) for ch in s)


def fold_dup(names: Iterable[str]) -> Optional[Tuple[str, str]]:
    """
    First pair of distinct names with equal folds, lexically smaller first.

    Returns None when every name folds uniquely.
    """
    clash: Dict[str, str] = {}
    for s in names:
        fold = to_fold(s)
        t = clash.get(fold)
        if t is not None and t != s:
            return (s, t) if s < t else (t, s)
        clash[fold] = s
    return None
