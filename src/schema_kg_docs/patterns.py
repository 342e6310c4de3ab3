"""Glob-style table name matching and label selection."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Sequence

from .errors import FilterError
from .schema import Table

WILDCARD = "*"


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Pattern[str]:
    # only "*" is special; everything else matches literally
    parts = [re.escape(part) for part in pattern.split(WILDCARD)]
    return re.compile("^" + ".*".join(parts) + "$", re.DOTALL)


def _check(pattern: object) -> str:
    if not isinstance(pattern, str):
        raise FilterError(f"invalid table pattern: {pattern!r} (expected a string)")
    return pattern


def match_pattern(pattern: str, name: str) -> bool:
    """Match one pattern. ``""`` never matches a real (non-empty) name."""
    pattern = _check(pattern)
    if not name:
        return False
    if pattern == WILDCARD:
        return True
    return _compile(pattern).match(name) is not None


def matches(name: str, patterns: Sequence[str]) -> bool:
    """True if any pattern matches ``name``."""
    return any(match_pattern(pattern, name) for pattern in patterns)


def match_length(patterns: Sequence[str], name: str) -> Optional[int]:
    """Length of the longest pattern matching ``name``, or None if none match.

    A longer pattern is treated as the more specific one when include and
    exclude patterns both match the same table.
    """
    longest: Optional[int] = None
    for pattern in patterns:
        if match_pattern(pattern, name) and (longest is None or len(pattern) > longest):
            longest = len(pattern)
    return longest


def has_any_label(table: Table, requested: Iterable[str]) -> bool:
    """True if the table carries at least one of the requested labels."""
    return not set(table.labels).isdisjoint(requested)


def validate_patterns(patterns: Iterable[object]) -> List[str]:
    """Return the patterns as a list, failing fast on non-string entries."""
    if isinstance(patterns, str):
        raise FilterError(f"table patterns must be a list, got the string {patterns!r}")
    return [_check(pattern) for pattern in patterns]
