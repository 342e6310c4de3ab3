"""Minimal version constraint evaluation for ``requiredVersion``."""

from __future__ import annotations

import operator
import re
from itertools import zip_longest
from typing import Callable, Dict, List, Tuple

from .errors import InvalidVersionConstraintError, InvalidVersionError, VersionMismatchError

__version__ = "0.1.0"

_CLAUSE = re.compile(r"^(?P<op>>=|<=|==|!=|>|<|=)?\s*(?P<version>v?\d+(?:\.\d+)*\S*)$")
_NUMERIC = re.compile(r"^v?(\d+(?:\.\d+)*)")

_OPERATORS: Dict[str, Callable[[int, int], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
    "=": operator.eq,
    "!=": operator.ne,
}


def parse_version(text: str) -> Tuple[int, ...]:
    """``"v1.42.3-rc1"`` -> ``(1, 42, 3)``. Pre-release and build suffixes are ignored."""
    match = _NUMERIC.match(text.strip())
    if not match:
        raise InvalidVersionError(text)
    return tuple(int(part) for part in match.group(1).split("."))


def compare_versions(a: Tuple[int, ...], b: Tuple[int, ...]) -> int:
    """Three-way compare; missing trailing parts count as zero."""
    for x, y in zip_longest(a, b, fillvalue=0):
        if x != y:
            return -1 if x < y else 1
    return 0


def parse_constraint(constraint: str) -> List[Tuple[str, Tuple[int, ...]]]:
    """Split ``">= 1.42, < 2"`` into ``[(">=", (1, 42)), ("<", (2,))]``."""
    clauses = []
    for raw in constraint.split(","):
        clause = raw.strip()
        if not clause:
            continue
        match = _CLAUSE.match(clause)
        if not match:
            raise InvalidVersionConstraintError(clause)
        clauses.append((match.group("op") or "==", parse_version(match.group("version"))))
    return clauses


def satisfies(running: str, constraint: str) -> bool:
    """True if ``running`` meets every clause of ``constraint``."""
    version = parse_version(running)
    return all(
        _OPERATORS[op](compare_versions(version, bound), 0)
        for op, bound in parse_constraint(constraint)
    )


def check_version(required: str, running: str, program: str = "schema-kg-docs") -> None:
    """
    Raise if ``running`` does not satisfy ``required``.

    An empty constraint is always satisfied.

    Raises:
        VersionMismatchError: Carries both the required and running versions.
        InvalidVersionConstraintError: If a clause cannot be parsed.
        InvalidVersionError: If ``running`` is not a numeric version.
    """
    if not required or not required.strip():
        return
    if not satisfies(running, required):
        raise VersionMismatchError(required, running, program=program)
