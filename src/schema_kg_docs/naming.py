"""Naming conventions used to guess parent tables from foreign-key column names."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from .errors import UnknownStrategyError

KEY_SUFFIX = "_id"
PRIMARY_KEY = "id"

_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "datum": "data",
}
_IRREGULAR_SINGULARS = {plural: singular for singular, plural in _IRREGULAR_PLURALS.items()}
_SIBILANT_ENDINGS = ("s", "x", "z", "ch", "sh")


def pluralize(word: str) -> str:
    """Suffix-based English plural, e.g. ``user`` -> ``users``, ``category`` -> ``categories``."""
    lower = word.lower()
    if lower in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[lower]
    if lower in _IRREGULAR_SINGULARS:
        return word
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    if lower.endswith(_SIBILANT_ENDINGS):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """Inverse of ``pluralize`` for the same suffix rules."""
    lower = word.lower()
    if lower in _IRREGULAR_SINGULARS:
        return _IRREGULAR_SINGULARS[lower]
    if lower.endswith("ies") and len(lower) > 3:
        return word[:-3] + "y"
    if lower.endswith(tuple(ending + "es" for ending in _SIBILANT_ENDINGS if ending != "s")):
        return word[:-2]
    if lower.endswith("sses"):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss") and len(lower) > 1:
        return word[:-1]
    return word


def strip_key_suffix(column_name: str) -> Optional[str]:
    """``user_id`` -> ``user``; None when the name is not a foreign-key name."""
    if len(column_name) <= len(KEY_SUFFIX) or not column_name.lower().endswith(KEY_SUFFIX):
        return None
    return column_name[: -len(KEY_SUFFIX)]


class NamingStrategy(ABC):
    """Maps a child column name to its candidate parent table and column.

    Implementations must provide:
    - parent_table_name(): candidate parent table for a child column
    - parent_column_name(): referenced column on that parent table
    """

    name: str = ""

    @abstractmethod
    def parent_table_name(self, column_name: str) -> Optional[str]:
        """Candidate parent table for ``column_name``, or None to skip it."""
        pass

    @abstractmethod
    def parent_column_name(self, parent_table_name: str) -> str:
        """Referenced column name on ``parent_table_name``."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class DefaultNamingStrategy(NamingStrategy):
    """``posts.user_id`` -> ``users.id``."""

    name = "default"

    def parent_table_name(self, column_name: str) -> Optional[str]:
        stem = strip_key_suffix(column_name)
        return pluralize(stem) if stem else None

    def parent_column_name(self, parent_table_name: str) -> str:
        return PRIMARY_KEY


class SingularTableNamingStrategy(NamingStrategy):
    """``posts.user_id`` -> ``user.id``, for schemas with singular table names."""

    name = "singularTableName"

    def parent_table_name(self, column_name: str) -> Optional[str]:
        return strip_key_suffix(column_name)

    def parent_column_name(self, parent_table_name: str) -> str:
        return PRIMARY_KEY


class PrefixedKeyNamingStrategy(NamingStrategy):
    """``posts.user_id`` -> ``users.user_id``, where primary keys repeat the table name."""

    name = "prefixedPrimaryKey"

    def parent_table_name(self, column_name: str) -> Optional[str]:
        stem = strip_key_suffix(column_name)
        return pluralize(stem) if stem else None

    def parent_column_name(self, parent_table_name: str) -> str:
        return singularize(parent_table_name) + KEY_SUFFIX


NAMING_STRATEGIES: Dict[str, Type[NamingStrategy]] = {
    cls.name: cls
    for cls in (DefaultNamingStrategy, SingularTableNamingStrategy, PrefixedKeyNamingStrategy)
}


def select_naming_strategy(name: str) -> NamingStrategy:
    """Instantiate a registered strategy by its identifier."""
    try:
        return NAMING_STRATEGIES[name]()
    except KeyError:
        raise UnknownStrategyError(name, NAMING_STRATEGIES) from None
