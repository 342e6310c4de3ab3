"""In-memory schema graph: tables, columns and the relations between them."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import InvalidCardinalityError, NotFoundError, RepairError


class Cardinality(Enum):
    """Relation multiplicity on one side of a relation.

    Values are the canonical wire tokens; ``UNKNOWN`` is encoded by omission.
    """

    UNKNOWN = ""
    ZERO_OR_ONE = "zero_or_one"
    EXACTLY_ONE = "exactly_one"
    ZERO_OR_MORE = "zero_or_more"
    ONE_OR_MORE = "one_or_more"

    @classmethod
    def parse(cls, token: Optional[str]) -> "Cardinality":
        """Parse a token such as ``zero_or_more`` or ``Zero or more``."""
        if token is None:
            return cls.UNKNOWN
        if not isinstance(token, str):
            raise InvalidCardinalityError(repr(token))
        normalized = re.sub(r"[\s\-]+", "_", token.strip().lower())
        for member in cls:
            if member.value == normalized:
                return member
        raise InvalidCardinalityError(token)


@dataclass(eq=False)
class Column:
    """Table column.

    ``default`` is ``None`` when the column has no default, which keeps it
    distinct from a default of ``""``.
    """

    name: str
    type: str = ""
    nullable: bool = False
    default: Optional[str] = None
    comment: str = ""
    extra_def: str = ""
    labels: List[str] = field(default_factory=list)
    # relations where this column is on the child (foreign key) side
    parent_relations: List["Relation"] = field(default_factory=list, repr=False)
    # relations where this column is on the parent (referenced) side
    child_relations: List["Relation"] = field(default_factory=list, repr=False)

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass
class Index:
    name: str
    definition: str = ""
    table: str = ""
    columns: List[str] = field(default_factory=list)
    comment: str = ""


@dataclass
class Constraint:
    name: str
    type: str = ""
    definition: str = ""
    table: str = ""
    referenced_table: str = ""
    columns: List[str] = field(default_factory=list)
    referenced_columns: List[str] = field(default_factory=list)
    comment: str = ""


@dataclass
class Trigger:
    name: str
    definition: str = ""
    comment: str = ""


def _get_by_name(items: Iterable[Any], name: str) -> Any:
    for item in items:
        if item.name == name:
            return item
    return None


def merge_labels(current: List[str], extra: Iterable[str]) -> List[str]:
    """Append labels from ``extra`` that are not already present."""
    merged = list(current)
    for label in extra:
        if label not in merged:
            merged.append(label)
    return merged


@dataclass(eq=False)
class Table:
    """Table or view metadata."""

    name: str
    type: str = ""
    comment: str = ""
    columns: List[Column] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)
    constraints: List[Constraint] = field(default_factory=list)
    triggers: List[Trigger] = field(default_factory=list)
    definition: str = ""
    labels: List[str] = field(default_factory=list)
    referenced_tables: List["Table"] = field(default_factory=list, repr=False)

    def get_column(self, name: str) -> Optional[Column]:
        return _get_by_name(self.columns, name)

    def find_column_by_name(self, name: str) -> Column:
        column = self.get_column(name)
        if column is None:
            raise NotFoundError("column", f"{self.name}.{name}")
        return column

    def get_index(self, name: str) -> Optional[Index]:
        return _get_by_name(self.indexes, name)

    def find_index_by_name(self, name: str) -> Index:
        index = self.get_index(name)
        if index is None:
            raise NotFoundError("index", f"{self.name}.{name}")
        return index

    def get_constraint(self, name: str) -> Optional[Constraint]:
        return _get_by_name(self.constraints, name)

    def find_constraint_by_name(self, name: str) -> Constraint:
        constraint = self.get_constraint(name)
        if constraint is None:
            raise NotFoundError("constraint", f"{self.name}.{name}")
        return constraint

    def get_trigger(self, name: str) -> Optional[Trigger]:
        return _get_by_name(self.triggers, name)

    def find_trigger_by_name(self, name: str) -> Trigger:
        trigger = self.get_trigger(name)
        if trigger is None:
            raise NotFoundError("trigger", f"{self.name}.{name}")
        return trigger


@dataclass(eq=False)
class Relation:
    """Foreign-key style link from child columns to parent columns."""

    table: Table
    columns: List[Column]
    parent_table: Table
    parent_columns: List[Column]
    cardinality: Cardinality = Cardinality.UNKNOWN
    parent_cardinality: Cardinality = Cardinality.UNKNOWN
    definition: str = ""
    virtual: bool = False

    def __post_init__(self) -> None:
        if len(self.columns) != len(self.parent_columns):
            raise ValueError(
                f"relation {self.table.name} -> {self.parent_table.name} has "
                f"{len(self.columns)} columns but {len(self.parent_columns)} parent columns"
            )

    def __repr__(self) -> str:
        child = ", ".join(c.name for c in self.columns)
        parent = ", ".join(c.name for c in self.parent_columns)
        kind = "virtual " if self.virtual else ""
        return f"<{kind}Relation {self.table.name}({child}) -> {self.parent_table.name}({parent})>"

    def connects(self, column: Column, parent_column: Column) -> bool:
        """True if ``column`` is paired with ``parent_column`` by identity."""
        return any(
            child is column and parent is parent_column
            for child, parent in zip(self.columns, self.parent_columns)
        )


@dataclass(eq=False)
class Schema:
    """Top-level schema graph. Owns its tables; relations reference them."""

    name: str = ""
    tables: List[Table] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    driver: Dict[str, Any] = field(default_factory=dict)

    @property
    def column_count(self) -> int:
        return sum(len(table.columns) for table in self.tables)

    def get_table(self, name: str) -> Optional[Table]:
        return _get_by_name(self.tables, name)

    def find_table_by_name(self, name: str) -> Table:
        table = self.get_table(name)
        if table is None:
            raise NotFoundError("table", name)
        return table

    def add_relation(self, relation: Relation) -> None:
        """Append a relation and update every index that refers to it."""
        self.relations.append(relation)
        _index_columns(relation)
        _link_tables(relation)

    def rebuild_references(self) -> None:
        """Recompute back-references and referenced tables from ``relations``."""
        for table in self.tables:
            table.referenced_tables = []
            for column in table.columns:
                column.parent_relations = []
                column.child_relations = []
        for relation in self.relations:
            _index_columns(relation)
            _link_tables(relation)

    def repair(self) -> None:
        """Swap name-only stubs for the objects held in ``tables``.

        Decoded snapshots reference tables and columns by name. Every graph
        operation relies on identity, so this must run before any of them.
        """
        for table in self.tables:
            table.referenced_tables = [
                self._repair_table(stub.name, f"referenced table of {table.name}")
                for stub in table.referenced_tables
            ]
            for column in table.columns:
                column.parent_relations = []
                column.child_relations = []

        for relation in self.relations:
            relation.table = self._repair_table(relation.table.name, "relation table")
            relation.columns = _repair_columns(relation.table, relation.columns)
            relation.parent_table = self._repair_table(
                relation.parent_table.name, "relation parent table"
            )
            relation.parent_columns = _repair_columns(
                relation.parent_table, relation.parent_columns
            )
            _index_columns(relation)

    def _repair_table(self, name: str, role: str) -> Table:
        table = self.get_table(name)
        if table is None:
            raise RepairError(f"failed to repair {role}: table not found: {name}")
        return table


def _repair_columns(table: Table, stubs: Sequence[Column]) -> List[Column]:
    resolved = []
    for stub in stubs:
        column = table.get_column(stub.name)
        if column is None:
            raise RepairError(
                f"failed to repair relation: column not found: {table.name}.{stub.name}"
            )
        resolved.append(column)
    return resolved


def _index_columns(relation: Relation) -> None:
    for column in relation.columns:
        column.parent_relations.append(relation)
    for column in relation.parent_columns:
        column.child_relations.append(relation)


def _link_tables(relation: Relation) -> None:
    if relation.parent_table not in relation.table.referenced_tables:
        relation.table.referenced_tables.append(relation.parent_table)
    if relation.table not in relation.parent_table.referenced_tables:
        relation.parent_table.referenced_tables.append(relation.table)
