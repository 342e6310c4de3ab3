"""Detect virtual relations from column naming conventions."""

from __future__ import annotations

import logging
from typing import List, Optional

from .naming import NamingStrategy
from .schema import Cardinality, Column, Relation, Schema, Table

logger = logging.getLogger(__name__)

DETECTED_RELATION_DEF = "Detected Relation"


def _already_related(column: Column, parent_column: Column) -> bool:
    return any(r.connects(column, parent_column) for r in column.parent_relations)


def detect_relation(
    schema: Schema, table: Table, column: Column, strategy: NamingStrategy
) -> Optional[Relation]:
    """Build the virtual relation implied by ``column``, or None if there is none."""

    parent_table_name = strategy.parent_table_name(column.name)
    if not parent_table_name:
        return None
    parent_table = schema.get_table(parent_table_name)
    if parent_table is None:
        logger.debug(f"No table {parent_table_name} for {table.name}.{column.name}")
        return None
    parent_column_name = strategy.parent_column_name(parent_table.name)
    parent_column = parent_table.get_column(parent_column_name)
    if parent_column is None:
        logger.debug(
            f"No column {parent_table.name}.{parent_column_name} for {table.name}.{column.name}"
        )
        return None
    if parent_column is column or _already_related(column, parent_column):
        return None

    return Relation(
        table=table,
        columns=[column],
        parent_table=parent_table,
        parent_columns=[parent_column],
        cardinality=Cardinality.ZERO_OR_MORE,
        parent_cardinality=(
            Cardinality.ZERO_OR_ONE if column.nullable else Cardinality.EXACTLY_ONE
        ),
        definition=DETECTED_RELATION_DEF,
        virtual=True,
    )


def infer_relations(schema: Schema, strategy: NamingStrategy) -> List[Relation]:
    """
    Add a virtual relation for every column that follows ``strategy``.

    Columns whose parent table or column cannot be found are skipped. A
    (column, parent column) pair that is already related, explicitly or by
    an earlier run, never gets a second relation.

    Returns:
        The relations that were added
    """
    added: List[Relation] = []
    for table in schema.tables:
        for column in table.columns:
            relation = detect_relation(schema, table, column, strategy)
            if relation is None:
                continue
            schema.add_relation(relation)
            added.append(relation)

    logger.info(
        f"Detected {len(added)} virtual relations in {schema.name or '<unnamed>'} "
        f"using the {strategy.name} naming strategy"
    )
    return added
