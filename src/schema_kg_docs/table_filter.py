"""Trim a schema to the tables selected by patterns, labels and distance."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Set, Tuple

from .errors import FilterError
from .graph_builder import build_relation_graph, expand_tables, relations_within
from .patterns import has_any_label, match_length, validate_patterns
from .schema import Schema, Table

logger = logging.getLogger(__name__)


@dataclass
class TableSelection:
    """Outcome of pattern/label selection, before distance expansion."""

    seeds: List[str] = field(default_factory=list)
    # rejected by an exclude pattern: never re-added by expansion
    excluded: Set[str] = field(default_factory=set)


def _is_seed(
    table: Table,
    include: Sequence[str],
    exclude: Sequence[str],
    labels: Sequence[str],
) -> bool:
    include_len = match_length(include, table.name)
    exclude_len = match_length(exclude, table.name)

    if include_len is not None:
        # the more specific (longer) pattern wins; ties go to include
        return exclude_len is None or include_len >= exclude_len
    if labels and has_any_label(table, labels):
        return exclude_len is None
    if not include and not labels:
        return exclude_len is None
    return False


def select_tables(
    schema: Schema,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    labels: Sequence[str] = (),
) -> TableSelection:
    """Pick seed tables by include/label selection minus exclusions."""

    include = validate_patterns(include)
    exclude = validate_patterns(exclude)
    labels = list(labels)

    selection = TableSelection()
    for table in schema.tables:
        if _is_seed(table, include, exclude, labels):
            selection.seeds.append(table.name)
        elif match_length(exclude, table.name) is not None:
            selection.excluded.add(table.name)
    return selection


def filter_tables(
    schema: Schema,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    labels: Sequence[str] = (),
    distance: int = 0,
    declared_edges: Iterable[Tuple[str, str]] = (),
) -> Set[str]:
    """
    Prune ``schema`` in place.

    Seeds are chosen by ``select_tables`` and expanded ``distance`` relation
    hops through tables that were not excluded. ``declared_edges`` (table,
    parent table) name pairs count as relations during expansion. Only
    relations with both ends in the surviving set are kept, and every
    back-reference is rebuilt. An empty result is valid.

    Returns:
        Names of the tables that were removed

    Raises:
        FilterError: If a pattern is not a string or distance is negative.
    """
    if isinstance(distance, bool) or not isinstance(distance, int) or distance < 0:
        raise FilterError(f"distance must be a non-negative integer, got {distance!r}")

    selection = select_tables(schema, include, exclude, labels)
    graph = build_relation_graph(schema, extra_edges=declared_edges)
    keep = expand_tables(graph, selection.seeds, distance, blocked=selection.excluded)

    before_tables = len(schema.tables)
    before_relations = len(schema.relations)

    pruned = {t.name for t in schema.tables if t.name not in keep}
    schema.tables = [t for t in schema.tables if t.name in keep]
    schema.relations = relations_within(schema, keep)
    schema.rebuild_references()

    logger.info(
        f"Filtered schema {schema.name or '<unnamed>'}: "
        f"{len(schema.tables)}/{before_tables} tables, "
        f"{len(schema.relations)}/{before_relations} relations "
        f"({len(selection.seeds)} seeds, distance {distance})"
    )
    return pruned
