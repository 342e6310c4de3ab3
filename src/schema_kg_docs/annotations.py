"""User-authored comments, labels and relations merged onto a schema."""

from __future__ import annotations

import logging
from typing import Collection, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ResolutionError
from .schema import Cardinality, Relation, Schema, Table, merge_labels

logger = logging.getLogger(__name__)

ADDITIONAL_RELATION_DEF = "Additional Relation"


class TableAnnotation(BaseModel):
    """Overrides for one table and the objects nested in it."""

    model_config = ConfigDict(populate_by_name=True)

    table: str
    table_comment: Optional[str] = Field(default=None, alias="tableComment")
    labels: List[str] = Field(default_factory=list)
    column_comments: Dict[str, str] = Field(default_factory=dict, alias="columnComments")
    column_labels: Dict[str, List[str]] = Field(default_factory=dict, alias="columnLabels")
    index_comments: Dict[str, str] = Field(default_factory=dict, alias="indexComments")
    constraint_comments: Dict[str, str] = Field(
        default_factory=dict, alias="constraintComments"
    )
    trigger_comments: Dict[str, str] = Field(default_factory=dict, alias="triggerComments")


class RelationAnnotation(BaseModel):
    """A relation declared by hand, e.g. one the database does not enforce."""

    model_config = ConfigDict(populate_by_name=True)

    table: str
    columns: List[str]
    cardinality: Optional[str] = None
    parent_table: str = Field(alias="parentTable")
    parent_columns: List[str] = Field(alias="parentColumns")
    parent_cardinality: Optional[str] = Field(default=None, alias="parentCardinality")
    definition: str = Field(default=ADDITIONAL_RELATION_DEF, alias="def")


class Annotations(BaseModel):
    """Everything a user can layer on top of an introspected schema."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    comments: List[TableAnnotation] = Field(default_factory=list)
    relations: List[RelationAnnotation] = Field(default_factory=list)


def _resolve_table(schema: Schema, name: str, declared: RelationAnnotation) -> Table:
    table = schema.get_table(name)
    if table is None:
        raise ResolutionError(
            f"failed to add relation {declared.table} -> {declared.parent_table}: "
            f"table not found: {name}"
        )
    return table


def resolve_relation(schema: Schema, declared: RelationAnnotation) -> Relation:
    """Turn a declaration into a ``Relation`` bound to objects in ``schema``.

    Raises:
        ResolutionError: If a table or column is missing, or the column lists
            are empty or of different lengths.
        InvalidCardinalityError: If a cardinality token is not recognised.
    """
    if not declared.columns or len(declared.columns) != len(declared.parent_columns):
        raise ResolutionError(
            f"failed to add relation {declared.table} -> {declared.parent_table}: "
            f"columns {declared.columns} do not pair with parent columns "
            f"{declared.parent_columns}"
        )

    table = _resolve_table(schema, declared.table, declared)
    parent_table = _resolve_table(schema, declared.parent_table, declared)

    columns = []
    for name in declared.columns:
        column = table.get_column(name)
        if column is None:
            raise ResolutionError(
                f"failed to add relation {declared.table} -> {declared.parent_table}: "
                f"column not found: {table.name}.{name}"
            )
        columns.append(column)

    parent_columns = []
    for name in declared.parent_columns:
        column = parent_table.get_column(name)
        if column is None:
            raise ResolutionError(
                f"failed to add relation {declared.table} -> {declared.parent_table}: "
                f"column not found: {parent_table.name}.{name}"
            )
        parent_columns.append(column)

    return Relation(
        table=table,
        columns=columns,
        parent_table=parent_table,
        parent_columns=parent_columns,
        cardinality=Cardinality.parse(declared.cardinality),
        parent_cardinality=Cardinality.parse(declared.parent_cardinality),
        definition=declared.definition,
        virtual=False,
    )


def _merge_table(schema: Schema, annotation: TableAnnotation) -> None:
    table = schema.get_table(annotation.table)
    if table is None:
        logger.debug(f"Skipping annotations for missing table {annotation.table}")
        return

    if annotation.table_comment is not None:
        table.comment = annotation.table_comment
    table.labels = merge_labels(table.labels, annotation.labels)

    for name, comment in annotation.column_comments.items():
        column = table.get_column(name)
        if column is None:
            logger.debug(f"Skipping comment for missing column {table.name}.{name}")
            continue
        column.comment = comment

    for name, labels in annotation.column_labels.items():
        column = table.get_column(name)
        if column is None:
            logger.debug(f"Skipping labels for missing column {table.name}.{name}")
            continue
        column.labels = merge_labels(column.labels, labels)

    for name, comment in annotation.index_comments.items():
        index = table.get_index(name)
        if index is None:
            logger.debug(f"Skipping comment for missing index {table.name}.{name}")
            continue
        index.comment = comment

    for name, comment in annotation.constraint_comments.items():
        constraint = table.get_constraint(name)
        if constraint is None:
            logger.debug(f"Skipping comment for missing constraint {table.name}.{name}")
            continue
        constraint.comment = comment

    for name, comment in annotation.trigger_comments.items():
        trigger = table.get_trigger(name)
        if trigger is None:
            logger.debug(f"Skipping comment for missing trigger {table.name}.{name}")
            continue
        trigger.comment = comment


def merge_table_labels(schema: Schema, annotations: Annotations) -> None:
    """Apply only the table-level labels, e.g. ahead of label-based filtering."""
    for annotation in annotations.comments:
        table = schema.get_table(annotation.table)
        if table is not None:
            table.labels = merge_labels(table.labels, annotation.labels)


def merge_annotations(
    schema: Schema, annotations: Annotations, pruned: Collection[str] = ()
) -> None:
    """
    Apply ``annotations`` to ``schema`` in place.

    Declared relations are resolved before anything is changed, so a
    ``ResolutionError`` leaves the schema untouched. A declared relation with
    an endpoint in ``pruned`` (tables removed by filtering) is skipped, as are
    comment and label targets that no longer exist.
    """
    relations = []
    for declared in annotations.relations:
        dropped = [
            name
            for name in (declared.table, declared.parent_table)
            if name in pruned and schema.get_table(name) is None
        ]
        if dropped:
            logger.debug(
                f"Skipping relation {declared.table} -> {declared.parent_table}: "
                f"filtered out {', '.join(dropped)}"
            )
            continue
        relations.append(resolve_relation(schema, declared))

    if annotations.name:
        schema.name = annotations.name

    for annotation in annotations.comments:
        _merge_table(schema, annotation)

    for relation in relations:
        schema.add_relation(relation)

    logger.info(
        f"Merged annotations into {schema.name or '<unnamed>'}: "
        f"{len(annotations.comments)} table entries, {len(relations)} relations"
    )
