"""JSON snapshot encoding for schemas.

Relations and referenced tables are written as names. ``decode_schema``
therefore returns a graph whose relations point at name-only stub objects;
call ``Schema.repair`` (or use ``load_schema``/``loads``) before running any
graph operation on it.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .errors import DecodeError
from .schema import (
    Cardinality,
    Column,
    Constraint,
    Index,
    Relation,
    Schema,
    Table,
    Trigger,
)


def _put(data: Dict[str, Any], key: str, value: Any) -> None:
    # omitempty
    if value:
        data[key] = value


def encode_column(column: Column) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": column.name,
        "type": column.type,
        "nullable": column.nullable,
    }
    if column.has_default:
        data["default"] = column.default
    _put(data, "comment", column.comment)
    _put(data, "extra_def", column.extra_def)
    _put(data, "labels", list(column.labels))
    return data


def encode_index(index: Index) -> Dict[str, Any]:
    data = {
        "name": index.name,
        "def": index.definition,
        "table": index.table,
        "columns": list(index.columns),
    }
    _put(data, "comment", index.comment)
    return data


def encode_constraint(constraint: Constraint) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": constraint.name,
        "type": constraint.type,
        "def": constraint.definition,
        "table": constraint.table,
    }
    _put(data, "referenced_table", constraint.referenced_table)
    data["columns"] = list(constraint.columns)
    _put(data, "referenced_columns", list(constraint.referenced_columns))
    _put(data, "comment", constraint.comment)
    return data


def encode_trigger(trigger: Trigger) -> Dict[str, Any]:
    data = {"name": trigger.name, "def": trigger.definition}
    _put(data, "comment", trigger.comment)
    return data


def encode_table(table: Table) -> Dict[str, Any]:
    data: Dict[str, Any] = {"name": table.name, "type": table.type}
    _put(data, "comment", table.comment)
    data["columns"] = [encode_column(c) for c in table.columns]
    _put(data, "indexes", [encode_index(i) for i in table.indexes])
    _put(data, "constraints", [encode_constraint(c) for c in table.constraints])
    _put(data, "triggers", [encode_trigger(t) for t in table.triggers])
    _put(data, "def", table.definition)
    _put(data, "labels", list(table.labels))
    _put(data, "referenced_tables", [t.name for t in table.referenced_tables])
    return data


def encode_relation(relation: Relation) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "table": relation.table.name,
        "columns": [c.name for c in relation.columns],
    }
    _put(data, "cardinality", relation.cardinality.value)
    data["parent_table"] = relation.parent_table.name
    data["parent_columns"] = [c.name for c in relation.parent_columns]
    _put(data, "parent_cardinality", relation.parent_cardinality.value)
    data["def"] = relation.definition
    _put(data, "virtual", relation.virtual)
    return data


def encode_schema(schema: Schema) -> Dict[str, Any]:
    """Encode a schema as a JSON-compatible dict."""
    data: Dict[str, Any] = {
        "name": schema.name,
        "tables": [encode_table(t) for t in schema.tables],
        "relations": [encode_relation(r) for r in schema.relations],
    }
    _put(data, "driver", dict(schema.driver))
    return data


def _require(data: Mapping[str, Any], key: str, what: str) -> Any:
    if not isinstance(data, Mapping):
        raise DecodeError(f"{what} must be an object, got {type(data).__name__}")
    if key not in data:
        raise DecodeError(f"{what} is missing required field '{key}'")
    return data[key]


def _flag(data: Mapping[str, Any], key: str, what: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise DecodeError(f"{what} field '{key}' must be a boolean, got {value!r}")
    return value


def decode_column(data: Mapping[str, Any]) -> Column:
    return Column(
        name=_require(data, "name", "column"),
        type=data.get("type", ""),
        nullable=_flag(data, "nullable", "column"),
        default=data.get("default"),
        comment=data.get("comment", ""),
        extra_def=data.get("extra_def", ""),
        labels=list(data.get("labels") or []),
    )


def decode_index(data: Mapping[str, Any]) -> Index:
    return Index(
        name=_require(data, "name", "index"),
        definition=data.get("def", ""),
        table=data.get("table", ""),
        columns=list(data.get("columns") or []),
        comment=data.get("comment", ""),
    )


def decode_constraint(data: Mapping[str, Any]) -> Constraint:
    return Constraint(
        name=_require(data, "name", "constraint"),
        type=data.get("type", ""),
        definition=data.get("def", ""),
        table=data.get("table", ""),
        referenced_table=data.get("referenced_table", ""),
        columns=list(data.get("columns") or []),
        referenced_columns=list(data.get("referenced_columns") or []),
        comment=data.get("comment", ""),
    )


def decode_trigger(data: Mapping[str, Any]) -> Trigger:
    return Trigger(
        name=_require(data, "name", "trigger"),
        definition=data.get("def", ""),
        comment=data.get("comment", ""),
    )


def decode_table(data: Mapping[str, Any]) -> Table:
    return Table(
        name=_require(data, "name", "table"),
        type=data.get("type", ""),
        comment=data.get("comment", ""),
        columns=[decode_column(c) for c in data.get("columns") or []],
        indexes=[decode_index(i) for i in data.get("indexes") or []],
        constraints=[decode_constraint(c) for c in data.get("constraints") or []],
        triggers=[decode_trigger(t) for t in data.get("triggers") or []],
        definition=data.get("def", ""),
        labels=list(data.get("labels") or []),
        referenced_tables=[Table(name=n) for n in data.get("referenced_tables") or []],
    )


def decode_relation(data: Mapping[str, Any]) -> Relation:
    """Decode a relation whose tables and columns are name-only stubs."""
    table = _require(data, "table", "relation")
    parent_table = _require(data, "parent_table", "relation")
    columns: List[str] = _require(data, "columns", "relation")
    parent_columns: List[str] = _require(data, "parent_columns", "relation")
    if len(columns) != len(parent_columns):
        raise DecodeError(
            f"relation {table} -> {parent_table} has {len(columns)} columns "
            f"but {len(parent_columns)} parent columns"
        )

    return Relation(
        table=Table(name=table),
        columns=[Column(name=c) for c in columns],
        parent_table=Table(name=parent_table),
        parent_columns=[Column(name=c) for c in parent_columns],
        cardinality=Cardinality.parse(data.get("cardinality", "")),
        parent_cardinality=Cardinality.parse(data.get("parent_cardinality", "")),
        definition=data.get("def", ""),
        virtual=_flag(data, "virtual", "relation"),
    )


def decode_schema(data: Mapping[str, Any]) -> Schema:
    """Decode a snapshot without resolving references (see ``Schema.repair``)."""
    if not isinstance(data, Mapping):
        raise DecodeError(f"schema must be an object, got {type(data).__name__}")
    return Schema(
        name=data.get("name", ""),
        tables=[decode_table(t) for t in data.get("tables") or []],
        relations=[decode_relation(r) for r in data.get("relations") or []],
        driver=dict(data.get("driver") or {}),
    )


def dumps(schema: Schema, indent: int | None = 2) -> str:
    return json.dumps(encode_schema(schema), indent=indent, ensure_ascii=False)


def loads(text: str) -> Schema:
    """Decode and repair a snapshot string."""
    schema = decode_schema(json.loads(text))
    schema.repair()
    return schema


def dump_schema(schema: Schema, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(encode_schema(schema), f, indent=2, ensure_ascii=False)
    return path


def load_schema(path: Path) -> Schema:
    """Load a snapshot file and repair it, ready for filtering."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Failed to parse JSON at {path}") from exc

    schema = decode_schema(data)
    schema.repair()
    return schema
