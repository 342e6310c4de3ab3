"""Utilities for exporting schema packs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

from networkx.readwrite import json_graph

from .codec import dump_schema
from .graph_builder import build_relation_graph, summarize_graph
from .schema import Schema


def schema_summary(schema: Schema) -> Dict[str, object]:
    graph = build_relation_graph(schema)
    return {
        "schema": schema.name,
        "table_count": len(schema.tables),
        "column_count": schema.column_count,
        "relation_count": len(schema.relations),
        "labels": sorted({label for t in schema.tables for label in t.labels}),
        "graph_stats": summarize_graph(graph),
    }


def export_schema_pack(schema: Schema, output_dir: Path) -> Dict[str, Path]:
    """Export snapshot + relation graph + summary into ``output_dir``."""

    output_dir.mkdir(parents=True, exist_ok=True)

    schema_path = dump_schema(schema, output_dir / "schema.json")

    graph = build_relation_graph(schema)
    graph_path = output_dir / "graph.json"
    with graph_path.open("w", encoding="utf-8") as f:
        json.dump(json_graph.node_link_data(graph), f, indent=2)

    summary_path = output_dir / "summary.json"
    with summary_path.open("w", encoding="utf-8") as f:
        json.dump(schema_summary(schema), f, indent=2)

    return {
        "schema": schema_path,
        "graph": graph_path,
        "summary": summary_path,
    }
