"""Build NetworkX relation graphs from a schema and expand table neighbourhoods."""

from __future__ import annotations

from itertools import islice
from typing import Collection, Dict, Iterable, List, Set, Tuple

import networkx as nx

from .schema import Relation, Schema


def build_relation_graph(
    schema: Schema, extra_edges: Iterable[Tuple[str, str]] = ()
) -> nx.MultiGraph:
    """Create an undirected table graph with one edge per relation.

    ``extra_edges`` are (table, parent table) name pairs for relations that
    are declared but not yet part of ``schema.relations``. Pairs naming an
    unknown table are ignored.
    """

    G = nx.MultiGraph()

    for table in schema.tables:
        G.add_node(
            table.name,
            kind="table",
            type=table.type,
            labels=list(table.labels),
            columns=len(table.columns),
        )

    for relation in schema.relations:
        G.add_edge(
            relation.table.name,
            relation.parent_table.name,
            rel="RELATION",
            columns=[c.name for c in relation.columns],
            parent_columns=[c.name for c in relation.parent_columns],
            virtual=relation.virtual,
        )

    for table, parent_table in extra_edges:
        if table in G and parent_table in G:
            G.add_edge(table, parent_table, rel="DECLARED", virtual=False)

    return G


def expand_tables(
    G: nx.MultiGraph,
    seeds: Iterable[str],
    distance: int,
    blocked: Collection[str] = (),
) -> Set[str]:
    """
    Breadth-first expansion of a seed set.

    Args:
        G: Relation graph from ``build_relation_graph``
        seeds: Table names to start from
        distance: Maximum number of relation hops (0 returns the seeds)
        blocked: Tables that are neither returned nor traversed

    Returns:
        Names of every table within ``distance`` hops of a seed
    """
    if distance < 0:
        raise ValueError(f"distance must be non-negative, got {distance}")

    view = G
    if blocked:
        view = nx.subgraph_view(G, filter_node=lambda n: n not in blocked)

    sources = [s for s in dict.fromkeys(seeds) if s in view]
    reached: Set[str] = set()
    for layer in islice(nx.bfs_layers(view, sources), distance + 1):
        reached.update(layer)
    return reached


def relations_within(schema: Schema, tables: Collection[str]) -> List[Relation]:
    """Relations whose child and parent tables are both in ``tables``."""
    return [
        r
        for r in schema.relations
        if r.table.name in tables and r.parent_table.name in tables
    ]


def summarize_graph(G: nx.MultiGraph) -> Dict[str, int]:
    """Quick counts for graph contents."""

    summary = {
        "tables": G.number_of_nodes(),
        "relations": G.number_of_edges(),
        "virtual_relations": sum(1 for _, _, attrs in G.edges(data=True) if attrs.get("virtual")),
        "components": nx.number_connected_components(G),
        "isolated_tables": nx.number_of_isolates(G),
    }
    return summary
