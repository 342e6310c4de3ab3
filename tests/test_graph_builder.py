"""Tests for the relation graph and distance expansion."""

import pytest

from schema_kg_docs import Relation, build_relation_graph, expand_tables, summarize_graph
from schema_kg_docs.graph_builder import relations_within


def test_graph_has_one_node_per_table_and_edge_per_relation(filter_schema):
    G = build_relation_graph(filter_schema)
    assert set(G.nodes) == {t.name for t in filter_schema.tables}
    assert G.number_of_edges() == 3
    assert G.has_edge("posts", "users")
    assert G.has_edge("users", "posts")
    assert G.nodes["users"]["labels"] == ["private"]


def test_parallel_relations_are_distinct_edges(filter_schema):
    """Two relations between the same tables stay two edges."""
    posts = filter_schema.find_table_by_name("posts")
    users = filter_schema.find_table_by_name("users")
    filter_schema.relations.append(
        Relation(
            table=posts,
            columns=[posts.find_column_by_name("user_id")],
            parent_table=users,
            parent_columns=[users.find_column_by_name("id")],
            virtual=True,
        )
    )
    G = build_relation_graph(filter_schema)
    assert G.number_of_edges("posts", "users") == 2


@pytest.mark.parametrize(
    "seeds,distance,expected",
    [
        (["users"], 0, {"users"}),
        (["users"], 1, {"users", "user_options", "posts"}),
        (["user_options"], 2, {"user_options", "users", "posts"}),
        (["user_options"], 3, {"user_options", "users", "posts", "comments"}),
        (["user_options", "schema_migrations"], 9, {
            "user_options", "users", "posts", "comments", "schema_migrations",
        }),
        ([], 5, set()),
        (["missing"], 2, set()),
    ],
)
def test_expand_tables(filter_schema, seeds, distance, expected):
    """BFS returns everything within ``distance`` hops."""
    G = build_relation_graph(filter_schema)
    assert expand_tables(G, seeds, distance) == expected


def test_expand_tables_skips_blocked(filter_schema):
    G = build_relation_graph(filter_schema)
    assert expand_tables(G, ["comments"], 9, blocked={"users"}) == {"comments", "posts"}
    assert expand_tables(G, ["users"], 9, blocked={"users"}) == set()


def test_expand_tables_rejects_negative_distance(filter_schema):
    G = build_relation_graph(filter_schema)
    with pytest.raises(ValueError):
        expand_tables(G, ["users"], -1)


def test_relations_within(filter_schema):
    kept = relations_within(filter_schema, {"users", "posts", "comments"})
    assert [(r.table.name, r.parent_table.name) for r in kept] == [
        ("posts", "users"),
        ("comments", "posts"),
    ]


def test_summarize_graph(filter_schema):
    summary = summarize_graph(build_relation_graph(filter_schema))
    assert summary == {
        "tables": 5,
        "relations": 3,
        "virtual_relations": 0,
        "components": 2,
        "isolated_tables": 1,
    }


def test_extra_edges_join_known_tables(filter_schema):
    """Declared edges are added; ones naming unknown tables are ignored."""
    G = build_relation_graph(
        filter_schema,
        extra_edges=[("schema_migrations", "users"), ("schema_migrations", "ghosts")],
    )
    assert G.has_edge("schema_migrations", "users")
    assert "ghosts" not in G
    assert G.number_of_edges() == 4
