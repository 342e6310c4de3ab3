"""Shared fixtures for schema-kg-docs tests."""

from pathlib import Path

import pytest

from schema_kg_docs import Column, Constraint, Index, Schema, Table, Trigger, load_schema

FIXTURES = Path(__file__).parent / "fixtures"


def build_blog_schema() -> Schema:
    """users/posts/migrations schema with no relations."""
    return Schema(
        name="testschema",
        tables=[
            Table(
                name="users",
                comment="users comment",
                columns=[
                    Column(name="id", type="serial"),
                    Column(name="username", type="text"),
                ],
                indexes=[Index(name="user_index")],
                constraints=[Constraint(name="PRIMARY")],
            ),
            Table(
                name="posts",
                comment="posts comment",
                columns=[
                    Column(name="id", type="serial"),
                    Column(name="user_id", type="int"),
                    Column(name="title", type="text"),
                ],
                triggers=[Trigger(name="update_posts_title")],
            ),
            Table(
                name="migrations",
                columns=[
                    Column(name="id", type="serial"),
                    Column(name="name", type="text"),
                ],
            ),
        ],
    )


def assert_references_consistent(schema: Schema) -> None:
    """Every column back-reference matches ``schema.relations`` exactly."""
    for table in schema.tables:
        for column in table.columns:
            expected_parent = [r for r in schema.relations if any(c is column for c in r.columns)]
            expected_child = [
                r for r in schema.relations if any(c is column for c in r.parent_columns)
            ]
            assert [id(r) for r in column.parent_relations] == [id(r) for r in expected_parent]
            assert [id(r) for r in column.child_relations] == [id(r) for r in expected_child]
    for relation in schema.relations:
        assert any(t is relation.table for t in schema.tables)
        assert any(t is relation.parent_table for t in schema.tables)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def filter_schema() -> Schema:
    """Five tables, three relations, loaded and repaired from JSON."""
    return load_schema(FIXTURES / "filter_tables.json")


@pytest.fixture
def blog_schema() -> Schema:
    return build_blog_schema()
