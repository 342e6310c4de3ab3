"""Tests for merging user annotations into a schema."""

import pytest

from conftest import assert_references_consistent
from schema_kg_docs import (
    Annotations,
    Cardinality,
    InvalidCardinalityError,
    RelationAnnotation,
    ResolutionError,
    TableAnnotation,
    merge_annotations,
)
from schema_kg_docs.annotations import ADDITIONAL_RELATION_DEF, resolve_relation


def blog_annotations(**kwargs) -> Annotations:
    defaults = dict(
        name="mydatabase",
        comments=[
            TableAnnotation(
                table="users",
                table_comment="registered users",
                labels=["private"],
                index_comments={"user_index": "user index"},
                constraint_comments={"PRIMARY": "PRIMARY(id)"},
            ),
            TableAnnotation(
                table="posts",
                column_comments={"title": "post title"},
                column_labels={"title": ["content", "searchable"]},
                trigger_comments={"update_posts_title": "update posts title"},
            ),
        ],
        relations=[
            RelationAnnotation(
                table="posts",
                columns=["user_id"],
                parent_table="users",
                parent_columns=["id"],
                definition="posts->users",
            )
        ],
    )
    defaults.update(kwargs)
    return Annotations(**defaults)


def test_merge_comments_and_labels(blog_schema):
    """Comments and labels land on the named objects."""
    merge_annotations(blog_schema, blog_annotations())

    assert blog_schema.name == "mydatabase"
    users = blog_schema.find_table_by_name("users")
    posts = blog_schema.find_table_by_name("posts")
    title = posts.find_column_by_name("title")

    assert users.comment == "registered users"
    assert users.labels == ["private"]
    assert users.find_index_by_name("user_index").comment == "user index"
    assert users.find_constraint_by_name("PRIMARY").comment == "PRIMARY(id)"
    assert posts.find_trigger_by_name("update_posts_title").comment == "update posts title"
    assert posts.comment == "posts comment"
    assert title.comment == "post title"
    assert len(title.labels) == 2


def test_merge_adds_declared_relations(blog_schema):
    """Each valid declaration adds exactly one relation."""
    before = len(blog_schema.relations)
    merge_annotations(blog_schema, blog_annotations())
    assert len(blog_schema.relations) == before + 1

    relation = blog_schema.relations[-1]
    assert relation.definition == "posts->users"
    assert relation.virtual is False
    assert relation.table is blog_schema.find_table_by_name("posts")
    assert relation.parent_table is blog_schema.find_table_by_name("users")
    assert_references_consistent(blog_schema)


def test_labels_are_merged_without_duplicates(blog_schema):
    users = blog_schema.find_table_by_name("users")
    users.labels = ["private", "core"]
    merge_annotations(
        blog_schema,
        Annotations(comments=[TableAnnotation(table="users", labels=["core", "audited"])]),
    )
    assert users.labels == ["private", "core", "audited"]


def test_missing_targets_are_skipped(blog_schema):
    """Annotations for filtered-out objects do nothing."""
    merge_annotations(
        blog_schema,
        Annotations(
            comments=[
                TableAnnotation(table="audit_logs", table_comment="gone"),
                TableAnnotation(
                    table="users",
                    column_comments={"password": "hashed"},
                    index_comments={"missing_index": "nope"},
                ),
            ]
        ),
    )
    users = blog_schema.find_table_by_name("users")
    assert users.comment == "users comment"
    assert blog_schema.get_table("audit_logs") is None


def test_unresolvable_relation_leaves_schema_untouched(blog_schema):
    """A bad declaration aborts the merge before any change is made."""
    annotations = blog_annotations(
        relations=[
            RelationAnnotation(
                table="posts", columns=["user_id"], parent_table="users", parent_columns=["id"]
            ),
            RelationAnnotation(
                table="posts", columns=["user_id"], parent_table="accounts", parent_columns=["id"]
            ),
        ]
    )

    with pytest.raises(ResolutionError) as excinfo:
        merge_annotations(blog_schema, annotations)

    assert "accounts" in str(excinfo.value)
    assert blog_schema.name == "testschema"
    assert blog_schema.relations == []
    assert blog_schema.find_table_by_name("users").comment == "users comment"
    assert_references_consistent(blog_schema)


@pytest.mark.parametrize(
    "columns,parent_columns",
    [
        (["user_id"], ["uuid"]),
        (["author_id"], ["id"]),
        ([], []),
        (["user_id", "id"], ["id"]),
    ],
)
def test_resolve_relation_errors(blog_schema, columns, parent_columns):
    declared = RelationAnnotation(
        table="posts", columns=columns, parent_table="users", parent_columns=parent_columns
    )
    with pytest.raises(ResolutionError):
        resolve_relation(blog_schema, declared)


def test_relation_defaults_and_cardinality(blog_schema):
    declared = RelationAnnotation.model_validate(
        {
            "table": "posts",
            "columns": ["user_id"],
            "cardinality": "Zero or more",
            "parentTable": "users",
            "parentColumns": ["id"],
            "parentCardinality": "exactly-one",
        }
    )
    relation = resolve_relation(blog_schema, declared)
    assert relation.definition == ADDITIONAL_RELATION_DEF
    assert relation.cardinality == Cardinality.ZERO_OR_MORE
    assert relation.parent_cardinality == Cardinality.EXACTLY_ONE


def test_unknown_cardinality_is_rejected(blog_schema):
    declared = RelationAnnotation(
        table="posts",
        columns=["user_id"],
        cardinality="many",
        parent_table="users",
        parent_columns=["id"],
    )
    with pytest.raises(InvalidCardinalityError) as excinfo:
        merge_annotations(blog_schema, Annotations(relations=[declared]))
    assert excinfo.value.token == "many"
    assert blog_schema.relations == []


def test_relations_to_pruned_tables_are_skipped(blog_schema):
    """Declarations naming a filtered-out table are dropped quietly."""
    blog_schema.tables = [t for t in blog_schema.tables if t.name != "users"]
    merge_annotations(blog_schema, blog_annotations(), pruned={"users", "migrations"})

    assert blog_schema.relations == []
    title = blog_schema.find_table_by_name("posts").find_column_by_name("title")
    assert title.comment == "post title"


def test_pruned_names_do_not_hide_typos(blog_schema):
    annotations = blog_annotations(
        relations=[
            RelationAnnotation(
                table="posts", columns=["user_id"], parent_table="user", parent_columns=["id"]
            )
        ]
    )
    with pytest.raises(ResolutionError):
        merge_annotations(blog_schema, annotations, pruned={"migrations"})
