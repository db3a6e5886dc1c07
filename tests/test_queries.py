"""Tests for filter and join translation into query plans."""

from __future__ import annotations

import pytest

from supabase_mcp.errors import InvalidParamsError
from supabase_mcp.queries import (
    Condition,
    JoinSpec,
    parse_filter,
    parse_join,
    parse_joins,
    project,
)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def test_scalar_filter_is_equality():
    assert parse_filter({"status": "draft"}) == (Condition("status", "eq", "draft"),)


def test_operator_filter_is_single_condition():
    assert parse_filter({"age": {"gt": 18}}) == (Condition("age", "gt", 18),)


def test_two_fields_are_anded():
    conditions = parse_filter({"status": "draft", "age": {"gte": 21}})
    assert conditions == (
        Condition("status", "eq", "draft"),
        Condition("age", "gte", 21),
    )


def test_multiple_operators_on_one_column():
    conditions = parse_filter({"age": {"gt": 18, "lte": 65}})
    assert conditions == (Condition("age", "gt", 18), Condition("age", "lte", 65))


def test_null_and_bool_values_pass_through():
    conditions = parse_filter({"deleted_at": None, "published": True})
    assert conditions == (
        Condition("deleted_at", "eq", None),
        Condition("published", "eq", True),
    )


@pytest.mark.parametrize("empty", [None, {}])
def test_empty_filter(empty):
    assert parse_filter(empty) == ()


def test_unknown_operator_rejected():
    with pytest.raises(InvalidParamsError, match="filter.age: unsupported operator 'between'"):
        parse_filter({"age": {"between": [1, 2]}})


def test_empty_operator_object_rejected():
    with pytest.raises(InvalidParamsError, match="filter.age"):
        parse_filter({"age": {}})


# ---------------------------------------------------------------------------
# Joins
# ---------------------------------------------------------------------------


def test_join_defaults_to_left():
    join = parse_join({"table": "users", "on": "posts.user_id=users.id"})
    assert join == JoinSpec(
        table="users",
        left_table="posts",
        left_column="user_id",
        right_table="users",
        right_column="id",
        type="left",
    )
    assert join.on == "posts.user_id=users.id"


def test_join_type_is_case_insensitive():
    assert parse_join({"type": "INNER", "table": "users", "on": "posts.user_id=users.id"}).type == "inner"


def test_join_column_for():
    join = parse_join({"table": "users", "on": "posts.user_id=users.id"})
    assert join.column_for("posts") == "user_id"
    assert join.column_for("users") == "id"
    assert join.column_for("comments") is None


@pytest.mark.parametrize(
    "join,message",
    [
        ({"on": "posts.user_id=users.id"}, "needs 'table' and 'on'"),
        ({"table": "users"}, "needs 'table' and 'on'"),
        ({"table": "users", "on": "posts.user_id"}, "invalid condition"),
        ({"table": "users", "on": "user_id=users.id"}, "invalid condition"),
        ({"table": "users", "on": "posts.user_id=authors.id"}, "does not reference table 'users'"),
        ({"type": "cross", "table": "users", "on": "posts.user_id=users.id"}, "unsupported join type"),
        ({"type": 1, "table": "users", "on": "posts.user_id=users.id"}, "joins.type: expected a string"),
        ({"table": ["users"], "on": "posts.user_id=users.id"}, "joins.table: expected a string"),
        ({"table": "users", "on": {"posts.user_id": "users.id"}}, "joins.on: expected a string"),
        ("users", "each join must be an object"),
    ],
)
def test_invalid_joins(join, message):
    with pytest.raises(InvalidParamsError, match=message):
        parse_join(join)


def test_parse_joins_preserves_order():
    joins = parse_joins([
        {"table": "users", "on": "posts.user_id=users.id"},
        {"type": "inner", "table": "comments", "on": "comments.post_id=posts.id"},
    ])
    assert [j.table for j in joins] == ["users", "comments"]
    assert parse_joins(None) == ()


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def test_project_rows():
    rows = [{"id": 1, "name": "Alice", "email": "a@example.com"}]
    assert project(rows, ("id", "name")) == [{"id": 1, "name": "Alice"}]


def test_project_without_fields_is_noop():
    rows = [{"id": 1}]
    assert project(rows, ()) is rows
