"""Query plans for table operations.

Tool arguments describe filters and joins as loose JSON. This module turns
them into small immutable plans that a ``BackendProvider`` executes, so the
translation rules can be tested without a database.

Filter shape::

    {"status": "draft"}                 -> status eq "draft"
    {"age": {"gt": 18, "lte": 65}}      -> age gt 18 AND age lte 65

Join shape::

    [{"type": "inner", "table": "users", "on": "posts.user_id=users.id"}]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from supabase_mcp.errors import InvalidParamsError

# PostgREST horizontal filtering operators
FILTER_OPERATORS = frozenset({
    "eq", "neq", "gt", "gte", "lt", "lte",
    "like", "ilike", "match", "imatch",
    "is", "isdistinct", "in",
    "cs", "cd", "ov", "sl", "sr", "nxl", "nxr", "adj",
    "fts", "plfts", "phfts", "wfts",
})

JOIN_TYPES = ("inner", "left", "right", "full")


@dataclass(frozen=True)
class Condition:
    """A single ``column <operator> value`` predicate."""

    column: str
    operator: str
    value: Any


@dataclass(frozen=True)
class JoinSpec:
    """A join of ``table`` onto the queried table."""

    table: str
    left_table: str
    left_column: str
    right_table: str
    right_column: str
    type: str = "left"

    @property
    def on(self) -> str:
        return f"{self.left_table}.{self.left_column}={self.right_table}.{self.right_column}"

    def column_for(self, table: str) -> str | None:
        """Return the join column belonging to ``table``, if either side names it."""
        if self.left_table == table:
            return self.left_column
        if self.right_table == table:
            return self.right_column
        return None


@dataclass(frozen=True)
class SelectQuery:
    table: str
    columns: tuple[str, ...] = ()
    conditions: tuple[Condition, ...] = ()
    joins: tuple[JoinSpec, ...] = ()


@dataclass(frozen=True)
class InsertQuery:
    table: str
    row: dict[str, Any] = field(default_factory=dict)
    returning: tuple[str, ...] = ()


@dataclass(frozen=True)
class UpdateQuery:
    table: str
    values: dict[str, Any] = field(default_factory=dict)
    conditions: tuple[Condition, ...] = ()
    returning: tuple[str, ...] = ()


@dataclass(frozen=True)
class DeleteQuery:
    table: str
    conditions: tuple[Condition, ...] = ()
    returning: tuple[str, ...] = ()


def parse_filter(filter: dict[str, Any] | None) -> tuple[Condition, ...]:
    """Translate a filter mapping into AND-ed conditions.

    Raises:
        InvalidParamsError: If an operator is not a PostgREST operator.
    """
    if not filter:
        return ()

    conditions = []
    for column, value in filter.items():
        if isinstance(value, dict):
            if not value:
                raise InvalidParamsError(f"filter.{column}: no operators given")
            for operator, operand in value.items():
                if operator not in FILTER_OPERATORS:
                    raise InvalidParamsError(
                        f"filter.{column}: unsupported operator '{operator}'"
                    )
                conditions.append(Condition(column, operator, operand))
        else:
            conditions.append(Condition(column, "eq", value))
    return tuple(conditions)


def _split_column_ref(ref: str, on: str) -> tuple[str, str]:
    table, sep, column = ref.strip().partition(".")
    if not sep or not table or not column:
        raise InvalidParamsError(
            f"joins: invalid condition '{on}', expected 'table.column=table.column'"
        )
    return table, column


def parse_join(join: dict[str, Any]) -> JoinSpec:
    """Translate one join mapping into a ``JoinSpec``."""
    if not isinstance(join, dict):
        raise InvalidParamsError("joins: each join must be an object")
    table = join.get("table")
    on = join.get("on")
    if not table or not on:
        raise InvalidParamsError("joins: each join needs 'table' and 'on'")
    for name, value in (("table", table), ("on", on), ("type", join.get("type"))):
        if value is not None and not isinstance(value, str):
            raise InvalidParamsError(f"joins.{name}: expected a string")

    join_type = (join.get("type") or "left").lower()
    if join_type not in JOIN_TYPES:
        raise InvalidParamsError(
            f"joins: unsupported join type '{join_type}', expected one of {', '.join(JOIN_TYPES)}"
        )

    left, sep, right = on.partition("=")
    if not sep:
        raise InvalidParamsError(
            f"joins: invalid condition '{on}', expected 'table.column=table.column'"
        )
    left_table, left_column = _split_column_ref(left, on)
    right_table, right_column = _split_column_ref(right, on)
    if table not in (left_table, right_table):
        raise InvalidParamsError(f"joins: condition '{on}' does not reference table '{table}'")

    return JoinSpec(
        table=table,
        left_table=left_table,
        left_column=left_column,
        right_table=right_table,
        right_column=right_column,
        type=join_type,
    )


def parse_joins(joins: list[dict[str, Any]] | None) -> tuple[JoinSpec, ...]:
    """Translate join mappings, preserving their order."""
    return tuple(parse_join(j) for j in joins or [])


def project(rows: Any, fields: tuple[str, ...]) -> Any:
    """Keep only ``fields`` of each returned row (no-op when ``fields`` is empty)."""
    if not fields:
        return rows
    if isinstance(rows, dict):
        return {k: v for k, v in rows.items() if k in fields}
    if isinstance(rows, list):
        return [project(r, fields) for r in rows]
    return rows
