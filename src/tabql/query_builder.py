"""Build TabQL query text from structured form input.

Every string produced here parses back through ``QueryParser`` to the
statement the form describes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from tabql.model import is_numeric_text


class StatementKind(enum.Enum):
    SELECT = "SELECT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    INSERT = "INSERT"
    ALTER_RENAME = "ALTER_RENAME"
    ALTER_ADD = "ALTER_ADD"
    ALTER_DROP = "ALTER_DROP"


@dataclass
class SetValue:
    """One column/value pair from the SET (or INSERT values) form rows."""

    column: str
    value: str


@dataclass
class StatementForm:
    """The form controls a query is assembled from."""

    kind: StatementKind
    table_name: str
    table_columns: list[str] = field(default_factory=list)
    selected_columns: list[str] = field(default_factory=list)
    where_column: str = ""
    where_operator: str = "="
    where_value: str = ""
    order_by_column: str = ""
    order_direction: str = "ASC"
    limit: str = ""
    set_values: list[SetValue] = field(default_factory=list)
    new_table_name: str = ""
    new_column_name: str = ""
    column_to_drop: str = ""


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def quote_name(name: str) -> str:
    """Quote a table or column name."""
    return f'"{_escape(name)}"'


def format_literal(value: str) -> str:
    """Emit numeric text as-is and quote everything else."""
    if is_numeric_text(value):
        return value.strip()
    return f'"{_escape(value)}"'


def _where_clause(form: StatementForm) -> str | None:
    if form.where_column and form.where_operator and form.where_value:
        return f"WHERE {quote_name(form.where_column)} {form.where_operator} {format_literal(form.where_value)}"
    return None


def _build_select(form: StatementForm) -> str:
    parts = ["SELECT"]
    selected = form.selected_columns
    if not selected or len(selected) == len(form.table_columns):
        parts.append("*")
    else:
        parts.append(", ".join(quote_name(col) for col in selected))
    parts.append(f"FROM {quote_name(form.table_name)}")

    where = _where_clause(form)
    if where:
        parts.append(where)
    if form.order_by_column:
        direction = "DESC" if form.order_direction.upper() == "DESC" else "ASC"
        parts.append(f"ORDER BY {quote_name(form.order_by_column)} {direction}")
    if form.limit.strip().isdigit():
        parts.append(f"LIMIT {form.limit.strip()}")
    return " ".join(parts)


def _build_update(form: StatementForm) -> str | None:
    if not form.set_values:
        # Can't generate an UPDATE without SET values
        return None
    assignments = ", ".join(
        f"{quote_name(item.column)} = {format_literal(item.value)}" for item in form.set_values
    )
    parts = [f"UPDATE {quote_name(form.table_name)} SET {assignments}"]
    where = _where_clause(form)
    if where:
        parts.append(where)
    return " ".join(parts)


def _build_delete(form: StatementForm) -> str:
    parts = [f"DELETE FROM {quote_name(form.table_name)}"]
    where = _where_clause(form)
    if where:
        parts.append(where)
    return " ".join(parts)


def _build_insert(form: StatementForm) -> str | None:
    if not form.selected_columns:
        return None
    values = []
    for col in form.selected_columns:
        match = next((sv for sv in form.set_values if sv.column == col), None)
        values.append(format_literal(match.value) if match else '""')
    columns = ", ".join(quote_name(col) for col in form.selected_columns)
    return f"INSERT INTO {quote_name(form.table_name)} ({columns}) VALUES ({', '.join(values)})"


def build_query(form: StatementForm) -> str | None:
    """Assemble a single-line query, or None when the form is incomplete."""
    if form.kind is StatementKind.SELECT:
        return _build_select(form)
    elif form.kind is StatementKind.UPDATE:
        return _build_update(form)
    elif form.kind is StatementKind.DELETE:
        return _build_delete(form)
    elif form.kind is StatementKind.INSERT:
        return _build_insert(form)

    prefix = f"ALTER TABLE {quote_name(form.table_name)}"
    if form.kind is StatementKind.ALTER_RENAME:
        return f"{prefix} RENAME TO {quote_name(form.new_table_name)}" if form.new_table_name else None
    elif form.kind is StatementKind.ALTER_ADD:
        return f"{prefix} ADD COLUMN {quote_name(form.new_column_name)}" if form.new_column_name else None
    elif form.kind is StatementKind.ALTER_DROP:
        return f"{prefix} DROP COLUMN {quote_name(form.column_to_drop)}" if form.column_to_drop else None
    raise ValueError(f"Unknown statement kind: {form.kind}")
