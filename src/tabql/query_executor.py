"""Query executor for TabQL statements."""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass, replace
from typing import Any

from tabql.errors import (
    ColumnExistsError,
    ColumnNotFoundError,
    CountMismatchError,
    NoValidColumnsError,
    TableNotFoundError,
    UnsupportedAlterActionError,
)
from tabql.model import IdFactory, Row, Table, new_row_id, to_number
from tabql.parsing.query_parser import (
    AlterAddColumnQuery,
    AlterDropColumnQuery,
    AlterRenameQuery,
    AlterUnsupportedQuery,
    DeleteQuery,
    InsertQuery,
    OrderBy,
    Query,
    SelectQuery,
    UnparsedCondition,
    UpdateQuery,
)
from tabql.predicate import filter_rows, matches
from tabql.projection import project_rows

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Result of a query execution.

    ``table`` is the new table value produced by a mutating statement, or
    None when the statement only read the table.
    """

    columns: list[str]
    rows: list[dict[str, Any]]
    message: str | None = None
    title: str = "Query executed successfully"
    table: Table | None = None

    @property
    def mutated(self) -> bool:
        return self.table is not None


@dataclass
class SelectResult(QueryResult):
    """Result of a SELECT query."""

    row_count: int = 0


@dataclass
class InsertResult(QueryResult):
    """Result of an INSERT query."""

    row_id: str = ""


@dataclass
class UpdateResult(QueryResult):
    """Result of an UPDATE query."""

    updated_count: int = 0


@dataclass
class DeleteResult(QueryResult):
    """Result of a DELETE query."""

    deleted_count: int = 0


@dataclass
class AlterResult(QueryResult):
    """Result of an ALTER TABLE query."""

    action: str = ""


def compare_sort_values(a: Any, b: Any) -> int:
    """Order two field values for ORDER BY.

    Two strings compare as text; anything else compares as numbers, and a
    pair that is not comparable numerically counts as equal.
    """
    if isinstance(a, str) and isinstance(b, str):
        return (a > b) - (a < b)
    left, right = to_number(a), to_number(b)
    if math.isnan(left) or math.isnan(right):
        return 0
    return (left > right) - (left < right)


class QueryExecutor:
    """Executes parsed TabQL statements against a single table.

    The executor holds no table state: every call gets the current table
    snapshot and mutating statements return a new Table in the result.
    """

    def __init__(self, id_factory: IdFactory | None = None) -> None:
        self.id_factory = id_factory or new_row_id

    @staticmethod
    def _sort_rows(rows: list[Row], order_by: OrderBy) -> list[Row]:
        """Sort rows by one column; ties keep their original order."""
        key = functools.cmp_to_key(
            lambda a, b: compare_sort_values(a.get(order_by.column), b.get(order_by.column))
        )
        return sorted(rows, key=key, reverse=order_by.descending)

    def execute(self, query: Query, table: Table) -> QueryResult:
        """Execute a query against ``table`` and return results."""
        if query.table != table.name:
            raise TableNotFoundError(query.table)

        if isinstance(query, SelectQuery):
            return self._execute_select(query, table)
        elif isinstance(query, InsertQuery):
            return self._execute_insert(query, table)
        elif isinstance(query, UpdateQuery):
            return self._execute_update(query, table)
        elif isinstance(query, DeleteQuery):
            return self._execute_delete(query, table)
        elif isinstance(query, AlterRenameQuery):
            return self._execute_alter_rename(query, table)
        elif isinstance(query, AlterAddColumnQuery):
            return self._execute_alter_add_column(query, table)
        elif isinstance(query, AlterDropColumnQuery):
            return self._execute_alter_drop_column(query, table)
        elif isinstance(query, AlterUnsupportedQuery):
            raise UnsupportedAlterActionError(query.action)
        else:
            raise ValueError(f"Unknown query type: {type(query)}")

    # --- SELECT ---

    def resolve_columns(self, requested: list[str], table: Table) -> list[str]:
        """Resolve a SELECT column list against the table's columns."""
        if "*" in requested:
            return list(table.columns)
        valid = [col.strip() for col in requested if col.strip() in table.columns]
        if not valid:
            raise NoValidColumnsError(table.columns)
        return valid

    def _execute_select(self, query: SelectQuery, table: Table) -> SelectResult:
        """Execute SELECT query."""
        columns = self.resolve_columns(query.columns, table)
        records = list(table.rows)

        # Apply WHERE filter; a clause that did not parse is ignored
        if isinstance(query.where, UnparsedCondition):
            logger.warning("Ignoring malformed WHERE clause %r", query.where.text)
        elif query.where is not None:
            records = filter_rows(records, query.where)

        # Apply ORDER BY
        if query.order_by is not None:
            records = self._sort_rows(records, query.order_by)

        # Apply LIMIT
        if query.limit is not None:
            records = records[: query.limit]

        rows = project_rows(records, columns)
        return SelectResult(
            columns=columns,
            rows=rows,
            message=f"Found {len(rows)} results",
            row_count=len(rows),
        )

    # --- INSERT ---

    def _execute_insert(self, query: InsertQuery, table: Table) -> InsertResult:
        """Execute INSERT query."""
        if query.columns is None:
            columns = list(table.columns)
        else:
            columns = query.columns
            for col in columns:
                if col not in table.columns:
                    raise ColumnNotFoundError(col, table.name)

        if len(columns) != len(query.values):
            raise CountMismatchError(len(columns), len(query.values))

        row = Row(id=self.id_factory(), values=dict(zip(columns, query.values)))
        new_table = replace(table, rows=[*table.rows, row])
        return InsertResult(
            columns=[],
            rows=[],
            message=f'Added new row to table "{table.name}"',
            title="Insert successful",
            table=new_table,
            row_id=row.id,
        )

    # --- UPDATE ---

    def _execute_update(self, query: UpdateQuery, table: Table) -> UpdateResult:
        """Execute UPDATE query."""
        assignments = {a.column: a.value for a in query.assignments}
        updated_count = 0
        new_rows = []
        for row in table.rows:
            if query.where is None or matches(row, query.where):
                new_rows.append(replace(row, values={**row.values, **assignments}))
                updated_count += 1
            else:
                new_rows.append(row)

        return UpdateResult(
            columns=[],
            rows=[],
            message=f'Updated {updated_count} row(s) in table "{table.name}"',
            title="Update successful",
            table=replace(table, rows=new_rows),
            updated_count=updated_count,
        )

    # --- DELETE ---

    def _execute_delete(self, query: DeleteQuery, table: Table) -> DeleteResult:
        """Execute DELETE query."""
        if query.where is None:
            kept: list[Row] = []
        else:
            kept = [r for r in table.rows if not matches(r, query.where)]
        deleted_count = len(table.rows) - len(kept)

        return DeleteResult(
            columns=[],
            rows=[],
            message=f'Deleted {deleted_count} row(s) from table "{table.name}"',
            title="Delete successful",
            table=replace(table, rows=kept),
            deleted_count=deleted_count,
        )

    # --- ALTER ---

    def _execute_alter_rename(self, query: AlterRenameQuery, table: Table) -> AlterResult:
        return AlterResult(
            columns=[],
            rows=[],
            message=f'Table "{table.name}" renamed to "{query.new_name}"',
            title="Table renamed",
            table=replace(table, name=query.new_name),
            action="rename",
        )

    def _execute_alter_add_column(self, query: AlterAddColumnQuery, table: Table) -> AlterResult:
        if query.column in table.columns:
            raise ColumnExistsError(query.column)

        new_rows = [replace(row, values={**row.values, query.column: ""}) for row in table.rows]
        return AlterResult(
            columns=[],
            rows=[],
            message=f'Column "{query.column}" added to table "{table.name}"',
            title="Column added",
            table=replace(table, columns=[*table.columns, query.column], rows=new_rows),
            action="add_column",
        )

    def _execute_alter_drop_column(self, query: AlterDropColumnQuery, table: Table) -> AlterResult:
        if query.column not in table.columns:
            raise ColumnNotFoundError(query.column)

        new_rows = [
            replace(row, values={k: v for k, v in row.values.items() if k != query.column})
            for row in table.rows
        ]
        return AlterResult(
            columns=[],
            rows=[],
            message=f'Column "{query.column}" removed from table "{table.name}"',
            title="Column dropped",
            table=replace(
                table,
                columns=[col for col in table.columns if col != query.column],
                rows=new_rows,
            ),
            action="drop_column",
        )
