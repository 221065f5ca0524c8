"""Exceptions raised while parsing and executing queries."""

from __future__ import annotations


class QueryError(Exception):
    """Base class for all query failures.

    ``title`` is the short heading used when the failure is reported to a
    notification sink; the exception message is the description.
    """

    title = "Query error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class QuerySyntaxError(QueryError):
    """A recognized statement whose text does not match the grammar."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class UnsupportedStatementError(QueryError):
    """The text is not one of the supported statement kinds."""

    def __init__(self, message: str = "Unsupported query type. Supported types: SELECT, UPDATE, DELETE, INSERT, ALTER") -> None:
        super().__init__(message)


class TableNotFoundError(QueryError):
    """The statement names a table other than the one it runs against."""

    title = "Error"

    def __init__(self, table_name: str) -> None:
        super().__init__(f'Table "{table_name}" not found')
        self.table_name = table_name


class NoValidColumnsError(QueryError):
    """None of the columns in a SELECT list exist on the table."""

    def __init__(self, available_columns: list[str]) -> None:
        super().__init__(
            f"No valid columns found in query. Available columns: {', '.join(available_columns)}"
        )
        self.available_columns = list(available_columns)


class ColumnExistsError(QueryError):
    title = "Error"

    def __init__(self, column: str) -> None:
        super().__init__(f'Column "{column}" already exists')
        self.column = column


class ColumnNotFoundError(QueryError):
    title = "Error"

    def __init__(self, column: str, table_name: str | None = None) -> None:
        if table_name is None:
            message = f'Column "{column}" does not exist'
        else:
            message = f'Column "{column}" does not exist in table "{table_name}"'
        super().__init__(message)
        self.column = column
        self.table_name = table_name


class CountMismatchError(QueryError):
    title = "Error"

    def __init__(self, column_count: int, value_count: int) -> None:
        super().__init__(
            f"The number of columns ({column_count}) doesn't match the number of values ({value_count})"
        )
        self.column_count = column_count
        self.value_count = value_count


class UnsupportedAlterActionError(QueryError):
    title = "Unsupported ALTER operation"

    def __init__(self, action: str) -> None:
        super().__init__("Only RENAME TO, ADD COLUMN and DROP COLUMN are supported")
        self.action = action


class EmptyQueryError(QueryError):
    title = "Error"

    def __init__(self, message: str = "Please enter a query") -> None:
        super().__init__(message)


class UnknownTableError(QueryError):
    """The selected table id is not present in the repository."""

    title = "Error"

    def __init__(self, table_id: str) -> None:
        super().__init__(f"Please select a table first (no table with id {table_id!r})")
        self.table_id = table_id
