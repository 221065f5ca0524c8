"""Run queries against a repository table and report the outcome."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from tabql.errors import EmptyQueryError, QueryError, UnknownTableError, UnsupportedStatementError
from tabql.model import IdFactory, Table
from tabql.nl_interpreter import DEFAULT_NL_LIMIT, NaturalLanguageInterpreter
from tabql.notifications import LoggingNotifier, Notification, NotificationSink, Severity
from tabql.parsing.query_parser import QueryParser
from tabql.query_executor import DeleteResult, InsertResult, QueryExecutor, QueryResult, UpdateResult
from tabql.repository import TableRepository

logger = logging.getLogger(__name__)


class QueryMode(enum.Enum):
    SQL = "sql"
    NATURAL_LANGUAGE = "nl"


@dataclass
class QueryOutcome:
    """What a caller gets back from one submitted query."""

    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    message: str | None = None
    error: QueryError | None = None
    affected_count: int | None = None
    table: Table | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class QuerySession:
    """Runs textual or natural-language queries against repository tables.

    The session keeps no table state between calls: each query loads the
    current table list, runs against one table snapshot and, for mutating
    statements, saves the full list back with the new table value.
    """

    def __init__(
        self,
        repository: TableRepository,
        notifier: NotificationSink | None = None,
        id_factory: IdFactory | None = None,
        default_nl_limit: int = DEFAULT_NL_LIMIT,
    ) -> None:
        self.repository = repository
        self.notifier = notifier or LoggingNotifier()
        self.parser = QueryParser()
        self.executor = QueryExecutor(id_factory=id_factory)
        self.interpreter = NaturalLanguageInterpreter(default_limit=default_nl_limit)

    def run(self, table_id: str, text: str, mode: QueryMode = QueryMode.SQL) -> QueryOutcome:
        if mode is QueryMode.NATURAL_LANGUAGE:
            return self.run_natural_language(table_id, text)
        return self.run_sql(table_id, text)

    def run_sql(self, table_id: str, text: str) -> QueryOutcome:
        """Parse and execute a textual query against the table with ``table_id``.

        Failures are reported to the notifier and returned in the outcome.
        UnsupportedStatementError is reported and then re-raised.
        """
        try:
            if not text.strip():
                raise EmptyQueryError("Please enter a SQL query")
            tables = self.repository.load()
            table = self._select_table(tables, table_id)
            query = self.parser.parse(text)
            result = self.executor.execute(query, table)
        except UnsupportedStatementError as e:
            self._report_error(e)
            raise
        except QueryError as e:
            return self._report_error(e)
        except Exception as e:
            logger.exception("Query %r failed", text)
            return self._report_error(QueryError(str(e) or "Failed to execute query"))

        if result.mutated:
            self._persist(tables, result.table)
        return self._report_result(result)

    def run_natural_language(self, table_id: str, text: str) -> QueryOutcome:
        """Interpret a natural-language phrase against the table with ``table_id``."""
        try:
            if not text.strip():
                raise EmptyQueryError("Please enter a natural language query")
            table = self._select_table(self.repository.load(), table_id)
            result = self.interpreter.interpret(text, table)
        except QueryError as e:
            return self._report_error(e)
        except Exception as e:
            logger.exception("Natural language query %r failed", text)
            return self._report_error(QueryError(str(e) or "Failed to execute natural language query"))

        self.notifier.notify(Notification(result.title, result.message or ""))
        return QueryOutcome(
            columns=result.columns,
            rows=result.rows,
            message=result.message,
            affected_count=len(result.rows),
        )

    @staticmethod
    def _select_table(tables: list[Table], table_id: str) -> Table:
        for table in tables:
            if table.id == table_id:
                return table
        raise UnknownTableError(table_id)

    def _persist(self, tables: list[Table], updated: Table) -> None:
        new_tables = [updated if t.id == updated.id else t for t in tables]
        self.repository.save(new_tables)
        logger.info("Saved table %r (%d rows)", updated.name, len(updated.rows))

    def _report_result(self, result: QueryResult) -> QueryOutcome:
        self.notifier.notify(Notification(result.title, result.message or ""))
        if isinstance(result, UpdateResult):
            affected = result.updated_count
        elif isinstance(result, DeleteResult):
            affected = result.deleted_count
        elif isinstance(result, InsertResult):
            affected = 1
        elif result.mutated:
            affected = None
        else:
            affected = len(result.rows)
        return QueryOutcome(
            columns=result.columns,
            rows=result.rows,
            message=result.message,
            affected_count=affected,
            table=result.table,
        )

    def _report_error(self, error: QueryError) -> QueryOutcome:
        logger.warning("%s: %s", error.title, error.message)
        self.notifier.notify(Notification(error.title, error.message, Severity.ERROR))
        return QueryOutcome(message=error.message, error=error)
