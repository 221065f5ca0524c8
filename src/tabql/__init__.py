"""TabQL - SQL-style and natural-language queries over in-memory tables."""

from tabql.errors import QueryError
from tabql.model import Row, Table
from tabql.nl_interpreter import NaturalLanguageInterpreter
from tabql.notifications import CollectingNotifier, LoggingNotifier, Notification, PrintingNotifier
from tabql.parsing import QueryParser
from tabql.query_builder import StatementForm, StatementKind, build_query
from tabql.query_executor import QueryExecutor, QueryResult
from tabql.repository import InMemoryTableRepository, JsonTableRepository, TableRepository
from tabql.session import QueryMode, QueryOutcome, QuerySession

__all__ = [
    # Main API
    "QuerySession",
    "QueryMode",
    "QueryOutcome",
    "QueryParser",
    "QueryExecutor",
    "QueryResult",
    "NaturalLanguageInterpreter",
    # Statement builder
    "StatementForm",
    "StatementKind",
    "build_query",
    # Data
    "Row",
    "Table",
    "TableRepository",
    "InMemoryTableRepository",
    "JsonTableRepository",
    # Notifications
    "Notification",
    "LoggingNotifier",
    "CollectingNotifier",
    "PrintingNotifier",
    # Errors
    "QueryError",
]

__version__ = "0.1.0"
