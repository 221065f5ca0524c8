"""Parsing module for the TabQL query dialect."""

from tabql.parsing.query_lexer import QueryLexer
from tabql.parsing.query_parser import (
    AlterAddColumnQuery,
    AlterDropColumnQuery,
    AlterRenameQuery,
    AlterUnsupportedQuery,
    Assignment,
    Condition,
    DeleteQuery,
    InsertQuery,
    OrderBy,
    QueryParser,
    SelectQuery,
    UnparsedCondition,
    UpdateQuery,
)

__all__ = [
    "AlterAddColumnQuery",
    "AlterDropColumnQuery",
    "AlterRenameQuery",
    "AlterUnsupportedQuery",
    "Assignment",
    "Condition",
    "DeleteQuery",
    "InsertQuery",
    "OrderBy",
    "QueryLexer",
    "QueryParser",
    "SelectQuery",
    "UnparsedCondition",
    "UpdateQuery",
]
