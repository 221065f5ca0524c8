"""Parser for the TabQL query dialect."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from tabql.errors import QuerySyntaxError, UnsupportedStatementError
from tabql.model import Scalar, coerce_scalar
from tabql.parsing.query_lexer import QueryLexer

logger = logging.getLogger(__name__)

# Leading keywords that start a statement, in the order they are documented
STATEMENT_KEYWORDS = ("ALTER", "UPDATE", "DELETE", "INSERT", "SELECT")

CONDITION_OPERATORS = {
    "EQ": "=",
    "NEQ": "!=",
    "LT": "<",
    "LTE": "<=",
    "GT": ">",
    "GTE": ">=",
    "LIKE": "LIKE",
}

_NAME_TOKENS = frozenset({"IDENTIFIER", "STRING", "WORD"})
_VALUE_TOKENS = frozenset({"IDENTIFIER", "STRING", "NUMBER", "WORD"})

# LIMIT literals with more digits are ignored
_MAX_LIMIT_DIGITS = 18


@dataclass
class Condition:
    """A single WHERE comparison."""

    column: str
    operator: str  # =, !=, <, <=, >, >=, LIKE
    value: Scalar


@dataclass
class UnparsedCondition:
    """A WHERE clause whose text is not a single comparison.

    SELECT ignores it; UPDATE and DELETE match no rows with it.
    """

    text: str


WhereClause = Condition | UnparsedCondition


@dataclass
class OrderBy:
    column: str
    descending: bool = False


@dataclass
class SelectQuery:
    """A SELECT query."""

    table: str
    columns: list[str] = field(default_factory=lambda: ["*"])
    where: WhereClause | None = None
    order_by: OrderBy | None = None
    limit: int | None = None


@dataclass
class InsertQuery:
    """An INSERT query; ``columns`` is None when the column list is omitted."""

    table: str
    values: list[Scalar] = field(default_factory=list)
    columns: list[str] | None = None


@dataclass
class Assignment:
    """A ``column = value`` pair from an UPDATE SET list."""

    column: str
    value: Scalar


@dataclass
class UpdateQuery:
    """An UPDATE query."""

    table: str
    assignments: list[Assignment] = field(default_factory=list)
    where: WhereClause | None = None


@dataclass
class DeleteQuery:
    """A DELETE query."""

    table: str
    where: WhereClause | None = None


@dataclass
class AlterRenameQuery:
    table: str
    new_name: str


@dataclass
class AlterAddColumnQuery:
    table: str
    column: str


@dataclass
class AlterDropColumnQuery:
    table: str
    column: str


@dataclass
class AlterUnsupportedQuery:
    """An ALTER TABLE whose action is not RENAME TO, ADD COLUMN or DROP COLUMN."""

    table: str
    action: str


AlterQuery = AlterRenameQuery | AlterAddColumnQuery | AlterDropColumnQuery | AlterUnsupportedQuery

Query = SelectQuery | InsertQuery | UpdateQuery | DeleteQuery | AlterQuery


def _tokens_text(tokens: list[Any]) -> str:
    return " ".join(str(tok.value) for tok in tokens)


class QueryParser:
    """Parser for TabQL queries.

    Statement classification happens on the token stream before the
    grammar runs: the leading keyword picks the statement kind, and text
    that starts with no statement keyword is rejected up front.
    """

    tokens = QueryLexer.tokens

    def __init__(self) -> None:
        self.lexer = QueryLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : query SEMICOLON
                     | query"""
        p[0] = p[1]

    def p_query(self, p: yacc.YaccProduction) -> None:
        """query : select_query
                 | insert_query
                 | update_query
                 | delete_query
                 | alter_query"""
        p[0] = p[1]

    def p_name(self, p: yacc.YaccProduction) -> None:
        """name : IDENTIFIER
                | STRING
                | WORD"""
        p[0] = p[1]

    # --- SELECT ---

    def p_select_query(self, p: yacc.YaccProduction) -> None:
        """select_query : SELECT select_list FROM name where_clause order_clause limit_clause"""
        p[0] = SelectQuery(
            table=p[4],
            columns=p[2],
            where=p[5],
            order_by=p[6],
            limit=p[7],
        )

    def p_select_list_single(self, p: yacc.YaccProduction) -> None:
        """select_list : select_item"""
        p[0] = [p[1]]

    def p_select_list_multiple(self, p: yacc.YaccProduction) -> None:
        """select_list : select_list COMMA select_item"""
        p[0] = p[1] + [p[3]]

    def p_select_item(self, p: yacc.YaccProduction) -> None:
        """select_item : name
                       | STAR"""
        p[0] = p[1]

    def p_order_clause_empty(self, p: yacc.YaccProduction) -> None:
        """order_clause : """
        p[0] = None

    def p_order_clause(self, p: yacc.YaccProduction) -> None:
        """order_clause : ORDER BY name
                        | ORDER BY name ASC
                        | ORDER BY name DESC"""
        descending = len(p) == 5 and p.slice[4].type == "DESC"
        p[0] = OrderBy(column=p[3], descending=descending)

    def p_limit_clause_empty(self, p: yacc.YaccProduction) -> None:
        """limit_clause : """
        p[0] = None

    def p_limit_clause(self, p: yacc.YaccProduction) -> None:
        """limit_clause : LIMIT NUMBER"""
        if p[2].isdigit() and len(p[2]) <= _MAX_LIMIT_DIGITS:
            p[0] = int(p[2])
        else:
            logger.debug("Ignoring LIMIT %s: not a non-negative integer", p[2])
            p[0] = None

    # --- INSERT ---

    def p_insert_query(self, p: yacc.YaccProduction) -> None:
        """insert_query : INSERT INTO name VALUES LPAREN value_list RPAREN"""
        p[0] = InsertQuery(table=p[3], values=[self._insert_value(v) for v in p[6]])

    def p_insert_query_columns(self, p: yacc.YaccProduction) -> None:
        """insert_query : INSERT INTO name LPAREN name_list RPAREN VALUES LPAREN value_list RPAREN"""
        p[0] = InsertQuery(
            table=p[3],
            columns=p[5],
            values=[self._insert_value(v) for v in p[9]],
        )

    def p_name_list_single(self, p: yacc.YaccProduction) -> None:
        """name_list : name"""
        p[0] = [p[1]]

    def p_name_list_multiple(self, p: yacc.YaccProduction) -> None:
        """name_list : name_list COMMA name"""
        p[0] = p[1] + [p[3]]

    def p_value_list_single(self, p: yacc.YaccProduction) -> None:
        """value_list : value"""
        p[0] = [p[1]]

    def p_value_list_multiple(self, p: yacc.YaccProduction) -> None:
        """value_list : value_list COMMA value"""
        p[0] = p[1] + [p[3]]

    def p_value(self, p: yacc.YaccProduction) -> None:
        """value : STRING
                 | NUMBER
                 | IDENTIFIER
                 | WORD"""
        # (token type, source text); coercion depends on the statement
        p[0] = (p.slice[1].type, p[1])

    # --- UPDATE ---

    def p_update_query(self, p: yacc.YaccProduction) -> None:
        """update_query : UPDATE name SET assignment_list where_clause"""
        p[0] = UpdateQuery(table=p[2], assignments=p[4], where=p[5])

    def p_assignment_list_single(self, p: yacc.YaccProduction) -> None:
        """assignment_list : assignment"""
        p[0] = [p[1]]

    def p_assignment_list_multiple(self, p: yacc.YaccProduction) -> None:
        """assignment_list : assignment_list COMMA assignment"""
        p[0] = p[1] + [p[3]]

    def p_assignment(self, p: yacc.YaccProduction) -> None:
        """assignment : name EQ value"""
        _, text = p[3]
        p[0] = Assignment(column=p[1], value=coerce_scalar(text))

    # --- DELETE ---

    def p_delete_query(self, p: yacc.YaccProduction) -> None:
        """delete_query : DELETE FROM name where_clause"""
        p[0] = DeleteQuery(table=p[3], where=p[4])

    # --- ALTER ---

    def p_alter_query_no_action(self, p: yacc.YaccProduction) -> None:
        """alter_query : ALTER TABLE name"""
        p[0] = AlterUnsupportedQuery(table=p[3], action="")

    def p_alter_query(self, p: yacc.YaccProduction) -> None:
        """alter_query : ALTER TABLE name alter_tokens"""
        p[0] = self._build_alter(p[3], p[4])

    def p_alter_tokens_single(self, p: yacc.YaccProduction) -> None:
        """alter_tokens : alter_token"""
        p[0] = [p[1]]

    def p_alter_tokens_multiple(self, p: yacc.YaccProduction) -> None:
        """alter_tokens : alter_tokens alter_token"""
        p[0] = p[1] + [p[2]]

    def p_alter_token(self, p: yacc.YaccProduction) -> None:
        """alter_token : clause_token"""
        p[0] = p[1]

    def p_alter_token_keyword(self, p: yacc.YaccProduction) -> None:
        """alter_token : ORDER
                       | LIMIT"""
        p[0] = p.slice[1]

    # --- WHERE ---

    def p_where_clause_empty(self, p: yacc.YaccProduction) -> None:
        """where_clause : """
        p[0] = None

    def p_where_clause_blank(self, p: yacc.YaccProduction) -> None:
        """where_clause : WHERE"""
        p[0] = UnparsedCondition(text="")

    def p_where_clause(self, p: yacc.YaccProduction) -> None:
        """where_clause : WHERE clause_tokens"""
        p[0] = self._build_condition(p[2])

    def p_clause_tokens_single(self, p: yacc.YaccProduction) -> None:
        """clause_tokens : clause_token"""
        p[0] = [p[1]]

    def p_clause_tokens_multiple(self, p: yacc.YaccProduction) -> None:
        """clause_tokens : clause_tokens clause_token"""
        p[0] = p[1] + [p[2]]

    def p_clause_token(self, p: yacc.YaccProduction) -> None:
        """clause_token : IDENTIFIER
                        | STRING
                        | NUMBER
                        | WORD
                        | STAR
                        | COMMA
                        | LPAREN
                        | RPAREN
                        | EQ
                        | NEQ
                        | LT
                        | LTE
                        | GT
                        | GTE
                        | LIKE
                        | OTHER
                        | SELECT
                        | FROM
                        | WHERE
                        | BY
                        | ASC
                        | DESC
                        | INSERT
                        | INTO
                        | VALUES
                        | UPDATE
                        | SET
                        | DELETE
                        | ALTER
                        | TABLE
                        | RENAME
                        | TO
                        | ADD
                        | COLUMN
                        | DROP"""
        p[0] = p.slice[1]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise QuerySyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})", position=p.lexpos)
        else:
            raise QuerySyntaxError("Syntax error at end of input")

    # --- Clause interpretation ---

    def _build_condition(self, tokens: list[Any]) -> WhereClause:
        """Interpret WHERE tokens as ``<name> <op> <value>``.

        Anything else becomes an UnparsedCondition instead of an error.
        """
        if (
            len(tokens) >= 3
            and tokens[0].type in _NAME_TOKENS
            and tokens[1].type in CONDITION_OPERATORS
            and tokens[2].type in _VALUE_TOKENS
        ):
            if len(tokens) > 3:
                logger.debug("Ignoring trailing WHERE tokens: %s", _tokens_text(tokens[3:]))
            return Condition(
                column=tokens[0].value,
                operator=CONDITION_OPERATORS[tokens[1].type],
                value=coerce_scalar(tokens[2].value),
            )
        text = _tokens_text(tokens)
        logger.warning("WHERE clause %r is not a single comparison; dropping it", text)
        return UnparsedCondition(text=text)

    def _build_alter(self, table: str, tokens: list[Any]) -> AlterQuery:
        types = [tok.type for tok in tokens]
        if len(tokens) == 3 and tokens[2].type in _NAME_TOKENS:
            target = tokens[2].value
            if types[:2] == ["RENAME", "TO"]:
                return AlterRenameQuery(table=table, new_name=target)
            if types[:2] == ["ADD", "COLUMN"]:
                return AlterAddColumnQuery(table=table, column=target)
            if types[:2] == ["DROP", "COLUMN"]:
                return AlterDropColumnQuery(table=table, column=target)
        return AlterUnsupportedQuery(table=table, action=_tokens_text(tokens))

    @staticmethod
    def _insert_value(value: tuple[str, str]) -> Scalar:
        token_type, text = value
        if token_type == "NUMBER":
            return coerce_scalar(text)
        return text

    # --- Parser methods ---

    def classify(self, data: str) -> str:
        """Return the statement keyword (SELECT, INSERT, ...) that ``data`` starts with.

        Raises UnsupportedStatementError when the text is none of the
        supported statements, and QuerySyntaxError when it mentions SELECT
        without starting with a statement keyword.
        """
        tokens = self.lexer.tokenize(data)
        if tokens and tokens[0].type in STATEMENT_KEYWORDS:
            return tokens[0].type
        if any(tok.type == "SELECT" for tok in tokens):
            raise QuerySyntaxError("Queries must start with SELECT, INSERT, UPDATE, DELETE or ALTER", position=0)
        raise UnsupportedStatementError()

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Query:
        """Parse a query string."""
        if self.parser is None:
            self.build(debug=False, write_tables=False, errorlog=yacc.NullLogger())

        text = data.strip()
        self.classify(text)
        return self.parser.parse(text, lexer=self.lexer.lexer)
