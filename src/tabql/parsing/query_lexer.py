"""Lexer for the TabQL query dialect."""

import re

import ply.lex as lex

from tabql.model import is_numeric_text


_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_IDENTIFIER_RE = re.compile(r"[^\W\d]\w*")


class QueryLexer:
    """Lexer for tokenizing TabQL queries."""

    # Reserved keywords
    reserved = {
        "select": "SELECT",
        "from": "FROM",
        "where": "WHERE",
        "order": "ORDER",
        "by": "BY",
        "asc": "ASC",
        "desc": "DESC",
        "limit": "LIMIT",
        "insert": "INSERT",
        "into": "INTO",
        "values": "VALUES",
        "update": "UPDATE",
        "set": "SET",
        "delete": "DELETE",
        "alter": "ALTER",
        "table": "TABLE",
        "rename": "RENAME",
        "to": "TO",
        "add": "ADD",
        "column": "COLUMN",
        "drop": "DROP",
        "like": "LIKE",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "STRING",
        "NUMBER",
        "WORD",
        "STAR",
        "COMMA",
        "LPAREN",
        "RPAREN",
        "EQ",
        "NEQ",
        "LT",
        "LTE",
        "GT",
        "GTE",
        "SEMICOLON",
        "OTHER",
    ] + list(reserved.values())

    # Simple tokens
    t_STAR = r"\*"
    t_COMMA = r","
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_EQ = r"="
    t_NEQ = r"!="
    t_LTE = r"<="
    t_LT = r"<"
    t_GTE = r">="
    t_GT = r">"
    t_SEMICOLON = r";"

    t_ignore = " \t\r"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r""""([^"\\]|\\.)*"|'([^'\\]|\\.)*'"""
        # Strip the quotes; a backslash keeps the next character literally
        t.value = _ESCAPE_RE.sub(r"\1", t.value[1:-1])
        return t

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"--[^\n]*"
        pass  # Ignore comments

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[^\s,()\"';=<>!*]+"
        # An unquoted run is a keyword, an identifier, a number (source text
        # kept; coercion depends on where the literal appears) or a bare word
        # such as 2024-01-01 or %An%.
        if _IDENTIFIER_RE.fullmatch(t.value):
            t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        elif is_numeric_text(t.value):
            t.type = "NUMBER"
        else:
            t.type = "WORD"
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> lex.LexToken:
        # Unknown characters become OTHER tokens; the grammar rejects them
        # where they matter and WHERE/ALTER clauses may simply carry them.
        t.type = "OTHER"
        t.value = t.value[0]
        t.lexer.skip(1)
        return t

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens

