"""Tests for the TabQL lexer and query parser."""

import pytest

from tabql.errors import QuerySyntaxError, UnsupportedStatementError
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


@pytest.fixture
def parser() -> QueryParser:
    return QueryParser()


class TestQueryLexer:
    """Tests for the query lexer."""

    def test_tokenize_select(self):
        """Test tokenizing a select query."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize('SELECT * FROM "Employees"')
        token_types = [t.type for t in tokens]

        assert token_types == ["SELECT", "STAR", "FROM", "STRING"]
        assert tokens[3].value == "Employees"

    def test_keywords_case_insensitive(self):
        """Test that keywords are recognized in any case."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("select Name from Employees")
        token_types = [t.type for t in tokens]

        assert token_types == ["SELECT", "IDENTIFIER", "FROM", "IDENTIFIER"]

    def test_tokenize_where(self):
        """Test tokenizing a where clause with every comparison operator."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("a = 1 != < <= > >= LIKE")
        token_types = [t.type for t in tokens]

        assert token_types == ["IDENTIFIER", "EQ", "NUMBER", "NEQ", "LT", "LTE", "GT", "GTE", "LIKE"]

    def test_single_quoted_string_with_escape(self):
        """Test single quotes and backslash escapes."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize(r"'it\'s' " + r'"say \"hi\""')

        assert [t.type for t in tokens] == ["STRING", "STRING"]
        assert tokens[0].value == "it's"
        assert tokens[1].value == 'say "hi"'

    def test_number_keeps_source_text(self):
        """Test that number tokens keep their text."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("-3.50 +7 1e3")

        assert [t.type for t in tokens] == ["NUMBER", "NUMBER", "NUMBER"]
        assert [t.value for t in tokens] == ["-3.50", "+7", "1e3"]

    def test_unknown_characters_become_other(self):
        """Test that the lexer never fails on unknown characters."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("a ! b")

        assert [t.type for t in tokens] == ["IDENTIFIER", "OTHER", "IDENTIFIER"]
        assert tokens[1].value == "!"

    def test_bare_words(self):
        """Test that unquoted runs like dates and LIKE patterns stay whole."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("Date = 2024-01-01 %An% a-b")

        assert [t.type for t in tokens] == ["IDENTIFIER", "EQ", "WORD", "WORD", "WORD"]
        assert [t.value for t in tokens[2:]] == ["2024-01-01", "%An%", "a-b"]

    def test_comments_ignored(self):
        """Test that -- comments are skipped."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("SELECT -- all columns\n*")

        assert [t.type for t in tokens] == ["SELECT", "STAR"]


class TestClassification:
    """Tests for statement classification."""

    def test_classify_leading_keyword(self, parser):
        """Test that the leading keyword picks the statement kind."""
        assert parser.classify('alter table "T" rename to "U"') == "ALTER"
        assert parser.classify("DELETE FROM T") == "DELETE"
        assert parser.classify("  select * from T") == "SELECT"

    def test_unsupported_statement(self, parser):
        """Test that text without a statement keyword is unsupported."""
        with pytest.raises(UnsupportedStatementError) as exc_info:
            parser.parse("SHOW TABLES")

        assert "Supported types: SELECT, UPDATE, DELETE, INSERT, ALTER" in exc_info.value.message

    def test_create_is_unsupported(self, parser):
        """Test that CREATE TABLE is not a supported statement."""
        with pytest.raises(UnsupportedStatementError):
            parser.parse('CREATE TABLE "T"')

    def test_select_not_leading_is_syntax_error(self, parser):
        """Test that a SELECT keyword later in the text is a syntax error."""
        with pytest.raises(QuerySyntaxError):
            parser.parse('EXPLAIN SELECT * FROM "T"')

    def test_malformed_body_is_syntax_error(self, parser):
        """Test that a recognized statement with a bad body raises."""
        with pytest.raises(QuerySyntaxError):
            parser.parse('SELECT FROM "Employees"')

    def test_unterminated_insert_is_syntax_error(self, parser):
        """Test a syntax error at end of input."""
        with pytest.raises(QuerySyntaxError):
            parser.parse('INSERT INTO "T" VALUES (1, 2')


class TestSelectParser:
    """Tests for parsing SELECT queries."""

    def test_parse_select_star(self, parser):
        """Test parsing SELECT *."""
        query = parser.parse('SELECT * FROM "Employees"')

        assert query == SelectQuery(table="Employees", columns=["*"])

    def test_parse_select_columns(self, parser):
        """Test parsing quoted and bare column names."""
        query = parser.parse('SELECT "Name", Age FROM Employees')

        assert isinstance(query, SelectQuery)
        assert query.table == "Employees"
        assert query.columns == ["Name", "Age"]

    def test_parse_where(self, parser):
        """Test parsing a WHERE comparison."""
        query = parser.parse('SELECT * FROM "Employees" WHERE "Age" > 40')

        assert query.where == Condition(column="Age", operator=">", value=40)

    def test_where_quoted_numeric_literal_is_coerced(self, parser):
        """Test that a quoted numeric WHERE literal becomes a number."""
        query = parser.parse('SELECT * FROM "Employees" WHERE "Age" = "30"')

        assert query.where.value == 30

    def test_where_like(self, parser):
        """Test parsing LIKE."""
        query = parser.parse("SELECT * FROM Employees WHERE Name like '%nn%'")

        assert query.where == Condition(column="Name", operator="LIKE", value="%nn%")

    def test_parse_order_by_and_limit(self, parser):
        """Test ORDER BY ... DESC LIMIT n."""
        query = parser.parse('SELECT * FROM "Employees" ORDER BY "Age" DESC LIMIT 5')

        assert query.order_by == OrderBy(column="Age", descending=True)
        assert query.limit == 5

    def test_order_by_defaults_to_ascending(self, parser):
        """Test ORDER BY without a direction."""
        query = parser.parse('SELECT * FROM "Employees" ORDER BY "Name"')

        assert query.order_by == OrderBy(column="Name", descending=False)

    def test_non_integer_limit_ignored(self, parser):
        """Test that a fractional or negative LIMIT is ignored."""
        assert parser.parse('SELECT * FROM "Employees" LIMIT 2.5').limit is None
        assert parser.parse('SELECT * FROM "Employees" LIMIT -1').limit is None

    def test_oversized_limit_ignored(self, parser):
        """Test that a LIMIT too long to convert is ignored."""
        query = parser.parse('SELECT * FROM "Employees" LIMIT ' + "9" * 5000)

        assert query.limit is None

    def test_where_bare_date(self, parser):
        """Test an unquoted date literal in WHERE."""
        query = parser.parse("SELECT * FROM Employees WHERE Date = 2024-01-01")

        assert query.where == Condition(column="Date", operator="=", value="2024-01-01")

    def test_where_bare_like_pattern(self, parser):
        """Test an unquoted LIKE pattern."""
        query = parser.parse("DELETE FROM Employees WHERE Name LIKE %An%")

        assert query.where == Condition(column="Name", operator="LIKE", value="%An%")

    def test_where_huge_number(self, parser):
        """Test that a numeric literal past the integer conversion limit parses."""
        query = parser.parse("SELECT * FROM Employees WHERE Age > 4" + "1" * 5000)

        assert query.where.operator == ">"
        assert isinstance(query.where.value, float)

    def test_trailing_semicolon(self, parser):
        """Test that a trailing semicolon is accepted."""
        query = parser.parse('SELECT * FROM "Employees";')

        assert isinstance(query, SelectQuery)

    def test_malformed_where_becomes_unparsed(self, parser):
        """Test that a WHERE that is not one comparison is kept as text."""
        query = parser.parse('SELECT * FROM "Employees" WHERE "Age" BETWEEN 1')

        assert query.where == UnparsedCondition(text="Age BETWEEN 1")

    def test_empty_where(self, parser):
        """Test a WHERE keyword with nothing after it."""
        query = parser.parse('SELECT * FROM "Employees" WHERE')

        assert query.where == UnparsedCondition(text="")

    def test_malformed_where_before_order_by(self, parser):
        """Test that ORDER BY still parses after a malformed WHERE."""
        query = parser.parse('SELECT * FROM "Employees" WHERE "Age" ORDER BY "Age"')

        assert isinstance(query.where, UnparsedCondition)
        assert query.order_by == OrderBy(column="Age")

    def test_trailing_where_tokens_ignored(self, parser):
        """Test that tokens after the first comparison are ignored."""
        query = parser.parse('SELECT * FROM "Employees" WHERE "Age" > 40 AND "Name" = "Bo"')

        assert query.where == Condition(column="Age", operator=">", value=40)

    def test_parser_reusable(self, parser):
        """Test that one parser handles several queries."""
        first = parser.parse('SELECT * FROM "A"')
        second = parser.parse('DELETE FROM "B"')

        assert first.table == "A"
        assert second.table == "B"


class TestMutationParser:
    """Tests for parsing INSERT, UPDATE and DELETE."""

    def test_parse_insert(self, parser):
        """Test INSERT without a column list."""
        query = parser.parse('INSERT INTO "Employees" VALUES ("Cy", 50)')

        assert query == InsertQuery(table="Employees", values=["Cy", 50], columns=None)

    def test_insert_quoted_number_stays_text(self, parser):
        """Test that a quoted INSERT value is not coerced."""
        query = parser.parse('INSERT INTO "Employees" VALUES ("Cy", "50")')

        assert query.values == ["Cy", "50"]

    def test_insert_bare_word_and_float(self, parser):
        """Test bare words and fractional numbers as INSERT values."""
        query = parser.parse("INSERT INTO Employees VALUES (Cy, 2.5)")

        assert query.values == ["Cy", 2.5]

    def test_parse_insert_with_columns(self, parser):
        """Test INSERT with a column list."""
        query = parser.parse('INSERT INTO "Employees" ("Name", "Age") VALUES (\'Di\', 28);')

        assert query.columns == ["Name", "Age"]
        assert query.values == ["Di", 28]

    def test_parse_update(self, parser):
        """Test UPDATE with two assignments and a WHERE."""
        query = parser.parse('UPDATE "Employees" SET "Age" = "31", Name = Ann WHERE "Name" = "Ann"')

        assert query == UpdateQuery(
            table="Employees",
            assignments=[Assignment(column="Age", value=31), Assignment(column="Name", value="Ann")],
            where=Condition(column="Name", operator="=", value="Ann"),
        )

    def test_update_bare_date(self, parser):
        """Test an unquoted date in an UPDATE assignment."""
        query = parser.parse("UPDATE Employees SET Date = 2025-01-01 WHERE Name = Ann")

        assert query.assignments == [Assignment(column="Date", value="2025-01-01")]

    def test_insert_bare_date(self, parser):
        """Test an unquoted date as an INSERT value."""
        query = parser.parse("INSERT INTO Employees VALUES (Cy, 2024-01-01)")

        assert query.values == ["Cy", "2024-01-01"]

    def test_parse_delete(self, parser):
        """Test DELETE with and without WHERE."""
        assert parser.parse('DELETE FROM "Employees"') == DeleteQuery(table="Employees")

        query = parser.parse('DELETE FROM "Employees" WHERE "Age" <= 30')
        assert query.where == Condition(column="Age", operator="<=", value=30)


class TestAlterParser:
    """Tests for parsing ALTER TABLE."""

    def test_parse_rename(self, parser):
        """Test RENAME TO."""
        query = parser.parse('ALTER TABLE "Employees" RENAME TO "Staff"')

        assert query == AlterRenameQuery(table="Employees", new_name="Staff")

    def test_parse_add_column(self, parser):
        """Test ADD COLUMN."""
        query = parser.parse('ALTER TABLE "Employees" ADD COLUMN "Email"')

        assert query == AlterAddColumnQuery(table="Employees", column="Email")

    def test_parse_drop_column(self, parser):
        """Test DROP COLUMN."""
        query = parser.parse("alter table Employees drop column Age")

        assert query == AlterDropColumnQuery(table="Employees", column="Age")

    def test_unknown_action(self, parser):
        """Test that an unknown ALTER action parses as unsupported."""
        query = parser.parse('ALTER TABLE "Employees" MODIFY COLUMN "Age"')

        assert query == AlterUnsupportedQuery(table="Employees", action="MODIFY COLUMN Age")

    def test_missing_action(self, parser):
        """Test ALTER TABLE with no action."""
        query = parser.parse('ALTER TABLE "Employees"')

        assert query == AlterUnsupportedQuery(table="Employees", action="")
