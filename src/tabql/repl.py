"""Interactive REPL and one-shot command line for TabQL queries."""

from __future__ import annotations

import argparse
import logging
import os
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path
from typing import Any

from tabql.errors import QueryError
from tabql.model import Table, format_scalar
from tabql.notifications import PrintingNotifier
from tabql.repository import JsonTableRepository, TableRepository
from tabql.session import QueryMode, QueryOutcome, QuerySession

DEFAULT_DATA_FILE = "tabql_data.json"
DATA_ENV_VAR = "TABQL_DATA"

HELP_TEXT = """\
Statements (SQL mode):
  SELECT * FROM "Table" WHERE "Col" > 10 ORDER BY "Col" DESC LIMIT 5
  INSERT INTO "Table" ("A", "B") VALUES ("x", 1)
  UPDATE "Table" SET "A" = "y" WHERE "B" = 1
  DELETE FROM "Table" WHERE "B" = 1
  ALTER TABLE "Table" RENAME TO "New" | ADD COLUMN "C" | DROP COLUMN "C"
Natural language (nl mode):
  show rows where age greater than 40 sort by age desc top 5
Commands:
  tables            list tables
  use <table>       switch the current table
  mode sql|nl       switch the query mode
  help              show this text
  exit | quit       leave the REPL"""


def _split_statements(content: str) -> list[str]:
    """Split content into statements on semicolons outside string literals.

    Lines starting with ``--`` are comments and are dropped first.
    """
    lines = [line for line in content.splitlines() if not line.strip().startswith("--")]
    content = "\n".join(lines)

    statements = []
    current = []
    quote: str | None = None
    escape_next = False

    for ch in content:
        if escape_next:
            current.append(ch)
            escape_next = False
            continue

        if ch == "\\" and quote:
            current.append(ch)
            escape_next = True
            continue

        if ch in "\"'":
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            current.append(ch)
            continue

        if ch == ";" and quote is None:
            stmt = "".join(current).strip()
            if stmt:
                statements.append(stmt)
            current = []
        else:
            current.append(ch)

    # Handle any remaining content
    stmt = "".join(current).strip()
    if stmt:
        statements.append(stmt)

    return statements


def _split_phrases(content: str) -> list[str]:
    """Split natural-language content into phrases, one per line or ``;``.

    Quotes are ordinary characters in phrases (``company's rows``).
    """
    phrases = []
    for line in content.splitlines():
        if line.strip().startswith("--"):
            continue
        phrases.extend(part.strip() for part in line.split(";") if part.strip())
    return phrases


def format_value(value: Any, max_width: int = 40) -> str:
    """Format a field value for display."""
    if value is None:
        return ""
    s = format_scalar(value)
    if len(s) > max_width:
        return s[: max_width - 3] + "..."
    return s


def print_result(outcome: QueryOutcome) -> None:
    """Print query results in a formatted table."""
    if not outcome.success:
        return
    if not outcome.columns:
        # Mutations have no result set; the notifier already printed the message
        return

    if not outcome.rows:
        print("(no results)")
        return

    # Calculate column widths
    col_widths = {col: len(col) for col in outcome.columns}
    for row in outcome.rows:
        for col in outcome.columns:
            col_widths[col] = max(col_widths[col], len(format_value(row.get(col))))

    # Cap column widths
    max_col_width = 40
    for col in col_widths:
        col_widths[col] = min(col_widths[col], max_col_width)

    # Print header
    header = " | ".join(col.ljust(col_widths[col])[: col_widths[col]] for col in outcome.columns)
    print(header)
    print("-" * len(header))

    # Print rows
    for row in outcome.rows:
        values = []
        for col in outcome.columns:
            val = format_value(row.get(col))
            if len(val) > col_widths[col]:
                val = val[: col_widths[col] - 3] + "..."
            values.append(val.ljust(col_widths[col]))
        print(" | ".join(values))

    print(f"\n({len(outcome.rows)} row{'s' if len(outcome.rows) != 1 else ''})")


def _resolve_table(repository: TableRepository, table_name: str | None) -> Table | None:
    tables = repository.load()
    if table_name is None:
        return tables[0] if tables else None
    return next((t for t in tables if t.name == table_name), None)


def _run_query(session: QuerySession, table: Table, text: str, mode: QueryMode) -> tuple[QueryOutcome, Table]:
    """Run one query and return the outcome plus the (possibly renamed) table."""
    outcome = session.run(table.id, text, mode)
    print_result(outcome)
    return outcome, outcome.table or table


def run_file(
    path: Path,
    repository: TableRepository,
    table_name: str | None = None,
    mode: QueryMode = QueryMode.SQL,
    verbose: bool = False,
) -> int:
    """Execute the statements in a file against one table. Returns an exit code."""
    table = _resolve_table(repository, table_name)
    if table is None:
        print(f"Error: Table not found: {table_name}", file=sys.stderr)
        return 1

    content = path.read_text()
    if mode is QueryMode.NATURAL_LANGUAGE:
        queries = _split_phrases(content)
    else:
        queries = _split_statements(content)

    session = QuerySession(repository, notifier=PrintingNotifier())
    for query_text in queries:
        if verbose:
            for i, line in enumerate(query_text.split("\n")):
                prefix = ">>> " if i == 0 else "... "
                print(f"{prefix}{line}")
        try:
            outcome, table = _run_query(session, table, query_text, mode)
        except QueryError:
            # Already reported by the notifier
            return 1
        if not outcome.success:
            return 1
    return 0


def run_repl(repository: TableRepository, table_name: str | None = None, mode: QueryMode = QueryMode.SQL) -> int:
    """Run the interactive REPL."""
    print("TabQL REPL - query tables with SQL or plain English")
    print("Type 'help' for commands, 'exit' to quit.\n")

    table = _resolve_table(repository, table_name)
    if table is None:
        print("No table selected. Use 'tables' and 'use <table>'.")
    else:
        print(f"Current table: {table.name}")

    session = QuerySession(repository, notifier=PrintingNotifier())

    while True:
        prompt = f"{mode.value}> "
        try:
            line = input(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue
        lower = line.lower()
        if lower in ("exit", "quit"):
            break
        if lower == "help":
            print(HELP_TEXT)
            continue
        if lower == "tables":
            for t in repository.load():
                marker = "*" if table is not None and t.id == table.id else " "
                print(f"{marker} {t.name} ({len(t.rows)} rows; columns: {', '.join(t.columns)})")
            continue
        if lower.startswith("use "):
            name = line[4:].strip().strip("\"'")
            found = _resolve_table(repository, name)
            if found is None:
                print(f"Error: Table not found: {name}")
            else:
                table = found
                print(f"Current table: {table.name}")
            continue
        if lower.startswith("mode "):
            try:
                mode = QueryMode(lower[5:].strip())
            except ValueError:
                print("Error: mode must be 'sql' or 'nl'")
            continue

        if table is None:
            print("Error: No table selected. Use 'use <table>' first.")
            continue

        try:
            _, table = _run_query(session, table, line, mode)
        except QueryError:
            # Already reported by the notifier
            continue
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Query tables with a small SQL dialect or natural language"
    )
    arg_parser.add_argument(
        "data_file",
        type=Path,
        nargs="?",
        default=Path(os.environ.get(DATA_ENV_VAR, DEFAULT_DATA_FILE)),
        help=f"JSON file holding the tables (default: ${DATA_ENV_VAR} or {DEFAULT_DATA_FILE})",
    )
    arg_parser.add_argument(
        "-t", "--table",
        type=str,
        default=None,
        help="Name of the table to query (default: the first table)",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute a single query and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute queries from a file and exit",
    )
    arg_parser.add_argument(
        "--nl",
        action="store_true",
        help="Treat queries as natural language instead of SQL",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each query before executing (for -f/--file)",
    )
    arg_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    args = arg_parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    repository = JsonTableRepository(args.data_file)
    mode = QueryMode.NATURAL_LANGUAGE if args.nl else QueryMode.SQL

    # Handle file execution
    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        return run_file(args.file, repository, args.table, mode, args.verbose)

    if args.command:
        try:
            table = _resolve_table(repository, args.table)
            if table is None:
                print(f"Error: Table not found: {args.table}", file=sys.stderr)
                return 1
            session = QuerySession(repository, notifier=PrintingNotifier())
            outcome, _ = _run_query(session, table, args.command, mode)
            return 0 if outcome.success else 1
        except QueryError:
            return 1
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return run_repl(repository, args.table, mode)


if __name__ == "__main__":
    sys.exit(main())
