"""Table repositories: where the table list is loaded from and saved to."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Protocol

from tabql.model import Row, Table, new_row_id

logger = logging.getLogger(__name__)


class TableRepository(Protocol):
    """Holds the collection of tables. Load and save are the only operations."""

    def load(self) -> list[Table]: ...

    def save(self, tables: list[Table]) -> None: ...


def sample_tables() -> list[Table]:
    """The table a fresh data file starts with."""
    columns = ["Code", "Company Name", "Employee Number", "Net Worth (in billion dollars)", "Global Position"]
    data = [
        (112, "Microsoft", 221000, 2135, 21),
        (113, "Meta", 58604, 36, 27),
        (114, "Amazon", 1468000, 1053.5, 4),
        (115, "Google", 150028, 1420, 2),
        (116, "Tesla", 110000, 710.78, 103),
    ]
    rows = [Row(id=new_row_id(), values=dict(zip(columns, values))) for values in data]
    return [Table(id=new_row_id(), name="Tech Companies", columns=columns, rows=rows)]


class InMemoryTableRepository:
    """Keeps tables in memory; load and save hand out copies."""

    def __init__(self, tables: list[Table] | None = None) -> None:
        self._tables = copy.deepcopy(tables or [])

    def load(self) -> list[Table]:
        return copy.deepcopy(self._tables)

    def save(self, tables: list[Table]) -> None:
        self._tables = copy.deepcopy(tables)


class JsonTableRepository:
    """Stores the table list in a JSON file.

    Rows are written flat, ``{"id": ..., <column>: <value>, ...}``. A
    missing file is created with the sample table on first load.
    """

    def __init__(self, path: Path, seed_sample: bool = True) -> None:
        self.path = Path(path)
        self.seed_sample = seed_sample

    def load(self) -> list[Table]:
        if not self.path.exists():
            tables = sample_tables() if self.seed_sample else []
            self.save(tables)
            return tables
        with open(self.path) as f:
            data = json.load(f)
        tables = [Table.from_dict(item) for item in data]
        if any(not row.get("id") for item in data for row in item.get("data", [])):
            # Rows without an id got one in from_dict; keep it stable
            logger.info("Assigned ids to rows in %s", self.path)
            self.save(tables)
        return tables

    def save(self, tables: list[Table]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump([t.to_dict() for t in tables], f, indent=2)
        logger.debug("Saved %d table(s) to %s", len(tables), self.path)


# --- Helpers over a loaded table list ---


def get_table_by_id(repository: TableRepository, table_id: str) -> Table | None:
    return next((t for t in repository.load() if t.id == table_id), None)


def find_table_by_name(repository: TableRepository, name: str) -> Table | None:
    return next((t for t in repository.load() if t.name == name), None)


def replace_table(repository: TableRepository, updated: Table) -> None:
    """Replace the table with the same id and save the full list."""
    tables = repository.load()
    for i, table in enumerate(tables):
        if table.id == updated.id:
            tables[i] = updated
            repository.save(tables)
            return
    logger.warning("Table %s is no longer in the repository; not saved", updated.id)


def add_table(repository: TableRepository, table: Table) -> None:
    tables = repository.load()
    tables.append(table)
    repository.save(tables)


def delete_table(repository: TableRepository, table_id: str) -> None:
    tables = [t for t in repository.load() if t.id != table_id]
    repository.save(tables)
