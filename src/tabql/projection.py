"""Narrow rows to the columns a query asked for."""

from __future__ import annotations

from typing import Any

from tabql.model import Row


def project_rows(rows: list[Row], columns: list[str]) -> list[dict[str, Any]]:
    """Project rows onto ``columns``, keeping row order.

    Fields a row does not have are left out of its projected dict rather
    than filled with a placeholder.
    """
    return [
        {col: row.values[col] for col in columns if col in row.values}
        for row in rows
    ]
