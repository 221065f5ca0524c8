"""Tables, rows and the text/number coercion rules shared by every query path."""

from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Union

Scalar = Union[str, int, float]

# Whole-text decimal number: sign, digits with optional fraction (or a bare
# fraction), optional exponent.
_NUMERIC_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER_RE = re.compile(r"[+-]?\d+")


def is_numeric_text(text: str) -> bool:
    """Return True if the whole (trimmed) text is a decimal number.

    Blank text is never numeric.
    """
    return bool(_NUMERIC_RE.fullmatch(text.strip()))


def coerce_scalar(text: str) -> Scalar:
    """Coerce text to a number if it is numeric, otherwise return it unchanged."""
    stripped = text.strip()
    if not _NUMERIC_RE.fullmatch(stripped):
        return text
    if _INTEGER_RE.fullmatch(stripped):
        try:
            return int(stripped)
        except ValueError:
            # Past the interpreter's integer string conversion limit
            pass
    return float(stripped)


def to_number(value: Any) -> float:
    """Force a field value to a number; anything non-numeric becomes NaN."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and is_numeric_text(value):
        return float(value.strip())
    return math.nan


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_scalar(value: Any) -> str:
    """Render a field value as text; integral floats drop their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def new_row_id() -> str:
    """Default row identifier generator."""
    return str(uuid.uuid4())


IdFactory = Callable[[], str]


@dataclass
class Row:
    """A table row: a stable identifier plus column values."""

    id: str
    values: dict[str, Scalar] = field(default_factory=dict)

    def get(self, column: str) -> Scalar | None:
        """Return a field value, or None when the row has no such field."""
        return self.values.get(column)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.values}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Row:
        values = {k: v for k, v in data.items() if k != "id"}
        return cls(id=str(data.get("id") or new_row_id()), values=values)


@dataclass
class Table:
    """A named table with an ordered column list and its rows.

    Query operations never modify a Table in place; they build a new value
    with ``dataclasses.replace`` and hand it back to the repository.
    """

    id: str
    name: str
    columns: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "columns": list(self.columns),
            "data": [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Table:
        return cls(
            id=str(data["id"]),
            name=data["name"],
            columns=list(data.get("columns", [])),
            rows=[Row.from_dict(r) for r in data.get("data", [])],
        )
