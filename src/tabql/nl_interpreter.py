"""Heuristic natural-language queries over a single table.

Phrases are not parsed. The interpreter looks for trigger verbs, column
names, comparison words and numbers in the lower-cased text and turns
them into a filter / sort / limit pipeline:

    >>> interpreter = NaturalLanguageInterpreter()
    >>> result = interpreter.interpret("show employees where age greater than 40", table)
    >>> result.rows
    [{'Name': 'Bo', 'Age': 45}]
"""

from __future__ import annotations

import enum
import functools
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from tabql.model import Row, Table, format_scalar, is_number, is_numeric_text, to_number
from tabql.projection import project_rows

logger = logging.getLogger(__name__)

DEFAULT_NL_LIMIT = 10

TRIGGER_WORDS = ("show", "get", "find")
SORT_PHRASES = ("sort by", "order by")
DESCENDING_PHRASES = ("descending", "high to low", "desc")
LIMIT_WORDS = ("limit", "top")

_NUMBER_RE = re.compile(r"\d+")


class Comparator(enum.Enum):
    GREATER = "greater"
    LESS = "less"
    EQUAL = "equal"


# Checked in order; the first class with a matching phrase wins
COMPARATOR_PHRASES: list[tuple[Comparator, tuple[str, ...]]] = [
    (Comparator.GREATER, ("greater than", "more than", ">")),
    (Comparator.LESS, ("less than", "smaller than", "<")),
    (Comparator.EQUAL, ("equal to", "equals", "=")),
]


@dataclass
class NaturalLanguagePlan:
    """What the interpreter understood from a phrase."""

    phrase: str
    active: bool = False
    columns: list[str] = field(default_factory=list)
    comparator: Comparator | None = None
    numbers: list[int] = field(default_factory=list)
    sort_column: str | None = None
    descending: bool = False
    limit: int | None = None


@dataclass
class NaturalLanguageResult:
    columns: list[str]
    rows: list[dict[str, Any]]
    plan: NaturalLanguagePlan
    message: str | None = None
    title: str = "Query executed"


def _phrase_numbers(text: str) -> list[int]:
    numbers = []
    for digits in _NUMBER_RE.findall(text):
        try:
            numbers.append(int(digits))
        except ValueError:
            logger.debug("Ignoring a %d-digit number in the phrase", len(digits))
    return numbers


def _detect_comparator(phrase: str) -> Comparator | None:
    for comparator, phrases in COMPARATOR_PHRASES:
        if any(p in phrase for p in phrases):
            return comparator
    return None


def _value_matches(value: Any, comparator: Comparator | None, numbers: list[int]) -> bool:
    if is_number(value) or (isinstance(value, str) and is_numeric_text(value)):
        number = to_number(value)
        if comparator is Comparator.GREATER:
            return number > numbers[0]
        if comparator is Comparator.LESS:
            return number < numbers[0]
        if comparator is Comparator.EQUAL:
            return number == numbers[0]
        return number in numbers
    if isinstance(value, str):
        return str(numbers[0]) in value.lower()
    return False


def _compare_values(a: Any, b: Any) -> int:
    if is_number(a) and is_number(b):
        return (a > b) - (a < b)
    left, right = format_scalar(a).lower(), format_scalar(b).lower()
    return (left > right) - (left < right)


class NaturalLanguageInterpreter:
    """Maps free text to a filter/sort/limit pipeline over one table."""

    def __init__(self, default_limit: int = DEFAULT_NL_LIMIT) -> None:
        self.default_limit = default_limit

    def plan(self, phrase: str, table: Table) -> NaturalLanguagePlan:
        """Work out the filter, sort and limit a phrase asks for."""
        text = phrase.lower()
        plan = NaturalLanguagePlan(phrase=phrase)
        if not any(word in text for word in TRIGGER_WORDS):
            return plan

        plan.active = True
        plan.columns = [col for col in table.columns if col.lower() in text]
        plan.comparator = _detect_comparator(text)
        plan.numbers = _phrase_numbers(text)

        if any(p in text for p in SORT_PHRASES):
            if plan.columns:
                plan.sort_column = plan.columns[0]
            elif table.columns:
                plan.sort_column = table.columns[0]
            plan.descending = any(p in text for p in DESCENDING_PHRASES)

        if plan.numbers and any(word in text for word in LIMIT_WORDS):
            plan.limit = plan.numbers[0]
        else:
            plan.limit = self.default_limit
        return plan

    def run(self, plan: NaturalLanguagePlan, rows: list[Row]) -> list[Row]:
        """Apply a plan to rows."""
        if not plan.active:
            return list(rows)

        records = list(rows)
        if plan.columns and plan.numbers:
            records = [
                r for r in records
                if any(_value_matches(r.get(col), plan.comparator, plan.numbers) for col in plan.columns)
            ]

        if plan.sort_column is not None:
            column = plan.sort_column
            records = self._sort(records, column, plan.descending)

        if plan.limit is not None:
            records = records[: plan.limit]
        return records

    @staticmethod
    def _sort(rows: list[Row], column: str, descending: bool) -> list[Row]:
        key = functools.cmp_to_key(lambda a, b: _compare_values(a.get(column), b.get(column)))
        return sorted(rows, key=key, reverse=descending)

    def interpret(self, phrase: str, table: Table) -> NaturalLanguageResult:
        """Run a natural-language phrase against a table."""
        plan = self.plan(phrase, table)
        logger.debug("Natural-language plan for %r: %s", phrase, plan)
        records = self.run(plan, table.rows)
        rows = project_rows(records, table.columns)
        return NaturalLanguageResult(
            columns=list(table.columns),
            rows=rows,
            plan=plan,
            message=f"Found {len(rows)} results based on your natural language query",
        )
