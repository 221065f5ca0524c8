"""Evaluation of single-comparison WHERE conditions against rows.

The comparison rules are loose:

* ``=`` and ``!=`` compare numerically when one side is a number and the
  other is a number or numeric text, and compare text forms otherwise.
* ``>``, ``<``, ``>=`` and ``<=`` force both sides to numbers; a value that
  is not numeric is NaN, so the comparison is false.
* ``LIKE`` strips every ``%`` from the literal and tests case-sensitive
  substring containment. It is not wildcard matching.
"""

from __future__ import annotations

import math
from typing import Any

from tabql.model import Row, format_scalar, is_number, is_numeric_text, to_number
from tabql.parsing.query_parser import Condition, UnparsedCondition, WhereClause


def loose_equals(field_value: Any, literal: Any) -> bool:
    """Loose equality between a field value and a literal."""
    if field_value is None or literal is None:
        return field_value is None and literal is None
    if is_number(field_value) and is_number(literal):
        return field_value == literal
    if is_number(field_value) and isinstance(literal, str) and is_numeric_text(literal):
        return field_value == to_number(literal)
    if is_number(literal) and isinstance(field_value, str) and is_numeric_text(field_value):
        return to_number(field_value) == literal
    return format_scalar(field_value) == format_scalar(literal)


def compare(field_value: Any, operator: str, literal: Any) -> bool:
    """Compare a field value against a condition literal."""
    if operator == "=":
        return loose_equals(field_value, literal)
    elif operator == "!=":
        return not loose_equals(field_value, literal)
    elif operator == "LIKE":
        needle = format_scalar(literal).replace("%", "")
        return needle in format_scalar(field_value)

    left = to_number(field_value)
    right = to_number(literal)
    if math.isnan(left) or math.isnan(right):
        return False
    if operator == ">":
        return left > right
    elif operator == "<":
        return left < right
    elif operator == ">=":
        return left >= right
    elif operator == "<=":
        return left <= right
    raise ValueError(f"Unknown comparison operator: {operator}")


def matches(row: Row, condition: WhereClause) -> bool:
    """Return True if the row satisfies the condition.

    An UnparsedCondition matches nothing; callers that want to ignore a
    malformed clause (SELECT) must skip filtering instead of calling this.
    """
    if isinstance(condition, UnparsedCondition):
        return False
    return compare(row.get(condition.column), condition.operator, condition.value)


def filter_rows(rows: list[Row], condition: Condition) -> list[Row]:
    return [row for row in rows if matches(row, condition)]
