"""Filter expression tree handed from the query builders to storage.

Nodes are immutable and carry no query-language specifics: the DAL compiles
them to SQL, and `evaluate` applies the same tree to in-memory records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Tuple, Union

OPERATORS = ("eq", "gte", "lte")
FIELDS = ("id", "title", "date", "currency", "amount", "category_id")


@dataclass(frozen=True)
class Comparison:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.field not in FIELDS:
            raise ValueError(f"unknown filter field '{self.field}'")
        if self.op not in OPERATORS:
            raise ValueError(f"unknown filter operator '{self.op}'")


@dataclass(frozen=True)
class And:
    clauses: Tuple["FilterExpr", ...]


@dataclass(frozen=True)
class Or:
    clauses: Tuple["FilterExpr", ...]


FilterExpr = Union[Comparison, And, Or]


def all_of(*clauses: FilterExpr | None) -> FilterExpr | None:
    """AND the given clauses, dropping None; collapses to None or a single node."""
    kept = tuple(c for c in clauses if c is not None)
    if not kept:
        return None
    if len(kept) == 1:
        return kept[0]
    return And(kept)


def _comparable(left: Any, right: Any) -> Tuple[Any, Any]:
    if isinstance(right, datetime) and not isinstance(left, datetime):
        if isinstance(left, date):
            left = datetime.combine(left, time.min)
    elif isinstance(left, datetime) and not isinstance(right, datetime):
        if isinstance(right, date):
            right = datetime.combine(right, time.min)
    if isinstance(right, Decimal) and isinstance(left, (int, float)):
        left = Decimal(str(left))
    return left, right


def evaluate(expr: FilterExpr | None, row: Any) -> bool:
    """Return True when the record (object or mapping) satisfies the expression."""
    if expr is None:
        return True
    if isinstance(expr, And):
        return all(evaluate(c, row) for c in expr.clauses)
    if isinstance(expr, Or):
        return any(evaluate(c, row) for c in expr.clauses)
    if isinstance(row, dict):
        value = row.get(expr.field)
    else:
        value = getattr(row, expr.field)
    if expr.op == "eq":
        return value == expr.value
    if value is None:
        return False
    left, right = _comparable(value, expr.value)
    if expr.op == "gte":
        return left >= right
    return left <= right
