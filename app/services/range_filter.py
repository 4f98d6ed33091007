"""Record query → filter expression tree.

Amount ranges are given in one caller-chosen currency but records are stored
in either USD or KHR. The bounds are converted to USD once and then emitted as
two currency branches, so each record is compared against the economically
equivalent threshold in its own unit:

    (currency = USD AND amount in usd_bounds)
    OR (currency = KHR AND amount in usd_bounds * rate)

Category, date and exact-currency filters AND onto that disjunction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic.alias_generators import to_camel

from app.core.errors import QueryValidationError
from app.models.constants import BASE_CURRENCY, CURRENCIES
from app.models.filters import Comparison, FilterExpr, Or, all_of
from app.services.currency import CurrencyConverter, normalize_currency
from app.services.money import to_decimal

logger = logging.getLogger("app.filters")

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class RecordQuery:
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    amount_currency: str = BASE_CURRENCY
    category_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    currency: Optional[str] = None

    def echo(self) -> Dict[str, Any]:
        """The effective query, keyed by its request parameter names."""
        data = asdict(self)
        for key in ("min_amount", "max_amount"):
            if data[key] is not None:
                data[key] = float(data[key])
        for key in ("start_date", "end_date"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return {to_camel(key): value for key, value in data.items()}


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


class RangeFilterBuilder:
    def __init__(self, converter: CurrencyConverter):
        self.converter = converter

    def normalize(self, query: RecordQuery) -> RecordQuery:
        """Validate and canonicalize a query; raises QueryValidationError."""
        amount_currency = normalize_currency(query.amount_currency or BASE_CURRENCY)
        currency = normalize_currency(query.currency) if query.currency else None
        min_amount = to_decimal(query.min_amount) if query.min_amount is not None else None
        max_amount = to_decimal(query.max_amount) if query.max_amount is not None else None
        for label, bound in (("minAmount", min_amount), ("maxAmount", max_amount)):
            if bound is not None and bound < 0:
                raise QueryValidationError(f"{label} cannot be negative")
        if min_amount is not None and max_amount is not None and min_amount > max_amount:
            raise QueryValidationError("minAmount cannot be greater than maxAmount")
        if query.start_date and query.end_date and query.start_date > query.end_date:
            raise QueryValidationError("startDate cannot be after endDate")
        return RecordQuery(
            min_amount=min_amount,
            max_amount=max_amount,
            amount_currency=amount_currency,
            category_id=query.category_id,
            start_date=query.start_date,
            end_date=query.end_date,
            currency=currency,
        )

    def amount_predicate(
        self,
        min_amount: Optional[Decimal],
        max_amount: Optional[Decimal],
        amount_currency: str,
    ) -> FilterExpr | None:
        if min_amount is None and max_amount is None:
            return None
        min_base = (
            self.converter.to_base(min_amount, amount_currency)
            if min_amount is not None
            else None
        )
        max_base = (
            self.converter.to_base(max_amount, amount_currency)
            if max_amount is not None
            else None
        )
        branches = []
        for currency in CURRENCIES:
            lower = (
                self.converter.from_base(min_base, currency)
                if min_base is not None
                else None
            )
            upper = (
                self.converter.from_base(max_base, currency)
                if max_base is not None
                else None
            )
            branches.append(
                all_of(
                    Comparison("currency", "eq", currency),
                    Comparison("amount", "gte", lower) if lower is not None else None,
                    Comparison("amount", "lte", upper) if upper is not None else None,
                )
            )
        return Or(tuple(branches))

    def build(self, query: RecordQuery) -> FilterExpr | None:
        q = self.normalize(query)
        expr = all_of(
            self.amount_predicate(q.min_amount, q.max_amount, q.amount_currency),
            Comparison("category_id", "eq", q.category_id)
            if q.category_id is not None
            else None,
            Comparison("date", "gte", q.start_date) if q.start_date else None,
            Comparison("date", "lte", end_of_day(q.end_date)) if q.end_date else None,
            Comparison("currency", "eq", q.currency) if q.currency else None,
        )
        logger.debug("built record filter %s", expr)
        return expr


def date_window(start: date, end: date) -> FilterExpr:
    """Inclusive calendar-day window used by the summary queries."""
    return all_of(
        Comparison("date", "gte", start),
        Comparison("date", "lte", end_of_day(end)),
    )
