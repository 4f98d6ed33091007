"""Expense aggregation (monthly summary, recent average, top-K ranking).

Each computation is split in two:
    - a pure function over an already-fetched record list (`summarize_month`,
      `summarize_recent_months`, `rank_records`);
    - a `get_*` wrapper that builds the date window, fetches through the DAL
      and delegates to the pure function.

Sums are accumulated as Decimal and only rounded (half-up, 2 dp) when the
response models are built.

Windows:
    - Recent average uses whole calendar months: the as-of month and the
      previous N-1 months, regardless of the day of month.
    - Top-K ranking uses a wider window, from the first day of the month N
      months before the as-of month through the as-of date. The two are kept
      distinct on purpose.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Set, Tuple

from app.core.config import Settings
from app.core.errors import QueryValidationError
from app.db.dal import Database
from app.models.constants import (
    ALL_CURRENCIES,
    BASE_CURRENCY,
    DEFAULT_SUMMARY_CURRENCY,
    DEFAULT_DISPLAY_MODE,
    DEFAULT_RANKING_CURRENCY,
    DISPLAY_MODES,
    MONTH_NAMES,
    RANKING_CURRENCIES,
    SECONDARY_CURRENCY,
    SUMMARY_CURRENCY_FILTERS,
)
from app.models.filters import Comparison, all_of
from app.models.record import Record
from app.models.summary import (
    CategoryBreakdownItem,
    CurrencyAmounts,
    MonthlySummary,
    MonthlySummaryResponse,
    RankedRecord,
    RecentAverageResponse,
    RecentMonth,
    TopExpensesResponse,
)
from app.services.currency import CurrencyConverter
from app.services.money import ZERO, round2, to_decimal
from app.services.range_filter import date_window

logger = logging.getLogger("app.summary")


# ---------------- Calendar helpers -----------------
def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move `delta` calendar months from (year, month); negative goes back."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def recent_month_windows(as_of: date, months: int) -> List[Tuple[int, int]]:
    """(year, month) pairs for the as-of month and the `months - 1` before it, newest first."""
    return [shift_month(as_of.year, as_of.month, -i) for i in range(months)]


def ranking_window(as_of: date, months_back: int) -> Tuple[date, date]:
    year, month = shift_month(as_of.year, as_of.month, -months_back)
    return date(year, month, 1), as_of


def resolve_choice(value: Optional[str], allowed: Set[str], default: str) -> str:
    """Upper-case `value` if allowed, else fall back to `default`."""
    choice = (value or "").strip().upper()
    if choice not in allowed:
        if value:
            logger.debug("unrecognized option %r, using %s", value, default)
        return default
    return choice


def _amounts(usd: Decimal, khr: Decimal) -> CurrencyAmounts:
    return CurrencyAmounts(USD=round2(usd), KHR=round2(khr))


# ---------------- Monthly summary -----------------
@dataclass
class _CategoryBucket:
    category_id: Optional[int]
    name: str
    color: str
    totals: Dict[str, Decimal] = field(
        default_factory=lambda: {BASE_CURRENCY: ZERO, SECONDARY_CURRENCY: ZERO}
    )
    record_count: int = 0


def validate_period(month: int, year: int, settings: Settings) -> None:
    if not 1 <= month <= 12:
        raise QueryValidationError("Month must be between 1 and 12")
    if not settings.summary_min_year <= year <= settings.summary_max_year:
        raise QueryValidationError(
            f"Year must be between {settings.summary_min_year} and {settings.summary_max_year}"
        )


def summarize_month(
    records: Sequence[Record],
    month: int,
    year: int,
    currency: str,
    converter: CurrencyConverter,
) -> MonthlySummaryResponse:
    totals = {BASE_CURRENCY: ZERO, SECONDARY_CURRENCY: ZERO}
    buckets: Dict[Optional[int], _CategoryBucket] = {}
    for record in records:
        amount = to_decimal(record.amount)
        totals[record.currency] += amount
        ref = record.category_or_default
        bucket = buckets.get(ref.id)
        if bucket is None:
            bucket = _CategoryBucket(category_id=ref.id, name=ref.name, color=ref.color)
            buckets[ref.id] = bucket
        bucket.totals[record.currency] += amount
        bucket.record_count += 1

    days = days_in_month(year, month)
    grand_base = converter.to_base(totals[BASE_CURRENCY], BASE_CURRENCY) + converter.to_base(
        totals[SECONDARY_CURRENCY], SECONDARY_CURRENCY
    )

    ranked: List[Tuple[Decimal, _CategoryBucket]] = []
    for bucket in buckets.values():
        base_total = converter.to_base(
            bucket.totals[BASE_CURRENCY], BASE_CURRENCY
        ) + converter.to_base(bucket.totals[SECONDARY_CURRENCY], SECONDARY_CURRENCY)
        ranked.append((base_total, bucket))
    # sort is stable: equal totals keep discovery order
    ranked.sort(key=lambda pair: pair[0], reverse=True)

    breakdown = [
        CategoryBreakdownItem(
            category_id=bucket.category_id,
            category_name=bucket.name,
            category_color=bucket.color,
            total_usd=round2(bucket.totals[BASE_CURRENCY]),
            total_khr=round2(bucket.totals[SECONDARY_CURRENCY]),
            record_count=bucket.record_count,
            percentage=round2(base_total * 100 / grand_base) if grand_base > 0 else 0.0,
        )
        for base_total, bucket in ranked
    ]

    summary = MonthlySummary(
        month=month,
        year=year,
        currency=currency,
        total_expenses=_amounts(totals[BASE_CURRENCY], totals[SECONDARY_CURRENCY]),
        record_count=len(records),
        average_per_day=_amounts(
            totals[BASE_CURRENCY] / days, totals[SECONDARY_CURRENCY] / days
        ),
        is_empty=len(records) == 0,
    )
    return MonthlySummaryResponse(summary=summary, category_breakdown=breakdown)


def get_monthly_summary(
    db: Database,
    owner_id: int,
    converter: CurrencyConverter,
    settings: Settings,
    month: Optional[int] = None,
    year: Optional[int] = None,
    currency: Optional[str] = None,
    as_of: Optional[date] = None,
) -> MonthlySummaryResponse:
    as_of = as_of or date.today()
    month = month if month is not None else as_of.month
    year = year if year is not None else as_of.year
    validate_period(month, year, settings)
    currency_filter = (currency or DEFAULT_SUMMARY_CURRENCY).strip().upper()
    if currency_filter not in SUMMARY_CURRENCY_FILTERS:
        raise QueryValidationError(
            f"currency must be one of {sorted(SUMMARY_CURRENCY_FILTERS)}"
        )

    start, end = month_bounds(year, month)
    expr = all_of(
        date_window(start, end),
        Comparison("currency", "eq", currency_filter)
        if currency_filter != ALL_CURRENCIES
        else None,
    )
    records, _ = db.fetch_records(owner_id, expr)
    logger.debug(
        "monthly summary %04d-%02d currency=%s records=%d",
        year,
        month,
        currency_filter,
        len(records),
    )
    return summarize_month(records, month, year, currency_filter, converter)


# ---------------- Recent average -----------------
def summarize_recent_months(
    months: Sequence[Tuple[Tuple[int, int], Sequence[Record]]],
    display_currency: str,
    converter: CurrencyConverter,
) -> RecentAverageResponse:
    """Per-month totals plus a day-weighted overall average.

    Both currency figures come from the single USD total of each month, so
    USD, KHR and BOTH modes report the same numbers. The overall average is
    sum(month USD totals) / sum(days), not the mean of the monthly averages.
    """
    recent: List[RecentMonth] = []
    overall_base = ZERO
    total_days = 0
    for (year, month), records in months:
        raw = {BASE_CURRENCY: ZERO, SECONDARY_CURRENCY: ZERO}
        month_base = ZERO
        for record in records:
            amount = to_decimal(record.amount)
            raw[record.currency] += amount
            month_base += converter.to_base(amount, record.currency)
        days = days_in_month(year, month)
        month_secondary = converter.from_base(month_base, SECONDARY_CURRENCY)
        recent.append(
            RecentMonth(
                month=month,
                year=year,
                month_name=MONTH_NAMES[month - 1],
                total_expenses=_amounts(month_base, month_secondary),
                average_per_day=_amounts(month_base / days, month_secondary / days),
                record_count=len(records),
                raw_totals=_amounts(raw[BASE_CURRENCY], raw[SECONDARY_CURRENCY]),
            )
        )
        overall_base += month_base
        total_days += days

    if total_days:
        overall_per_day = overall_base / total_days
    else:
        overall_per_day = ZERO
    return RecentAverageResponse(
        display_currency=display_currency,
        recent_months=recent,
        overall_average=_amounts(
            overall_per_day, converter.from_base(overall_per_day, SECONDARY_CURRENCY)
        ),
    )


def get_recent_average(
    db: Database,
    owner_id: int,
    converter: CurrencyConverter,
    display_currency: Optional[str] = None,
    as_of: Optional[date] = None,
    months: int = 3,
) -> RecentAverageResponse:
    as_of = as_of or date.today()
    mode = resolve_choice(display_currency, DISPLAY_MODES, DEFAULT_DISPLAY_MODE)
    fetched = []
    for year, month in recent_month_windows(as_of, months):
        start, end = month_bounds(year, month)
        records, _ = db.fetch_records(owner_id, date_window(start, end))
        fetched.append(((year, month), records))
    logger.debug(
        "recent average over %s: %s",
        [f"{y:04d}-{m:02d}" for (y, m), _ in fetched],
        [len(r) for _, r in fetched],
    )
    return summarize_recent_months(fetched, mode, converter)


# ---------------- Top-K ranking -----------------
def rank_records(
    records: Sequence[Record],
    display_currency: str,
    converter: CurrencyConverter,
    k: int = 5,
) -> List[RankedRecord]:
    """Top `k` records by value in `display_currency`.

    Ties keep the input order (newest first as fetched).
    """
    converted = [
        (converter.convert(record.amount, record.currency, display_currency), record)
        for record in records
    ]
    converted.sort(key=lambda pair: pair[0], reverse=True)
    ranked = []
    for value, record in converted[:k]:
        ref = record.category_or_default
        ranked.append(
            RankedRecord(
                id=record.id,
                title=record.title,
                amount=round2(value),
                original_amount=record.amount,
                original_currency=record.currency,
                date=record.date,
                category_name=ref.name,
                category_color=ref.color,
            )
        )
    return ranked


def get_top_expenses(
    db: Database,
    owner_id: int,
    converter: CurrencyConverter,
    display_currency: Optional[str] = None,
    as_of: Optional[date] = None,
    k: int = 5,
    months_back: int = 3,
) -> TopExpensesResponse:
    as_of = as_of or date.today()
    currency = resolve_choice(
        display_currency, RANKING_CURRENCIES, DEFAULT_RANKING_CURRENCY
    )
    start, end = ranking_window(as_of, months_back)
    records, total = db.fetch_records(owner_id, date_window(start, end))
    logger.debug("ranking %d records between %s and %s", total, start, end)
    return TopExpensesResponse(
        display_currency=currency,
        total_records=total,
        top_k=rank_records(records, currency, converter, k),
    )
