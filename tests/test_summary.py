from datetime import date

import pytest

from app.core.errors import QueryValidationError
from app.models.constants import ALL_CURRENCIES, DEFAULT_SUMMARY_CURRENCY
from app.services.summary import (
    days_in_month,
    get_monthly_summary,
    get_recent_average,
    get_top_expenses,
    rank_records,
    ranking_window,
    recent_month_windows,
    shift_month,
    summarize_month,
    summarize_recent_months,
)

from factories import FOOD, GAS, OWNER, make_record


# ---------------- Calendar helpers -----------------
def test_shift_month_crosses_year():
    assert shift_month(2026, 1, -1) == (2025, 12)
    assert shift_month(2026, 2, -3) == (2025, 11)
    assert shift_month(2025, 12, 1) == (2026, 1)


def test_days_in_month_handles_leap_years():
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2026, 2) == 28
    assert days_in_month(2026, 10) == 31


def test_recent_months_are_calendar_aligned():
    assert recent_month_windows(date(2026, 3, 31), 3) == [(2026, 3), (2026, 2), (2026, 1)]
    assert recent_month_windows(date(2026, 1, 1), 3) == [(2026, 1), (2025, 12), (2025, 11)]


def test_ranking_window_reaches_back_further_than_recent_months():
    assert ranking_window(date(2026, 10, 18), 3) == (date(2026, 7, 1), date(2026, 10, 18))
    assert ranking_window(date(2026, 5, 31), 3) == (date(2026, 2, 1), date(2026, 5, 31))


# ---------------- Monthly summary -----------------
def test_monthly_summary_breakdown(converter):
    records = [
        make_record(1, 10, "USD", category=FOOD),
        make_record(2, 40000, "KHR", category=GAS),
        make_record(3, 5, "USD"),
        make_record(4, 20000, "KHR", category=FOOD),
    ]
    result = summarize_month(records, 10, 2026, "ALL", converter)

    summary = result.summary
    assert summary.total_expenses.usd == 15
    assert summary.total_expenses.khr == 60000
    assert summary.average_per_day.usd == 0.48  # 15 / 31
    assert summary.average_per_day.khr == 1935.48  # 60000 / 31
    assert summary.record_count == 4
    assert not summary.is_empty

    names = [item.category_name for item in result.category_breakdown]
    assert names == ["Food", "Gas", "Uncategorized"]
    food, gas, uncategorized = result.category_breakdown
    assert (food.total_usd, food.total_khr, food.record_count) == (10, 20000, 2)
    assert food.percentage == 50.0  # 15 of 30 USD
    assert gas.percentage == 33.33
    assert uncategorized.percentage == 16.67
    assert uncategorized.category_id is None
    assert uncategorized.category_color == "#808080"
    assert sum(i.percentage for i in result.category_breakdown) == pytest.approx(100, abs=0.05)


def test_monthly_summary_ties_keep_discovery_order(converter):
    records = [
        make_record(1, 5, "USD", category=GAS),
        make_record(2, 20000, "KHR", category=FOOD),
    ]
    result = summarize_month(records, 10, 2026, "ALL", converter)
    assert [i.category_name for i in result.category_breakdown] == ["Gas", "Food"]
    assert [i.percentage for i in result.category_breakdown] == [50.0, 50.0]


def test_monthly_summary_zero_total_has_zero_percentages(converter):
    records = [make_record(1, 0, "USD", category=FOOD), make_record(2, 0, "KHR")]
    result = summarize_month(records, 2, 2024, "ALL", converter)
    assert [i.percentage for i in result.category_breakdown] == [0.0, 0.0]
    assert result.summary.average_per_day.usd == 0


def test_monthly_summary_empty(converter):
    result = summarize_month([], 2, 2024, "USD", converter)
    assert result.summary.is_empty
    assert result.summary.record_count == 0
    assert result.category_breakdown == []


def test_monthly_summary_rounds_once(converter):
    # three thirds of a cent would round to 0.00 each if rounded before summing
    records = [make_record(i, 0.004, "USD") for i in range(1, 4)]
    result = summarize_month(records, 10, 2026, "ALL", converter)
    assert result.summary.total_expenses.usd == 0.01


def test_get_monthly_summary_filters_month_and_currency(db, converter, settings):
    db.insert_record(OWNER, "in", date(2024, 2, 29), "USD", 29)
    db.insert_record(OWNER, "khr", date(2024, 2, 1), "KHR", 4000)
    db.insert_record(OWNER, "next month", date(2024, 3, 1), "USD", 100)

    result = get_monthly_summary(db, OWNER, converter, settings, month=2, year=2024)
    assert result.summary.record_count == 2
    assert result.summary.average_per_day.usd == 1.0  # 29 / 29 days

    usd_only = get_monthly_summary(
        db, OWNER, converter, settings, month=2, year=2024, currency="usd"
    )
    assert usd_only.summary.currency == "USD"
    assert usd_only.summary.record_count == 1
    assert usd_only.summary.total_expenses.khr == 0

    everything = get_monthly_summary(
        db, OWNER, converter, settings, month=2, year=2024, currency="all"
    )
    assert everything.summary.currency == ALL_CURRENCIES
    assert everything.summary.record_count == 2
    assert result.summary.currency == DEFAULT_SUMMARY_CURRENCY


@pytest.mark.parametrize(
    "kwargs",
    [
        {"month": 13, "year": 2026},
        {"month": 0, "year": 2026},
        {"month": 1, "year": 2019},
        {"month": 1, "year": 2031},
        {"month": 1, "year": 2026, "currency": "EUR"},
    ],
)
def test_get_monthly_summary_validation(db, converter, settings, kwargs):
    with pytest.raises(QueryValidationError):
        get_monthly_summary(db, OWNER, converter, settings, **kwargs)


# ---------------- Recent average -----------------
def test_recent_average_is_day_weighted(converter):
    months = [
        ((2026, 4), [make_record(1, 300, "USD", day=date(2026, 4, 2))]),
        ((2026, 3), [make_record(2, 62, "USD", day=date(2026, 3, 5))]),
        ((2026, 2), [make_record(3, 112000, "KHR", day=date(2026, 2, 9))]),
    ]
    result = summarize_recent_months(months, "BOTH", converter)

    april, march, february = result.recent_months
    assert april.average_per_day.usd == 10.0
    assert march.average_per_day.usd == 2.0
    assert february.average_per_day.usd == 1.0
    assert february.total_expenses.usd == 28.0
    assert february.total_expenses.khr == 112000.0
    assert february.raw_totals.usd == 0 and february.raw_totals.khr == 112000
    assert february.month_name == "February"

    # 390 USD over 89 days, not (10 + 2 + 1) / 3
    assert result.overall_average.usd == 4.38
    assert result.overall_average.usd != round((10 + 2 + 1) / 3, 2)
    assert result.overall_average.khr == 17528.09


def test_recent_average_modes_share_numbers(db, converter):
    db.insert_record(OWNER, "usd", date(2026, 10, 3), "USD", 10)
    db.insert_record(OWNER, "khr", date(2026, 9, 30), "KHR", 8000)
    db.insert_record(OWNER, "too old", date(2026, 7, 31), "USD", 999)

    results = {
        mode: get_recent_average(db, OWNER, converter, mode, as_of=date(2026, 10, 18))
        for mode in ("USD", "KHR", "BOTH")
    }
    assert results["KHR"].display_currency == "KHR"
    dumped = {m: r.model_dump()["recent_months"] for m, r in results.items()}
    assert dumped["USD"] == dumped["KHR"] == dumped["BOTH"]

    october, september, august = results["BOTH"].recent_months
    assert (october.month, september.month, august.month) == (10, 9, 8)
    assert october.total_expenses.khr == 40000
    assert september.total_expenses.usd == 2
    assert august.record_count == 0


def test_recent_average_unknown_mode_defaults_to_both(db, converter):
    result = get_recent_average(db, OWNER, converter, "EUR", as_of=date(2026, 10, 18))
    assert result.display_currency == "BOTH"
    assert result.overall_average.usd == 0


# ---------------- Top-K -----------------
def test_top5_includes_ties_and_caps_length(converter):
    values = [10, 50, 5, 90, 20, 90, 1, 30]
    records = [make_record(i + 1, v, "USD") for i, v in enumerate(values)]
    # value 50 stored in KHR still ranks by its USD worth
    records[1] = make_record(2, 200000, "KHR")

    top = rank_records(records, "USD", converter, k=5)
    assert len(top) == 5
    assert [r.amount for r in top] == [90, 90, 50, 30, 20]
    assert [r.id for r in top[:2]] == [4, 6]
    assert top[2].original_amount == 200000
    assert top[2].original_currency == "KHR"


def test_top5_returns_all_when_fewer_records(converter):
    records = [make_record(1, 3, "USD", category=FOOD), make_record(2, 4000, "KHR")]
    top = rank_records(records, "KHR", converter, k=5)
    assert [r.amount for r in top] == [12000, 4000]
    assert top[0].category_name == "Food"
    assert top[1].category_name == "Uncategorized"
    assert "converted_amount" not in top[0].model_dump()


def test_get_top_expenses_uses_ranking_window(db, converter):
    as_of = date(2026, 10, 18)
    db.insert_record(OWNER, "window start", date(2026, 7, 1), "USD", 70)
    db.insert_record(OWNER, "before window", date(2026, 6, 30), "USD", 500)
    db.insert_record(OWNER, "future", date(2026, 10, 19), "USD", 900)
    db.insert_record(OWNER, "today", as_of, "KHR", 40000)

    result = get_top_expenses(db, OWNER, converter, "JPY", as_of=as_of)
    assert result.display_currency == "USD"
    assert result.total_records == 2
    assert [r.title for r in result.top_k] == ["window start", "today"]
    assert result.top_k[1].amount == 10
