from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.config import Settings
from app.db.dal import Database
from app.models.constants import DEFAULT_SUMMARY_CURRENCY
from app.models.summary import (
    MonthlySummaryResponse,
    RecentAverageResponse,
    TopExpensesResponse,
)
from app.routers.deps import get_app_settings, get_converter, get_db, get_owner_id
from app.services.currency import CurrencyConverter
from app.services.summary import (
    get_monthly_summary,
    get_recent_average,
    get_top_expenses,
)

router = APIRouter(prefix="/summary", tags=["summary"])


@router.get(
    "/monthly",
    response_model=MonthlySummaryResponse,
    summary="Monthly totals per currency and category breakdown",
)
async def monthly_summary_endpoint(
    month: Optional[int] = Query(None, description="Month 1-12 (defaults to current)"),
    year: Optional[int] = Query(None, description="Year (defaults to current)"),
    currency: str = Query(DEFAULT_SUMMARY_CURRENCY, description="USD | KHR | ALL"),
    as_of: Optional[date] = Query(
        None, alias="asOf", description="Reference date for defaults (defaults to today)"
    ),
    owner_id: int = Depends(get_owner_id),
    db: Database = Depends(get_db),
    converter: CurrencyConverter = Depends(get_converter),
    settings: Settings = Depends(get_app_settings),
):
    """Totals per native currency, per-day averages over the month's calendar
    days, and a per-category breakdown ordered by USD-equivalent total.

    Percentages are 0 when the month has no spending.
    """
    return get_monthly_summary(
        db,
        owner_id,
        converter,
        settings,
        month=month,
        year=year,
        currency=currency,
        as_of=as_of,
    )


@router.get(
    "/recent-average",
    response_model=RecentAverageResponse,
    summary="Average daily spend over the most recent calendar months",
)
async def recent_average_endpoint(
    display_currency: Optional[str] = Query(
        None, alias="displayCurrency", description="USD | KHR | BOTH (default BOTH)"
    ),
    as_of: Optional[date] = Query(
        None, alias="asOf", description="Reference date (defaults to today)"
    ),
    owner_id: int = Depends(get_owner_id),
    db: Database = Depends(get_db),
    converter: CurrencyConverter = Depends(get_converter),
    settings: Settings = Depends(get_app_settings),
):
    return get_recent_average(
        db,
        owner_id,
        converter,
        display_currency=display_currency,
        as_of=as_of,
        months=settings.recent_months,
    )


@router.get(
    "/top5",
    response_model=TopExpensesResponse,
    summary="Largest records of the ranking window, converted to one currency",
)
async def top_expenses_endpoint(
    display_currency: Optional[str] = Query(
        None, alias="displayCurrency", description="USD | KHR (default USD)"
    ),
    as_of: Optional[date] = Query(
        None, alias="asOf", description="Reference date (defaults to today)"
    ),
    owner_id: int = Depends(get_owner_id),
    db: Database = Depends(get_db),
    converter: CurrencyConverter = Depends(get_converter),
    settings: Settings = Depends(get_app_settings),
):
    """Window starts on the first day of the month RANKING_WINDOW_MONTHS before
    the as-of month and ends on the as-of date.
    """
    return get_top_expenses(
        db,
        owner_id,
        converter,
        display_currency=display_currency,
        as_of=as_of,
        k=settings.top_k,
        months_back=settings.ranking_window_months,
    )
