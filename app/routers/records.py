from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.config import Settings
from app.db.dal import Database
from app.models.summary import RecordListing
from app.routers.deps import get_app_settings, get_converter, get_db, get_owner_id
from app.services.currency import CurrencyConverter
from app.services.listing import list_records
from app.services.pagination import PageRequest, SortSpec
from app.services.range_filter import RecordQuery

router = APIRouter(prefix="/records", tags=["records"])


@router.get(
    "/",
    response_model=RecordListing,
    summary="List records with pagination, sorting and currency-aware filters",
)
async def list_records_endpoint(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: Optional[int] = Query(
        None, ge=1, description="Records per page (defaults to DEFAULT_PAGE_SIZE)"
    ),
    sort_by: Optional[str] = Query(
        None,
        alias="sortBy",
        description="id | amount | date | title; anything else sorts by id",
    ),
    sort: Optional[str] = Query(
        None, description="asc | desc; anything else sorts ascending"
    ),
    min_amount: Optional[Decimal] = Query(None, alias="minAmount", ge=0),
    max_amount: Optional[Decimal] = Query(None, alias="maxAmount", ge=0),
    amount_currency: str = Query(
        "USD",
        alias="amountCurrency",
        description="Currency the min/max bounds are expressed in",
    ),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    category: Optional[str] = Query(
        None, description="Category name; 404 if the owner has no such category"
    ),
    start_date: Optional[date] = Query(
        None, alias="startDate", description="Filter: start date inclusive"
    ),
    end_date: Optional[date] = Query(
        None, alias="endDate", description="Filter: end date inclusive (whole day)"
    ),
    currency: Optional[str] = Query(
        None, description="Filter by the record's own currency (USD | KHR)"
    ),
    owner_id: int = Depends(get_owner_id),
    db: Database = Depends(get_db),
    converter: CurrencyConverter = Depends(get_converter),
    settings: Settings = Depends(get_app_settings),
):
    """Return one page of records plus `meta` (totals, page info, filter echo).

    Amount bounds match records in either currency: a USD bound of 100 also
    matches KHR records of 400000 and above at the configured rate.
    """
    page_size = min(limit or settings.default_page_size, settings.max_page_size)
    query = RecordQuery(
        min_amount=min_amount,
        max_amount=max_amount,
        amount_currency=amount_currency,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
        currency=currency,
    )
    return list_records(
        db,
        owner_id,
        converter,
        query,
        PageRequest(page=page, page_size=page_size),
        SortSpec.resolve(sort_by, sort),
        category_name=category,
    )
