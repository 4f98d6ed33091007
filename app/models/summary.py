"""Response models for the listing, summary and ranking endpoints.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .record import CategoryRef


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CurrencyAmounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    usd: float = Field(0.0, alias="USD")
    khr: float = Field(0.0, alias="KHR")


# ---------------- Listing -----------------
class ListingMeta(ApiModel):
    total_items: int
    page: int
    page_size: int
    total_pages: int
    filters: Dict[str, Any]


class RecordView(ApiModel):
    """A stored record as returned by the listing, amount in its own currency."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    title: str
    date: date
    currency: str
    amount: float
    note: Optional[str] = None
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None


class RecordListing(ApiModel):
    meta: ListingMeta
    data: List[RecordView]


# ---------------- Monthly summary -----------------
class MonthlySummary(ApiModel):
    month: int
    year: int
    currency: str
    total_expenses: CurrencyAmounts
    record_count: int
    average_per_day: CurrencyAmounts
    is_empty: bool


class CategoryBreakdownItem(ApiModel):
    category_id: Optional[int]
    category_name: str
    category_color: str
    total_usd: float = Field(..., alias="totalUSD")
    total_khr: float = Field(..., alias="totalKHR")
    record_count: int
    percentage: float


class MonthlySummaryResponse(ApiModel):
    summary: MonthlySummary
    category_breakdown: List[CategoryBreakdownItem]


# ---------------- Recent average -----------------
class RecentMonth(ApiModel):
    month: int
    year: int
    month_name: str
    total_expenses: CurrencyAmounts
    average_per_day: CurrencyAmounts
    record_count: int
    raw_totals: CurrencyAmounts


class RecentAverageResponse(ApiModel):
    display_currency: str
    recent_months: List[RecentMonth]
    overall_average: CurrencyAmounts


# ---------------- Top-K ranking -----------------
class RankedRecord(ApiModel):
    id: int
    title: str
    amount: float
    original_amount: float
    original_currency: str
    date: date
    category_name: str
    category_color: str


class TopExpensesResponse(ApiModel):
    display_currency: str
    total_records: int
    top_k: List[RankedRecord]
