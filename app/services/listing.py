"""Paginated record listing.

Resolves an optional category name to an id, builds the currency-aware filter,
fetches one page through the DAL and wraps it with pagination metadata. The
records are returned as stored (native currency, no conversion).
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from app.core.errors import CategoryNotFoundError
from app.db.dal import Database
from app.models.summary import ListingMeta, RecordListing, RecordView
from app.services.currency import CurrencyConverter
from app.services.pagination import PageRequest, SortSpec, total_pages
from app.services.range_filter import RangeFilterBuilder, RecordQuery

logger = logging.getLogger("app.listing")


def resolve_category_name(db: Database, owner_id: int, name: str) -> int:
    category = db.fetch_category(owner_id, name=name)
    if category is None:
        raise CategoryNotFoundError(name)
    return category.id


def list_records(
    db: Database,
    owner_id: int,
    converter: CurrencyConverter,
    query: RecordQuery,
    page: PageRequest,
    sort: SortSpec,
    category_name: Optional[str] = None,
) -> RecordListing:
    if category_name:
        query = dataclasses.replace(
            query, category_id=resolve_category_name(db, owner_id, category_name)
        )
    builder = RangeFilterBuilder(converter)
    query = builder.normalize(query)
    expr = builder.build(query)
    records, total = db.fetch_records(
        owner_id, expr, sort=sort, limit=page.limit, offset=page.offset
    )
    logger.debug(
        "listing page=%d size=%d total=%d sort=%s:%s",
        page.page,
        page.page_size,
        total,
        sort.field,
        sort.direction,
    )
    filters = query.echo()
    if category_name:
        filters["category"] = category_name
    filters["sortBy"] = sort.field
    filters["sort"] = sort.direction
    return RecordListing(
        meta=ListingMeta(
            total_items=total,
            page=page.page,
            page_size=page.page_size,
            total_pages=total_pages(total, page.page_size),
            filters=filters,
        ),
        data=[RecordView.model_validate(r) for r in records],
    )
