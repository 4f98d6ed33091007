from __future__ import annotations

import math
from dataclasses import dataclass

from app.core.errors import QueryValidationError
from app.models.constants import (
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    SORT_DIRECTIONS,
    SORT_FIELDS,
)


@dataclass(frozen=True)
class SortSpec:
    field: str = DEFAULT_SORT_FIELD
    direction: str = DEFAULT_SORT_DIRECTION

    @classmethod
    def resolve(cls, sort_by: str | None, direction: str | None) -> "SortSpec":
        """Unknown fields fall back to id, unknown directions to asc."""
        field = (sort_by or "").strip()
        if field not in SORT_FIELDS:
            field = DEFAULT_SORT_FIELD
        order = (direction or "").strip().lower()
        if order not in SORT_DIRECTIONS:
            order = DEFAULT_SORT_DIRECTION
        return cls(field=field, direction=order)


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise QueryValidationError("page size must be a positive integer")
        if self.page < 1:
            raise QueryValidationError("page must be at least 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def total_pages(total_items: int, page_size: int) -> int:
    """ceil(total / size); 0 only when there are no items."""
    if page_size <= 0:
        raise QueryValidationError("page size must be a positive integer")
    if total_items <= 0:
        return 0
    return math.ceil(total_items / page_size)
