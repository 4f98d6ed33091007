from datetime import date

import pytest

from app.core.errors import QueryValidationError
from app.services.pagination import PageRequest, SortSpec, total_pages

from factories import OWNER


@pytest.mark.parametrize(
    "total,size,expected",
    [(23, 10, 3), (0, 10, 0), (10, 10, 1), (11, 10, 2), (1, 100, 1)],
)
def test_total_pages(total, size, expected):
    assert total_pages(total, size) == expected


def test_zero_page_size_rejected():
    with pytest.raises(QueryValidationError):
        total_pages(5, 0)
    with pytest.raises(QueryValidationError):
        PageRequest(page=1, page_size=0)


def test_page_below_one_rejected():
    with pytest.raises(QueryValidationError):
        PageRequest(page=0, page_size=10)


def test_offset():
    assert PageRequest(page=1, page_size=10).offset == 0
    assert PageRequest(page=3, page_size=25).offset == 50


@pytest.mark.parametrize(
    "sort_by,direction,expected",
    [
        ("amount", "desc", SortSpec("amount", "desc")),
        ("title", "DESC", SortSpec("title", "desc")),
        ("password", "desc", SortSpec("id", "desc")),
        (None, None, SortSpec("id", "asc")),
        ("date", "sideways", SortSpec("date", "asc")),
    ],
)
def test_sort_resolution_falls_back(sort_by, direction, expected):
    assert SortSpec.resolve(sort_by, direction) == expected


def test_storage_pages_with_stable_secondary_order(db):
    for i in range(5):
        db.insert_record(OWNER, f"r{i}", date(2026, 10, 1), "USD", 10)
    first, total = db.fetch_records(
        OWNER, sort=SortSpec("amount", "asc"), limit=2, offset=0
    )
    second, _ = db.fetch_records(
        OWNER, sort=SortSpec("amount", "asc"), limit=2, offset=2
    )
    assert total == 5
    ids = [r.id for r in first + second]
    assert ids == sorted(ids)
    assert len(set(ids)) == 4
