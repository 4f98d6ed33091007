from datetime import date

from app.models.record import CategoryRef, Record

OWNER = 1
OTHER_OWNER = 2

FOOD = CategoryRef(id=10, name="Food", color="#ff5722")
GAS = CategoryRef(id=11, name="Gas", color="#2196f3")


def make_record(id, amount, currency="USD", day=date(2026, 10, 1), category=None, title=None):
    return Record(
        id=id,
        owner_id=OWNER,
        title=title or f"record {id}",
        date=day,
        currency=currency,
        amount=amount,
        category_id=category.id if category else None,
        category=category,
    )
