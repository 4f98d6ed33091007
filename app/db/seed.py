"""Seeding helpers for default categories and demo records.

`seed_categories` ensures the default Food/Gas/Services categories exist for an
owner; existing rows are left untouched so it can be re-run. `seed_demo_records`
adds a small mixed-currency set for local exploration.
"""

from __future__ import annotations
from datetime import date
from pathlib import Path
import sqlite3
from typing import Dict, Mapping

from app.models.constants import DEFAULT_CATEGORIES
from .schema import init_db

DEMO_RECORDS = (
    # (title, day offset within month, currency, amount, category)
    ("Coffee", 1, "USD", 3.5, "Food"),
    ("Lunch", 2, "KHR", 24000, "Food"),
    ("Gas Refill", 3, "USD", 40.0, "Gas"),
    ("Repair", 5, "KHR", 180000, "Services"),
    ("Car Wash", 7, "USD", 8.0, "Services"),
    ("Subscription", 9, "USD", 12.99, None),
)


def seed_categories(
    db_path: Path, owner_id: int, categories: Mapping[str, str] | None = None
) -> Dict[str, int]:
    """Insert missing categories and return a name -> id map."""
    init_db(db_path)  # ensure tables exist
    wanted = categories or DEFAULT_CATEGORIES
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        for name, color in wanted.items():
            cur.execute(
                "INSERT OR IGNORE INTO categories (owner_id, name, color) VALUES (?, ?, ?)",
                (owner_id, name, color),
            )
        cur.execute("SELECT name, id FROM categories WHERE owner_id = ?", (owner_id,))
        ids = {r[0]: int(r[1]) for r in cur.fetchall()}
        conn.commit()
    return ids


def seed_demo_records(db_path: Path, owner_id: int, month_start: date) -> int:
    """Add demo records in the month starting at `month_start`; returns count added."""
    ids = seed_categories(db_path, owner_id)
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM records WHERE owner_id = ?", (owner_id,))
        if cur.fetchone()[0]:
            return 0
        for title, day, currency, amount, category in DEMO_RECORDS:
            cur.execute(
                "INSERT INTO records (owner_id, title, date, currency, amount, category_id) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    owner_id,
                    title,
                    month_start.replace(day=day).isoformat(),
                    currency,
                    amount,
                    ids.get(category) if category else None,
                ),
            )
        conn.commit()
    return len(DEMO_RECORDS)
