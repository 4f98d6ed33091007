"""Database schema DDL definitions and initialization utilities.

Tables:
  - categories: flat per-owner category set (name unique per owner)
  - records: individual expenses, amount stored in the record's own currency
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

CATEGORIES_DDL = f"""
CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    color TEXT NOT NULL, -- '#RRGGBB'
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    UNIQUE(owner_id, name)
);
"""

RECORDS_DDL = f"""
CREATE TABLE IF NOT EXISTS records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    date TEXT NOT NULL, -- ISO date (YYYY-MM-DD)
    currency TEXT NOT NULL CHECK (currency IN ('USD','KHR')),
    amount REAL NOT NULL CHECK (amount >= 0), -- native currency units
    note TEXT,
    category_id INTEGER,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

RECORDS_OWNER_DATE_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_records_owner_date ON records(owner_id, date);"
)
RECORDS_OWNER_CATEGORY_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_records_owner_category ON records(owner_id, category_id);"
)

DDL_ORDER: Sequence[str] = (
    CATEGORIES_DDL,
    RECORDS_DDL,
    METADATA_DDL,
    RECORDS_OWNER_DATE_INDEX_DDL,
    RECORDS_OWNER_CATEGORY_INDEX_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
