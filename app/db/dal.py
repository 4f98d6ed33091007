"""Data Access Layer for records and categories.

Responsibilities
----------------
- Scope every read to a single owner; callers pass an already-trusted owner id.
- Translate the filter expression tree (`app.models.filters`) into a
  parameterized SQL WHERE clause.
- Return records with their category resolved, plus the unpaged total count.
- Provide small insert helpers used by seeding and tests. Editing flows live
  outside this service.
"""

from __future__ import annotations

from pathlib import Path
import logging
import sqlite3
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from app.core.errors import StorageUnavailableError
from app.models.filters import And, Comparison, FilterExpr, Or
from app.models.record import Category, CategoryRef, Record
from app.services.pagination import SortSpec

logger = logging.getLogger("app.db")

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

_SQL_OPERATORS = {"eq": "=", "gte": ">=", "lte": "<="}
_SQL_COLUMNS = {
    "id": "r.id",
    "title": "r.title",
    "date": "r.date",
    "currency": "r.currency",
    "amount": "r.amount",
    "category_id": "r.category_id",
}

RECORD_SELECT = """
    SELECT r.id, r.owner_id, r.title, r.date, r.currency, r.amount, r.note,
           r.category_id, c.name AS category_name, c.color AS category_color
    FROM records r
    LEFT JOIN categories c ON c.id = r.category_id AND c.owner_id = r.owner_id
"""


def _sql_param(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat(timespec="milliseconds")
    if isinstance(value, date):
        return value.isoformat()
    return value


def compile_filter(expr: FilterExpr) -> Tuple[str, List[Any]]:
    """Render an expression tree as a SQL fragment plus positional params."""
    if isinstance(expr, Comparison):
        column = _SQL_COLUMNS[expr.field]
        if expr.op == "eq" and expr.value is None:
            return f"{column} IS NULL", []
        return f"{column} {_SQL_OPERATORS[expr.op]} ?", [_sql_param(expr.value)]
    if not isinstance(expr, (And, Or)):
        raise TypeError(f"unsupported filter node {expr!r}")
    joiner = " AND " if isinstance(expr, And) else " OR "
    parts: List[str] = []
    params: List[Any] = []
    for clause in expr.clauses:
        sql, clause_params = compile_filter(clause)
        parts.append(f"({sql})")
        params.extend(clause_params)
    if not parts:
        return "1 = 1", []
    return joiner.join(parts), params


def _row_to_record(row: sqlite3.Row) -> Record:
    category = None
    if row["category_id"] is not None and row["category_name"] is not None:
        category = CategoryRef(
            id=row["category_id"], name=row["category_name"], color=row["category_color"]
        )
    return Record(
        id=row["id"],
        owner_id=row["owner_id"],
        title=row["title"],
        date=date.fromisoformat(row["date"]),
        currency=row["currency"],
        amount=row["amount"],
        note=row["note"],
        category_id=row["category_id"],
        category=category,
    )


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            logger.error("cannot open database %s: %s", self.db_path, exc)
            raise StorageUnavailableError("record storage is unavailable") from exc
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Reads
    def fetch_records(
        self,
        owner_id: int,
        filter_expr: Optional[FilterExpr] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Record], int]:
        """Return (records, total matching count) for one owner.

        Without `sort` rows come back newest first (date DESC, id DESC). When
        sorting by a non-id field, id breaks ties in the same direction.
        """
        where = "r.owner_id = ?"
        params: List[Any] = [owner_id]
        if filter_expr is not None:
            sql, filter_params = compile_filter(filter_expr)
            where += f" AND ({sql})"
            params.extend(filter_params)

        if sort is None:
            order_by = "r.date DESC, r.id DESC"
        else:
            direction = "DESC" if sort.direction == "desc" else "ASC"
            order_by = f"{_SQL_COLUMNS[sort.field]} {direction}"
            if sort.field != "id":
                order_by += f", r.id {direction}"

        query = f"{RECORD_SELECT} WHERE {where} ORDER BY {order_by}"
        page_params = list(params)
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            page_params.extend([limit, offset])

        try:
            with self._connect() as conn:
                cur = conn.cursor()
                cur.execute(f"SELECT COUNT(*) FROM records r WHERE {where}", params)
                total = int(cur.fetchone()[0] or 0)
                cur.execute(query, page_params)
                records = [_row_to_record(r) for r in cur.fetchall()]
        except sqlite3.Error as exc:
            logger.error("record fetch failed for owner %s: %s", owner_id, exc)
            raise StorageUnavailableError("record storage is unavailable") from exc
        logger.debug(
            "fetched %d of %d records (limit=%s offset=%s)",
            len(records),
            total,
            limit,
            offset,
        )
        return records, total

    def fetch_category(
        self,
        owner_id: int,
        name: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> Optional[Category]:
        if name is None and category_id is None:
            raise ValueError("fetch_category requires a name or an id")
        if category_id is not None:
            sql = "SELECT * FROM categories WHERE owner_id = ? AND id = ?"
            params: Tuple[Any, ...] = (owner_id, category_id)
        else:
            sql = "SELECT * FROM categories WHERE owner_id = ? AND name = ?"
            params = (owner_id, name)
        try:
            with self._connect() as conn:
                cur = conn.cursor()
                cur.execute(sql, params)
                row = cur.fetchone()
        except sqlite3.Error as exc:
            logger.error("category fetch failed for owner %s: %s", owner_id, exc)
            raise StorageUnavailableError("category storage is unavailable") from exc
        if not row:
            return None
        return Category(
            id=row["id"], owner_id=row["owner_id"], name=row["name"], color=row["color"]
        )

    # ------------------------------------------------------------------
    # Inserts (seeding / fixtures)
    def create_category(self, owner_id: int, name: str, color: str) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO categories (owner_id, name, color, created_at, updated_at)
                VALUES (?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                """,
                (owner_id, name, color),
            )
            conn.commit()
            return int(cur.lastrowid)

    def insert_record(
        self,
        owner_id: int,
        title: str,
        record_date: date,
        currency: str,
        amount: float,
        note: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO records (owner_id, title, date, currency, amount, note,
                                     category_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                """,
                (
                    owner_id,
                    title,
                    record_date.isoformat(),
                    currency,
                    float(amount),
                    note,
                    category_id,
                ),
            )
            conn.commit()
            return int(cur.lastrowid)
