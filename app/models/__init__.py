"""Pydantic domain models for the Expense Ledger."""

from .constants import (
    BASE_CURRENCY,
    SECONDARY_CURRENCY,
    CURRENCIES,
)  # re-export
from .record import Category, CategoryRef, Record, UNCATEGORIZED

__all__ = [
    "BASE_CURRENCY",
    "SECONDARY_CURRENCY",
    "CURRENCIES",
    "Category",
    "CategoryRef",
    "Record",
    "UNCATEGORIZED",
]
