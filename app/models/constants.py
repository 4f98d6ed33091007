"""Domain constants and enumerations for validation.

Kept as plain sets/tuples; routers and services validate against these.
"""

from typing import Dict, Set, Tuple

BASE_CURRENCY = "USD"
SECONDARY_CURRENCY = "KHR"
CURRENCIES: Tuple[str, str] = (BASE_CURRENCY, SECONDARY_CURRENCY)

# Monthly summary filter; ALL disables the currency predicate
ALL_CURRENCIES = "ALL"
SUMMARY_CURRENCY_FILTERS: Set[str] = {BASE_CURRENCY, SECONDARY_CURRENCY, ALL_CURRENCIES}
DEFAULT_SUMMARY_CURRENCY = ALL_CURRENCIES

# Recent-average display modes
DISPLAY_MODES: Set[str] = {BASE_CURRENCY, SECONDARY_CURRENCY, "BOTH"}
DEFAULT_DISPLAY_MODE = "BOTH"

# Top-K ranking display currencies
RANKING_CURRENCIES: Set[str] = {BASE_CURRENCY, SECONDARY_CURRENCY}
DEFAULT_RANKING_CURRENCY = BASE_CURRENCY

SORT_FIELDS: Set[str] = {"id", "amount", "date", "title"}
DEFAULT_SORT_FIELD = "id"
SORT_DIRECTIONS: Set[str] = {"asc", "desc"}
DEFAULT_SORT_DIRECTION = "asc"

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#808080"

# Seeded for each new owner
DEFAULT_CATEGORIES: Dict[str, str] = {
    "Food": "#ff5722",
    "Gas": "#2196f3",
    "Services": "#4caf50",
}

MONTH_NAMES: Tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
