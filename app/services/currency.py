"""Fixed-rate USD/KHR conversion.

Design:
- Base currency: USD. Every cross-currency figure is routed through it.
- `ExchangeRates` holds the two directional factors as independent constants;
  the reciprocity check is opt-out via settings.
- `RateProvider` produces an `ExchangeRates`; `FixedRateProvider` reads it from
  settings. A live source would be another provider, call sites stay the same.
- `CurrencyConverter` works in Decimal and never rounds; callers round once
  when building responses.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from app.core.config import Settings
from app.core.errors import ExchangeRateConfigError, UnsupportedCurrencyError
from app.models.constants import BASE_CURRENCY, SECONDARY_CURRENCY
from app.services.money import Number, to_decimal

logger = logging.getLogger("app.currency")

RECIPROCAL_TOLERANCE = Decimal("1e-9")


@dataclass(frozen=True)
class ExchangeRates:
    base_to_secondary: Decimal  # KHR per 1 USD
    secondary_to_base: Decimal  # USD per 1 KHR

    def is_reciprocal(self) -> bool:
        product = self.base_to_secondary * self.secondary_to_base
        return abs(product - 1) <= RECIPROCAL_TOLERANCE


class RateProvider(ABC):
    @abstractmethod
    def get_rates(self) -> ExchangeRates:
        raise NotImplementedError


class FixedRateProvider(RateProvider):
    def __init__(self, settings: Settings):
        self._rates = ExchangeRates(
            base_to_secondary=to_decimal(settings.usd_to_khr_rate),
            secondary_to_base=to_decimal(settings.khr_to_usd_rate),
        )

    def get_rates(self) -> ExchangeRates:
        return self._rates


def normalize_currency(currency: str) -> str:
    code = (currency or "").strip().upper()
    if code not in (BASE_CURRENCY, SECONDARY_CURRENCY):
        raise UnsupportedCurrencyError(currency)
    return code


class CurrencyConverter:
    def __init__(self, rates: ExchangeRates, require_reciprocal: bool = True):
        if rates.base_to_secondary <= 0 or rates.secondary_to_base <= 0:
            raise ExchangeRateConfigError("exchange rates must be positive")
        if require_reciprocal and not rates.is_reciprocal():
            raise ExchangeRateConfigError(
                "exchange rates are not reciprocal: "
                f"{rates.base_to_secondary} x {rates.secondary_to_base} != 1"
            )
        if not rates.is_reciprocal():
            logger.warning(
                "non-reciprocal exchange rates in use (%s, %s)",
                rates.base_to_secondary,
                rates.secondary_to_base,
            )
        self.rates = rates

    @classmethod
    def from_provider(
        cls, provider: RateProvider, require_reciprocal: bool = True
    ) -> "CurrencyConverter":
        return cls(provider.get_rates(), require_reciprocal=require_reciprocal)

    def to_base(self, amount: Number, currency: str) -> Decimal:
        """Return the USD value of `amount` expressed in `currency`."""
        value = to_decimal(amount)
        if normalize_currency(currency) == BASE_CURRENCY:
            return value
        return value * self.rates.secondary_to_base

    def from_base(self, amount_base: Number, target: str) -> Decimal:
        """Re-express a USD value in `target` units."""
        value = to_decimal(amount_base)
        if normalize_currency(target) == BASE_CURRENCY:
            return value
        return value * self.rates.base_to_secondary

    def convert(self, amount: Number, source: str, target: str) -> Decimal:
        if normalize_currency(source) == normalize_currency(target):
            return to_decimal(amount)
        return self.from_base(self.to_base(amount, source), target)


def build_converter(settings: Settings) -> CurrencyConverter:
    return CurrencyConverter.from_provider(
        FixedRateProvider(settings),
        require_reciprocal=settings.enforce_reciprocal_rates,
    )
