from decimal import Decimal

import pytest

from app.core.config import Settings
from app.core.errors import ExchangeRateConfigError, UnsupportedCurrencyError
from app.services.currency import (
    CurrencyConverter,
    ExchangeRates,
    FixedRateProvider,
    build_converter,
)
from app.services.money import round2


def test_fixed_provider_reads_independent_rates():
    rates = FixedRateProvider(Settings()).get_rates()
    assert rates.base_to_secondary == Decimal("4000")
    assert rates.secondary_to_base == Decimal("0.00025")
    assert rates.is_reciprocal()


def test_to_base_and_from_base(converter):
    assert converter.to_base(Decimal("400000"), "KHR") == Decimal("100")
    assert converter.to_base(12.5, "USD") == Decimal("12.5")
    assert converter.from_base(Decimal("2.5"), "KHR") == Decimal("10000")
    assert converter.from_base(Decimal("2.5"), "usd") == Decimal("2.5")


@pytest.mark.parametrize(
    "amount,currency",
    [(0, "USD"), (19.99, "USD"), (1234.56, "KHR"), (0.01, "KHR"), (987654.33, "KHR")],
)
def test_round_trip_recovers_amount(converter, amount, currency):
    back = converter.from_base(converter.to_base(amount, currency), currency)
    assert abs(round2(back) - amount) <= 0.01


def test_convert_same_currency_is_identity(converter):
    assert converter.convert(42, "KHR", "KHR") == Decimal("42")
    assert converter.convert(42, "KHR", "USD") == Decimal("0.0105")


def test_unsupported_currency_rejected(converter):
    with pytest.raises(UnsupportedCurrencyError):
        converter.to_base(10, "EUR")


def test_non_reciprocal_rates_rejected_when_enforced():
    rates = ExchangeRates(base_to_secondary=Decimal("4100"), secondary_to_base=Decimal("0.00025"))
    with pytest.raises(ExchangeRateConfigError):
        CurrencyConverter(rates)


def test_non_reciprocal_rates_allowed_when_not_enforced():
    settings = Settings(
        usd_to_khr_rate=Decimal("4100"),
        khr_to_usd_rate=Decimal("0.00025"),
        enforce_reciprocal_rates=False,
    )
    converter = build_converter(settings)
    assert converter.from_base(1, "KHR") == Decimal("4100")
    assert converter.to_base(4000, "KHR") == Decimal("1.00000")


def test_round2_is_half_up():
    assert round2(Decimal("0.125")) == 0.13
    assert round2(2.675) == 2.68
    assert round2(Decimal("-0.005")) == -0.01
