"""
Unit tests for Money, Currency and the currency registry.

Verifies:
- Rounding to each currency's precision, half up
- Currency code validation and normalisation
- Registry precision lookups
"""

from decimal import Decimal

import pytest

from rental_engines.fees import round_money
from rental_kernel.domain.currency import CurrencyRegistry
from rental_kernel.domain.values import Currency, Money


class TestCurrency:

    def test_code_normalised(self):
        assert Currency(" omr ").code == "OMR"
        assert str(Currency("usd")) == "USD"

    def test_invalid_code_rejected(self):
        with pytest.raises(ValueError):
            Currency("ZZZ")

    @pytest.mark.parametrize("code,quantum", [
        ("OMR", "0.001"), ("KWD", "0.001"), ("AED", "0.01"), ("JPY", "1"),
    ])
    def test_quantum(self, code, quantum):
        assert Currency(code).quantum == Decimal(quantum)

    def test_registry_precision(self):
        assert CurrencyRegistry.get_decimal_places("bhd") == 3
        assert CurrencyRegistry.get_decimal_places("XYZ") == 3
        assert CurrencyRegistry.get_info("XYZ") is None
        assert not CurrencyRegistry.is_valid("")


class TestMoneyRounding:

    @pytest.mark.parametrize("amount,currency,expected", [
        ("1.2345", "OMR", "1.235"),
        ("1.2344", "OMR", "1.234"),
        ("1.005", "USD", "1.01"),
        ("2.5", "JPY", "3"),
        ("-0.0005", "OMR", "-0.001"),
    ])
    def test_round_half_up(self, amount, currency, expected):
        assert Money.of(amount, currency).round().amount == Decimal(expected)

    def test_round_returns_new_value(self):
        money = Money.of("10.5555", "OMR")
        money.round()
        assert money.amount == Decimal("10.5555")

    def test_float_goes_through_str(self):
        assert Money(0.1, "OMR").amount == Decimal("0.1")

    def test_invalid_amount_rejected(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            Money.of("abc", "OMR")

    def test_round_money_uses_contract_currency(self):
        assert round_money(Decimal("300") / 7, "OMR") == Decimal("42.857")
        assert round_money("1.005", "USD") == Decimal("1.01")
