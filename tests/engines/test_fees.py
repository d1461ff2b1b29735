"""
Tests for the money/date utilities and derived contract figures.

Tests cover:
- Coercion: to_decimal / to_date never raise
- Rounding: half-up to the currency's minor unit
- Date arithmetic: month clamping, due days, end dates, grace days
- Fee and tax formulas
- derive_contract_figures: one pass, deterministic
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from rental_engines.fees import (
    FeeRates,
    FeeTerms,
    add_months,
    calc_annual_rent,
    calc_end_date,
    calc_grace_period_amount,
    calc_grace_period_days,
    calc_municipality_fees,
    calc_other_tax,
    calc_rent_base_for_fees,
    calc_rent_from_area,
    calc_total_rent,
    calc_vat,
    derive_contract_figures,
    due_date_in_month,
    round_money,
    to_date,
    to_decimal,
)


class TestCoercion:

    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "Infinity", True, [1]])
    def test_unparseable_amounts_become_zero(self, raw):
        assert to_decimal(raw) == Decimal("0")

    def test_numeric_strings_and_ints(self):
        assert to_decimal(" 12.50 ") == Decimal("12.50")
        assert to_decimal(7) == Decimal("7")
        assert to_decimal(Decimal("1.1")) == Decimal("1.1")

    def test_iso_strings_and_datetimes_become_dates(self):
        assert to_date("2025-03-01") == date(2025, 3, 1)
        assert to_date("2025-03-01T10:00:00Z") == date(2025, 3, 1)
        assert to_date(datetime(2025, 3, 1, 23, 59)) == date(2025, 3, 1)

    @pytest.mark.parametrize("raw", [None, "", "not a date", "2025-13-40"])
    def test_invalid_dates_become_none(self, raw):
        assert to_date(raw) is None


class TestRounding:

    def test_omr_rounds_to_three_places_half_up(self):
        assert round_money("1.2345") == Decimal("1.235")
        assert str(round_money(30)) == "30.000"

    def test_currency_precision_is_respected(self):
        assert round_money("1.005", "USD") == Decimal("1.01")
        assert round_money("2.5", "JPY") == Decimal("3")

    def test_garbage_rounds_to_zero(self):
        assert round_money("oops") == Decimal("0.000")


class TestDates:

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)

    def test_due_day_clamped_to_month_length(self):
        assert due_date_in_month(date(2025, 2, 1), 31) == date(2025, 2, 28)
        assert due_date_in_month(date(2025, 4, 1), 5) == date(2025, 4, 5)

    def test_missing_due_day_keeps_date(self):
        assert due_date_in_month(date(2025, 4, 17), None) == date(2025, 4, 17)

    def test_end_date(self):
        assert calc_end_date(date(2025, 1, 1), 12) == date(2026, 1, 1)
        assert calc_end_date("2025-01-01", 12, inclusive=True) == date(2025, 12, 31)

    @pytest.mark.parametrize("start,duration", [(None, 12), (date(2025, 1, 1), 0), ("bad", 3)])
    def test_end_date_missing_inputs(self, start, duration):
        assert calc_end_date(start, duration) is None

    def test_grace_period_days(self):
        assert calc_grace_period_days(date(2025, 1, 11), date(2025, 1, 1)) == 10

    def test_grace_period_days_never_negative(self):
        assert calc_grace_period_days(date(2024, 12, 20), date(2025, 1, 1)) == 0
        assert calc_grace_period_days(None, date(2025, 1, 1)) == 0


class TestAmounts:

    def test_municipality_fee_on_one_thousand(self):
        fee = calc_municipality_fees(Decimal("1000"))
        assert fee == Decimal("30")
        assert str(fee) == "30.000"

    def test_annual_rent_and_area_rent(self):
        assert calc_annual_rent("250") == Decimal("3000.000")
        assert calc_rent_from_area("120", "2.5") == Decimal("300.000")

    def test_total_rent_uniform(self):
        assert calc_total_rent(300, 6) == Decimal("1800.000")

    def test_total_rent_custom_months_fall_back_to_monthly(self):
        assert calc_total_rent(150, 6, (Decimal("100"), None, Decimal("200"))) == Decimal("450.000")

    def test_rent_base_floored_at_zero(self):
        assert calc_rent_base_for_fees(1800, 100) == Decimal("1700.000")
        assert calc_rent_base_for_fees(1800, 5000) == Decimal("0.000")

    def test_vat_total_and_monthly(self):
        assert calc_vat(1800, 6) == (Decimal("15.000"), Decimal("90.000"))
        assert calc_vat(1000, 3) == (Decimal("16.667"), Decimal("50.000"))

    def test_vat_zero_duration(self):
        assert calc_vat(1800, 0) == (Decimal("0.000"), Decimal("90.000"))

    def test_other_tax_disabled_or_zero_rate(self):
        zero = (Decimal("0.000"), Decimal("0.000"))
        assert calc_other_tax(1000, 12, "0.02", enabled=False) == zero
        assert calc_other_tax(1000, 12, "0", enabled=True) == zero

    def test_other_tax_enabled(self):
        assert calc_other_tax(1000, 12, "0.02", enabled=True) == (
            Decimal("1.667"), Decimal("20.000"),
        )

    def test_grace_period_amount(self):
        assert calc_grace_period_amount(300, 10) == Decimal("100.000")
        assert calc_grace_period_amount(300, 0) == Decimal("0.000")


class TestDeriveContractFigures:

    def _terms(self, **overrides) -> FeeTerms:
        values = dict(
            monthly_rent=Decimal("300"),
            duration_months=6,
            start_date=date(2025, 1, 1),
            actual_rental_date=date(2025, 1, 11),
        )
        values.update(overrides)
        return FeeTerms(**values)

    def test_all_figures(self):
        figures = derive_contract_figures(terms=self._terms(), rates=FeeRates())

        assert figures.end_date == date(2025, 7, 1)
        assert figures.annual_rent == Decimal("3600.000")
        assert figures.total_rent == Decimal("1800.000")
        assert figures.rent_base == Decimal("1800.000")
        assert figures.municipality_fees == Decimal("54.000")
        assert figures.grace_period_days == 10
        assert figures.grace_period_amount == Decimal("100.000")
        assert figures.total_vat_amount == Decimal("90.000")
        assert figures.monthly_vat_amount == Decimal("15.000")
        assert figures.total_other_tax_amount == Decimal("0.000")

    def test_vat_not_applicable(self):
        figures = derive_contract_figures(
            terms=self._terms(vat_applicable=False), rates=FeeRates(),
        )
        assert figures.total_vat_amount == Decimal("0")
        assert figures.monthly_vat_amount == Decimal("0")

    def test_custom_rents_define_term_for_vat(self):
        figures = derive_contract_figures(
            terms=self._terms(custom_monthly_rents=(
                Decimal("100"), Decimal("150"), Decimal("200"),
            )),
            rates=FeeRates(),
        )
        assert figures.total_rent == Decimal("450.000")
        assert figures.total_vat_amount == Decimal("22.500")
        assert figures.monthly_vat_amount == Decimal("7.500")

    def test_discount_reduces_fee_base(self):
        figures = derive_contract_figures(
            terms=self._terms(discount_amount="800"), rates=FeeRates(),
        )
        assert figures.rent_base == Decimal("1000.000")
        assert figures.municipality_fees == Decimal("30.000")

    def test_configured_rates(self):
        rates = FeeRates(municipality_fee_rate=Decimal("0.05"), end_date_inclusive=True)
        figures = derive_contract_figures(terms=self._terms(), rates=rates)
        assert figures.municipality_fees == Decimal("90.000")
        assert figures.end_date == date(2025, 6, 30)

    def test_recomputing_unchanged_terms_is_stable(self):
        first = derive_contract_figures(terms=self._terms(), rates=FeeRates())
        second = derive_contract_figures(terms=self._terms(), rates=FeeRates())
        assert first == second

    def test_emits_engine_trace(self, captured_logs):
        derive_contract_figures(terms=self._terms(), rates=FeeRates())
        traces = [r for r in captured_logs() if r["message"] == "RENTAL_ENGINE_TRACE"]
        assert traces
        assert traces[-1]["engine_name"] == "fees"
        assert len(traces[-1]["input_fingerprint"]) == 16
