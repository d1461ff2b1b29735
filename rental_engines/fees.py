"""
Fee Engine - Money and date utilities for rental contracts.

Municipality fee, VAT, other taxes, grace period and end date derived from
contract terms.  Pure functions with no I/O; rates provided as parameters.

Every function degrades to zero (amounts) or None (dates) on unparseable
input instead of raising, because the contract service re-evaluates them on
every terms edit.  Amounts are rounded ROUND_HALF_UP to the currency's
decimal places through ``Money.round()`` (three for OMR).

Usage:
    from rental_engines.fees import FeeRates, FeeTerms, derive_contract_figures

    figures = derive_contract_figures(
        terms=FeeTerms(monthly_rent=Decimal("300"), duration_months=12),
        rates=FeeRates(),
    )
    print(figures.municipality_fees)  # Decimal("108.000")
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from rental_engines.tracer import traced_engine
from rental_kernel.domain.values import Money
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.fees")

Amount = Decimal | int | float | str | None
DateLike = date | str | None

DEFAULT_CURRENCY = "OMR"
MUNICIPALITY_FEE_RATE = Decimal("0.03")
DEFAULT_VAT_RATE = Decimal("0.05")
DAYS_PER_MONTH = 30


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def to_decimal(value: Amount) -> Decimal:
    """Coerce an amount to Decimal; anything unparseable becomes zero."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


def to_date(value: DateLike) -> date | None:
    """Coerce an ISO date string (or datetime) to a date; None when invalid."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text.split("T", 1)[0])
    except ValueError:
        return None


def round_money(value: Amount, currency: str = DEFAULT_CURRENCY) -> Decimal:
    """Round to the currency's minor-unit precision."""
    return Money.of(to_decimal(value), currency).round().amount


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def add_months(day: date, months: int) -> date:
    """Same day-of-month ``months`` later, clamped to the month's last day."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def due_date_in_month(day: date, due_day: int | None) -> date:
    """The ``due_day`` of ``day``'s month, clamped to the last day."""
    if not due_day or due_day < 1:
        return day
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=min(due_day, last))


def calc_end_date(
    start: DateLike,
    duration_months: int | None,
    inclusive: bool = False,
) -> date | None:
    """Start plus duration months.

    With ``inclusive`` the result is the last day of the tenancy (one day
    earlier).  Returns None when the start date or duration is missing.
    """
    start_date = to_date(start)
    if start_date is None or not duration_months or duration_months < 1:
        return None
    end = add_months(start_date, int(duration_months))
    if inclusive:
        end = date.fromordinal(end.toordinal() - 1)
    return end


def calc_grace_period_days(actual_rental_date: DateLike, start_date: DateLike) -> int:
    """Days between the start date and the actual rental date, never negative."""
    actual = to_date(actual_rental_date)
    start = to_date(start_date)
    if actual is None or start is None:
        return 0
    return max(0, (actual - start).days)


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def calc_annual_rent(monthly_rent: Amount, currency: str = DEFAULT_CURRENCY) -> Decimal:
    return round_money(to_decimal(monthly_rent) * 12, currency)


def calc_rent_from_area(
    area: Amount,
    price_per_meter: Amount,
    currency: str = DEFAULT_CURRENCY,
) -> Decimal:
    """Monthly rent from the rented area and the price per square metre."""
    return round_money(to_decimal(area) * to_decimal(price_per_meter), currency)


def calc_total_rent(
    monthly_rent: Amount,
    duration_months: int | None,
    custom_monthly_rents: Sequence[Amount] = (),
    currency: str = DEFAULT_CURRENCY,
) -> Decimal:
    """Rent for the whole term.

    When custom monthly rents are set they define the term month by month;
    a blank month falls back to the uniform monthly rent.
    """
    rent = to_decimal(monthly_rent)
    if custom_monthly_rents:
        total = sum(
            (rent if value is None else to_decimal(value) for value in custom_monthly_rents),
            Decimal("0"),
        )
    else:
        total = rent * max(0, int(duration_months or 0))
    return round_money(total, currency)


def calc_rent_base_for_fees(
    total_rent: Amount,
    discount: Amount = None,
    currency: str = DEFAULT_CURRENCY,
) -> Decimal:
    """Total rent minus discount, floored at zero."""
    base = to_decimal(total_rent) - to_decimal(discount)
    return round_money(max(Decimal("0"), base), currency)


def calc_municipality_fees(
    base: Amount,
    rate: Amount = MUNICIPALITY_FEE_RATE,
    currency: str = DEFAULT_CURRENCY,
) -> Decimal:
    return round_money(to_decimal(base) * to_decimal(rate), currency)


def calc_vat(
    rent_base: Amount,
    duration_months: int | None,
    vat_rate: Amount = DEFAULT_VAT_RATE,
    currency: str = DEFAULT_CURRENCY,
) -> tuple[Decimal, Decimal]:
    """Return ``(monthly, total)`` VAT for the rent base.

    The total is taken on the whole base; the monthly figure spreads it over
    the duration (zero when the duration is zero).
    """
    total = round_money(to_decimal(rent_base) * to_decimal(vat_rate), currency)
    months = int(duration_months or 0)
    if months <= 0:
        return round_money(0, currency), total
    return round_money(total / months, currency), total


def calc_other_tax(
    rent_base: Amount,
    duration_months: int | None,
    rate: Amount,
    enabled: bool,
    currency: str = DEFAULT_CURRENCY,
) -> tuple[Decimal, Decimal]:
    """Same shape as VAT; zero unless enabled with a positive rate."""
    if not enabled or to_decimal(rate) <= 0:
        zero = round_money(0, currency)
        return zero, zero
    return calc_vat(rent_base, duration_months, rate, currency)


def calc_grace_period_amount(
    monthly_rent: Amount,
    days: int,
    days_per_month: int = DAYS_PER_MONTH,
    currency: str = DEFAULT_CURRENCY,
) -> Decimal:
    """Daily rent (monthly / days_per_month) times grace days."""
    if not days or days < 0 or days_per_month <= 0:
        return round_money(0, currency)
    return round_money(to_decimal(monthly_rent) * days / days_per_month, currency)


# ---------------------------------------------------------------------------
# Derived figures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeeRates:
    """Rates and conventions the derived figures are computed with."""

    currency: str = DEFAULT_CURRENCY
    municipality_fee_rate: Decimal = MUNICIPALITY_FEE_RATE
    vat_rate: Decimal = DEFAULT_VAT_RATE
    days_per_month: int = DAYS_PER_MONTH
    end_date_inclusive: bool = False


@dataclass(frozen=True)
class FeeTerms:
    """The subset of contract terms the derived figures depend on."""

    monthly_rent: Amount = None
    duration_months: int | None = None
    start_date: DateLike = None
    actual_rental_date: DateLike = None
    discount_amount: Amount = None
    custom_monthly_rents: tuple[Amount, ...] = field(default_factory=tuple)
    vat_applicable: bool = True
    other_tax_enabled: bool = False
    other_tax_rate: Amount = None


@dataclass(frozen=True)
class DerivedFigures:
    """Every value recomputed from the terms after an edit."""

    end_date: date | None
    annual_rent: Decimal
    total_rent: Decimal
    rent_base: Decimal
    municipality_fees: Decimal
    grace_period_days: int
    grace_period_amount: Decimal
    monthly_vat_amount: Decimal
    total_vat_amount: Decimal
    monthly_other_tax_amount: Decimal
    total_other_tax_amount: Decimal


@traced_engine("fees", "1.0", fingerprint_fields=("terms", "rates"))
def derive_contract_figures(*, terms: FeeTerms, rates: FeeRates) -> DerivedFigures:
    """Recompute all derived contract figures in one pass.

    Fields depending on other derived fields (rent base on total rent, VAT
    on rent base) are evaluated in dependency order, so repeated calls with
    unchanged terms return equal results.
    """
    currency = rates.currency
    duration = int(terms.duration_months or 0)
    effective_duration = len(terms.custom_monthly_rents) or duration

    total_rent = calc_total_rent(
        terms.monthly_rent, duration, terms.custom_monthly_rents, currency,
    )
    rent_base = calc_rent_base_for_fees(total_rent, terms.discount_amount, currency)

    if terms.vat_applicable:
        monthly_vat, total_vat = calc_vat(
            rent_base, effective_duration, rates.vat_rate, currency,
        )
    else:
        monthly_vat = total_vat = round_money(0, currency)

    monthly_other, total_other = calc_other_tax(
        rent_base,
        effective_duration,
        terms.other_tax_rate,
        terms.other_tax_enabled,
        currency,
    )

    grace_days = calc_grace_period_days(terms.actual_rental_date, terms.start_date)

    figures = DerivedFigures(
        end_date=calc_end_date(terms.start_date, duration, rates.end_date_inclusive),
        annual_rent=calc_annual_rent(terms.monthly_rent, currency),
        total_rent=total_rent,
        rent_base=rent_base,
        municipality_fees=calc_municipality_fees(
            rent_base, rates.municipality_fee_rate, currency,
        ),
        grace_period_days=grace_days,
        grace_period_amount=calc_grace_period_amount(
            terms.monthly_rent, grace_days, rates.days_per_month, currency,
        ),
        monthly_vat_amount=monthly_vat,
        total_vat_amount=total_vat,
        monthly_other_tax_amount=monthly_other,
        total_other_tax_amount=total_other,
    )

    logger.debug(
        "contract_figures_derived",
        extra={
            "rent_base": str(rent_base),
            "municipality_fees": str(figures.municipality_fees),
            "total_vat_amount": str(total_vat),
        },
    )
    return figures
