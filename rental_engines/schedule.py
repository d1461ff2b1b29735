"""
Schedule Engine - Required payment instruments from contract terms.

Derives the ordered list of cheques a contract needs: the non-rent cheques
the property's catalog requires, the deposit (security) cheques, and one
rent cheque per payment period.  The order of that list is significant;
the reconciler and the booking mirror align on it.

Pure functions with no I/O.  The catalog entries are fetched by the caller
and passed in.

Usage:
    from rental_engines.schedule import ScheduleTerms, generate_required_instruments

    instruments = generate_required_instruments(
        terms=ScheduleTerms(
            rent_payment_method="check",
            duration_months=6,
            rent_payment_frequency="quarterly",
            monthly_rent=Decimal("300"),
            start_date=date(2025, 1, 1),
            rent_due_day=5,
        ),
        catalog_entries=(),
        settings=ScheduleSettings(),
    )
    # two RENT_CHEQUE entries of 900.000, due 2025-01-05 and 2025-04-05
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from rental_engines.fees import (
    Amount,
    DateLike,
    add_months,
    due_date_in_month,
    round_money,
    to_date,
    to_decimal,
)
from rental_engines.tracer import traced_engine
from rental_kernel.logging_config import get_logger
from rental_kernel.utils.hashing import slot_key

logger = get_logger("engines.schedule")

RENT_CHEQUE = "RENT_CHEQUE"
SECURITY_CHEQUE = "SECURITY_CHEQUE"
COMPUTED_CHECK_TYPES = frozenset({RENT_CHEQUE, SECURITY_CHEQUE})


class PaymentMethod(str, Enum):
    """How rent is paid."""

    CASH = "cash"
    CHECK = "check"
    BANK_TRANSFER = "bank_transfer"
    ELECTRONIC_PAYMENT = "electronic_payment"


class PaymentFrequency(str, Enum):
    """Rent payment frequency."""

    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"


DEFAULT_FREQUENCY_MONTHS: Mapping[str, int] = MappingProxyType({
    PaymentFrequency.MONTHLY.value: 1,
    PaymentFrequency.BIMONTHLY.value: 2,
    PaymentFrequency.QUARTERLY.value: 3,
    PaymentFrequency.SEMIANNUAL.value: 6,
    PaymentFrequency.ANNUAL.value: 12,
})

MAX_DEPOSIT_CHEQUES = 6


@dataclass(frozen=True)
class CatalogCheck:
    """A check type the property/contract-type catalog requires."""

    check_type_id: str
    label_ar: str
    label_en: str


@dataclass(frozen=True)
class ScheduleSettings:
    """Labels and period lengths used by the generator."""

    currency: str = "OMR"
    frequency_months: Mapping[str, int] = field(
        default_factory=lambda: DEFAULT_FREQUENCY_MONTHS
    )
    rent_label_ar: str = "شيك إيجار"
    rent_label_en: str = "Rent cheque"
    deposit_label_ar: str = "شيك ضمان"
    deposit_label_en: str = "Security cheque"
    max_deposit_cheques: int = MAX_DEPOSIT_CHEQUES


@dataclass(frozen=True)
class ScheduleTerms:
    """The contract terms the instrument schedule depends on."""

    rent_payment_method: str | None = None
    duration_months: int | None = None
    rent_payment_frequency: str | None = PaymentFrequency.MONTHLY.value
    custom_monthly_rents: tuple[Amount, ...] = field(default_factory=tuple)
    deposit_cheque_required: bool = False
    deposit_cheque_duration_months: int | None = None
    monthly_rent: Amount = None
    start_date: DateLike = None
    rent_due_day: int | None = None


@dataclass(frozen=True)
class RequiredInstrument:
    """One slot in the generated schedule.

    ``ordinal`` is 1-based within the check type, also when the type occurs
    once, so a slot keeps its key when the count grows or shrinks.  The
    label is numbered only when the type occurs more than once.
    """

    check_type_id: str
    label_ar: str
    label_en: str
    ordinal: int
    slot_key: str
    default_amount: Decimal
    default_date: date | None = None
    period_index: int | None = None

    @property
    def is_rent(self) -> bool:
        return self.check_type_id == RENT_CHEQUE

    @property
    def is_deposit(self) -> bool:
        return self.check_type_id == SECURITY_CHEQUE


def period_months_for(frequency: str | None, settings: ScheduleSettings) -> int:
    """Months covered by one rent cheque; unknown frequencies are monthly."""
    if isinstance(frequency, PaymentFrequency):
        frequency = frequency.value
    return settings.frequency_months.get(frequency or "", 1)


def effective_duration(terms: ScheduleTerms) -> int:
    """Length of the custom rent list when set, else the contract duration."""
    if terms.custom_monthly_rents:
        return len(terms.custom_monthly_rents)
    return max(0, int(terms.duration_months or 0))


def rent_cheque_count(duration: int, period_months: int) -> int:
    """Ceiling division; the last period is never shortened."""
    if duration < 1 or period_months < 1:
        return 0
    return -(-duration // period_months)


def _numbered(label: str, ordinal: int, count: int) -> str:
    return label if count == 1 else f"{label} #{ordinal}"


def _rent_amount(terms: ScheduleTerms, period_index: int, period_months: int) -> Decimal:
    monthly = to_decimal(terms.monthly_rent)
    if not terms.custom_monthly_rents:
        return monthly * period_months
    custom = terms.custom_monthly_rents
    total = Decimal("0")
    first = period_index * period_months
    for month in range(first, first + period_months):
        value = custom[month] if month < len(custom) else None
        total += monthly if value is None else to_decimal(value)
    return total


def _catalog_instruments(
    entries: Sequence[CatalogCheck],
    currency: str,
) -> list[RequiredInstrument]:
    kept = [e for e in entries if e.check_type_id not in COMPUTED_CHECK_TYPES]
    occurrences = Counter(e.check_type_id for e in kept)
    seen: Counter[str] = Counter()
    result = []
    for entry in kept:
        seen[entry.check_type_id] += 1
        ordinal = seen[entry.check_type_id]
        count = occurrences[entry.check_type_id]
        result.append(RequiredInstrument(
            check_type_id=entry.check_type_id,
            label_ar=_numbered(entry.label_ar, ordinal, count),
            label_en=_numbered(entry.label_en, ordinal, count),
            ordinal=ordinal,
            slot_key=slot_key(entry.check_type_id, ordinal),
            default_amount=round_money(0, currency),
        ))
    return result


def _deposit_instruments(
    terms: ScheduleTerms,
    settings: ScheduleSettings,
) -> list[RequiredInstrument]:
    count = int(terms.deposit_cheque_duration_months or 0)
    if not terms.deposit_cheque_required or not 1 <= count <= settings.max_deposit_cheques:
        return []
    amount = round_money(terms.monthly_rent, settings.currency)
    result = []
    for i in range(count):
        ordinal = i + 1
        result.append(RequiredInstrument(
            check_type_id=SECURITY_CHEQUE,
            label_ar=_numbered(settings.deposit_label_ar, ordinal, count),
            label_en=_numbered(settings.deposit_label_en, ordinal, count),
            ordinal=ordinal,
            slot_key=slot_key(SECURITY_CHEQUE, ordinal),
            default_amount=amount,
            default_date=None,
        ))
    return result


def _rent_instruments(
    terms: ScheduleTerms,
    settings: ScheduleSettings,
) -> list[RequiredInstrument]:
    method = terms.rent_payment_method
    if isinstance(method, PaymentMethod):
        method = method.value
    if method != PaymentMethod.CHECK.value or int(terms.duration_months or 0) < 1:
        return []

    period = period_months_for(terms.rent_payment_frequency, settings)
    count = rent_cheque_count(effective_duration(terms), period)
    start = to_date(terms.start_date)

    result = []
    for i in range(count):
        ordinal = i + 1
        due = None
        if start is not None:
            due = due_date_in_month(add_months(start, i * period), terms.rent_due_day)
        result.append(RequiredInstrument(
            check_type_id=RENT_CHEQUE,
            label_ar=_numbered(settings.rent_label_ar, ordinal, count),
            label_en=_numbered(settings.rent_label_en, ordinal, count),
            ordinal=ordinal,
            slot_key=slot_key(RENT_CHEQUE, ordinal),
            default_amount=round_money(_rent_amount(terms, i, period), settings.currency),
            default_date=due,
            period_index=i,
        ))
    return result


@traced_engine("schedule", "1.0", fingerprint_fields=("terms", "catalog_entries"))
def generate_required_instruments(
    *,
    terms: ScheduleTerms,
    catalog_entries: Sequence[CatalogCheck] = (),
    settings: ScheduleSettings | None = None,
) -> tuple[RequiredInstrument, ...]:
    """Build the ordered instrument schedule.

    Order: catalog (non-rent) entries, then deposit cheques, then rent
    cheques.  Rent and security entries coming from the catalog are
    dropped; those two types are always computed here.
    """
    settings = settings or ScheduleSettings()
    instruments = (
        _catalog_instruments(catalog_entries, settings.currency)
        + _deposit_instruments(terms, settings)
        + _rent_instruments(terms, settings)
    )

    logger.debug(
        "schedule_generated",
        extra={
            "instrument_count": len(instruments),
            "rent_cheques": sum(1 for i in instruments if i.is_rent),
            "deposit_cheques": sum(1 for i in instruments if i.is_deposit),
        },
    )
    return tuple(instruments)
