"""Factory helpers shared by the test modules."""

from datetime import date
from decimal import Decimal

from rental_engines.completeness import PartyDetails
from rental_engines.schedule import ScheduleTerms


def make_omani_party(**overrides) -> PartyDetails:
    values = dict(
        name="Salim Al-Harthi",
        nationality="Omani",
        gender="male",
        phone="+96890000001",
        email="salim@example.com",
        civil_id="12345678",
        civil_id_expiry=date(2030, 1, 1),
    )
    values.update(overrides)
    return PartyDetails(**values)


def make_expat_party(**overrides) -> PartyDetails:
    values = dict(
        name="Priya Nair",
        nationality="Indian",
        gender="female",
        phone="+96890000002",
        email="priya@example.com",
        passport_number="P1234567",
        passport_expiry=date(2031, 6, 30),
    )
    values.update(overrides)
    return PartyDetails(**values)


QUARTERLY_TERMS = {
    "monthly_rent": Decimal("300"),
    "duration_months": 6,
    "start_date": date(2025, 1, 1),
    "rent_due_day": 5,
    "rent_payment_method": "check",
    "rent_payment_frequency": "quarterly",
}


def make_schedule_terms(**overrides) -> ScheduleTerms:
    values = dict(QUARTERLY_TERMS)
    values.update(overrides)
    return ScheduleTerms(**values)
