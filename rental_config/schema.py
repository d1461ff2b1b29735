"""
ContractConfig schema.

The frozen runtime configuration for contract calculations: currency,
fee and tax rates, the payment-frequency map, check-type labels and the
tenant document-upload link.  YAML is parsed into this type by the loader.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from rental_engines.fees import FeeRates
from rental_engines.schedule import (
    DEFAULT_FREQUENCY_MONTHS,
    MAX_DEPOSIT_CHEQUES,
    RENT_CHEQUE,
    SECURITY_CHEQUE,
    ScheduleSettings,
)
from rental_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True)
class CheckTypeLabel:
    """Bilingual label for a check type."""

    label_ar: str
    label_en: str


DEFAULT_CHECK_TYPE_LABELS: Mapping[str, CheckTypeLabel] = MappingProxyType({
    RENT_CHEQUE: CheckTypeLabel("شيك إيجار", "Rent cheque"),
    SECURITY_CHEQUE: CheckTypeLabel("شيك ضمان", "Security cheque"),
})


@dataclass(frozen=True)
class ContractConfig:
    """Configuration for contract fee, schedule and notification behaviour."""

    config_id: str = "default"
    version: int = 1
    currency: str = "OMR"
    municipality_fee_rate: Decimal = Decimal("0.03")
    vat_rate: Decimal = Decimal("0.05")
    grace_days_per_month: int = 30
    end_date_inclusive: bool = False
    max_deposit_cheques: int = MAX_DEPOSIT_CHEQUES
    frequency_months: Mapping[str, int] = field(
        default_factory=lambda: DEFAULT_FREQUENCY_MONTHS
    )
    check_type_labels: Mapping[str, CheckTypeLabel] = field(
        default_factory=lambda: DEFAULT_CHECK_TYPE_LABELS
    )
    document_upload_url_template: str = "/bookings/{booking_id}/documents"

    def __post_init__(self) -> None:
        if not CurrencyRegistry.is_valid(self.currency):
            raise ValueError(f"Unknown currency: {self.currency}")
        if self.municipality_fee_rate < 0:
            raise ValueError("municipality_fee_rate cannot be negative")
        if self.vat_rate < 0:
            raise ValueError("vat_rate cannot be negative")
        if self.grace_days_per_month <= 0:
            raise ValueError("grace_days_per_month must be positive")
        if self.max_deposit_cheques < 1:
            raise ValueError("max_deposit_cheques must be at least 1")
        for name, months in self.frequency_months.items():
            if months < 1:
                raise ValueError(f"frequency '{name}' must cover at least one month")
        for check_type in (RENT_CHEQUE, SECURITY_CHEQUE):
            if check_type not in self.check_type_labels:
                raise ValueError(f"Missing label for check type {check_type}")
        if "{booking_id}" not in self.document_upload_url_template:
            raise ValueError("document_upload_url_template must contain {booking_id}")

    @property
    def currency_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.currency)

    def fee_rates(self) -> FeeRates:
        return FeeRates(
            currency=self.currency,
            municipality_fee_rate=self.municipality_fee_rate,
            vat_rate=self.vat_rate,
            days_per_month=self.grace_days_per_month,
            end_date_inclusive=self.end_date_inclusive,
        )

    def schedule_settings(self) -> ScheduleSettings:
        rent = self.check_type_labels[RENT_CHEQUE]
        deposit = self.check_type_labels[SECURITY_CHEQUE]
        return ScheduleSettings(
            currency=self.currency,
            frequency_months=self.frequency_months,
            rent_label_ar=rent.label_ar,
            rent_label_en=rent.label_en,
            deposit_label_ar=deposit.label_ar,
            deposit_label_en=deposit.label_en,
            max_deposit_cheques=self.max_deposit_cheques,
        )

    def label_for(self, check_type_id: str) -> CheckTypeLabel:
        """Configured label, falling back to the raw type id."""
        return self.check_type_labels.get(
            check_type_id, CheckTypeLabel(check_type_id, check_type_id)
        )

    def document_upload_url(self, booking_id: str) -> str:
        return self.document_upload_url_template.format(booking_id=booking_id)
