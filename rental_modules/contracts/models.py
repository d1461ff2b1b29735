"""
Contract Domain Models (``rental_modules.contracts.models``).

Responsibility
--------------
Frozen dataclass value objects for the rental contract aggregate: the
contract with its commercial, deposit and tax terms, parties, payee and
derived figures; and the per-user edit session.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``ContractService`` and returned to callers.  Shared value types
(``PartyDetails``, ``PayeeDetails``, ``DerivedFigures``, status and payment
enums) come from the engines so the engines and this module agree on them.

Invariants enforced
-------------------
* All models except ``ContractEditSession`` are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``edit_mode`` lives only on the session object and is never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from rental_engines.approval import ApprovalState, ContractStatus
from rental_engines.completeness import PartyDetails, PartyRole
from rental_engines.fees import DerivedFigures, FeeTerms
from rental_engines.reconciler import PayeeDetails, PayeeOwnerType
from rental_engines.schedule import PaymentFrequency, PaymentMethod, ScheduleTerms
from rental_kernel.logging_config import get_logger

logger = get_logger("modules.contracts.models")

__all__ = [
    "Contract",
    "ContractEditSession",
    "ContractStatus",
    "DerivedFigures",
    "PartyDetails",
    "PartyRole",
    "PayeeDetails",
    "PayeeOwnerType",
    "PaymentFrequency",
    "PaymentMethod",
    "TERM_FIELDS",
]


# Fields ContractService.update_terms accepts
TERM_FIELDS = frozenset({
    "monthly_rent",
    "duration_months",
    "start_date",
    "actual_rental_date",
    "rent_due_day",
    "rent_payment_method",
    "rent_payment_frequency",
    "custom_monthly_rents",
    "discount_amount",
    "deposit_amount",
    "deposit_cheque_required",
    "deposit_cheque_duration_months",
    "vat_applicable",
    "other_tax_enabled",
    "other_tax_name",
    "other_tax_rate",
})


@dataclass(frozen=True)
class Contract:
    """A rental contract."""
    id: UUID
    property_id: str
    contract_type: str = "residential"
    status: ContractStatus = ContractStatus.DRAFT
    booking_id: str | None = None
    currency: str = "OMR"

    # Commercial terms
    monthly_rent: Decimal = Decimal("0")
    duration_months: int = 0
    start_date: date | None = None
    end_date: date | None = None
    actual_rental_date: date | None = None
    rent_due_day: int = 1
    rent_payment_method: PaymentMethod = PaymentMethod.CHECK
    rent_payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    custom_monthly_rents: tuple[Decimal | None, ...] = ()
    discount_amount: Decimal = Decimal("0")

    # Deposit terms
    deposit_amount: Decimal = Decimal("0")
    deposit_cheque_required: bool = False
    deposit_cheque_duration_months: int | None = None

    # Tax switches
    vat_applicable: bool = True
    other_tax_enabled: bool = False
    other_tax_name: str | None = None
    other_tax_rate: Decimal = Decimal("0")

    figures: DerivedFigures | None = None

    tenant: PartyDetails = field(default_factory=PartyDetails)
    landlord: PartyDetails = field(default_factory=PartyDetails)
    payee: PayeeDetails | None = None

    admin_approved_at: datetime | None = None
    tenant_approved_at: datetime | None = None
    landlord_approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def deposit_cash_amount(self) -> Decimal:
        """Same value as ``deposit_amount``; both names are used by callers."""
        return self.deposit_amount

    def party(self, role: PartyRole | str) -> PartyDetails:
        return self.tenant if PartyRole(role) == PartyRole.TENANT else self.landlord

    def fee_terms(self) -> FeeTerms:
        return FeeTerms(
            monthly_rent=self.monthly_rent,
            duration_months=self.duration_months,
            start_date=self.start_date,
            actual_rental_date=self.actual_rental_date,
            discount_amount=self.discount_amount,
            custom_monthly_rents=self.custom_monthly_rents,
            vat_applicable=self.vat_applicable,
            other_tax_enabled=self.other_tax_enabled,
            other_tax_rate=self.other_tax_rate,
        )

    def schedule_terms(self) -> ScheduleTerms:
        return ScheduleTerms(
            rent_payment_method=self.rent_payment_method.value,
            duration_months=self.duration_months,
            rent_payment_frequency=self.rent_payment_frequency.value,
            custom_monthly_rents=self.custom_monthly_rents,
            deposit_cheque_required=self.deposit_cheque_required,
            deposit_cheque_duration_months=self.deposit_cheque_duration_months,
            monthly_rent=self.monthly_rent,
            start_date=self.start_date,
            rent_due_day=self.rent_due_day,
        )

    def approval_state(self) -> ApprovalState:
        return ApprovalState(
            status=self.status,
            admin_approved_at=self.admin_approved_at,
            tenant_approved_at=self.tenant_approved_at,
            landlord_approved_at=self.landlord_approved_at,
        )


@dataclass
class ContractEditSession:
    """Per-user editing state for one contract.

    ``edit_mode`` unlocks terms of an ADMIN_APPROVED contract without
    demoting it.  ``overrides`` holds the slot keys whose cheque amount or
    date the user typed in during this session; the reconciler keeps
    those values when terms change.
    """
    contract_id: UUID
    edit_mode: bool = False
    overrides: set[str] = field(default_factory=set)

    def enter_edit_mode(self) -> None:
        self.edit_mode = True
        logger.info("contract_edit_mode_entered", extra={"contract_id": str(self.contract_id)})

    def exit_edit_mode(self) -> None:
        self.edit_mode = False
        self.overrides.clear()

    def record_override(self, slot_key: str) -> None:
        self.overrides.add(slot_key)
