"""
Module: rental_modules.contracts.orm
Responsibility:
    SQLAlchemy ORM persistence models for rental contracts.  Maps the
    frozen ``Contract`` dataclass and its ordered cheque records to
    relational tables.

Architecture position:
    **Modules layer** -- ORM models inheriting from ``TrackedBase``
    (kernel DB base).

Invariants enforced:
    - All monetary fields use Decimal (maps to Numeric(38,9) via TrackedBase).
    - Enum fields stored as String(50).
    - Parties and payee are stored as JSON text; dates inside are ISO strings.
    - Cheque rows are ordered by ``position``; (contract_id, position) and
      (contract_id, slot_key) are unique.
"""

import json
from dataclasses import asdict, fields
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental_kernel.db.base import TrackedBase, UUIDString


def _party_to_json(party) -> str:
    data = asdict(party)
    for key, value in data.items():
        if isinstance(value, date):
            data[key] = value.isoformat()
    return json.dumps(data, ensure_ascii=False)


def _party_from_json(raw: str | None):
    from rental_modules.contracts.models import PartyDetails

    if not raw:
        return PartyDetails()
    data = json.loads(raw)
    known = {f.name for f in fields(PartyDetails)}
    values = {k: v for k, v in data.items() if k in known}
    for key in ("civil_id_expiry", "passport_expiry"):
        if values.get(key):
            values[key] = date.fromisoformat(values[key])
    return PartyDetails(**values)


# =============================================================================
# Contract
# =============================================================================


class ContractModel(TrackedBase):
    """
    A rental contract.

    Guarantees:
        - ``status`` is one of the ContractStatus values.
        - Derived figure columns are written together by ContractService.
        - ``checks`` is ordered by position.
    """

    __tablename__ = "rental_contracts"

    __table_args__ = (
        Index("idx_rental_contract_booking", "booking_id"),
        Index("idx_rental_contract_property", "property_id"),
        Index("idx_rental_contract_status", "status"),
    )

    property_id: Mapped[str] = mapped_column(String(100), nullable=False)
    contract_type: Mapped[str] = mapped_column(String(50), default="residential")
    status: Mapped[str] = mapped_column(String(50), default="DRAFT")
    booking_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="OMR")

    monthly_rent: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    duration_months: Mapped[int] = mapped_column(Integer, default=0)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    actual_rental_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rent_due_day: Mapped[int] = mapped_column(Integer, default=1)
    rent_payment_method: Mapped[str] = mapped_column(String(50), default="check")
    rent_payment_frequency: Mapped[str] = mapped_column(String(50), default="monthly")
    custom_monthly_rents_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    discount_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    deposit_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    deposit_cheque_required: Mapped[bool] = mapped_column(Boolean, default=False)
    deposit_cheque_duration_months: Mapped[int | None] = mapped_column(Integer, nullable=True)

    vat_applicable: Mapped[bool] = mapped_column(Boolean, default=True)
    other_tax_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    other_tax_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    other_tax_rate: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    # Derived figures
    annual_rent: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_rent: Mapped[Decimal | None] = mapped_column(nullable=True)
    rent_base: Mapped[Decimal | None] = mapped_column(nullable=True)
    municipality_fees: Mapped[Decimal | None] = mapped_column(nullable=True)
    grace_period_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grace_period_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    monthly_vat_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_vat_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    monthly_other_tax_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_other_tax_amount: Mapped[Decimal | None] = mapped_column(nullable=True)

    tenant_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    landlord_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    payee_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    admin_approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    tenant_approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    landlord_approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    checks: Mapped[list["ContractCheckModel"]] = relationship(
        "ContractCheckModel",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="ContractCheckModel.position",
        lazy="selectin",
    )

    def to_dto(self):
        from rental_modules.contracts.models import (
            Contract,
            ContractStatus,
            DerivedFigures,
            PayeeDetails,
            PaymentFrequency,
            PaymentMethod,
        )

        from rental_engines.fees import round_money

        def money(value):
            return round_money(value, self.currency) if value is not None else None

        figures = None
        if self.rent_base is not None:
            figures = DerivedFigures(
                end_date=self.end_date,
                annual_rent=money(self.annual_rent),
                total_rent=money(self.total_rent),
                rent_base=money(self.rent_base),
                municipality_fees=money(self.municipality_fees),
                grace_period_days=self.grace_period_days or 0,
                grace_period_amount=money(self.grace_period_amount),
                monthly_vat_amount=money(self.monthly_vat_amount),
                total_vat_amount=money(self.total_vat_amount),
                monthly_other_tax_amount=money(self.monthly_other_tax_amount),
                total_other_tax_amount=money(self.total_other_tax_amount),
            )

        custom = ()
        if self.custom_monthly_rents_json:
            custom = tuple(
                Decimal(v) if v is not None else None
                for v in json.loads(self.custom_monthly_rents_json)
            )

        return Contract(
            id=self.id,
            property_id=self.property_id,
            contract_type=self.contract_type,
            status=ContractStatus(self.status),
            booking_id=self.booking_id,
            currency=self.currency,
            monthly_rent=money(self.monthly_rent),
            duration_months=self.duration_months,
            start_date=self.start_date,
            end_date=self.end_date,
            actual_rental_date=self.actual_rental_date,
            rent_due_day=self.rent_due_day,
            rent_payment_method=PaymentMethod(self.rent_payment_method),
            rent_payment_frequency=PaymentFrequency(self.rent_payment_frequency),
            custom_monthly_rents=custom,
            discount_amount=money(self.discount_amount),
            deposit_amount=money(self.deposit_amount),
            deposit_cheque_required=self.deposit_cheque_required,
            deposit_cheque_duration_months=self.deposit_cheque_duration_months,
            vat_applicable=self.vat_applicable,
            other_tax_enabled=self.other_tax_enabled,
            other_tax_name=self.other_tax_name,
            other_tax_rate=self.other_tax_rate,
            figures=figures,
            tenant=_party_from_json(self.tenant_json),
            landlord=_party_from_json(self.landlord_json),
            payee=PayeeDetails.from_dict(json.loads(self.payee_json)) if self.payee_json else None,
            admin_approved_at=self.admin_approved_at,
            tenant_approved_at=self.tenant_approved_at,
            landlord_approved_at=self.landlord_approved_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply_dto(self, dto) -> None:
        """Copy every persisted field from the dataclass onto this row."""
        self.property_id = dto.property_id
        self.contract_type = dto.contract_type
        self.status = dto.status.value if hasattr(dto.status, "value") else dto.status
        self.booking_id = dto.booking_id
        self.currency = dto.currency
        self.monthly_rent = dto.monthly_rent
        self.duration_months = dto.duration_months
        self.start_date = dto.start_date
        self.end_date = dto.end_date
        self.actual_rental_date = dto.actual_rental_date
        self.rent_due_day = dto.rent_due_day
        self.rent_payment_method = dto.rent_payment_method.value
        self.rent_payment_frequency = dto.rent_payment_frequency.value
        self.custom_monthly_rents_json = (
            json.dumps([str(v) if v is not None else None for v in dto.custom_monthly_rents])
            if dto.custom_monthly_rents
            else None
        )
        self.discount_amount = dto.discount_amount
        self.deposit_amount = dto.deposit_amount
        self.deposit_cheque_required = dto.deposit_cheque_required
        self.deposit_cheque_duration_months = dto.deposit_cheque_duration_months
        self.vat_applicable = dto.vat_applicable
        self.other_tax_enabled = dto.other_tax_enabled
        self.other_tax_name = dto.other_tax_name
        self.other_tax_rate = dto.other_tax_rate

        figures = dto.figures
        self.annual_rent = figures.annual_rent if figures else None
        self.total_rent = figures.total_rent if figures else None
        self.rent_base = figures.rent_base if figures else None
        self.municipality_fees = figures.municipality_fees if figures else None
        self.grace_period_days = figures.grace_period_days if figures else None
        self.grace_period_amount = figures.grace_period_amount if figures else None
        self.monthly_vat_amount = figures.monthly_vat_amount if figures else None
        self.total_vat_amount = figures.total_vat_amount if figures else None
        self.monthly_other_tax_amount = figures.monthly_other_tax_amount if figures else None
        self.total_other_tax_amount = figures.total_other_tax_amount if figures else None

        self.tenant_json = _party_to_json(dto.tenant)
        self.landlord_json = _party_to_json(dto.landlord)
        self.payee_json = (
            json.dumps(dto.payee.to_dict(), ensure_ascii=False) if dto.payee else None
        )
        self.admin_approved_at = dto.admin_approved_at
        self.tenant_approved_at = dto.tenant_approved_at
        self.landlord_approved_at = dto.landlord_approved_at

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "ContractModel":
        model = cls(id=dto.id, created_by_id=created_by_id)
        model.apply_dto(dto)
        return model

    def __repr__(self) -> str:
        return f"<ContractModel {self.id} {self.status}>"


# =============================================================================
# Contract cheque records
# =============================================================================


class ContractCheckModel(TrackedBase):
    """
    One stored cheque record of a contract.

    Guarantees:
        - ``position`` follows the generator order.
        - ``payee_json`` is set on position 0 only.
    """

    __tablename__ = "rental_contract_checks"

    __table_args__ = (
        UniqueConstraint("contract_id", "position", name="uq_contract_check_position"),
        UniqueConstraint("contract_id", "slot_key", name="uq_contract_check_slot"),
        Index("idx_contract_check_contract", "contract_id"),
    )

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("rental_contracts.id"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    slot_key: Mapped[str] = mapped_column(String(32), nullable=False)
    check_type_id: Mapped[str] = mapped_column(String(100), nullable=False)
    label_ar: Mapped[str] = mapped_column(String(255), default="")
    label_en: Mapped[str] = mapped_column(String(255), default="")
    check_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    account_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    payee_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    contract: Mapped["ContractModel"] = relationship(
        "ContractModel",
        back_populates="checks",
    )

    def to_dto(self):
        from rental_engines.reconciler import PayeeDetails, StoredCheckRecord

        return StoredCheckRecord(
            check_type_id=self.check_type_id,
            label_ar=self.label_ar,
            label_en=self.label_en,
            slot_key=self.slot_key,
            check_number=self.check_number,
            amount=self.amount,
            due_date=self.due_date,
            account_number=self.account_number,
            account_name=self.account_name,
            image_url=self.image_url,
            payee=PayeeDetails.from_dict(json.loads(self.payee_json)) if self.payee_json else None,
        )

    @classmethod
    def from_dto(cls, dto, contract_id: UUID, position: int, created_by_id: UUID) -> "ContractCheckModel":
        return cls(
            contract_id=contract_id,
            position=position,
            slot_key=dto.slot_key,
            check_type_id=dto.check_type_id,
            label_ar=dto.label_ar,
            label_en=dto.label_en,
            check_number=dto.check_number,
            amount=dto.amount,
            due_date=dto.due_date,
            account_number=dto.account_number,
            account_name=dto.account_name,
            image_url=dto.image_url,
            payee_json=(
                json.dumps(dto.payee.to_dict(), ensure_ascii=False) if dto.payee else None
            ),
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ContractCheckModel {self.contract_id}#{self.position} {self.check_type_id}>"
