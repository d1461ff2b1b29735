"""
SQLAlchemy ORM persistence model for the booking-side cheque mirror.

Responsibility
--------------
``BookingCheckModel`` stores the cheque list a tenant sees on their
booking, one row per position, together with the per-cheque approval or
rejection recorded by the property administration.

Architecture position
---------------------
**Services layer** -- ORM model consumed by ``BookingCheckMirror``.
Inherits from ``TrackedBase`` (kernel db layer).

Invariants enforced
-------------------
* (booking_id, position) is unique; positions follow the contract's
  cheque record order and ``slot_key`` carries the contract slot identity.
* Amounts use ``Decimal`` (Numeric(38,9)) -- NEVER float.
* Payee metadata is stored as JSON text on position 0 only.
"""

import json
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import TrackedBase


class BookingCheckModel(TrackedBase):
    """
    One cheque on a booking.

    Guarantees:
        - approved_* and rejected_* are never both set after approve/reject.
        - A row exists for every position written by the last save.
    """

    __tablename__ = "rental_booking_checks"

    __table_args__ = (
        UniqueConstraint("booking_id", "position", name="uq_booking_check_position"),
        Index("idx_booking_checks_booking", "booking_id"),
    )

    booking_id: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    slot_key: Mapped[str | None] = mapped_column(String(32), nullable=True)
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

    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    approval_note_ar: Mapped[str | None] = mapped_column(Text, nullable=True)
    approval_note_en: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rejection_reason_ar: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason_en: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from rental_engines.reconciler import PayeeDetails
        from rental_services.booking_checks import BookingCheck

        return BookingCheck(
            position=self.position,
            slot_key=self.slot_key,
            check_type_id=self.check_type_id,
            label_ar=self.label_ar,
            label_en=self.label_en,
            check_number=self.check_number,
            amount=self.amount,
            due_date=self.due_date,
            account_number=self.account_number,
            account_name=self.account_name,
            image_url=self.image_url,
            payee=PayeeDetails.from_dict(json.loads(self.payee_json)) if self.payee_json else None,
            approved_at=self.approved_at,
            approved_by=self.approved_by,
            approval_note_ar=self.approval_note_ar,
            approval_note_en=self.approval_note_en,
            rejected_at=self.rejected_at,
            rejected_by=self.rejected_by,
            rejection_reason_ar=self.rejection_reason_ar,
            rejection_reason_en=self.rejection_reason_en,
        )

    def clear_approval(self) -> None:
        self.approved_at = None
        self.approved_by = None

    def clear_rejection(self) -> None:
        self.rejected_at = None
        self.rejected_by = None
        self.rejection_reason_ar = None
        self.rejection_reason_en = None

    def __repr__(self) -> str:
        return (
            f"<BookingCheckModel {self.booking_id}#{self.position} "
            f"{self.check_type_id}>"
        )
