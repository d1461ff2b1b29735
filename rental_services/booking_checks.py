"""
rental_services.booking_checks -- Booking-side cheque mirror.

Responsibility:
    Keep the cheque list the tenant sees on their booking, in the order of
    the contract's records and keyed by the same slot keys, and record the
    administration's per-cheque approval or rejection.  ``all_checks_approved`` makes the
    mirror usable as the check-approval aggregate the completeness gate
    consults.

Architecture position:
    Services layer.  Holds a SQLAlchemy session; never commits.  The caller
    (``ContractService``) owns the transaction boundary.

Invariants enforced:
    - Saving a list keeps a prior approval only for the same slot key and
      check type; a cheque that moved into another slot starts unreviewed.
    - A prior rejection is cleared when the tenant changed the cheque's
      number, amount or date since it was rejected.
    - Approving clears rejection data; rejecting clears approval data.
    - All-approved requires a non-empty list.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from rental_engines.reconciler import PayeeDetails, StoredCheckRecord, assign_slot_keys
from rental_kernel.db.base import UUID
from rental_kernel.domain.clock import Clock, SystemClock
from rental_kernel.exceptions import BookingCheckNotFoundError
from rental_kernel.logging_config import LogContext, get_logger
from rental_services.orm import BookingCheckModel

logger = get_logger("services.booking_checks")


@dataclass(frozen=True)
class BookingCheck:
    """A mirrored cheque with its approval state."""

    position: int
    check_type_id: str
    slot_key: str | None = None
    label_ar: str = ""
    label_en: str = ""
    check_number: str | None = None
    amount: Decimal | None = None
    due_date: date | None = None
    account_number: str | None = None
    account_name: str | None = None
    image_url: str | None = None
    payee: PayeeDetails | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    approval_note_ar: str | None = None
    approval_note_en: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None
    rejection_reason_ar: str | None = None
    rejection_reason_en: str | None = None

    @property
    def is_approved(self) -> bool:
        return self.approved_at is not None and self.rejected_at is None

    @property
    def is_rejected(self) -> bool:
        return self.rejected_at is not None


def _data_changed(check: BookingCheck, record: StoredCheckRecord) -> bool:
    if (record.check_number or "").strip() != (check.check_number or "").strip():
        return True
    if (record.amount or Decimal("0")) != (check.amount or Decimal("0")):
        return True
    return record.due_date != check.due_date


class BookingCheckMirror:
    """
    SQLAlchemy-backed booking cheque list.

    Contract:
        Positions are 0-based and match the contract record list order.
        Approval state follows the slot key, not the position.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def _rows(self, booking_id: str) -> list[BookingCheckModel]:
        stmt = (
            select(BookingCheckModel)
            .where(BookingCheckModel.booking_id == booking_id)
            .order_by(BookingCheckModel.position)
        )
        return list(self._session.scalars(stmt))

    def _row(self, booking_id: str, position: int) -> BookingCheckModel:
        stmt = select(BookingCheckModel).where(
            BookingCheckModel.booking_id == booking_id,
            BookingCheckModel.position == position,
        )
        row = self._session.scalars(stmt).one_or_none()
        if row is None:
            raise BookingCheckNotFoundError(booking_id, position)
        return row

    def get_booking_checks(self, booking_id: str) -> tuple[BookingCheck, ...]:
        return tuple(row.to_dto() for row in self._rows(booking_id))

    def save_booking_checks(
        self,
        booking_id: str,
        records: Sequence[StoredCheckRecord],
        actor_id: UUID,
    ) -> tuple[BookingCheck, ...]:
        """Replace the booking's cheque list with ``records``.

        Approval and rejection data carry over only from a prior row with
        the same slot key and check type; any other row starts unreviewed.
        Old rows are deleted and flushed before the new ones are inserted so
        the position constraint never sees both.
        """
        records = assign_slot_keys(records)
        previous = {
            (check.slot_key, check.check_type_id): check
            for check in self.get_booking_checks(booking_id)
            if check.slot_key
        }
        for row in self._rows(booking_id):
            self._session.delete(row)
        self._session.flush()

        carried = 0
        cleared = []
        for position, record in enumerate(records):
            prior = previous.pop((record.slot_key, record.check_type_id), None)
            payee = record.payee if position == 0 else None
            if payee is None and position == 0 and prior is not None:
                payee = prior.payee
            row = BookingCheckModel(
                booking_id=booking_id,
                position=position,
                slot_key=record.slot_key,
                check_type_id=record.check_type_id,
                label_ar=record.label_ar,
                label_en=record.label_en,
                check_number=record.check_number,
                amount=record.amount,
                due_date=record.due_date,
                account_number=record.account_number or (prior.account_number if prior else None),
                account_name=record.account_name or (prior.account_name if prior else None),
                image_url=record.image_url or (prior.image_url if prior else None),
                payee_json=json.dumps(payee.to_dict()) if payee is not None else None,
                created_by_id=actor_id,
                updated_by_id=actor_id if prior is not None else None,
            )
            if prior is not None:
                carried += 1
                row.approved_at = prior.approved_at
                row.approved_by = prior.approved_by
                row.approval_note_ar = prior.approval_note_ar
                row.approval_note_en = prior.approval_note_en
                if prior.is_rejected and _data_changed(prior, record):
                    cleared.append(position)
                elif prior.is_rejected:
                    row.rejected_at = prior.rejected_at
                    row.rejected_by = prior.rejected_by
                    row.rejection_reason_ar = prior.rejection_reason_ar
                    row.rejection_reason_en = prior.rejection_reason_en
            self._session.add(row)

        self._session.flush()
        logger.info(
            "booking_checks_saved",
            extra={
                "booking_id": booking_id,
                "check_count": len(records),
                "carried_count": carried,
                "dropped_count": len(previous),
                "rejections_cleared": cleared,
            },
        )
        return self.get_booking_checks(booking_id)

    def approve_check(
        self,
        booking_id: str,
        position: int,
        approved_by: str,
        note_ar: str | None = None,
        note_en: str | None = None,
    ) -> BookingCheck:
        """Approve one cheque; clears any rejection on it."""
        row = self._row(booking_id, position)
        row.approved_at = self._clock.now()
        row.approved_by = approved_by
        if note_ar is not None:
            row.approval_note_ar = note_ar
        if note_en is not None:
            row.approval_note_en = note_en
        row.clear_rejection()
        self._session.flush()

        with LogContext.bind(booking_id=booking_id):
            logger.info(
                "booking_check_approved",
                extra={"position": position, "approved_by": approved_by},
            )
        return row.to_dto()

    def reject_check(
        self,
        booking_id: str,
        position: int,
        rejected_by: str,
        reason_ar: str | None = None,
        reason_en: str | None = None,
    ) -> BookingCheck:
        """Reject one cheque; clears any approval on it."""
        row = self._row(booking_id, position)
        row.clear_approval()
        row.rejected_at = self._clock.now()
        row.rejected_by = rejected_by
        row.rejection_reason_ar = reason_ar or ""
        row.rejection_reason_en = reason_en or ""
        self._session.flush()

        with LogContext.bind(booking_id=booking_id):
            logger.info(
                "booking_check_rejected",
                extra={"position": position, "rejected_by": rejected_by},
            )
        return row.to_dto()

    def all_checks_approved(self, booking_id: str) -> bool:
        """Non-empty, every cheque approved, none rejected."""
        checks = self.get_booking_checks(booking_id)
        return bool(checks) and all(c.is_approved for c in checks)
