"""
rental_services.sync -- Party and cheque propagation between records.

Responsibility:
    One-way refresh of tenant/landlord fields from the contact directory,
    two-way mirroring of cheque data between a contract and its booking,
    the booking back-reference, and payee prefill from a bank account.

Architecture position:
    Services layer.  Glue over the collaborator protocols and the booking
    mirror; works on engine value types so the contracts module can call it
    without the adapter knowing about contract persistence.

Failure modes:
    - ``ContactConflictError`` subclasses raised by the contact directory
      propagate unchanged; ``conflict_field`` maps their tag to a form field.
    - ``BookingNotFoundError`` / ``BankAccountNotFoundError`` for unknown ids.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from rental_engines.completeness import PartyDetails, PartyRole
from rental_engines.reconciler import PayeeDetails, StoredCheckRecord, assign_slot_keys
from rental_kernel.db.base import UUID
from rental_kernel.exceptions import (
    BankAccountNotFoundError,
    BookingNotFoundError,
    ConflictTag,
)
from rental_kernel.logging_config import get_logger
from rental_services.booking_checks import BookingCheck, BookingCheckMirror
from rental_services.collaborators import (
    BankAccountDirectory,
    BookingDirectory,
    BookingInfo,
    ContactDirectory,
    ContactRecord,
)

logger = get_logger("services.sync")

CONFLICT_FIELDS: dict[ConflictTag, str] = {
    ConflictTag.DUPLICATE_CIVIL_ID: "civil_id",
    ConflictTag.DUPLICATE_PASSPORT: "passport_number",
    ConflictTag.DUPLICATE_PHONE: "phone",
    ConflictTag.DUPLICATE_COMMERCIAL_REG: "company_registration",
}

# Always taken from the directory when it has a value
_IDENTITY_FIELDS = (
    "nationality",
    "civil_id",
    "civil_id_expiry",
    "passport_number",
    "passport_expiry",
    "workplace",
)
# Only filled in when the contract has nothing yet
_SEED_FIELDS = ("name", "gender", "phone", "email")


def conflict_field(tag: ConflictTag | str) -> str:
    """Form field a duplicate-contact tag belongs to."""
    return CONFLICT_FIELDS[ConflictTag(tag)]


class SyncAdapter:
    """Propagates data between the contract, the contact directory and the booking."""

    def __init__(
        self,
        contacts: ContactDirectory,
        bookings: BookingDirectory,
        mirror: BookingCheckMirror,
        bank_accounts: BankAccountDirectory | None = None,
    ):
        self._contacts = contacts
        self._bookings = bookings
        self._mirror = mirror
        self._bank_accounts = bank_accounts

    # =========================================================================
    # Parties
    # =========================================================================

    def _find_contact(self, party: PartyDetails) -> ContactRecord | None:
        for identifier in (party.phone, party.email):
            if identifier and identifier.strip():
                contact = self._contacts.find_contact_by_identifier(identifier.strip())
                if contact is not None:
                    return contact
        return None

    def refresh_party(self, party: PartyDetails, role: PartyRole | str) -> PartyDetails:
        """Copy nationality, identity documents and workplace from the directory.

        Looks the party up by phone first, then email.  Returns the party
        unchanged when no contact matches.  The directory is never written.
        """
        role = PartyRole(role)
        contact = self._find_contact(party)
        if contact is None:
            logger.info("party_contact_not_found", extra={"role": role.value})
            return party

        changes: dict[str, object] = {"contact_id": contact.contact_id}
        for name in _IDENTITY_FIELDS:
            value = getattr(contact, name)
            if value not in (None, ""):
                changes[name] = value
        for name in _SEED_FIELDS:
            if not getattr(party, name) and getattr(contact, name):
                changes[name] = getattr(contact, name)

        logger.info(
            "party_refreshed",
            extra={
                "role": role.value,
                "contact_id": contact.contact_id,
                "fields": sorted(changes),
            },
        )
        return replace(party, **changes)

    # =========================================================================
    # Booking
    # =========================================================================

    def get_booking(self, booking_id: str) -> BookingInfo:
        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def link_booking(self, booking_id: str, contract_id: str) -> None:
        """Set the booking's back-reference to the contract."""
        self.get_booking(booking_id)
        self._bookings.set_contract_id(booking_id, str(contract_id))
        logger.info(
            "booking_linked",
            extra={"booking_id": booking_id, "contract_id": str(contract_id)},
        )

    def mirror_to_booking(
        self,
        booking_id: str,
        records: Sequence[StoredCheckRecord],
        actor_id: UUID,
    ) -> tuple[BookingCheck, ...]:
        """Write the contract's cheque records to the booking mirror."""
        return self._mirror.save_booking_checks(booking_id, records, actor_id)

    def pull_from_booking(
        self,
        booking_id: str,
        records: Sequence[StoredCheckRecord],
    ) -> tuple[StoredCheckRecord, ...]:
        """Copy tenant-entered cheque data back onto the contract records.

        Aligned by slot key; a booking cheque whose check type differs is
        left alone.  Blank booking values never overwrite contract values.
        """
        checks = {
            (c.slot_key, c.check_type_id): c
            for c in self._mirror.get_booking_checks(booking_id)
            if c.slot_key
        }
        pulled = []
        updated = 0
        for record in assign_slot_keys(records):
            check = checks.get((record.slot_key, record.check_type_id))
            if check is None:
                pulled.append(record)
                continue
            new = replace(
                record,
                check_number=check.check_number or record.check_number,
                amount=check.amount if check.amount else record.amount,
                due_date=None if record.is_deposit else (check.due_date or record.due_date),
                account_number=check.account_number or record.account_number,
                account_name=check.account_name or record.account_name,
                image_url=check.image_url or record.image_url,
            )
            if new != record:
                updated += 1
            pulled.append(new)

        logger.info(
            "booking_checks_pulled",
            extra={"booking_id": booking_id, "updated_count": updated},
        )
        return tuple(pulled)

    # =========================================================================
    # Bank accounts
    # =========================================================================

    def apply_bank_account(
        self,
        account_id: str,
        payee: PayeeDetails | None = None,
    ) -> PayeeDetails:
        """Prefill payee bank metadata from a bank-account directory entry."""
        account = (
            self._bank_accounts.get_bank_account(account_id)
            if self._bank_accounts is not None
            else None
        )
        if account is None:
            raise BankAccountNotFoundError(account_id)

        base = payee or PayeeDetails()
        return replace(
            base,
            bank_name=account.bank_name_ar or account.bank_name_en or base.bank_name,
            bank_branch=account.branch or base.bank_branch,
            account_number=account.account_number or account.iban or base.account_number,
            account_name=account.name_ar or account.name_en or base.account_name,
        )
