"""
Typed Exception Hierarchy for the Rental Kernel.

Every error has a typed exception class, a class-level ``code`` attribute
(machine-readable, API-safe) and structured attributes instead of data
packed into the message string.

Callers catch by type and read attributes:

    try:
        service.update_terms(contract_id, changes, session=edit_session)
    except ContractNotEditableError as e:
        return {"error": e.code, "status": e.status}

Validation problems (missing party fields, unapproved documents or cheques)
are NOT exceptions: the completeness gate and the approval state machine
return them as data so the caller can present remediation guidance.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    RentalKernelError (base)
    |
    +-- ContractError
    |   +-- ContractNotFoundError
    |   +-- ContractNotEditableError
    |   +-- TransitionRejectedError
    |
    +-- CollaboratorError
    |   +-- BookingNotFoundError
    |   +-- BankAccountNotFoundError
    |   +-- BookingCheckNotFoundError
    |
    +-- ContactConflictError
        +-- DuplicateCivilIdError
        +-- DuplicatePassportError
        +-- DuplicatePhoneError
        +-- DuplicateCommercialRegistrationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                           | When Raised
-------------|--------------------------------|-----------------------------------
Contract     | CONTRACT_NOT_FOUND             | Contract ID doesn't exist
             | CONTRACT_NOT_EDITABLE          | Terms edited outside DRAFT/edit mode
             | TRANSITION_REJECTED            | require_transition() on a refused guard
-------------|--------------------------------|-----------------------------------
Collaborator | BOOKING_NOT_FOUND              | Linked booking missing
             | BANK_ACCOUNT_NOT_FOUND         | Bank account id unknown
             | BOOKING_CHECK_NOT_FOUND        | No mirrored cheque at that position
-------------|--------------------------------|-----------------------------------
Contact      | DUPLICATE_CIVIL_ID             | Contact directory duplicate
             | DUPLICATE_PASSPORT             | Contact directory duplicate
             | DUPLICATE_PHONE                | Contact directory duplicate
             | DUPLICATE_COMMERCIAL_REG       | Contact directory duplicate
"""

from __future__ import annotations

from enum import Enum


class RentalKernelError(Exception):
    """
    Base exception for all rental kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "RENTAL_KERNEL_ERROR"


# Contract-related exceptions


class ContractError(RentalKernelError):
    """Base exception for contract errors."""

    code: str = "CONTRACT_ERROR"


class ContractNotFoundError(ContractError):
    """Contract with given ID was not found."""

    code: str = "CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: str):
        self.contract_id = str(contract_id)
        super().__init__(f"Contract not found: {contract_id}")


class ContractNotEditableError(ContractError):
    """Terms were changed while the contract is locked."""

    code: str = "CONTRACT_NOT_EDITABLE"

    def __init__(self, contract_id: str, status: str, edit_mode: bool):
        self.contract_id = str(contract_id)
        self.status = status
        self.edit_mode = edit_mode
        super().__init__(
            f"Contract {contract_id} is not editable in status {status} "
            f"(edit_mode={edit_mode})"
        )


class TransitionRejectedError(ContractError):
    """A guarded approval transition was refused."""

    code: str = "TRANSITION_REJECTED"

    def __init__(self, contract_id: str, action: str, reasons: tuple[str, ...]):
        self.contract_id = str(contract_id)
        self.action = action
        self.reasons = reasons
        super().__init__(
            f"Transition '{action}' rejected for contract {contract_id}: "
            f"{', '.join(reasons)}"
        )


# Collaborator exceptions


class CollaboratorError(RentalKernelError):
    """Base exception for failed lookups against external collaborators."""

    code: str = "COLLABORATOR_ERROR"


class BookingNotFoundError(CollaboratorError):
    """Linked booking does not exist."""

    code: str = "BOOKING_NOT_FOUND"

    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        super().__init__(f"Booking not found: {booking_id}")


class BankAccountNotFoundError(CollaboratorError):
    """Bank account id is unknown to the bank-account directory."""

    code: str = "BANK_ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Bank account not found: {account_id}")


class BookingCheckNotFoundError(CollaboratorError):
    """No mirrored cheque exists at the requested booking position."""

    code: str = "BOOKING_CHECK_NOT_FOUND"

    def __init__(self, booking_id: str, position: int):
        self.booking_id = booking_id
        self.position = position
        super().__init__(f"Booking {booking_id} has no cheque at position {position}")


# Contact directory conflicts


class ConflictTag(str, Enum):
    """Duplicate tags raised by the contact-directory layer."""

    DUPLICATE_CIVIL_ID = "DUPLICATE_CIVIL_ID"
    DUPLICATE_PASSPORT = "DUPLICATE_PASSPORT"
    DUPLICATE_PHONE = "DUPLICATE_PHONE"
    DUPLICATE_COMMERCIAL_REG = "DUPLICATE_COMMERCIAL_REG"


class ContactConflictError(RentalKernelError):
    """
    Base exception for duplicate-contact conflicts.

    Raised by the contact directory, never by this kernel. Carries the tag
    consumed by form-level error mapping; must not be swallowed.
    """

    code: str = "CONTACT_CONFLICT"
    tag: ConflictTag

    def __init__(self, value: str, existing_contact_id: str | None = None):
        self.value = value
        self.existing_contact_id = existing_contact_id
        super().__init__(f"{self.tag.value}: {value}")


class DuplicateCivilIdError(ContactConflictError):
    """Another contact already holds this civil ID."""

    code: str = "DUPLICATE_CIVIL_ID"
    tag = ConflictTag.DUPLICATE_CIVIL_ID


class DuplicatePassportError(ContactConflictError):
    """Another contact already holds this passport number."""

    code: str = "DUPLICATE_PASSPORT"
    tag = ConflictTag.DUPLICATE_PASSPORT


class DuplicatePhoneError(ContactConflictError):
    """Another contact already uses this phone number."""

    code: str = "DUPLICATE_PHONE"
    tag = ConflictTag.DUPLICATE_PHONE


class DuplicateCommercialRegistrationError(ContactConflictError):
    """Another company contact already uses this commercial registration."""

    code: str = "DUPLICATE_COMMERCIAL_REG"
    tag = ConflictTag.DUPLICATE_COMMERCIAL_REG
