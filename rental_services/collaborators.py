"""
rental_services.collaborators -- Contracts for external collaborators.

Responsibility:
    Structural protocols for everything the contract core reads from or
    writes to outside itself: the contact directory, bookings, document and
    check catalogs, the approval aggregates, bank accounts and the tenant
    notifier.  Plus dict-backed catalog defaults.

Architecture position:
    Services layer.  Depends on engines for the value types it returns
    (``CatalogCheck``, ``PartyDetails``).  Implementations live in the
    host application; tests provide in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol, runtime_checkable

from rental_engines.completeness import PartyDetails, is_omani
from rental_engines.schedule import CatalogCheck


# ---------------------------------------------------------------------------
# Value types exchanged with collaborators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContactRecord:
    """A contact directory entry as seen by the contract core."""

    contact_id: str
    name: str | None = None
    nationality: str | None = None
    gender: str | None = None
    phone: str | None = None
    email: str | None = None
    civil_id: str | None = None
    civil_id_expiry: date | None = None
    passport_number: str | None = None
    passport_expiry: date | None = None
    workplace: str | None = None


@dataclass(frozen=True)
class BookingInfo:
    """Identity fields of a booking the contract may be created from."""

    booking_id: str
    property_id: str
    contract_type: str = "residential"
    tenant_name: str | None = None
    tenant_phone: str | None = None
    tenant_email: str | None = None
    contract_id: str | None = None


@dataclass(frozen=True)
class DocRequirement:
    doc_type_id: str
    label_ar: str
    label_en: str


@dataclass(frozen=True)
class BankAccount:
    account_id: str
    name_ar: str | None = None
    name_en: str | None = None
    bank_name_ar: str | None = None
    bank_name_en: str | None = None
    account_number: str | None = None
    iban: str | None = None
    branch: str | None = None


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class ContactDirectory(Protocol):
    def find_contact_by_identifier(self, identifier: str) -> ContactRecord | None:
        """Look a contact up by phone number or email.

        May raise a ``ContactConflictError`` subclass; callers propagate it.
        """
        ...


@runtime_checkable
class BookingDirectory(Protocol):
    def get_booking(self, booking_id: str) -> BookingInfo | None: ...

    def set_contract_id(self, booking_id: str, contract_id: str) -> None: ...

    def mark_rented(self, booking_id: str) -> None: ...


@runtime_checkable
class DocumentRequirementCatalog(Protocol):
    def required_doc_types(
        self,
        property_id: str,
        contract_type: str,
        party: PartyDetails | None,
    ) -> Sequence[DocRequirement]: ...


@runtime_checkable
class DocumentApprovalAggregate(Protocol):
    def all_required_documents_approved(self, booking_id: str) -> bool: ...


@runtime_checkable
class CheckRequirementCatalog(Protocol):
    def required_checks(self, property_id: str, contract_type: str) -> Sequence[CatalogCheck]: ...


@runtime_checkable
class CheckApprovalAggregate(Protocol):
    def all_checks_approved(self, booking_id: str) -> bool: ...


@runtime_checkable
class BankAccountDirectory(Protocol):
    def get_bank_account(self, account_id: str) -> BankAccount | None: ...


@runtime_checkable
class TenantNotifier(Protocol):
    def notify_tenant(self, booking_id: str, contract_id: str, upload_url: str) -> None: ...


# ---------------------------------------------------------------------------
# Static catalogs
# ---------------------------------------------------------------------------


@dataclass
class StaticCheckCatalog:
    """Required non-rent checks per contract type, with per-property overrides."""

    by_contract_type: Mapping[str, Sequence[CatalogCheck]] = field(default_factory=dict)
    by_property: Mapping[str, Sequence[CatalogCheck]] = field(default_factory=dict)

    def required_checks(self, property_id: str, contract_type: str) -> Sequence[CatalogCheck]:
        if property_id in self.by_property:
            return tuple(self.by_property[property_id])
        return tuple(self.by_contract_type.get(contract_type, ()))


CIVIL_ID_COPY = DocRequirement("CIVIL_ID_COPY", "نسخة البطاقة المدنية", "Civil ID copy")
PASSPORT_COPY = DocRequirement("PASSPORT_COPY", "نسخة جواز السفر", "Passport copy")


@dataclass
class StaticDocumentCatalog:
    """Required documents per contract type plus one identity document.

    Omani parties upload a civil ID copy, everyone else a passport copy.
    """

    by_contract_type: Mapping[str, Sequence[DocRequirement]] = field(default_factory=dict)

    def required_doc_types(
        self,
        property_id: str,
        contract_type: str,
        party: PartyDetails | None,
    ) -> Sequence[DocRequirement]:
        identity = CIVIL_ID_COPY if party and is_omani(party.nationality) else PASSPORT_COPY
        return (identity,) + tuple(self.by_contract_type.get(contract_type, ()))
