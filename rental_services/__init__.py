"""
rental_services -- Stateful services over the rental engines.

Responsibility:
    Collaborator protocols, the SQLAlchemy-backed booking cheque mirror and
    the sync adapter.  This layer may hold database sessions; engines below
    it may not.

Architecture position:
    Services -- dependency direction:
        rental_modules/  -> rental_services/  (allowed)
        rental_services/ -> rental_engines/   (allowed)
        rental_services/ -> rental_kernel/    (allowed)
        rental_engines/  -> rental_services/  (FORBIDDEN)
        rental_kernel/   -> rental_services/  (FORBIDDEN)
"""

from rental_services.booking_checks import BookingCheck, BookingCheckMirror
from rental_services.collaborators import (
    BankAccount,
    BankAccountDirectory,
    BookingDirectory,
    BookingInfo,
    CheckApprovalAggregate,
    CheckRequirementCatalog,
    ContactDirectory,
    ContactRecord,
    DocRequirement,
    DocumentApprovalAggregate,
    DocumentRequirementCatalog,
    StaticCheckCatalog,
    StaticDocumentCatalog,
    TenantNotifier,
)
from rental_services.sync import SyncAdapter, conflict_field

__all__ = [
    "BankAccount",
    "BankAccountDirectory",
    "BookingCheck",
    "BookingCheckMirror",
    "BookingDirectory",
    "BookingInfo",
    "CheckApprovalAggregate",
    "CheckRequirementCatalog",
    "ContactDirectory",
    "ContactRecord",
    "DocRequirement",
    "DocumentApprovalAggregate",
    "DocumentRequirementCatalog",
    "StaticCheckCatalog",
    "StaticDocumentCatalog",
    "SyncAdapter",
    "TenantNotifier",
    "conflict_field",
]
