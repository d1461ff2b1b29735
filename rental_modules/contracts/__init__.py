"""
Rental Contracts Module (``rental_modules.contracts``).

Responsibility
--------------
Rental contract lifecycle: terms with derived fees and taxes, the payment
instrument (cheque) schedule and its reconciliation with stored records,
party data synced from the contact directory, the booking cheque mirror,
the completeness gate and the multi-party approval workflow.

Architecture position
---------------------
**Modules layer** -- domain models, workflow table, ORM, repository and the
``ContractService`` facade.  Calculation is delegated to ``rental_engines``.

Invariants enforced
-------------------
* Transaction boundary owned by ``ContractService``.
* No branching on status strings; transitions come from
  ``CONTRACT_APPROVAL_WORKFLOW``.
* Terms are only editable in DRAFT, or in ADMIN_APPROVED with edit mode on.

Failure modes
-------------
* ``TransitionOutcome.succeeded == False`` -- a refused approval action,
  with every reason listed on ``outcome.rejection``.
* ``ContractNotEditableError`` -- terms edited while locked.
"""

from rental_modules.contracts.models import (
    TERM_FIELDS,
    Contract,
    ContractEditSession,
    ContractStatus,
    DerivedFigures,
    PartyDetails,
    PartyRole,
    PayeeDetails,
    PayeeOwnerType,
    PaymentFrequency,
    PaymentMethod,
)
from rental_modules.contracts.repository import ContractRepository
from rental_modules.contracts.service import ContractService
from rental_modules.contracts.workflows import CONTRACT_APPROVAL_WORKFLOW

__all__ = [
    "CONTRACT_APPROVAL_WORKFLOW",
    "Contract",
    "ContractEditSession",
    "ContractRepository",
    "ContractService",
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
