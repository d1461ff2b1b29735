"""Contract Approval Workflow.

State machine for the rental contract lifecycle: admin approval gated by
the completeness checks, tenant and landlord approvals in either order,
then a final admin approval that rents out the booking.
"""

from rental_engines.approval import (
    GUARD_CHEQUES_APPROVED,
    GUARD_DOCUMENTS_APPROVED,
    GUARD_PARTY_APPROVALS_RECORDED,
    GUARD_PARTY_DATA_COMPLETE,
    ApprovalAction,
    ContractStatus,
)
from rental_kernel.domain.workflow import Guard, Transition, Workflow
from rental_kernel.logging_config import get_logger

logger = get_logger("modules.contracts.workflows")


PARTY_DATA_COMPLETE = Guard(GUARD_PARTY_DATA_COMPLETE, "Tenant and landlord data complete")
DOCUMENTS_APPROVED = Guard(GUARD_DOCUMENTS_APPROVED, "All required booking documents approved")
CHEQUES_APPROVED = Guard(GUARD_CHEQUES_APPROVED, "All required cheques filled in and approved")
PARTY_APPROVALS_RECORDED = Guard(
    GUARD_PARTY_APPROVALS_RECORDED, "Both tenant and landlord have approved"
)

_DRAFT = ContractStatus.DRAFT.value
_ADMIN = ContractStatus.ADMIN_APPROVED.value
_TENANT = ContractStatus.TENANT_APPROVED.value
_LANDLORD = ContractStatus.LANDLORD_APPROVED.value
_APPROVED = ContractStatus.APPROVED.value
_CANCELLED = ContractStatus.CANCELLED.value


CONTRACT_APPROVAL_WORKFLOW = Workflow(
    name="rental_contract_approval",
    description="Rental contract approval lifecycle",
    initial_state=_DRAFT,
    states=(_DRAFT, _ADMIN, _TENANT, _LANDLORD, _APPROVED, _CANCELLED),
    transitions=(
        Transition(
            _DRAFT, _ADMIN, action=ApprovalAction.APPROVE_BY_ADMIN.value,
            guards=(PARTY_DATA_COMPLETE, DOCUMENTS_APPROVED, CHEQUES_APPROVED),
        ),
        Transition(_ADMIN, _TENANT, action=ApprovalAction.APPROVE_BY_TENANT.value),
        Transition(_LANDLORD, _TENANT, action=ApprovalAction.APPROVE_BY_TENANT.value),
        Transition(_ADMIN, _LANDLORD, action=ApprovalAction.APPROVE_BY_LANDLORD.value),
        Transition(_TENANT, _LANDLORD, action=ApprovalAction.APPROVE_BY_LANDLORD.value),
        Transition(
            _TENANT, _APPROVED, action=ApprovalAction.APPROVE_BY_ADMIN_FINAL.value,
            guards=(PARTY_APPROVALS_RECORDED, DOCUMENTS_APPROVED, CHEQUES_APPROVED),
        ),
        Transition(
            _LANDLORD, _APPROVED, action=ApprovalAction.APPROVE_BY_ADMIN_FINAL.value,
            guards=(PARTY_APPROVALS_RECORDED, DOCUMENTS_APPROVED, CHEQUES_APPROVED),
        ),
        Transition(_ADMIN, _DRAFT, action=ApprovalAction.REVERT_TO_DRAFT.value),
        Transition(_ADMIN, _CANCELLED, action=ApprovalAction.CANCEL.value),
        Transition(_TENANT, _CANCELLED, action=ApprovalAction.CANCEL.value),
        Transition(_LANDLORD, _CANCELLED, action=ApprovalAction.CANCEL.value),
    ),
    terminal_states=(_APPROVED, _CANCELLED),
)

logger.info(
    "contract_approval_workflow_registered",
    extra={
        "workflow_name": CONTRACT_APPROVAL_WORKFLOW.name,
        "state_count": len(CONTRACT_APPROVAL_WORKFLOW.states),
        "transition_count": len(CONTRACT_APPROVAL_WORKFLOW.transitions),
    },
)
