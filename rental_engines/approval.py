"""
rental_engines.approval -- Pure contract approval state machine.

Responsibility:
    Apply one approval action to a contract's approval state.  The legal
    transitions come from a ``Workflow`` table; guards on a transition are
    evaluated by a ``GuardExecutor`` against the completeness report and the
    current state.  The result is either the new state or a typed rejection
    listing every failed guard.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import rental_kernel/domain types and sibling engines.

Invariants enforced:
    - An action with no entry in the table for the current state is
      rejected with NO_TRANSITION; terminal states have no entries.
    - Guards fail closed: an unknown guard or a guard that raises counts
      as failed.
    - No partial application: a rejected transition returns no state.
    - Party approvals are stamped on their own timestamp fields; the final
      guard checks both timestamps, not the status value.
    - revert_to_draft clears no timestamps.

Failure modes:
    - Never raises for a refused transition; see TransitionOutcome.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

from rental_engines.completeness import CompletenessReport
from rental_engines.tracer import traced_engine
from rental_kernel.domain.workflow import Guard, Workflow
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.approval")


class ContractStatus(str, Enum):
    """Contract lifecycle states."""

    DRAFT = "DRAFT"
    ADMIN_APPROVED = "ADMIN_APPROVED"
    TENANT_APPROVED = "TENANT_APPROVED"
    LANDLORD_APPROVED = "LANDLORD_APPROVED"
    APPROVED = "APPROVED"
    CANCELLED = "CANCELLED"


class ApprovalAction(str, Enum):
    APPROVE_BY_ADMIN = "approve_by_admin"
    APPROVE_BY_TENANT = "approve_by_tenant"
    APPROVE_BY_LANDLORD = "approve_by_landlord"
    APPROVE_BY_ADMIN_FINAL = "approve_by_admin_final"
    REVERT_TO_DRAFT = "revert_to_draft"
    CANCEL = "cancel"


class RejectionReason(str, Enum):
    PARTY_DATA_INCOMPLETE = "PARTY_DATA_INCOMPLETE"
    DOCUMENTS_NOT_APPROVED = "DOCUMENTS_NOT_APPROVED"
    CHEQUES_NOT_APPROVED = "CHEQUES_NOT_APPROVED"
    PARTY_APPROVALS_MISSING = "PARTY_APPROVALS_MISSING"
    NO_TRANSITION = "NO_TRANSITION"


# Guard names used in the contract workflow table
GUARD_PARTY_DATA_COMPLETE = "party_data_complete"
GUARD_DOCUMENTS_APPROVED = "documents_approved"
GUARD_CHEQUES_APPROVED = "cheques_approved"
GUARD_PARTY_APPROVALS_RECORDED = "party_approvals_recorded"

GUARD_REASONS: dict[str, RejectionReason] = {
    GUARD_PARTY_DATA_COMPLETE: RejectionReason.PARTY_DATA_INCOMPLETE,
    GUARD_DOCUMENTS_APPROVED: RejectionReason.DOCUMENTS_NOT_APPROVED,
    GUARD_CHEQUES_APPROVED: RejectionReason.CHEQUES_NOT_APPROVED,
    GUARD_PARTY_APPROVALS_RECORDED: RejectionReason.PARTY_APPROVALS_MISSING,
}

# Which timestamp each action stamps on success
STAMPED_TIMESTAMPS: dict[str, str] = {
    ApprovalAction.APPROVE_BY_ADMIN.value: "admin_approved_at",
    ApprovalAction.APPROVE_BY_TENANT.value: "tenant_approved_at",
    ApprovalAction.APPROVE_BY_LANDLORD.value: "landlord_approved_at",
}


@dataclass(frozen=True)
class ApprovalState:
    """Status plus the three independent approval timestamps."""

    status: ContractStatus = ContractStatus.DRAFT
    admin_approved_at: datetime | None = None
    tenant_approved_at: datetime | None = None
    landlord_approved_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", ContractStatus(self.status))

    @property
    def both_parties_approved(self) -> bool:
        return self.tenant_approved_at is not None and self.landlord_approved_at is not None


@dataclass(frozen=True)
class ApprovalContext:
    """What guards see: the current state and the latest completeness report."""

    state: ApprovalState
    report: CompletenessReport | None = None


@dataclass(frozen=True)
class Rejection:
    """A refused transition and every reason it was refused."""

    action: str
    from_state: ContractStatus
    reasons: tuple[RejectionReason, ...]

    @property
    def message(self) -> str:
        return (
            f"{self.action} refused from {self.from_state.value}: "
            + ", ".join(r.value for r in self.reasons)
        )


@dataclass(frozen=True)
class TransitionOutcome:
    """Either a new state or a rejection, never both."""

    action: str
    from_state: ContractStatus
    state: ApprovalState | None = None
    rejection: Rejection | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is not None

    @property
    def to_state(self) -> ContractStatus | None:
        return self.state.status if self.state is not None else None


class GuardExecutor:
    """Evaluates workflow guards against an ApprovalContext.

    Guards are declared on transitions (name + description). This executor
    holds the evaluation logic per guard name.
    """

    def __init__(self) -> None:
        self._evaluators: dict[str, Callable[[ApprovalContext], bool]] = {}

    def register(self, guard_name: str, evaluator: Callable[[ApprovalContext], bool]) -> None:
        """Register an evaluator for a guard by name."""
        self._evaluators[guard_name] = evaluator

    def evaluate(self, guard: Guard, context: ApprovalContext) -> bool:
        """Evaluate a guard against context. Returns True if guard passes."""
        fn = self._evaluators.get(guard.name)
        if fn is None:
            logger.warning(
                "guard_no_evaluator",
                extra={"guard_name": guard.name},
            )
            return False
        try:
            return bool(fn(context))
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "guard_evaluation_error",
                extra={"guard_name": guard.name, "error": str(e)},
            )
            return False


def _report_flag(name: str) -> Callable[[ApprovalContext], bool]:
    def evaluator(context: ApprovalContext) -> bool:
        if context.report is None:
            return False
        return getattr(context.report, name)
    return evaluator


def default_guard_executor() -> GuardExecutor:
    """Return a GuardExecutor with the contract guards registered."""
    ex = GuardExecutor()
    ex.register(GUARD_PARTY_DATA_COMPLETE, _report_flag("party_complete"))
    ex.register(GUARD_DOCUMENTS_APPROVED, _report_flag("documents_complete"))
    ex.register(GUARD_CHEQUES_APPROVED, _report_flag("cheques_complete"))
    ex.register(GUARD_PARTY_APPROVALS_RECORDED, lambda ctx: ctx.state.both_parties_approved)
    return ex


def is_terms_editable(status: ContractStatus | str, edit_mode: bool = False) -> bool:
    """Terms are editable in DRAFT, or in ADMIN_APPROVED while edit mode is on."""
    status = ContractStatus(status)
    if status == ContractStatus.DRAFT:
        return True
    return status == ContractStatus.ADMIN_APPROVED and edit_mode


@traced_engine("approval", "1.0", fingerprint_fields=("action", "state"))
def apply_transition(
    *,
    workflow: Workflow,
    state: ApprovalState,
    action: ApprovalAction | str,
    now: datetime,
    report: CompletenessReport | None = None,
    guards: GuardExecutor | None = None,
) -> TransitionOutcome:
    """Apply ``action`` to ``state``.

    Args:
        workflow: The contract workflow table.
        state: Current approval state.
        action: The action to apply.
        now: Timestamp stamped on successful party/admin approvals.
        report: Completeness report for guarded transitions.
        guards: Guard evaluators; defaults to ``default_guard_executor()``.
    """
    action_name = action.value if isinstance(action, ApprovalAction) else action
    from_state = state.status
    transition = workflow.find_transition(from_state.value, action_name)

    if transition is None:
        rejection = Rejection(action_name, from_state, (RejectionReason.NO_TRANSITION,))
        logger.info(
            "approval_transition_rejected",
            extra={
                "action": action_name,
                "from_state": from_state.value,
                "reasons": [RejectionReason.NO_TRANSITION.value],
            },
        )
        return TransitionOutcome(action_name, from_state, rejection=rejection)

    executor = guards or default_guard_executor()
    context = ApprovalContext(state=state, report=report)
    failed = tuple(
        GUARD_REASONS.get(guard.name, RejectionReason.NO_TRANSITION)
        for guard in transition.guards
        if not executor.evaluate(guard, context)
    )
    if failed:
        logger.info(
            "approval_transition_rejected",
            extra={
                "action": action_name,
                "from_state": from_state.value,
                "reasons": [r.value for r in failed],
            },
        )
        return TransitionOutcome(
            action_name, from_state, rejection=Rejection(action_name, from_state, failed),
        )

    changes: dict[str, Any] = {"status": ContractStatus(transition.to_state)}
    stamped = STAMPED_TIMESTAMPS.get(action_name)
    if stamped is not None:
        changes[stamped] = now
    new_state = replace(state, **changes)

    logger.info(
        "approval_transition_applied",
        extra={
            "action": action_name,
            "from_state": from_state.value,
            "to_state": new_state.status.value,
        },
    )
    return TransitionOutcome(action_name, from_state, state=new_state)
