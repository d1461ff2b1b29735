"""
Tests for the pure contract approval state machine.

Tests cover:
- The transition table: legal and illegal actions per state
- Guards: completeness report, both-party approvals, fail-closed behaviour
- Timestamps stamped per party; revert clears none
- Terms editability
"""

from datetime import datetime, timezone

import pytest

from rental_engines.approval import (
    ApprovalAction,
    ApprovalContext,
    ApprovalState,
    ContractStatus,
    GuardExecutor,
    RejectionReason,
    apply_transition,
    default_guard_executor,
    is_terms_editable,
)
from rental_engines.completeness import CompletenessReport
from rental_kernel.domain.workflow import Guard, Transition, Workflow
from rental_modules.contracts.workflows import CONTRACT_APPROVAL_WORKFLOW

NOW = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
LATER = datetime(2025, 1, 2, 9, 0, tzinfo=timezone.utc)

COMPLETE = CompletenessReport()
NO_DOCUMENTS = CompletenessReport(documents_complete=False)
NOTHING = CompletenessReport(
    missing_fields={"tenant": ("civil_id",)},
    documents_complete=False,
    cheques_complete=False,
)


def apply(state, action, report=COMPLETE, now=NOW, guards=None):
    return apply_transition(
        workflow=CONTRACT_APPROVAL_WORKFLOW,
        state=state,
        action=action,
        now=now,
        report=report,
        guards=guards,
    )


def state_of(status, **stamps):
    return ApprovalState(status=status, **stamps)


class TestAdminApproval:

    def test_admin_approval_stamps_timestamp(self):
        outcome = apply(ApprovalState(), ApprovalAction.APPROVE_BY_ADMIN)

        assert outcome.succeeded
        assert outcome.to_state == ContractStatus.ADMIN_APPROVED
        assert outcome.state.admin_approved_at == NOW
        assert outcome.rejection is None

    def test_refused_without_document_approval(self):
        outcome = apply(ApprovalState(), ApprovalAction.APPROVE_BY_ADMIN, report=NO_DOCUMENTS)

        assert not outcome.succeeded
        assert outcome.state is None
        assert outcome.rejection.reasons == (RejectionReason.DOCUMENTS_NOT_APPROVED,)
        assert "DOCUMENTS_NOT_APPROVED" in outcome.rejection.message

    def test_every_failed_guard_listed(self):
        outcome = apply(ApprovalState(), ApprovalAction.APPROVE_BY_ADMIN, report=NOTHING)
        assert outcome.rejection.reasons == (
            RejectionReason.PARTY_DATA_INCOMPLETE,
            RejectionReason.DOCUMENTS_NOT_APPROVED,
            RejectionReason.CHEQUES_NOT_APPROVED,
        )

    def test_missing_report_fails_closed(self):
        outcome = apply(ApprovalState(), ApprovalAction.APPROVE_BY_ADMIN, report=None)
        assert not outcome.succeeded
        assert len(outcome.rejection.reasons) == 3

    def test_string_action_accepted(self):
        outcome = apply(ApprovalState(), "approve_by_admin")
        assert outcome.succeeded


class TestPartyApprovals:

    def test_tenant_then_landlord(self):
        admin = state_of(ContractStatus.ADMIN_APPROVED, admin_approved_at=NOW)

        tenant = apply(admin, ApprovalAction.APPROVE_BY_TENANT)
        assert tenant.to_state == ContractStatus.TENANT_APPROVED
        assert tenant.state.tenant_approved_at == NOW
        assert tenant.state.landlord_approved_at is None

        landlord = apply(tenant.state, ApprovalAction.APPROVE_BY_LANDLORD, now=LATER)
        assert landlord.to_state == ContractStatus.LANDLORD_APPROVED
        assert landlord.state.tenant_approved_at == NOW
        assert landlord.state.landlord_approved_at == LATER
        assert landlord.state.both_parties_approved

    def test_landlord_then_tenant(self):
        admin = state_of(ContractStatus.ADMIN_APPROVED)
        landlord = apply(admin, ApprovalAction.APPROVE_BY_LANDLORD)
        tenant = apply(landlord.state, ApprovalAction.APPROVE_BY_TENANT)

        assert tenant.to_state == ContractStatus.TENANT_APPROVED
        assert tenant.state.both_parties_approved

    def test_party_approval_from_draft_has_no_transition(self):
        outcome = apply(ApprovalState(), ApprovalAction.APPROVE_BY_TENANT)
        assert outcome.rejection.reasons == (RejectionReason.NO_TRANSITION,)


class TestFinalApproval:

    def test_final_requires_both_timestamps(self):
        only_tenant = state_of(ContractStatus.TENANT_APPROVED, tenant_approved_at=NOW)
        outcome = apply(only_tenant, ApprovalAction.APPROVE_BY_ADMIN_FINAL)

        assert not outcome.succeeded
        assert outcome.rejection.reasons == (RejectionReason.PARTY_APPROVALS_MISSING,)

    def test_final_checks_timestamps_not_status(self):
        both = state_of(
            ContractStatus.LANDLORD_APPROVED,
            tenant_approved_at=NOW,
            landlord_approved_at=LATER,
        )
        outcome = apply(both, ApprovalAction.APPROVE_BY_ADMIN_FINAL)
        assert outcome.to_state == ContractStatus.APPROVED

    def test_final_rechecks_documents_and_cheques(self):
        both = state_of(
            ContractStatus.TENANT_APPROVED,
            tenant_approved_at=NOW,
            landlord_approved_at=NOW,
        )
        outcome = apply(
            both,
            ApprovalAction.APPROVE_BY_ADMIN_FINAL,
            report=CompletenessReport(cheques_complete=False),
        )
        assert outcome.rejection.reasons == (RejectionReason.CHEQUES_NOT_APPROVED,)

    def test_final_from_admin_approved_has_no_transition(self):
        outcome = apply(state_of(ContractStatus.ADMIN_APPROVED), ApprovalAction.APPROVE_BY_ADMIN_FINAL)
        assert outcome.rejection.reasons == (RejectionReason.NO_TRANSITION,)


class TestRevertAndCancel:

    def test_revert_keeps_timestamps(self):
        admin = state_of(ContractStatus.ADMIN_APPROVED, admin_approved_at=NOW)
        outcome = apply(admin, ApprovalAction.REVERT_TO_DRAFT)

        assert outcome.to_state == ContractStatus.DRAFT
        assert outcome.state.admin_approved_at == NOW

    @pytest.mark.parametrize("status", [
        ContractStatus.TENANT_APPROVED,
        ContractStatus.LANDLORD_APPROVED,
        ContractStatus.DRAFT,
    ])
    def test_revert_only_from_admin_approved(self, status):
        outcome = apply(state_of(status), ApprovalAction.REVERT_TO_DRAFT)
        assert not outcome.succeeded

    @pytest.mark.parametrize("status", [
        ContractStatus.ADMIN_APPROVED,
        ContractStatus.TENANT_APPROVED,
        ContractStatus.LANDLORD_APPROVED,
    ])
    def test_cancel_from_intermediate_states(self, status):
        outcome = apply(state_of(status), ApprovalAction.CANCEL)
        assert outcome.to_state == ContractStatus.CANCELLED

    @pytest.mark.parametrize("status", [
        ContractStatus.DRAFT,
        ContractStatus.APPROVED,
        ContractStatus.CANCELLED,
    ])
    def test_cancel_refused_elsewhere(self, status):
        outcome = apply(state_of(status), ApprovalAction.CANCEL)
        assert outcome.rejection.reasons == (RejectionReason.NO_TRANSITION,)

    @pytest.mark.parametrize("action", list(ApprovalAction))
    @pytest.mark.parametrize("status", [ContractStatus.APPROVED, ContractStatus.CANCELLED])
    def test_terminal_states_accept_nothing(self, status, action):
        assert not apply(state_of(status), action).succeeded
        assert CONTRACT_APPROVAL_WORKFLOW.actions_from(status.value) == ()


class TestGuardExecutor:

    def test_unknown_guard_fails_closed(self):
        executor = GuardExecutor()
        context_guard = Guard("not_registered", "nobody evaluates this")

        assert executor.evaluate(context_guard, ApprovalContext(ApprovalState())) is False

    def test_raising_evaluator_fails_closed(self):
        executor = default_guard_executor()
        executor.register("documents_approved", lambda ctx: 1 / 0)

        outcome = apply(ApprovalState(), ApprovalAction.APPROVE_BY_ADMIN, guards=executor)
        assert outcome.rejection.reasons == (RejectionReason.DOCUMENTS_NOT_APPROVED,)

    def test_custom_executor_can_pass_everything(self):
        executor = GuardExecutor()
        for guard in ("party_data_complete", "documents_approved", "cheques_approved"):
            executor.register(guard, lambda ctx: True)
        outcome = apply(ApprovalState(), ApprovalAction.APPROVE_BY_ADMIN, report=NOTHING, guards=executor)
        assert outcome.succeeded


class TestWorkflowTable:

    def test_terminal_state_with_outgoing_transition_rejected(self):
        with pytest.raises(ValueError, match="terminal state"):
            Workflow(
                name="broken",
                description="",
                initial_state="A",
                states=("A", "B"),
                transitions=(Transition("B", "A", action="reopen"),),
                terminal_states=("B",),
            )

    def test_unknown_state_rejected(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow(
                name="broken",
                description="",
                initial_state="A",
                states=("A",),
                transitions=(Transition("A", "Z", action="go"),),
            )

    def test_actions_from_draft(self):
        assert CONTRACT_APPROVAL_WORKFLOW.actions_from("DRAFT") == ("approve_by_admin",)


class TestEditability:

    def test_draft_editable(self):
        assert is_terms_editable(ContractStatus.DRAFT)

    def test_admin_approved_needs_edit_mode(self):
        assert not is_terms_editable(ContractStatus.ADMIN_APPROVED)
        assert is_terms_editable("ADMIN_APPROVED", edit_mode=True)

    @pytest.mark.parametrize("status", [
        ContractStatus.TENANT_APPROVED,
        ContractStatus.LANDLORD_APPROVED,
        ContractStatus.APPROVED,
        ContractStatus.CANCELLED,
    ])
    def test_later_states_locked_even_in_edit_mode(self, status):
        assert not is_terms_editable(status, edit_mode=True)
