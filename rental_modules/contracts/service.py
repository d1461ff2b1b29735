"""
Contract Module Service (``rental_modules.contracts.service``).

Responsibility
--------------
Orchestrates the rental contract lifecycle: creation (manually or from a
booking), terms edits with the derived-figure and cheque-schedule
recompute, cheque data entry, party refresh, booking mirroring, the
completeness gate and the approval transitions with their side effects.
Pure computation is delegated to ``rental_engines``; persistence to
``ContractRepository`` and ``BookingCheckMirror``.

Architecture position
---------------------
**Modules layer** -- ``ContractService`` is the sole public entry point for
contract operations.  Collaborators are injected as protocol
implementations from ``rental_services.collaborators``.

Invariants enforced
-------------------
* Each public mutating method owns the transaction boundary (``commit`` on
  success, ``rollback`` on exception).
* Every terms edit runs one pass: derived figures, then schedule generation
  and reconciliation, persisted together before any gate evaluation.
* The reconciler output is the only thing written to the contract's cheque
  list; approval transitions never touch it.
* Terms are only editable in DRAFT, or in ADMIN_APPROVED with edit mode on.

Failure modes
-------------
* ``ContractNotFoundError`` for unknown contract ids.
* ``ContractNotEditableError`` for edits to a locked contract.
* ``TransitionRejectedError`` from ``require_transition`` only; the other
  transition methods return a ``TransitionOutcome``.
* ``ContactConflictError`` subclasses from the contact directory propagate.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from rental_config import ContractConfig, get_active_config
from rental_engines.approval import (
    ApprovalAction,
    GuardExecutor,
    TransitionOutcome,
    apply_transition,
    is_terms_editable,
)
from rental_engines.completeness import CompletenessReport, evaluate_completeness
from rental_engines.fees import derive_contract_figures, round_money, to_date, to_decimal
from rental_engines.reconciler import (
    ReconcileMode,
    ReconcileResult,
    StoredCheckRecord,
    auto_create_cheques,
    fill_check_numbers,
    reconcile_schedule,
)
from rental_engines.schedule import CatalogCheck, generate_required_instruments
from rental_kernel.domain.clock import Clock, SystemClock
from rental_kernel.exceptions import (
    ContractNotEditableError,
    TransitionRejectedError,
)
from rental_kernel.logging_config import LogContext, get_logger
from rental_modules.contracts.models import (
    TERM_FIELDS,
    Contract,
    ContractEditSession,
    PartyDetails,
    PartyRole,
    PayeeDetails,
    PaymentFrequency,
    PaymentMethod,
)
from rental_modules.contracts.repository import ContractRepository
from rental_modules.contracts.workflows import CONTRACT_APPROVAL_WORKFLOW
from rental_services.booking_checks import BookingCheckMirror
from rental_services.collaborators import (
    BookingDirectory,
    CheckApprovalAggregate,
    CheckRequirementCatalog,
    DocRequirement,
    DocumentApprovalAggregate,
    DocumentRequirementCatalog,
    TenantNotifier,
)
from rental_services.sync import SyncAdapter

logger = get_logger("modules.contracts.service")

_UNSET: Any = object()

_DECIMAL_TERMS = frozenset({"monthly_rent", "discount_amount", "deposit_amount", "other_tax_rate"})
_DATE_TERMS = frozenset({"start_date", "actual_rental_date"})
_INT_TERMS = frozenset({"duration_months", "rent_due_day"})
_BOOL_TERMS = frozenset({
    "deposit_cheque_required", "vat_applicable", "other_tax_enabled",
})


def _coerce_term(name: str, value: Any) -> Any:
    """Normalize one incoming term value to the model's type."""
    if name in _DECIMAL_TERMS:
        return to_decimal(value)
    if name in _DATE_TERMS:
        return to_date(value)
    if name in _INT_TERMS:
        number = int(to_decimal(value))
        if name == "rent_due_day":
            return min(31, max(1, number))
        return max(0, number)
    if name in _BOOL_TERMS:
        return bool(value)
    if name == "deposit_cheque_duration_months":
        return int(to_decimal(value)) if value not in (None, "") else None
    if name == "rent_payment_method":
        return PaymentMethod(value)
    if name == "rent_payment_frequency":
        return PaymentFrequency(value)
    if name == "custom_monthly_rents":
        return tuple(
            None if v in (None, "") else to_decimal(v) for v in (value or ())
        )
    return value


class ContractService:
    """
    Orchestrates rental contracts through the engines and collaborators.

    Contract
    --------
    * Mutating methods return the updated ``Contract`` (or records).
    * Transition methods return ``TransitionOutcome``; inspect
      ``outcome.succeeded``.

    Guarantees
    ----------
    * Session is committed on success and rolled back on any exception.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT detect duplicate contacts; the contact directory does.
    * Does NOT render documents or send messages itself; the notifier does.
    """

    def __init__(
        self,
        session: Session,
        config: ContractConfig | None = None,
        check_catalog: CheckRequirementCatalog | None = None,
        document_catalog: DocumentRequirementCatalog | None = None,
        document_approvals: DocumentApprovalAggregate | None = None,
        check_approvals: CheckApprovalAggregate | None = None,
        bookings: BookingDirectory | None = None,
        notifier: TenantNotifier | None = None,
        sync: SyncAdapter | None = None,
        clock: Clock | None = None,
        guards: GuardExecutor | None = None,
    ):
        self._session = session
        self._config = config or get_active_config()
        self._clock = clock or SystemClock()
        self._repository = ContractRepository(session)
        self._check_catalog = check_catalog
        self._document_catalog = document_catalog
        self._document_approvals = document_approvals
        self._check_approvals = check_approvals or BookingCheckMirror(session, self._clock)
        self._bookings = bookings
        self._notifier = notifier
        self._sync = sync
        self._guards = guards

    # =========================================================================
    # Queries
    # =========================================================================

    def get_contract(self, contract_id: UUID) -> Contract:
        return self._repository.get(contract_id)

    def get_records(self, contract_id: UUID) -> tuple[StoredCheckRecord, ...]:
        return self._repository.get_records(contract_id)

    def available_actions(self, contract_id: UUID) -> tuple[str, ...]:
        contract = self._repository.get(contract_id)
        return CONTRACT_APPROVAL_WORKFLOW.actions_from(contract.status.value)

    def open_edit_session(self, contract_id: UUID, edit_mode: bool = False) -> ContractEditSession:
        self._repository.get(contract_id)
        session = ContractEditSession(contract_id=contract_id)
        if edit_mode:
            session.enter_edit_mode()
        return session

    def is_editable(self, contract: Contract, edit_session: ContractEditSession | None) -> bool:
        edit_mode = bool(edit_session and edit_session.edit_mode)
        return is_terms_editable(contract.status, edit_mode)

    # =========================================================================
    # Internal recompute helpers
    # =========================================================================

    def _require_editable(
        self,
        contract: Contract,
        edit_session: ContractEditSession | None,
    ) -> None:
        if not self.is_editable(contract, edit_session):
            raise ContractNotEditableError(
                str(contract.id),
                contract.status.value,
                bool(edit_session and edit_session.edit_mode),
            )

    def _catalog_entries(self, contract: Contract) -> Sequence[CatalogCheck]:
        if self._check_catalog is None:
            return ()
        return self._check_catalog.required_checks(contract.property_id, contract.contract_type)

    def _recompute_figures(self, contract: Contract) -> Contract:
        figures = derive_contract_figures(
            terms=contract.fee_terms(),
            rates=self._config.fee_rates(),
        )
        return replace(contract, figures=figures, end_date=figures.end_date)

    def _reschedule(
        self,
        contract: Contract,
        mode: ReconcileMode,
        edit_session: ContractEditSession | None = None,
        existing: Sequence[StoredCheckRecord] | None = None,
    ) -> ReconcileResult:
        required = generate_required_instruments(
            terms=contract.schedule_terms(),
            catalog_entries=self._catalog_entries(contract),
            settings=self._config.schedule_settings(),
        )
        if existing is None:
            existing = self._repository.get_records(contract.id)
        return reconcile_schedule(
            required=required,
            existing=existing,
            mode=mode,
            overrides=edit_session.overrides if edit_session else (),
            payee=contract.payee,
        )

    def _store_records(
        self,
        contract: Contract,
        records: Sequence[StoredCheckRecord],
        actor_id: UUID,
    ) -> tuple[StoredCheckRecord, ...]:
        stored = self._repository.save_records(contract.id, records, actor_id)
        if contract.booking_id and self._sync is not None:
            self._sync.mirror_to_booking(contract.booking_id, stored, actor_id)
        return stored

    # =========================================================================
    # Creation
    # =========================================================================

    def create_contract(
        self,
        *,
        property_id: str,
        actor_id: UUID,
        contract_type: str = "residential",
        booking_id: str | None = None,
        terms: Mapping[str, Any] | None = None,
        tenant: PartyDetails | None = None,
        landlord: PartyDetails | None = None,
        contract_id: UUID | None = None,
    ) -> Contract:
        """Create a DRAFT contract with its figures and cheque schedule."""
        terms = dict(terms or {})
        unknown = set(terms) - TERM_FIELDS
        if unknown:
            raise ValueError(f"Unknown contract terms: {sorted(unknown)}")

        contract = Contract(
            id=contract_id or uuid4(),
            property_id=property_id,
            contract_type=contract_type,
            booking_id=booking_id,
            currency=self._config.currency,
            tenant=tenant or PartyDetails(),
            landlord=landlord or PartyDetails(),
            **{name: _coerce_term(name, value) for name, value in terms.items()},
        )

        with LogContext.bind(contract_id=str(contract.id), actor_id=str(actor_id)):
            try:
                contract = self._recompute_figures(contract)
                saved = self._repository.save(contract, actor_id)
                result = self._reschedule(saved, ReconcileMode.INITIAL_LOAD, existing=())
                self._store_records(saved, result.records, actor_id)
                if booking_id and self._sync is not None:
                    self._sync.link_booking(booking_id, str(saved.id))
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "contract_created",
                extra={
                    "property_id": property_id,
                    "booking_id": booking_id,
                    "record_count": len(result.records),
                },
            )
        return saved

    def create_from_booking(
        self,
        booking_id: str,
        *,
        actor_id: UUID,
        terms: Mapping[str, Any] | None = None,
        landlord: PartyDetails | None = None,
    ) -> Contract:
        """Create a DRAFT contract seeded from a booking and its tenant contact."""
        if self._sync is None:
            raise RuntimeError("create_from_booking requires a SyncAdapter")
        booking = self._sync.get_booking(booking_id)
        tenant = PartyDetails(
            name=booking.tenant_name,
            phone=booking.tenant_phone,
            email=booking.tenant_email,
        )
        tenant = self._sync.refresh_party(tenant, PartyRole.TENANT)
        return self.create_contract(
            property_id=booking.property_id,
            contract_type=booking.contract_type,
            booking_id=booking_id,
            actor_id=actor_id,
            terms=terms,
            tenant=tenant,
            landlord=landlord,
        )

    # =========================================================================
    # Terms and schedule
    # =========================================================================

    def update_terms(
        self,
        contract_id: UUID,
        changes: Mapping[str, Any],
        *,
        actor_id: UUID,
        edit_session: ContractEditSession | None = None,
    ) -> Contract:
        """Apply a terms edit and run the recompute pass.

        Raises:
            ContractNotEditableError: If the contract is locked.
            ValueError: If ``changes`` names a field that is not a term.
        """
        unknown = set(changes) - TERM_FIELDS
        if unknown:
            raise ValueError(f"Unknown contract terms: {sorted(unknown)}")

        with LogContext.bind(contract_id=str(contract_id), actor_id=str(actor_id)):
            try:
                contract = self._repository.get(contract_id)
                self._require_editable(contract, edit_session)
                contract = replace(
                    contract,
                    **{name: _coerce_term(name, value) for name, value in changes.items()},
                )
                contract = self._recompute_figures(contract)
                saved = self._repository.save(contract, actor_id)
                result = self._reschedule(saved, ReconcileMode.TERMS_EDIT, edit_session)
                self._store_records(saved, result.records, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "contract_terms_updated",
                extra={
                    "fields": sorted(changes),
                    "regenerated": result.regenerated,
                    "changed_slot_count": len(result.changed_slots),
                },
            )
        return saved

    def load_schedule(self, contract_id: UUID, *, actor_id: UUID) -> ReconcileResult:
        """Reconcile stored records on open, keeping stored amounts and dates."""
        with LogContext.bind(contract_id=str(contract_id), actor_id=str(actor_id)):
            try:
                contract = self._repository.get(contract_id)
                result = self._reschedule(contract, ReconcileMode.INITIAL_LOAD)
                if result.changed_slots or result.regenerated:
                    self._store_records(contract, result.records, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise
        return result

    def auto_create_cheques(
        self,
        contract_id: UUID,
        *,
        actor_id: UUID,
        edit_session: ContractEditSession | None = None,
    ) -> tuple[StoredCheckRecord, ...]:
        """Regenerate every cheque; dates start today when no start date is set."""
        with LogContext.bind(contract_id=str(contract_id), actor_id=str(actor_id)):
            try:
                contract = self._repository.get(contract_id)
                self._require_editable(contract, edit_session)
                result = auto_create_cheques(
                    terms=contract.schedule_terms(),
                    clock=self._clock,
                    catalog_entries=self._catalog_entries(contract),
                    settings=self._config.schedule_settings(),
                    existing=self._repository.get_records(contract_id),
                    payee=contract.payee,
                )
                stored = self._store_records(contract, result.records, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info("cheques_auto_created", extra={"record_count": len(stored)})
        return stored

    def update_check(
        self,
        contract_id: UUID,
        index: int,
        *,
        actor_id: UUID,
        edit_session: ContractEditSession | None = None,
        check_number: str | None = _UNSET,
        amount: Decimal | str | None = _UNSET,
        due_date: date | str | None = _UNSET,
        image_url: str | None = _UNSET,
    ) -> tuple[StoredCheckRecord, ...]:
        """Apply a user edit to one cheque record.

        An amount or date typed in is remembered on the edit session so the
        next terms edit keeps it.  A check number typed into the first
        record numbers the rest sequentially.
        """
        with LogContext.bind(contract_id=str(contract_id), actor_id=str(actor_id)):
            try:
                contract = self._repository.get(contract_id)
                self._require_editable(contract, edit_session)
                records = list(self._repository.get_records(contract_id))
                if not 0 <= index < len(records):
                    raise IndexError(f"Contract {contract_id} has no cheque at index {index}")

                record = records[index]
                if amount is not _UNSET:
                    record = replace(
                        record,
                        amount=round_money(amount, contract.currency) if amount not in (None, "") else None,
                    )
                if due_date is not _UNSET and not record.is_deposit:
                    record = replace(record, due_date=to_date(due_date))
                if image_url is not _UNSET:
                    record = replace(record, image_url=image_url or None)
                records[index] = record
                if (amount is not _UNSET or due_date is not _UNSET) and edit_session is not None:
                    edit_session.record_override(record.slot_key)

                updated: Sequence[StoredCheckRecord] = records
                if check_number is not _UNSET:
                    updated = fill_check_numbers(records, index, check_number)

                stored = self._store_records(contract, updated, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info("contract_check_updated", extra={"index": index})
        return stored

    def set_payee(
        self,
        contract_id: UUID,
        payee: PayeeDetails | None,
        *,
        actor_id: UUID,
        edit_session: ContractEditSession | None = None,
    ) -> tuple[StoredCheckRecord, ...]:
        """Store payee metadata and apply its account data to every cheque."""
        with LogContext.bind(contract_id=str(contract_id), actor_id=str(actor_id)):
            try:
                contract = self._repository.get(contract_id)
                self._require_editable(contract, edit_session)
                contract = self._repository.save(replace(contract, payee=payee), actor_id)
                result = self._reschedule(contract, ReconcileMode.INITIAL_LOAD, edit_session)
                stored = self._store_records(contract, result.records, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "contract_payee_set",
                extra={"owner_type": payee.owner_type if payee else None},
            )
        return stored

    def apply_bank_account(
        self,
        contract_id: UUID,
        account_id: str,
        *,
        actor_id: UUID,
        edit_session: ContractEditSession | None = None,
    ) -> tuple[StoredCheckRecord, ...]:
        """Prefill the payee from a bank account and apply it to every cheque."""
        if self._sync is None:
            raise RuntimeError("apply_bank_account requires a SyncAdapter")
        contract = self._repository.get(contract_id)
        payee = self._sync.apply_bank_account(account_id, contract.payee)
        return self.set_payee(contract_id, payee, actor_id=actor_id, edit_session=edit_session)

    # =========================================================================
    # Parties and booking
    # =========================================================================

    def set_party(
        self,
        contract_id: UUID,
        role: PartyRole | str,
        party: PartyDetails,
        *,
        actor_id: UUID,
    ) -> Contract:
        """Replace the tenant or landlord details."""
        role = PartyRole(role)
        with LogContext.bind(contract_id=str(contract_id), actor_id=str(actor_id)):
            try:
                contract = self._repository.get(contract_id)
                contract = replace(contract, **{role.value: party})
                saved = self._repository.save(contract, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise
        return saved

    def refresh_party(
        self,
        contract_id: UUID,
        role: PartyRole | str,
        *,
        actor_id: UUID,
    ) -> Contract:
        """Refresh a party from the contact directory.

        Contact conflicts raised by the directory propagate unchanged.
        """
        if self._sync is None:
            raise RuntimeError("refresh_party requires a SyncAdapter")
        role = PartyRole(role)
        contract = self._repository.get(contract_id)
        party = self._sync.refresh_party(contract.party(role), role)
        return self.set_party(contract_id, role, party, actor_id=actor_id)

    def pull_booking_checks(self, contract_id: UUID, *, actor_id: UUID) -> tuple[StoredCheckRecord, ...]:
        """Copy tenant-entered cheque data from the booking onto the contract.

        The pulled values go through the reconciler as stored data, so the
        deposit-date and payee rules apply before anything is written.
        """
        if self._sync is None:
            raise RuntimeError("pull_booking_checks requires a SyncAdapter")
        with LogContext.bind(contract_id=str(contract_id), actor_id=str(actor_id)):
            try:
                contract = self._repository.get(contract_id)
                records = self._repository.get_records(contract_id)
                if contract.booking_id:
                    pulled = self._sync.pull_from_booking(contract.booking_id, records)
                    result = self._reschedule(contract, ReconcileMode.INITIAL_LOAD, existing=pulled)
                    records = self._repository.save_records(contract_id, result.records, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise
        return records

    # =========================================================================
    # Completeness and approval
    # =========================================================================

    def required_documents(self, contract_id: UUID) -> tuple[DocRequirement, ...]:
        """Documents the tenant must upload, by property, contract type and nationality."""
        return self._required_documents(self._repository.get(contract_id)) or ()

    def _required_documents(self, contract: Contract) -> tuple[DocRequirement, ...] | None:
        if self._document_catalog is None:
            return None
        return tuple(self._document_catalog.required_doc_types(
            contract.property_id, contract.contract_type, contract.tenant,
        ))

    def evaluate_completeness(self, contract_id: UUID) -> CompletenessReport:
        """Run the gate against the persisted records and approval aggregates."""
        contract = self._repository.get(contract_id)
        records = self._repository.get_records(contract_id)
        documents_approved = None
        cheques_approved = None
        if contract.booking_id:
            required_docs = self._required_documents(contract)
            if required_docs == ():
                documents_approved = True
            elif self._document_approvals is not None:
                documents_approved = self._document_approvals.all_required_documents_approved(
                    contract.booking_id
                )
            if records:
                cheques_approved = self._check_approvals.all_checks_approved(contract.booking_id)

        with LogContext.bind(contract_id=str(contract_id)):
            return evaluate_completeness(
                tenant=contract.tenant,
                landlord=contract.landlord,
                booking_id=contract.booking_id,
                stored_records=records,
                documents_approved=documents_approved,
                cheques_approved=cheques_approved,
            )

    def transition(
        self,
        contract_id: UUID,
        action: ApprovalAction | str,
        *,
        actor_id: UUID,
    ) -> TransitionOutcome:
        """Apply an approval action; a refused action leaves the contract unchanged."""
        action = ApprovalAction(action)
        with LogContext.bind(contract_id=str(contract_id), actor_id=str(actor_id)):
            try:
                contract = self._repository.get(contract_id)
                report = self.evaluate_completeness(contract_id)
                outcome = apply_transition(
                    workflow=CONTRACT_APPROVAL_WORKFLOW,
                    state=contract.approval_state(),
                    action=action,
                    now=self._clock.now(),
                    report=report,
                    guards=self._guards,
                )
                if not outcome.succeeded:
                    self._session.rollback()
                    logger.info(
                        "contract_transition_rejected",
                        extra={
                            "action": action.value,
                            "from_state": contract.status.value,
                            "reasons": [r.value for r in outcome.rejection.reasons],
                        },
                    )
                    return outcome

                state = outcome.state
                contract = replace(
                    contract,
                    status=state.status,
                    admin_approved_at=state.admin_approved_at,
                    tenant_approved_at=state.tenant_approved_at,
                    landlord_approved_at=state.landlord_approved_at,
                )
                self._repository.save(contract, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "contract_transition_applied",
                extra={
                    "action": action.value,
                    "from_state": outcome.from_state.value,
                    "to_state": state.status.value,
                },
            )
            self._after_transition(contract, action)
        return outcome

    def _after_transition(self, contract: Contract, action: ApprovalAction) -> None:
        if not contract.booking_id:
            return
        if action == ApprovalAction.APPROVE_BY_ADMIN and self._notifier is not None:
            upload_url = self._config.document_upload_url(contract.booking_id)
            self._notifier.notify_tenant(contract.booking_id, str(contract.id), upload_url)
            required_docs = self._required_documents(contract) or ()
            logger.info(
                "tenant_notified",
                extra={
                    "booking_id": contract.booking_id,
                    "required_documents": [d.doc_type_id for d in required_docs],
                },
            )
        elif action == ApprovalAction.APPROVE_BY_ADMIN_FINAL and self._bookings is not None:
            self._bookings.mark_rented(contract.booking_id)
            logger.info("booking_marked_rented", extra={"booking_id": contract.booking_id})

    def require_transition(
        self,
        contract_id: UUID,
        action: ApprovalAction | str,
        *,
        actor_id: UUID,
    ) -> Contract:
        """Like ``transition`` but raises TransitionRejectedError when refused."""
        outcome = self.transition(contract_id, action, actor_id=actor_id)
        if not outcome.succeeded:
            raise TransitionRejectedError(
                str(contract_id),
                outcome.action,
                tuple(r.value for r in outcome.rejection.reasons),
            )
        return self._repository.get(contract_id)

    def approve_by_admin(self, contract_id: UUID, *, actor_id: UUID) -> TransitionOutcome:
        return self.transition(contract_id, ApprovalAction.APPROVE_BY_ADMIN, actor_id=actor_id)

    def approve_by_tenant(self, contract_id: UUID, *, actor_id: UUID) -> TransitionOutcome:
        return self.transition(contract_id, ApprovalAction.APPROVE_BY_TENANT, actor_id=actor_id)

    def approve_by_landlord(self, contract_id: UUID, *, actor_id: UUID) -> TransitionOutcome:
        return self.transition(contract_id, ApprovalAction.APPROVE_BY_LANDLORD, actor_id=actor_id)

    def approve_by_admin_final(self, contract_id: UUID, *, actor_id: UUID) -> TransitionOutcome:
        return self.transition(contract_id, ApprovalAction.APPROVE_BY_ADMIN_FINAL, actor_id=actor_id)

    def revert_to_draft(self, contract_id: UUID, *, actor_id: UUID) -> TransitionOutcome:
        return self.transition(contract_id, ApprovalAction.REVERT_TO_DRAFT, actor_id=actor_id)

    def cancel(self, contract_id: UUID, *, actor_id: UUID) -> TransitionOutcome:
        return self.transition(contract_id, ApprovalAction.CANCEL, actor_id=actor_id)
