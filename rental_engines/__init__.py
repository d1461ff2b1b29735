"""
Module: rental_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for rental_services
    and rental_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import rental_kernel (domain, logging, hashing) and sibling
    engine modules.  MUST NOT import rental_services or rental_modules.

Invariants enforced:
    - Purity: engines never read the wall clock.  ``auto_create_cheques``
      takes an injected ``Clock``; every other date is a parameter.
    - Decimal-only arithmetic for amounts.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from rental_engines.fees import derive_contract_figures
    from rental_engines.schedule import generate_required_instruments
    from rental_engines.reconciler import reconcile_schedule
    from rental_engines.completeness import evaluate_completeness
    from rental_engines.approval import apply_transition
"""

from rental_engines.approval import (
    ApprovalAction,
    ApprovalState,
    ContractStatus,
    GuardExecutor,
    Rejection,
    RejectionReason,
    TransitionOutcome,
    apply_transition,
    default_guard_executor,
    is_terms_editable,
)
from rental_engines.completeness import (
    CompletenessReason,
    CompletenessReport,
    PartyDetails,
    PartyRole,
    evaluate_completeness,
    missing_party_fields,
)
from rental_engines.fees import (
    DerivedFigures,
    FeeRates,
    FeeTerms,
    calc_end_date,
    calc_grace_period_amount,
    calc_grace_period_days,
    calc_municipality_fees,
    calc_other_tax,
    calc_rent_base_for_fees,
    calc_vat,
    derive_contract_figures,
)
from rental_engines.reconciler import (
    PayeeDetails,
    ReconcileMode,
    ReconcileResult,
    StoredCheckRecord,
    auto_create_cheques,
    fill_check_numbers,
    reconcile_schedule,
    schedule_matches,
)
from rental_engines.schedule import (
    RENT_CHEQUE,
    SECURITY_CHEQUE,
    CatalogCheck,
    PaymentFrequency,
    PaymentMethod,
    RequiredInstrument,
    ScheduleSettings,
    ScheduleTerms,
    generate_required_instruments,
)

__all__ = [
    # Approval
    "ApprovalAction",
    "ApprovalState",
    "ContractStatus",
    "GuardExecutor",
    "Rejection",
    "RejectionReason",
    "TransitionOutcome",
    "apply_transition",
    "default_guard_executor",
    "is_terms_editable",
    # Completeness
    "CompletenessReason",
    "CompletenessReport",
    "PartyDetails",
    "PartyRole",
    "evaluate_completeness",
    "missing_party_fields",
    # Fees
    "DerivedFigures",
    "FeeRates",
    "FeeTerms",
    "calc_end_date",
    "calc_grace_period_amount",
    "calc_grace_period_days",
    "calc_municipality_fees",
    "calc_other_tax",
    "calc_rent_base_for_fees",
    "calc_vat",
    "derive_contract_figures",
    # Reconciler
    "PayeeDetails",
    "ReconcileMode",
    "ReconcileResult",
    "StoredCheckRecord",
    "auto_create_cheques",
    "fill_check_numbers",
    "reconcile_schedule",
    "schedule_matches",
    # Schedule
    "RENT_CHEQUE",
    "SECURITY_CHEQUE",
    "CatalogCheck",
    "PaymentFrequency",
    "PaymentMethod",
    "RequiredInstrument",
    "ScheduleSettings",
    "ScheduleTerms",
    "generate_required_instruments",
]
