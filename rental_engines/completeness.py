"""
Completeness Gate - Is a contract ready to leave DRAFT?

Three independent predicates: party data, document approval and cheque
approval.  The result is a structured report rather than a boolean or an
exception, so callers can show which fields, documents or cheques still
need attention.

Pure functions with no I/O.  Approval flags from the document and check
aggregates are looked up by the caller and passed in.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from rental_engines.reconciler import StoredCheckRecord
from rental_engines.tracer import traced_engine
from rental_kernel.logging_config import get_logger

logger = get_logger("engines.completeness")


class PartyRole(str, Enum):
    TENANT = "tenant"
    LANDLORD = "landlord"


class CompletenessReason(str, Enum):
    """Why a contract is not ready for approval."""

    PARTY_DATA_INCOMPLETE = "PARTY_DATA_INCOMPLETE"
    DOCUMENTS_NOT_APPROVED = "DOCUMENTS_NOT_APPROVED"
    CHEQUES_NOT_APPROVED = "CHEQUES_NOT_APPROVED"


OMANI_NATIONALITY_ALIASES = frozenset({"عماني", "عمانية", "عمان", "omani", "oman"})

BASE_PARTY_FIELDS = ("name", "nationality", "gender", "phone", "email")
CIVIL_ID_FIELDS = ("civil_id", "civil_id_expiry")
PASSPORT_FIELDS = ("passport_number", "passport_expiry")


@dataclass(frozen=True)
class PartyDetails:
    """Identity fields for a tenant or landlord as copied onto the contract."""

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
    contact_id: str | None = None


def is_omani(nationality: str | None) -> bool:
    return (nationality or "").strip().lower() in OMANI_NATIONALITY_ALIASES


def required_party_fields(party: PartyDetails | None) -> tuple[str, ...]:
    """Omani nationals need a civil ID, everyone else a passport."""
    nationality = party.nationality if party else None
    identity = CIVIL_ID_FIELDS if is_omani(nationality) else PASSPORT_FIELDS
    return BASE_PARTY_FIELDS + identity


def _blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_party_fields(role: PartyRole | str, party: PartyDetails | None) -> tuple[str, ...]:
    """Names of the required fields that are empty, in a stable order."""
    required = required_party_fields(party)
    if party is None:
        missing = required
    else:
        missing = tuple(name for name in required if _blank(getattr(party, name)))
    if missing:
        logger.debug(
            "party_fields_missing",
            extra={"role": PartyRole(role).value, "missing": list(missing)},
        )
    return missing


def documents_complete(booking_id: str | None, documents_approved: bool | None) -> bool:
    """Without a linked booking there are no required documents."""
    if not booking_id:
        return True
    return bool(documents_approved)


def cheques_complete(
    booking_id: str | None,
    stored_records: Sequence[StoredCheckRecord],
    cheques_approved: bool | None,
) -> bool:
    """Cheque gate.

    Nothing to check when no instrument is persisted.  With a booking the
    booking mirror decides; without one every record needs its number.
    """
    if not stored_records:
        return True
    if booking_id:
        return bool(cheques_approved)
    return all(not _blank(r.check_number) for r in stored_records)


@dataclass(frozen=True)
class CompletenessReport:
    """Per-predicate result of the gate."""

    missing_fields: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    documents_complete: bool = True
    cheques_complete: bool = True

    @property
    def party_complete(self) -> bool:
        return not any(self.missing_fields.values())

    @property
    def reasons(self) -> tuple[CompletenessReason, ...]:
        reasons = []
        if not self.party_complete:
            reasons.append(CompletenessReason.PARTY_DATA_INCOMPLETE)
        if not self.documents_complete:
            reasons.append(CompletenessReason.DOCUMENTS_NOT_APPROVED)
        if not self.cheques_complete:
            reasons.append(CompletenessReason.CHEQUES_NOT_APPROVED)
        return tuple(reasons)

    @property
    def is_complete(self) -> bool:
        return not self.reasons


@traced_engine("completeness", "1.0", fingerprint_fields=("booking_id",))
def evaluate_completeness(
    *,
    tenant: PartyDetails | None,
    landlord: PartyDetails | None,
    booking_id: str | None,
    stored_records: Sequence[StoredCheckRecord] = (),
    documents_approved: bool | None = None,
    cheques_approved: bool | None = None,
) -> CompletenessReport:
    """Evaluate all three predicates; none short-circuits the others."""
    missing = {
        PartyRole.TENANT.value: missing_party_fields(PartyRole.TENANT, tenant),
        PartyRole.LANDLORD.value: missing_party_fields(PartyRole.LANDLORD, landlord),
    }
    report = CompletenessReport(
        missing_fields={role: names for role, names in missing.items() if names},
        documents_complete=documents_complete(booking_id, documents_approved),
        cheques_complete=cheques_complete(booking_id, stored_records, cheques_approved),
    )
    logger.info(
        "completeness_evaluated",
        extra={
            "complete": report.is_complete,
            "reasons": [r.value for r in report.reasons],
            "record_count": len(stored_records),
        },
    )
    return report
