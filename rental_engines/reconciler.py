"""
Schedule Reconciler - Merge a generated schedule with stored cheque records.

Responsibility:
    Produce the new stored-record list after the contract terms change.
    Records are matched to generated slots by ``slot_key`` rather than by
    position, so a reordered catalog never shifts user input onto another
    cheque.  Check numbers and images survive every pass; amounts and dates
    survive only where the mode and the session's overrides say so.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The current date is read
    from an injected ``Clock`` only by ``auto_create_cheques``.

Invariants enforced:
    - The output has exactly one record per required instrument, in the
      generator's order, with the generator's type and labels.
    - Deposit (security) cheques are undated.
    - The payee is stored in full on the first record only; its account
      number and account name are copied to every record.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, fields, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from rental_engines.fees import to_date, to_decimal
from rental_engines.schedule import (
    SECURITY_CHEQUE,
    CatalogCheck,
    RequiredInstrument,
    ScheduleSettings,
    ScheduleTerms,
    generate_required_instruments,
)
from rental_engines.tracer import traced_engine
from rental_kernel.domain.clock import Clock
from rental_kernel.logging_config import get_logger
from rental_kernel.utils.hashing import slot_key

logger = get_logger("engines.reconciler")


class ReconcileMode(str, Enum):
    """Which stored values win over freshly generated defaults."""

    INITIAL_LOAD = "initial_load"  # stored positive amounts and dates kept
    TERMS_EDIT = "terms_edit"  # recomputed, except session overrides


class PayeeOwnerType(str, Enum):
    TENANT = "tenant"
    OTHER_INDIVIDUAL = "other_individual"
    COMPANY = "company"


@dataclass(frozen=True)
class PayeeDetails:
    """Owner and bank metadata shared by every rent cheque."""

    owner_type: str = PayeeOwnerType.TENANT.value
    owner_name: str | None = None
    owner_civil_id: str | None = None
    owner_phone: str | None = None
    company_name: str | None = None
    company_registration: str | None = None
    authorized_representative: str | None = None
    bank_name: str | None = None
    bank_branch: str | None = None
    account_number: str | None = None
    account_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PayeeDetails | None:
        if not data:
            return None
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class StoredCheckRecord:
    """A persisted cheque slot with whatever the user has filled in."""

    check_type_id: str
    label_ar: str = ""
    label_en: str = ""
    slot_key: str | None = None
    check_number: str | None = None
    amount: Decimal | None = None
    due_date: date | None = None
    account_number: str | None = None
    account_name: str | None = None
    image_url: str | None = None
    payee: PayeeDetails | None = None

    @property
    def is_deposit(self) -> bool:
        return self.check_type_id == SECURITY_CHEQUE

    def to_dict(self) -> dict[str, Any]:
        return {
            "check_type_id": self.check_type_id,
            "label_ar": self.label_ar,
            "label_en": self.label_en,
            "slot_key": self.slot_key,
            "check_number": self.check_number,
            "amount": str(self.amount) if self.amount is not None else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "account_number": self.account_number,
            "account_name": self.account_name,
            "image_url": self.image_url,
            "payee": self.payee.to_dict() if self.payee else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoredCheckRecord:
        amount = data.get("amount")
        return cls(
            check_type_id=data["check_type_id"],
            label_ar=data.get("label_ar") or "",
            label_en=data.get("label_en") or "",
            slot_key=data.get("slot_key"),
            check_number=data.get("check_number") or None,
            amount=to_decimal(amount) if amount not in (None, "") else None,
            due_date=to_date(data.get("due_date")),
            account_number=data.get("account_number") or None,
            account_name=data.get("account_name") or None,
            image_url=data.get("image_url") or None,
            payee=PayeeDetails.from_dict(data.get("payee")),
        )


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of one reconciliation pass.

    ``regenerated`` is True when the stored list did not match the
    generated schedule (length or per-index type).  ``changed_slots`` lists
    the slot keys whose record differs from what was stored.
    """

    records: tuple[StoredCheckRecord, ...]
    regenerated: bool
    changed_slots: tuple[str, ...] = ()


def schedule_matches(
    required: Sequence[RequiredInstrument],
    stored: Sequence[StoredCheckRecord],
) -> bool:
    """True when lengths agree and every index carries the same check type."""
    if len(required) != len(stored):
        return False
    return all(r.check_type_id == s.check_type_id for r, s in zip(required, stored))


def assign_slot_keys(records: Iterable[StoredCheckRecord]) -> tuple[StoredCheckRecord, ...]:
    """Give legacy records (stored before slot keys existed) their key.

    The ordinal is the record's 1-based position among records of the
    same type, matching how the generator numbers.
    """
    records = tuple(records)
    seen: Counter[str] = Counter()
    result = []
    for record in records:
        seen[record.check_type_id] += 1
        if record.slot_key:
            result.append(record)
            continue
        result.append(replace(record, slot_key=slot_key(record.check_type_id, seen[record.check_type_id])))
    return tuple(result)


def _positive(amount: Decimal | None) -> bool:
    return amount is not None and amount > 0


@traced_engine("reconciler", "1.0", fingerprint_fields=("required", "existing", "mode"))
def reconcile_schedule(
    *,
    required: Sequence[RequiredInstrument],
    existing: Sequence[StoredCheckRecord] = (),
    mode: ReconcileMode = ReconcileMode.TERMS_EDIT,
    overrides: Iterable[str] = (),
    payee: PayeeDetails | None = None,
) -> ReconcileResult:
    """Merge the generated schedule with the stored records.

    Args:
        required: Generator output for the current terms.
        existing: Records currently stored for the contract.
        mode: INITIAL_LOAD keeps stored positive amounts and dates;
            TERMS_EDIT recomputes them.
        overrides: Slot keys whose amount/date the user entered during
            this edit session; kept even in TERMS_EDIT mode.
        payee: Payee metadata to apply; defaults to the first stored
            record's payee.
    """
    existing = assign_slot_keys(existing)
    by_key = {r.slot_key: r for r in existing}
    override_keys = frozenset(overrides)

    if payee is None:
        payee = next((r.payee for r in existing if r.payee is not None), None)

    records: list[StoredCheckRecord] = []
    for index, slot in enumerate(required):
        stored = by_key.get(slot.slot_key)
        keep_values = stored is not None and (
            mode == ReconcileMode.INITIAL_LOAD or slot.slot_key in override_keys
        )

        amount = slot.default_amount
        due_date = slot.default_date
        if keep_values:
            if _positive(stored.amount):
                amount = stored.amount
            if stored.due_date is not None:
                due_date = stored.due_date
        if slot.is_deposit:
            due_date = None

        account_number = stored.account_number if stored else None
        account_name = stored.account_name if stored else None
        if payee is not None:
            account_number = payee.account_number or account_number
            account_name = payee.account_name or account_name

        records.append(StoredCheckRecord(
            check_type_id=slot.check_type_id,
            label_ar=slot.label_ar,
            label_en=slot.label_en,
            slot_key=slot.slot_key,
            check_number=stored.check_number if stored else None,
            amount=amount,
            due_date=due_date,
            account_number=account_number,
            account_name=account_name,
            image_url=stored.image_url if stored else None,
            payee=payee if index == 0 else None,
        ))

    changed = tuple(
        r.slot_key for r in records if by_key.get(r.slot_key) != r
    )
    result = ReconcileResult(
        records=tuple(records),
        regenerated=not schedule_matches(required, existing),
        changed_slots=changed,
    )

    logger.debug(
        "schedule_reconciled",
        extra={
            "mode": mode.value,
            "record_count": len(records),
            "regenerated": result.regenerated,
            "changed_slot_count": len(changed),
        },
    )
    return result


def auto_create_cheques(
    *,
    terms: ScheduleTerms,
    clock: Clock,
    catalog_entries: Sequence[CatalogCheck] = (),
    settings: ScheduleSettings | None = None,
    existing: Sequence[StoredCheckRecord] = (),
    payee: PayeeDetails | None = None,
) -> ReconcileResult:
    """Generate and reconcile all cheques, starting today when no start date is set."""
    if to_date(terms.start_date) is None:
        terms = replace(terms, start_date=clock.today())
    required = generate_required_instruments(
        terms=terms, catalog_entries=catalog_entries, settings=settings,
    )
    return reconcile_schedule(
        required=required,
        existing=existing,
        mode=ReconcileMode.TERMS_EDIT,
        payee=payee,
    )


def fill_check_numbers(
    records: Sequence[StoredCheckRecord],
    index: int,
    value: str | None,
) -> tuple[StoredCheckRecord, ...]:
    """Apply one check-number edit.

    Editing the first record to an integer fills every later record with
    the following numbers, keeping the typed width ("000120" -> "000121").
    Edits to other records touch only that record.
    """
    records = list(records)
    if not 0 <= index < len(records):
        return tuple(records)
    text = (value or "").strip()
    records[index] = replace(records[index], check_number=text or None)

    if index != 0 or not text.isdigit():
        return tuple(records)

    start = int(text)
    width = len(text)
    for offset in range(1, len(records)):
        number = str(start + offset).zfill(width)
        records[offset] = replace(records[offset], check_number=number)
    return tuple(records)
