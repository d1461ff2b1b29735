"""
Tests for contract models, the edit session and the repository.

Tests cover:
- Contract value object helpers (terms views, party lookup, approval state)
- ContractEditSession mode and override tracking
- Repository round-trip of parties, payee, custom rents and cheque records
"""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from rental_engines.reconciler import PayeeDetails, StoredCheckRecord
from rental_kernel.exceptions import ContractNotFoundError
from rental_modules.contracts import (
    TERM_FIELDS,
    Contract,
    ContractEditSession,
    ContractRepository,
    ContractStatus,
    PartyRole,
    PaymentFrequency,
    PaymentMethod,
)
from tests.factories import make_expat_party, make_omani_party


def make_contract(**overrides):
    values = dict(
        id=uuid4(),
        property_id="PROP-1",
        monthly_rent=Decimal("300"),
        duration_months=6,
        start_date=date(2025, 1, 1),
        rent_due_day=5,
        rent_payment_method=PaymentMethod.CHECK,
        rent_payment_frequency=PaymentFrequency.QUARTERLY,
        tenant=make_omani_party(),
        landlord=make_expat_party(),
    )
    values.update(overrides)
    return Contract(**values)


class TestContract:

    def test_defaults(self):
        contract = Contract(id=uuid4(), property_id="P")
        assert contract.status == ContractStatus.DRAFT
        assert contract.currency == "OMR"
        assert contract.rent_payment_frequency == PaymentFrequency.MONTHLY
        assert contract.payee is None

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            make_contract().monthly_rent = Decimal("1")

    def test_party_lookup(self):
        contract = make_contract()
        assert contract.party(PartyRole.TENANT).name == "Salim Al-Harthi"
        assert contract.party("landlord").name == "Priya Nair"

    def test_schedule_terms_use_enum_values(self):
        terms = make_contract().schedule_terms()
        assert terms.rent_payment_method == "check"
        assert terms.rent_payment_frequency == "quarterly"
        assert terms.rent_due_day == 5

    def test_deposit_cash_amount_alias(self):
        assert make_contract(deposit_amount=Decimal("300")).deposit_cash_amount == Decimal("300")

    def test_approval_state(self):
        state = make_contract(status=ContractStatus.ADMIN_APPROVED).approval_state()
        assert state.status == ContractStatus.ADMIN_APPROVED
        assert not state.both_parties_approved

    def test_term_fields_exclude_status_and_parties(self):
        assert "monthly_rent" in TERM_FIELDS
        assert "status" not in TERM_FIELDS
        assert "tenant" not in TERM_FIELDS


class TestEditSession:

    def test_overrides_cleared_on_exit(self):
        edit = ContractEditSession(contract_id=uuid4())
        edit.enter_edit_mode()
        edit.record_override("abc")

        assert edit.edit_mode
        assert edit.overrides == {"abc"}

        edit.exit_edit_mode()
        assert not edit.edit_mode
        assert edit.overrides == set()


class TestRepository:

    def test_unknown_contract(self, session):
        with pytest.raises(ContractNotFoundError):
            ContractRepository(session).get(uuid4())
        assert ContractRepository(session).find(uuid4()) is None

    def test_round_trip(self, session, actor_id):
        repo = ContractRepository(session)
        payee = PayeeDetails(owner_type="company", company_name="شركة العقارات")
        contract = make_contract(
            booking_id="BK-7",
            custom_monthly_rents=(Decimal("100"), None, Decimal("120.5")),
            payee=payee,
        )

        repo.save(contract, actor_id)
        session.commit()
        loaded = repo.get(contract.id)

        assert loaded.tenant == contract.tenant
        assert loaded.landlord.passport_expiry == date(2031, 6, 30)
        assert loaded.payee == payee
        assert loaded.custom_monthly_rents == (Decimal("100"), None, Decimal("120.5"))
        assert loaded.rent_payment_frequency == PaymentFrequency.QUARTERLY
        assert repo.find_by_booking("BK-7").id == contract.id

    def test_records_replaced_in_order(self, session, actor_id):
        repo = ContractRepository(session)
        contract = make_contract()
        repo.save(contract, actor_id)

        first = (
            StoredCheckRecord("RENT_CHEQUE", slot_key="a", amount=Decimal("1.2346")),
            StoredCheckRecord("RENT_CHEQUE", slot_key="b", check_number="7"),
        )
        repo.save_records(contract.id, first, actor_id)
        stored = repo.save_records(contract.id, first[::-1], actor_id)

        assert [r.slot_key for r in stored] == ["b", "a"]
        assert stored[1].amount == Decimal("1.235")
        assert stored[0].check_number == "7"
