"""
Pytest fixtures for the rental contract test suite.

Provides:
- Structured logging setup and log capture
- An in-memory SQLite database with every table created
- A deterministic clock
- In-memory fakes for the external collaborators
- Party and contract factories
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO
from uuid import uuid4

import pytest

from rental_config import ContractConfig
from rental_engines.schedule import CatalogCheck
from rental_kernel.db.base import Base
from rental_kernel.db.engine import get_session, init_engine_from_url, reset_engine
from rental_kernel.domain.clock import DeterministicClock
from rental_kernel.exceptions import ContactConflictError
from rental_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from rental_modules._orm_registry import create_all_tables
from rental_modules.contracts.service import ContractService
from rental_services.booking_checks import BookingCheckMirror
from rental_services.collaborators import (
    BankAccount,
    BookingInfo,
    ContactRecord,
    DocRequirement,
    StaticCheckCatalog,
    StaticDocumentCatalog,
)
from rental_services.sync import SyncAdapter
from tests.factories import QUARTERLY_TERMS, make_expat_party, make_omani_party


# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

TEST_NOW = datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture rental_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "contract_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("rental_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """In-memory SQLite engine shared by the whole session."""
    engine = init_engine_from_url("sqlite://")
    create_all_tables()
    yield engine
    reset_engine()


@pytest.fixture
def session(db_engine):
    """A session whose committed rows are deleted after the test."""
    sess = get_session()
    yield sess
    sess.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        sess.execute(table.delete())
    sess.commit()
    sess.close()


# =============================================================================
# Clock and config
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock(TEST_NOW)


@pytest.fixture
def config():
    return ContractConfig()


@pytest.fixture
def actor_id():
    return TEST_ACTOR_ID


# =============================================================================
# Collaborator fakes
# =============================================================================


class FakeContactDirectory:
    """Contacts keyed by phone and email; ``conflicts`` raise on lookup."""

    def __init__(self):
        self.contacts: dict[str, ContactRecord] = {}
        self.conflicts: dict[str, ContactConflictError] = {}
        self.lookups: list[str] = []

    def add(self, contact: ContactRecord) -> None:
        for identifier in (contact.phone, contact.email):
            if identifier:
                self.contacts[identifier] = contact

    def find_contact_by_identifier(self, identifier: str) -> ContactRecord | None:
        self.lookups.append(identifier)
        if identifier in self.conflicts:
            raise self.conflicts[identifier]
        return self.contacts.get(identifier)


class FakeBookingDirectory:
    def __init__(self):
        self.bookings: dict[str, BookingInfo] = {}
        self.contract_ids: dict[str, str] = {}
        self.rented: list[str] = []

    def add(self, booking: BookingInfo) -> None:
        self.bookings[booking.booking_id] = booking

    def get_booking(self, booking_id: str) -> BookingInfo | None:
        return self.bookings.get(booking_id)

    def set_contract_id(self, booking_id: str, contract_id: str) -> None:
        self.contract_ids[booking_id] = contract_id

    def mark_rented(self, booking_id: str) -> None:
        self.rented.append(booking_id)


class FakeDocumentApprovals:
    def __init__(self):
        self.approved: set[str] = set()

    def all_required_documents_approved(self, booking_id: str) -> bool:
        return booking_id in self.approved


class FakeBankAccounts:
    def __init__(self, *accounts: BankAccount):
        self.accounts = {a.account_id: a for a in accounts}

    def get_bank_account(self, account_id: str) -> BankAccount | None:
        return self.accounts.get(account_id)


class FakeNotifier:
    def __init__(self):
        self.calls: list[tuple[str, str, str]] = []

    def notify_tenant(self, booking_id: str, contract_id: str, upload_url: str) -> None:
        self.calls.append((booking_id, contract_id, upload_url))


@pytest.fixture
def contacts():
    return FakeContactDirectory()


@pytest.fixture
def bookings():
    directory = FakeBookingDirectory()
    directory.add(BookingInfo(
        booking_id="BK-1",
        property_id="PROP-1",
        contract_type="residential",
        tenant_name="Salim Al-Harthi",
        tenant_phone="+96890000001",
        tenant_email="salim@example.com",
    ))
    return directory


@pytest.fixture
def document_approvals():
    return FakeDocumentApprovals()


@pytest.fixture
def bank_accounts():
    return FakeBankAccounts(BankAccount(
        account_id="ACC-1",
        name_ar="شركة العقارات",
        name_en="Realty LLC",
        bank_name_ar="بنك مسقط",
        bank_name_en="Bank Muscat",
        account_number="0123456789",
        branch="Qurum",
    ))


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def check_catalog():
    return StaticCheckCatalog(by_contract_type={
        "residential": (
            CatalogCheck("MAINTENANCE_CHEQUE", "شيك صيانة", "Maintenance cheque"),
        ),
    })


@pytest.fixture
def document_catalog():
    return StaticDocumentCatalog(by_contract_type={
        "residential": (
            DocRequirement("SALARY_CERTIFICATE", "شهادة راتب", "Salary certificate"),
        ),
    })


@pytest.fixture
def mirror(session, clock):
    return BookingCheckMirror(session, clock)


@pytest.fixture
def sync(contacts, bookings, mirror, bank_accounts):
    return SyncAdapter(contacts, bookings, mirror, bank_accounts)


@pytest.fixture
def contract_service(
    session, config, check_catalog, document_catalog, document_approvals, mirror,
    bookings, notifier, sync, clock,
):
    return ContractService(
        session,
        config=config,
        check_catalog=check_catalog,
        document_catalog=document_catalog,
        document_approvals=document_approvals,
        check_approvals=mirror,
        bookings=bookings,
        notifier=notifier,
        sync=sync,
        clock=clock,
    )


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def tenant():
    return make_omani_party()


@pytest.fixture
def landlord():
    return make_expat_party()


@pytest.fixture
def create_contract(contract_service, actor_id, tenant, landlord):
    """Factory creating a persisted contract with quarterly cheque terms."""

    def _create(**kwargs):
        params = dict(
            property_id="PROP-1",
            actor_id=actor_id,
            terms=dict(QUARTERLY_TERMS),
            tenant=tenant,
            landlord=landlord,
        )
        params.update(kwargs)
        return contract_service.create_contract(**params)

    return _create
