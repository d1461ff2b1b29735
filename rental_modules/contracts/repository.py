"""
Contract persistence (``rental_modules.contracts.repository``).

One contract row per id and one ordered cheque-record list per contract.
Last write wins; the repository flushes but never commits, the service
owns the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from rental_engines.fees import round_money
from rental_engines.reconciler import StoredCheckRecord
from rental_kernel.exceptions import ContractNotFoundError
from rental_kernel.logging_config import get_logger
from rental_modules.contracts.models import Contract
from rental_modules.contracts.orm import ContractCheckModel, ContractModel

logger = get_logger("modules.contracts.repository")


class ContractRepository:
    """SQLAlchemy-backed store for contracts and their cheque records."""

    def __init__(self, session: Session):
        self._session = session

    def _model(self, contract_id: UUID) -> ContractModel:
        model = self._session.get(ContractModel, contract_id)
        if model is None:
            raise ContractNotFoundError(str(contract_id))
        return model

    def find(self, contract_id: UUID) -> Contract | None:
        model = self._session.get(ContractModel, contract_id)
        return model.to_dto() if model is not None else None

    def get(self, contract_id: UUID) -> Contract:
        """Raises ContractNotFoundError for an unknown id."""
        return self._model(contract_id).to_dto()

    def find_by_booking(self, booking_id: str) -> Contract | None:
        stmt = select(ContractModel).where(ContractModel.booking_id == booking_id)
        model = self._session.scalars(stmt).first()
        return model.to_dto() if model is not None else None

    def save(self, contract: Contract, actor_id: UUID) -> Contract:
        """Insert or update the contract row."""
        model = self._session.get(ContractModel, contract.id)
        if model is None:
            model = ContractModel.from_dto(contract, created_by_id=actor_id)
            self._session.add(model)
        else:
            model.apply_dto(contract)
            model.updated_by_id = actor_id
        self._session.flush()
        return model.to_dto()

    def get_records(self, contract_id: UUID) -> tuple[StoredCheckRecord, ...]:
        model = self._model(contract_id)
        return tuple(
            replace(
                row.to_dto(),
                amount=round_money(row.amount, model.currency) if row.amount is not None else None,
            )
            for row in model.checks
        )

    def save_records(
        self,
        contract_id: UUID,
        records: Sequence[StoredCheckRecord],
        actor_id: UUID,
    ) -> tuple[StoredCheckRecord, ...]:
        """Replace the contract's cheque list.

        Old rows are deleted and flushed before the new ones are inserted so
        the position and slot-key unique constraints never see both.
        """
        model = self._model(contract_id)
        model.checks.clear()
        self._session.flush()

        for position, record in enumerate(records):
            model.checks.append(ContractCheckModel.from_dto(
                record,
                contract_id=contract_id,
                position=position,
                created_by_id=actor_id,
            ))
        self._session.flush()

        logger.debug(
            "contract_records_saved",
            extra={"contract_id": str(contract_id), "record_count": len(records)},
        )
        return self.get_records(contract_id)
