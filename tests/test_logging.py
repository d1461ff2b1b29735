"""Tests for the structured logging system (rental_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from rental_engines.fees import FeeRates, FeeTerms, derive_contract_figures
from rental_kernel.exceptions import ContractNotEditableError
from rental_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite setup."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_all_logs(stream)[0]
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "rental_kernel.test"
        assert "ts" in record

    def test_extra_fields_and_decimals(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("figures", extra={"total_rent": Decimal("1800.000"), "count": 2})

        record = _parse_all_logs(stream)[0]
        assert record["total_rent"] == "1800.000"
        assert record["count"] == 2

    def test_exception_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ContractNotEditableError("c-1", "APPROVED", False)
        except ContractNotEditableError:
            get_logger("test").exception("edit_refused")

        record = _parse_all_logs(stream)[0]
        assert record["exc_type"] == "ContractNotEditableError"
        assert record["exc_code"] == "CONTRACT_NOT_EDITABLE"
        assert record["exc_status"] == "APPROVED"
        assert "traceback" in record


class TestLogContext:

    def test_bound_fields_appear_and_are_restored(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        contract_id = str(uuid4())

        with LogContext.bind(contract_id=contract_id, booking_id="BK-1"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _parse_all_logs(stream)
        assert inside["contract_id"] == contract_id
        assert inside["booking_id"] == "BK-1"
        assert "contract_id" not in outside

    def test_configure_is_idempotent(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=handler)
        get_logger("test").info("once")

        assert len(_parse_all_logs(stream)) == 1


class TestEngineTrace:

    def test_trace_record_emitted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)

        derive_contract_figures(terms=FeeTerms(monthly_rent="300", duration_months=6), rates=FeeRates())

        traces = [r for r in _parse_all_logs(stream) if r["message"] == "RENTAL_ENGINE_TRACE"]
        assert traces
        assert traces[0]["engine_name"] == "fees"
        assert len(traces[0]["input_fingerprint"]) == 16
        assert "duration_ms" in traces[0]
