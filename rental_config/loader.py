"""
Configuration Loader (``rental_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``ContractConfig``.  Runtime callers go through
``rental_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from ``ContractConfig.__post_init__``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from rental_config.schema import DEFAULT_CHECK_TYPE_LABELS, CheckTypeLabel, ContractConfig
from rental_engines.schedule import DEFAULT_FREQUENCY_MONTHS


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, default: Decimal) -> Decimal:
    """Parse a rate from YAML; floats go through str to keep their digits."""
    if value is None:
        return default
    return Decimal(str(value))


def parse_labels(data: dict[str, Any] | None) -> dict[str, CheckTypeLabel]:
    labels = dict(DEFAULT_CHECK_TYPE_LABELS)
    for check_type, entry in (data or {}).items():
        labels[check_type] = CheckTypeLabel(
            label_ar=entry["ar"],
            label_en=entry["en"],
        )
    return labels


def parse_contract_config(data: dict[str, Any]) -> ContractConfig:
    """
    Parse a ``ContractConfig`` from a dict.

    Unspecified keys take the schema defaults.  The frequency map replaces
    the default one when given.
    """
    fees = data.get("fees", {})
    schedule = data.get("schedule", {})
    notifications = data.get("notifications", {})

    frequency = schedule.get("frequency_months")
    frequency_months = (
        MappingProxyType({str(k): int(v) for k, v in frequency.items()})
        if frequency
        else DEFAULT_FREQUENCY_MONTHS
    )

    defaults = ContractConfig.__dataclass_fields__
    kwargs: dict[str, Any] = {
        "config_id": data.get("config_id", defaults["config_id"].default),
        "version": int(data.get("version", defaults["version"].default)),
        "currency": str(data.get("currency", defaults["currency"].default)).upper(),
        "municipality_fee_rate": parse_decimal(
            fees.get("municipality_fee_rate"), defaults["municipality_fee_rate"].default,
        ),
        "vat_rate": parse_decimal(fees.get("vat_rate"), defaults["vat_rate"].default),
        "grace_days_per_month": int(
            fees.get("grace_days_per_month", defaults["grace_days_per_month"].default)
        ),
        "end_date_inclusive": bool(
            schedule.get("end_date_inclusive", defaults["end_date_inclusive"].default)
        ),
        "max_deposit_cheques": int(
            schedule.get("max_deposit_cheques", defaults["max_deposit_cheques"].default)
        ),
        "frequency_months": frequency_months,
        "check_type_labels": MappingProxyType(parse_labels(data.get("check_type_labels"))),
    }
    if "document_upload_url_template" in notifications:
        kwargs["document_upload_url_template"] = notifications["document_upload_url_template"]
    return ContractConfig(**kwargs)


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
