"""
Deterministic hashing utilities.

All hashing in the rental kernel must be deterministic and reproducible.
This module provides the canonical hashing functions used throughout.
"""

import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Args:
        obj: Object to serialize.

    Returns:
        JSON-serializable representation.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, Decimal):
        # Normalize so 900 and 900.000 hash identically
        return str(obj.normalize())
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string.

    Produces a deterministic JSON representation:
    - Keys are sorted alphabetically
    - No whitespace
    - Consistent handling of special types (Decimal, date, UUID)

    Args:
        data: Data to canonicalize.

    Returns:
        Canonical JSON string.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict) -> str:
    """
    Compute SHA-256 hash of a payload.

    Args:
        payload: Dictionary payload to hash.

    Returns:
        Hex-encoded SHA-256 hash (64 characters).
    """
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def slot_key(check_type_id: str, ordinal: int) -> str:
    """
    Stable key for one required-instrument slot.

    The key depends only on the instrument type and its ordinal within that
    type, so a reordered catalog never moves a stored value onto a different
    instrument.

    Returns:
        First 16 hex characters of the slot payload hash.
    """
    return hash_payload({"check_type_id": check_type_id, "ordinal": ordinal})[:16]
