"""Database layer - engine, sessions and declarative base classes."""

from rental_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from rental_kernel.db.engine import create_tables, get_engine, get_session

__all__ = [
    "get_engine",
    "get_session",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUID",
    "UUIDString",
]
