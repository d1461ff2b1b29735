"""
Pure domain layer.

This module contains pure value objects with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from rental_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from rental_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from rental_kernel.domain.values import Currency, Money
from rental_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Currency",
    "Money",
    "Guard",
    "Transition",
    "Workflow",
]
