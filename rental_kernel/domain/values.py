"""
Values -- Immutable monetary value objects.

Responsibility:
    Provides Currency and Money, the value types used wherever the engine
    rounds a rent, fee or tax amount.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except rental_kernel.domain.currency.

Invariants enforced:
    - Amounts are always Decimal; floats go through ``str`` first.
    - Currency codes are validated at construction time.
    - Rounding precision comes from the currency registry (three places
      for OMR), never from the call site.

Failure modes:
    - ValueError on construction with invalid amounts or currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rental_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True, slots=True)
class Currency:
    """ISO 4217 code, validated and uppercased on construction."""

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def quantum(self) -> Decimal:
        return CurrencyRegistry.get_info(self.code).quantum

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Money:
    """
    An amount paired with its currency.

    Guarantees:
        - Immutable and hashable.
        - ``amount`` is always a Decimal.

    Non-goals:
        - Does NOT auto-round -- callers call ``.round()``.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(amount=amount, currency=currency)

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's quantum; returns a new Money."""
        rounded = self.amount.quantize(self.currency.quantum, rounding=rounding)
        return Money(amount=rounded, currency=self.currency)

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency})"
