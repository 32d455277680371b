from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class Variant(str, Enum):
    # one cash movement: dividend, interest, tax, fee, deposit, removal
    POSTING = "posting"
    # security leg + cash leg: buy, sell, transfer
    PAIRED = "paired"


class TransactionType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    DIVIDENDS = "DIVIDENDS"
    INTEREST = "INTEREST"
    INTEREST_CHARGE = "INTEREST_CHARGE"
    TAXES = "TAXES"
    TAX_REFUND = "TAX_REFUND"
    FEES = "FEES"
    FEES_REFUND = "FEES_REFUND"
    DEPOSIT = "DEPOSIT"
    REMOVAL = "REMOVAL"

    @property
    def variant(self) -> Variant:
        return Variant.PAIRED if self in _PAIRED_TYPES else Variant.POSTING


_PAIRED_TYPES = frozenset(
    {TransactionType.BUY, TransactionType.SELL, TransactionType.TRANSFER_IN, TransactionType.TRANSFER_OUT}
)


class UnitType(str, Enum):
    TAX = "TAX"
    FEE = "FEE"
    GROSS_VALUE = "GROSS_VALUE"


@dataclass(frozen=True)
class Money:
    currency: str
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Money must not be negative: {self.amount} {self.currency}")

    def __add__(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValueError(f"Cannot add {other.currency} to {self.currency}")
        return Money(self.currency, self.amount + other.amount)


@dataclass(frozen=True)
class Unit:
    type: UnitType
    amount: Money
    forex: Money | None = None
    exchange_rate: Decimal | None = None
    category: str | None = None


@dataclass(frozen=True)
class Security:
    id: str
    name: str | None
    isin: str | None
    wkn: str | None
    currency: str | None


@dataclass(frozen=True)
class TransactionTemplate:
    type: TransactionType

    @property
    def variant(self) -> Variant:
        return self.type.variant

    def new_draft(self) -> TransactionDraft:
        return TransactionDraft(type=self.type)


@dataclass
class TransactionDraft:
    """Transaction under construction; sections fill it field by field."""

    type: TransactionType
    date: datetime | None = None
    shares: Decimal | None = None
    amount: int | None = None
    currency: str | None = None
    security: Security | None = None
    note: str | None = None
    units: list[Unit] = field(default_factory=list)

    @property
    def variant(self) -> Variant:
        return self.type.variant

    def add_unit(self, unit: Unit) -> None:
        self.units.append(unit)


@dataclass(frozen=True)
class Posting:
    type: TransactionType
    date: datetime | None
    amount: Money
    shares: Decimal | None = None
    security: Security | None = None
    note: str | None = None
    units: tuple[Unit, ...] = ()


@dataclass(frozen=True)
class TransactionItem:
    """Immutable output of one block.

    ``posting`` is the single cash movement for POSTING items and the security
    leg for PAIRED items; ``cash_leg`` is only set for PAIRED items.
    """

    variant: Variant
    posting: Posting
    cash_leg: Posting | None = None

    @property
    def type(self) -> TransactionType:
        return self.posting.type

    @property
    def amount(self) -> Money:
        return self.posting.amount

    @property
    def units(self) -> tuple[Unit, ...]:
        return self.posting.units

    @property
    def security_leg(self) -> Posting | None:
        return self.posting if self.variant is Variant.PAIRED else None

    def unit_totals(self, unit_type: UnitType) -> dict[str, Money]:
        totals: dict[str, Money] = {}
        for unit in self.units:
            if unit.type is not unit_type:
                continue
            cur = unit.amount.currency
            totals[cur] = unit.amount if cur not in totals else totals[cur] + unit.amount
        return totals

    def unit_total(self, unit_type: UnitType, currency: str | None = None) -> Money | None:
        """Total of ``unit_type`` units in ``currency`` (default: the item currency)."""
        return self.unit_totals(unit_type).get(currency or self.amount.currency)
