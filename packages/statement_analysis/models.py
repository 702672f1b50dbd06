"""Data models for ``statement_analysis``.

Domain records are frozen dataclasses built from ``Decimal`` amounts so totals
stay exact. The JSON snapshot written next to the input file is described by
Pydantic models at the bottom of this module; they own the on-disk shape
(camelCase keys) and are the only place where amounts become floats.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ZERO = Decimal("0")

# Source date format of the bank export (``DD/MM/YYYY``).
DATE_FORMAT = "%d/%m/%Y"


class TransactionKind(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


# ---------------------------------------------------------------------------
# Reassembly output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawRecord:
    """One logical transaction record made of one or more physical lines.

    ``lines`` are stripped physical lines in file order: the first starts with
    the ``DD/MM/YYYY;`` date token, the last carries the amount columns (they
    are the same line for single-line records). ``line_number`` is the 1-based
    position of the first line in the file, for diagnostics only.
    """

    date: str
    lines: tuple[str, ...]
    line_number: int = 0


@dataclass(frozen=True, slots=True)
class ReassembledStatement:
    account_balance: Decimal | None
    records: list[RawRecord]


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single extracted bank operation.

    Invariants: ``amount == credit - debit`` and ``kind`` is ``CREDIT`` iff
    ``amount >= 0``. Use :meth:`from_amounts` rather than building instances by
    hand so both hold.
    """

    date: str
    description: str
    debit: Decimal
    credit: Decimal
    amount: Decimal
    kind: TransactionKind

    @classmethod
    def from_amounts(
        cls, date: str, description: str, debit: Decimal, credit: Decimal
    ) -> Transaction:
        amount = credit - debit
        kind = TransactionKind.CREDIT if amount >= 0 else TransactionKind.DEBIT
        return cls(
            date=date,
            description=description,
            debit=debit,
            credit=credit,
            amount=amount,
            kind=kind,
        )

    @property
    def value_date(self) -> dt.date:
        return dt.datetime.strptime(self.date, DATE_FORMAT).date()


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class CategorizedGroup:
    """Transactions assigned to one category, in insertion order."""

    transactions: list[Transaction] = field(default_factory=list)
    total_amount: Decimal = ZERO
    count: int = 0

    def add(self, tx: Transaction) -> None:
        self.transactions.append(tx)
        self.total_amount += tx.amount
        self.count += 1

    @property
    def average_amount(self) -> Decimal:
        if self.count == 0:
            return ZERO
        return self.total_amount / self.count


@dataclass(frozen=True, slots=True)
class Summary:
    total_operations: int
    total_debit: Decimal
    total_credit: Decimal
    net_amount: Decimal
    account_balance: Decimal | None = None


# ---------------------------------------------------------------------------
# JSON snapshot (``<basename>_categorized.json``)
# ---------------------------------------------------------------------------


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class OperationSnapshot(_SnapshotModel):
    date: str
    description: str
    debit: float
    credit: float
    amount: float
    kind: TransactionKind = Field(alias="type")

    @classmethod
    def from_transaction(cls, tx: Transaction) -> OperationSnapshot:
        return cls(
            date=tx.date,
            description=tx.description,
            debit=float(tx.debit),
            credit=float(tx.credit),
            amount=float(tx.amount),
            kind=tx.kind,
        )


class CategorySnapshot(_SnapshotModel):
    operations: list[OperationSnapshot]
    total_amount: float
    count: int


class SummarySnapshot(_SnapshotModel):
    total_operations: int
    total_debit: float
    total_credit: float
    net_amount: float
    account_balance: float | None = None


class CategorizedSnapshot(_SnapshotModel):
    """Top-level schema for the categorized JSON artifact."""

    generated_at: str
    categories: dict[str, CategorySnapshot]
    summary: SummarySnapshot


__all__ = [
    "DATE_FORMAT",
    "CategorizedGroup",
    "CategorizedSnapshot",
    "CategorySnapshot",
    "OperationSnapshot",
    "RawRecord",
    "ReassembledStatement",
    "Summary",
    "SummarySnapshot",
    "Transaction",
    "TransactionKind",
]
