"""Turn reassembled records into :class:`~statement_analysis.models.Transaction`.

Per record:

- Debit and credit come from the tail of the last line,
  ``;<debit>;<credit>;`` with either column possibly empty. Amounts use a
  comma as the decimal separator; an empty column is zero.
- The description is built from the record's interior: every line after the
  date-bearing first line, with the amount columns cut off the last one. When
  that leaves nothing (single-line records, or wrapped records whose text is
  all on the first line) the whole record is used instead, minus the date
  token.
- Separators, amount-shaped numbers and double quotes are removed from the
  description and whitespace is collapsed.

Failures are per record: a record that cannot be parsed is logged and
skipped, never aborting the batch.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from .logging_setup import get_logger
from .models import ZERO, RawRecord, Transaction

_logger = get_logger("statement_analysis.extract")

AMOUNTS_RE = re.compile(r";(\d+,\d+|);(\d+,\d+|);$")

_AMOUNT_SHAPED_RE = re.compile(r"\d+,\d+")


def parse_amount(raw: str) -> Decimal:
    """Convert a comma-decimal amount string (``"1500,00"``) to ``Decimal``.

    Empty strings map to zero. Raises ``ValueError`` for anything else that is
    not a number.
    """

    s = raw.strip()
    if not s:
        return ZERO
    try:
        return Decimal(s.replace(",", "."))
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc


def clean_description(text: str) -> str:
    text = text.replace(";", " ")
    text = _AMOUNT_SHAPED_RE.sub(" ", text)
    text = text.replace('"', " ")
    return " ".join(text.split())


def _interior_description(record: RawRecord, amounts: re.Match[str]) -> str:
    if len(record.lines) < 2:
        return ""
    last = record.lines[-1]
    parts = [*record.lines[1:-1], last[: amounts.start()]]
    return clean_description(" ".join(parts))


def _full_text_description(record: RawRecord) -> str:
    full = " ".join(record.lines).replace(record.date, "", 1)
    return clean_description(full)


def extract_transaction(record: RawRecord) -> Transaction | None:
    """Build a transaction from ``record`` or return ``None`` when the amount
    columns cannot be read from its last line."""

    last = record.lines[-1]
    m = AMOUNTS_RE.search(last)
    if m is None:
        _logger.warning("Could not parse amounts from: %r", last)
        return None

    debit = parse_amount(m.group(1))
    credit = parse_amount(m.group(2))

    description = _interior_description(record, m) or _full_text_description(record)
    return Transaction.from_amounts(record.date, description, debit, credit)


def extract_transactions(records: Iterable[RawRecord]) -> list[Transaction]:
    """Extract every parseable record, skipping (and logging) the others."""

    transactions: list[Transaction] = []
    for record in records:
        try:
            tx = extract_transaction(record)
        except Exception as e:
            _logger.warning(
                "Error parsing transaction starting at line %d: %s", record.line_number, e
            )
            continue
        if tx is not None:
            transactions.append(tx)
    return transactions


__all__ = [
    "AMOUNTS_RE",
    "clean_description",
    "extract_transaction",
    "extract_transactions",
    "parse_amount",
]
