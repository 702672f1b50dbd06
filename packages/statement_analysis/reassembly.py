"""Regroup physical CSV lines into logical transaction records.

The bank export is semicolon-delimited but not RFC 4180: a description may
wrap onto several physical lines before the debit/credit columns appear, and
the quoting is not reliable enough for :mod:`csv`. Records are therefore
rebuilt with a small two-state automaton:

``SEEKING_RECORD_START``
    Blank lines and lines that do not start with a ``DD/MM/YYYY;`` token are
    ignored. A date line opens a record and moves to the next state, unless it
    already ends with the amount columns (single-line record), in which case
    the record is emitted immediately.

``ACCUMULATING_UNTIL_AMOUNTS``
    Every non-blank line is appended to the open record. The first line whose
    tail matches one of the amount terminators closes the record and returns
    to ``SEEKING_RECORD_START``.

A record still open at end of input never found its amounts and is dropped.
"""

from __future__ import annotations

import re
from decimal import Decimal
from enum import Enum, auto

from .logging_setup import get_logger
from .models import RawRecord, ReassembledStatement

_logger = get_logger("statement_analysis.reassembly")

# 0-based index of the "Solde au ..." line in the export preamble.
BALANCE_LINE_INDEX = 6

# The header must appear within this many leading lines.
HEADER_SCAN_LINES = 25

EXPECTED_HEADER = "Date;Libellé;Débit euros;Crédit euros;"

RECORD_START_RE = re.compile(r"^(\d{2}/\d{2}/\d{4});")

# ``;debit;;`` / ``;;credit;`` / ``;debit;credit;`` at the end of a line.
AMOUNT_TERMINATOR_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r";\d+,\d+;;$"),
    re.compile(r";;\d+,\d+;$"),
    re.compile(r";\d+,\d+;\d+,\d+;$"),
)

# Thousands separators and the euro sign are frequently mangled by the export
# (or by the encoding fallback, which may turn them into "é"), so both parts
# accept more than the clean glyphs.
BALANCE_RE = re.compile(
    r"Solde au \d{2}/\d{2}/\d{4}\s+([\d\s.'Â\ufffdé]+),(\d{2})\s*[€\ufffdé?]"
)


class HeaderNotFoundError(ValueError):
    """Raised when no column header is found in the leading lines of a file."""


class ReassemblyState(Enum):
    SEEKING_RECORD_START = auto()
    ACCUMULATING_UNTIL_AMOUNTS = auto()


def split_lines(text: str) -> list[str]:
    """Split ``text`` into stripped physical lines (``\\n`` and ``\\r\\n``)."""

    return [line.strip() for line in text.split("\n")]


def is_amount_terminator(line: str) -> bool:
    return any(p.search(line) for p in AMOUNT_TERMINATOR_RES)


def extract_account_balance(lines: list[str]) -> Decimal | None:
    """Parse the account balance from the fixed preamble line, if present.

    A missing or unparseable line is not an error; ``None`` is returned and a
    warning logged.
    """

    if len(lines) <= BALANCE_LINE_INDEX:
        return None

    balance_line = lines[BALANCE_LINE_INDEX]
    m = BALANCE_RE.search(balance_line)
    if m is None:
        _logger.warning(
            "Could not extract account balance from line %d: %r",
            BALANCE_LINE_INDEX + 1,
            balance_line,
        )
        return None

    units = re.sub(r"\D", "", m.group(1))
    balance = Decimal(f"{units or '0'}.{m.group(2)}")
    _logger.info("Account balance extracted: %s€", balance)
    return balance


def _is_header(line: str) -> bool:
    # Accents in the labels are often corrupted, so only unaccented fragments
    # of "Libellé", "Débit euros" and "Crédit euros" are required.
    if "Date;" not in line:
        return False
    return ("Libell" in line and "bit euros" in line) or (
        "euros;" in line and "dit euros" in line
    )


def find_header_index(lines: list[str]) -> int:
    """Return the 0-based index of the column header line.

    Raises ``HeaderNotFoundError`` if none of the first
    :data:`HEADER_SCAN_LINES` lines looks like the header.
    """

    for idx, line in enumerate(lines[:HEADER_SCAN_LINES]):
        if _is_header(line):
            _logger.info("Found header at line %d: %r", idx + 1, line)
            return idx
    raise HeaderNotFoundError(
        f"Header row not found in the first {HEADER_SCAN_LINES} lines. "
        f"Expected format: {EXPECTED_HEADER!r}"
    )


class RecordReassembler:
    """Feed physical lines one at a time; collect :class:`RawRecord` objects."""

    def __init__(self) -> None:
        self.state = ReassemblyState.SEEKING_RECORD_START
        self.records: list[RawRecord] = []
        self.dropped = 0
        self._date = ""
        self._lines: list[str] = []
        self._line_number = 0

    def feed(self, line: str, line_number: int = 0) -> None:
        line = line.strip()
        if not line:
            return

        if self.state is ReassemblyState.SEEKING_RECORD_START:
            m = RECORD_START_RE.match(line)
            if m is None:
                return
            self._date = m.group(1)
            self._lines = [line]
            self._line_number = line_number
            self.state = ReassemblyState.ACCUMULATING_UNTIL_AMOUNTS
        else:
            self._lines.append(line)

        if is_amount_terminator(line):
            self._emit()

    def finish(self) -> list[RawRecord]:
        """Close the input; an unterminated trailing record is discarded."""

        if self.state is ReassemblyState.ACCUMULATING_UNTIL_AMOUNTS:
            _logger.debug(
                "Dropping record starting at line %d: no amount columns before end of file",
                self._line_number,
            )
            self.dropped += 1
            self._reset()
        return self.records

    def _emit(self) -> None:
        self.records.append(
            RawRecord(date=self._date, lines=tuple(self._lines), line_number=self._line_number)
        )
        self._reset()

    def _reset(self) -> None:
        self._date = ""
        self._lines = []
        self._line_number = 0
        self.state = ReassemblyState.SEEKING_RECORD_START


def reassemble(text: str) -> ReassembledStatement:
    """Split normalized text into the account balance and raw records."""

    lines = split_lines(text)
    account_balance = extract_account_balance(lines)
    header_idx = find_header_index(lines)

    machine = RecordReassembler()
    for offset, line in enumerate(lines[header_idx + 1 :], start=header_idx + 2):
        machine.feed(line, offset)
    records = machine.finish()

    return ReassembledStatement(account_balance=account_balance, records=records)


__all__ = [
    "AMOUNT_TERMINATOR_RES",
    "BALANCE_LINE_INDEX",
    "HEADER_SCAN_LINES",
    "HeaderNotFoundError",
    "ReassemblyState",
    "RecordReassembler",
    "extract_account_balance",
    "find_header_index",
    "is_amount_terminator",
    "reassemble",
    "split_lines",
]
