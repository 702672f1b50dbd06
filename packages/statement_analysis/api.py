"""Pipeline orchestration for ``statement_analysis``.

raw bytes -> :func:`~statement_analysis.encoding.decode_statement_bytes`
-> :func:`~statement_analysis.reassembly.reassemble`
-> :func:`~statement_analysis.extract.extract_transactions`
-> :func:`~statement_analysis.aggregate.aggregate`
-> :mod:`~statement_analysis.report` renderers.

Everything is computed in memory first; the two artifacts
(``<basename>_categorized.json`` and ``<basename>_report.txt``) are written
beside the input only once at least one transaction was found.

Errors
------
- ``FileNotFoundError`` / ``OSError`` when the input cannot be read.
- :class:`~statement_analysis.reassembly.HeaderNotFoundError` when the column
  header is missing. No output is written in either case.
"""

from __future__ import annotations

import contextlib
import datetime as dt
import os
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from .aggregate import CategorizationResult, aggregate
from .encoding import decode_statement_bytes
from .extract import extract_transactions
from .keywords import CategoryKeywordTable, default_keyword_table, load_keyword_table
from .logging_setup import get_logger
from .reassembly import reassemble
from .report import build_snapshot, render_json, render_text_report
from .settings import Settings

_logger = get_logger("statement_analysis.api")


@dataclass(frozen=True, slots=True)
class StatementOutputs:
    result: CategorizationResult
    report: str
    json_path: Path
    report_path: Path


def analyze_text(
    text: str, table: CategoryKeywordTable | None = None
) -> CategorizationResult | None:
    """Run the pipeline on already-decoded text.

    Returns ``None`` (after logging a warning) when no transaction could be
    extracted.
    """

    statement = reassemble(text)
    transactions = extract_transactions(statement.records)

    _logger.info("%d operations extracted", len(transactions))
    if statement.account_balance is not None:
        _logger.info("Account balance: %s€", statement.account_balance)

    if not transactions:
        _logger.warning("No operations found in the file")
        return None

    result = aggregate(transactions, table, account_balance=statement.account_balance)
    _logger.info("Operations categorized into %d categories", len(result.categories))
    return result


def analyze_bytes(
    raw: bytes, table: CategoryKeywordTable | None = None
) -> CategorizationResult | None:
    return analyze_text(decode_statement_bytes(raw), table)


def resolve_keyword_table(settings: Settings) -> CategoryKeywordTable:
    if settings.keywords_file is not None:
        return load_keyword_table(settings.keywords_file)
    return default_keyword_table()


def output_paths(csv_path: str | PathLike[str]) -> tuple[Path, Path]:
    """Return ``(json_path, report_path)`` beside ``csv_path``."""

    p = Path(csv_path)
    return (
        p.with_name(f"{p.stem}_categorized.json"),
        p.with_name(f"{p.stem}_report.txt"),
    )


def _write_texts_atomic(files: list[tuple[Path, str]]) -> None:
    # All `.tmp` files are written before the first replace.
    staged: list[tuple[Path, Path]] = []
    try:
        for path, text in files:
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_text(text, encoding="utf-8")
            staged.append((tmp, path))
        for tmp, path in staged:
            os.replace(tmp, path)
    except Exception:
        for tmp, _ in staged:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
        raise


def process_csv_file(
    csv_path: str | PathLike[str],
    *,
    settings: Settings | None = None,
    table: CategoryKeywordTable | None = None,
    generated_at: dt.datetime | None = None,
) -> StatementOutputs | None:
    """Analyze ``csv_path`` and write the JSON and text artifacts beside it.

    ``table`` wins over ``settings.keywords_file``; with neither, the built-in
    table is used. Returns ``None`` when the file holds no transaction, in
    which case nothing is written.
    """

    if settings is None:
        settings = Settings()
    if table is None:
        table = resolve_keyword_table(settings)

    p = Path(csv_path)
    _logger.info("Processing file: %s", p)
    raw = p.read_bytes()
    _logger.info("CSV file read successfully (%d bytes)", len(raw))

    result = analyze_bytes(raw, table)
    if result is None:
        return None

    report = render_text_report(
        result,
        top_operations=settings.top_operations,
        full_listing=settings.full_listing,
        description_width=settings.description_width,
    )
    snapshot = build_snapshot(result, generated_at=generated_at)

    json_path, report_path = output_paths(p)
    _write_texts_atomic([(json_path, render_json(snapshot)), (report_path, report)])
    _logger.info("Data saved to: %s", json_path)
    _logger.info("Report saved to: %s", report_path)

    return StatementOutputs(
        result=result, report=report, json_path=json_path, report_path=report_path
    )


__all__ = [
    "StatementOutputs",
    "analyze_bytes",
    "analyze_text",
    "output_paths",
    "process_csv_file",
    "resolve_keyword_table",
]
