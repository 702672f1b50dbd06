"""Public interface for the ``statement_analysis`` package.

Keyword categorization of French bank CSV exports: encoding repair,
multi-line record reassembly, transaction extraction, first-match-wins
categorization, aggregation, and text/JSON reporting. This module only
re-exports the stable import surface.
"""

from .aggregate import CategorizationResult, aggregate
from .api import (
    StatementOutputs,
    analyze_bytes,
    analyze_text,
    output_paths,
    process_csv_file,
)
from .categorize import OTHER_CATEGORY, categorize_description
from .encoding import decode_statement_bytes, repair_text
from .extract import extract_transaction, extract_transactions
from .keywords import CategoryKeywordTable, default_keyword_table, load_keyword_table
from .models import (
    CategorizedGroup,
    CategorizedSnapshot,
    RawRecord,
    ReassembledStatement,
    Summary,
    Transaction,
    TransactionKind,
)
from .reassembly import HeaderNotFoundError, RecordReassembler, reassemble
from .report import build_snapshot, render_json, render_text_report
from .settings import Settings

__all__ = [
    # API
    "analyze_bytes",
    "analyze_text",
    "output_paths",
    "process_csv_file",
    "StatementOutputs",
    # Pipeline stages
    "decode_statement_bytes",
    "repair_text",
    "reassemble",
    "RecordReassembler",
    "HeaderNotFoundError",
    "extract_transaction",
    "extract_transactions",
    "categorize_description",
    "OTHER_CATEGORY",
    "aggregate",
    "CategorizationResult",
    "render_text_report",
    "build_snapshot",
    "render_json",
    # Keyword configuration
    "CategoryKeywordTable",
    "default_keyword_table",
    "load_keyword_table",
    "Settings",
    # Models
    "Transaction",
    "TransactionKind",
    "RawRecord",
    "ReassembledStatement",
    "CategorizedGroup",
    "Summary",
    "CategorizedSnapshot",
]
