"""Keyword categorization of transaction descriptions.

Pure and deterministic: the same description and table always produce the
same category. Ties between overlapping keywords are settled only by the
table's declaration order (see :mod:`statement_analysis.keywords`).
"""

from __future__ import annotations

from .keywords import CategoryKeywordTable, default_keyword_table
from .logging_setup import get_logger

_logger = get_logger("statement_analysis.categorize")

# Sentinel category for descriptions no keyword matches.
OTHER_CATEGORY = "Autres"


def categorize_description(
    description: str, table: CategoryKeywordTable | None = None
) -> str:
    """Return the category of the first keyword found in ``description``.

    ``table`` defaults to a fresh copy of the built-in table. Unmatched
    descriptions fall back to :data:`OTHER_CATEGORY`.
    """

    hit = (table if table is not None else default_keyword_table()).match(description)
    if hit is None:
        return OTHER_CATEGORY
    category, keyword = hit
    _logger.debug("%r -> %s (keyword %r)", description, category, keyword)
    return category


__all__ = ["OTHER_CATEGORY", "categorize_description"]
