"""Group categorized transactions and compute statement totals."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from .categorize import categorize_description
from .keywords import CategoryKeywordTable, default_keyword_table
from .models import ZERO, CategorizedGroup, Summary, Transaction


@dataclass(frozen=True, slots=True)
class CategorizationResult:
    """Per-category groups (first-assignment order) plus the overall summary."""

    categories: dict[str, CategorizedGroup]
    summary: Summary

    def sorted_groups(self) -> list[tuple[str, CategorizedGroup]]:
        """Groups by ascending total: the largest net expense comes first.

        Categories with equal totals keep their first-assignment order.
        """

        return sorted(self.categories.items(), key=lambda item: item[1].total_amount)


def aggregate(
    transactions: Iterable[Transaction],
    table: CategoryKeywordTable | None = None,
    account_balance: Decimal | None = None,
) -> CategorizationResult:
    """Categorize ``transactions`` and fold them into groups and totals.

    ``total_debit`` is the magnitude of all negative amounts and
    ``total_credit`` the sum of all non-negative ones, so ``net_amount`` equals
    the sum of every transaction amount.
    """

    if table is None:
        table = default_keyword_table()

    categories: dict[str, CategorizedGroup] = {}
    total_debit = ZERO
    total_credit = ZERO
    count = 0

    for tx in transactions:
        category = categorize_description(tx.description, table)
        group = categories.get(category)
        if group is None:
            group = categories[category] = CategorizedGroup()
        group.add(tx)

        if tx.amount < 0:
            total_debit += abs(tx.amount)
        else:
            total_credit += tx.amount
        count += 1

    summary = Summary(
        total_operations=count,
        total_debit=total_debit,
        total_credit=total_credit,
        net_amount=total_credit - total_debit,
        account_balance=account_balance,
    )
    return CategorizationResult(categories=categories, summary=summary)


__all__ = ["CategorizationResult", "aggregate"]
