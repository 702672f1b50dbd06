"""Text and JSON renderings of a :class:`CategorizationResult`.

Rendering is formatting only; every number shown comes from the aggregation
step. The text report is French, like the bank exports it summarizes.
"""

from __future__ import annotations

import datetime as dt
import json
from decimal import ROUND_HALF_UP, Decimal

from .aggregate import CategorizationResult
from .models import (
    CategorizedGroup,
    CategorizedSnapshot,
    CategorySnapshot,
    OperationSnapshot,
    SummarySnapshot,
    Transaction,
)

DEFAULT_TOP_OPERATIONS = 3
DEFAULT_DESCRIPTION_WIDTH = 40

_EXPENSE_EMOJI = "💸"
_INCOME_EMOJI = "💰"


def _fmt_amount(d: Decimal) -> str:
    # Exactly two decimals, half-up.
    q = d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{q:.2f}"


def _signed(d: Decimal) -> str:
    return ("+" if d >= 0 else "") + _fmt_amount(d)


def _truncate(text: str, width: int) -> str:
    if width <= 0 or len(text) <= width:
        return text
    return text[:width] + "..."


def _top_transactions(group: CategorizedGroup, limit: int) -> list[Transaction]:
    # Stable sort: equal magnitudes keep file order.
    ranked = sorted(group.transactions, key=lambda tx: abs(tx.amount), reverse=True)
    return ranked[:limit]


def render_text_report(
    result: CategorizationResult,
    *,
    top_operations: int = DEFAULT_TOP_OPERATIONS,
    full_listing: bool = False,
    description_width: int = DEFAULT_DESCRIPTION_WIDTH,
) -> str:
    """Render the human-readable report.

    Categories are listed by ascending total (largest net expense first).
    Each block lists the ``top_operations`` largest transactions by absolute
    amount, or every transaction in file order when ``full_listing`` is set.
    """

    summary = result.summary
    out: list[str] = ["", "=== RAPPORT D'ANALYSE DES OPÉRATIONS ===", ""]

    out.append("📊 RÉSUMÉ GÉNÉRAL:")
    out.append(f"   • Nombre total d'opérations: {summary.total_operations}")
    out.append(f"   • Total débits: -{_fmt_amount(summary.total_debit)}€")
    out.append(f"   • Total crédits: +{_fmt_amount(summary.total_credit)}€")
    out.append(f"   • Solde net: {_signed(summary.net_amount)}€")
    if summary.account_balance is not None:
        out.append(f"   • Solde du compte: {_fmt_amount(summary.account_balance)}€")
    out.append("")

    out.append("📋 RÉPARTITION PAR CATÉGORIE:")
    out.append("")

    for category, group in result.sorted_groups():
        emoji = _EXPENSE_EMOJI if group.total_amount < 0 else _INCOME_EMOJI
        out.append(f"{emoji} {category.upper()}:")
        out.append(f"   • Nombre d'opérations: {group.count}")
        out.append(f"   • Montant total: {_signed(group.total_amount)}€")
        out.append(f"   • Montant moyen: {_signed(group.average_amount)}€")

        if full_listing:
            out.append("   • Opérations:")
            listed = list(group.transactions)
        else:
            out.append("   • Principales opérations:")
            listed = _top_transactions(group, top_operations)
        for tx in listed:
            desc = _truncate(tx.description, description_width)
            out.append(f"     - {tx.date}: {desc} ({_signed(tx.amount)}€)")
        out.append("")

    return "\n".join(out) + "\n"


def _iso_timestamp(moment: dt.datetime | None) -> str:
    if moment is None:
        moment = dt.datetime.now(dt.UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_snapshot(
    result: CategorizationResult, *, generated_at: dt.datetime | None = None
) -> CategorizedSnapshot:
    """Build the JSON snapshot model (categories in first-assignment order)."""

    summary = result.summary
    return CategorizedSnapshot(
        generated_at=_iso_timestamp(generated_at),
        categories={
            name: CategorySnapshot(
                operations=[OperationSnapshot.from_transaction(tx) for tx in group.transactions],
                total_amount=float(group.total_amount),
                count=group.count,
            )
            for name, group in result.categories.items()
        },
        summary=SummarySnapshot(
            total_operations=summary.total_operations,
            total_debit=float(summary.total_debit),
            total_credit=float(summary.total_credit),
            net_amount=float(summary.net_amount),
            account_balance=(
                float(summary.account_balance) if summary.account_balance is not None else None
            ),
        ),
    )


def render_json(snapshot: CategorizedSnapshot) -> str:
    return json.dumps(snapshot.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2)


__all__ = [
    "DEFAULT_DESCRIPTION_WIDTH",
    "DEFAULT_TOP_OPERATIONS",
    "build_snapshot",
    "render_json",
    "render_text_report",
]
