import datetime as dt
import json
from decimal import Decimal

import pytest

from statement_analysis.aggregate import aggregate
from statement_analysis.extract import extract_transactions
from statement_analysis.keywords import CategoryKeywordTable
from statement_analysis.models import Transaction
from statement_analysis.reassembly import reassemble
from statement_analysis.report import build_snapshot, render_json, render_text_report

FIXED_NOW = dt.datetime(2024, 3, 6, 12, 30, 0, 123000, tzinfo=dt.UTC)


def _tx(date: str, description: str, amount: str) -> Transaction:
    value = Decimal(amount)
    if value < 0:
        return Transaction.from_amounts(date, description, -value, Decimal("0"))
    return Transaction.from_amounts(date, description, Decimal("0"), value)


@pytest.fixture
def sample_result(statement_text: str):
    statement = reassemble(statement_text)
    txs = extract_transactions(statement.records)
    return aggregate(txs, account_balance=statement.account_balance)


def test_sample_groups_and_totals(sample_result):
    groups = sample_result.categories
    assert list(groups) == ["Revenus", "Alimentation", "Logement"]
    assert groups["Revenus"].total_amount == Decimal("1500.00")
    assert groups["Alimentation"].total_amount == Decimal("-48.50")
    assert groups["Alimentation"].count == 2
    assert groups["Logement"].total_amount == Decimal("-19.99")

    summary = sample_result.summary
    assert summary.total_operations == 4
    assert summary.total_debit == Decimal("68.49")
    assert summary.total_credit == Decimal("1500.00")
    assert summary.net_amount == Decimal("1431.51")
    assert summary.account_balance == Decimal("1234.56")


def test_aggregation_invariants(sample_result):
    summary = sample_result.summary
    groups = sample_result.categories.values()
    assert sum(g.count for g in groups) == summary.total_operations
    assert sum((g.total_amount for g in groups), Decimal("0")) == summary.net_amount
    assert summary.net_amount == summary.total_credit - summary.total_debit
    for g in groups:
        assert g.count == len(g.transactions)
        assert g.total_amount == sum((tx.amount for tx in g.transactions), Decimal("0"))


def test_sorted_groups_largest_expense_first(sample_result):
    assert [name for name, _ in sample_result.sorted_groups()] == [
        "Alimentation",
        "Logement",
        "Revenus",
    ]


def test_sorted_groups_ties_keep_first_assignment_order():
    table = CategoryKeywordTable([("A", ["ALPHA"]), ("B", ["BETA"])])
    result = aggregate(
        [_tx("01/03/2024", "BETA", "-5"), _tx("02/03/2024", "ALPHA", "-5")], table
    )
    assert [name for name, _ in result.sorted_groups()] == ["B", "A"]


def test_unmatched_go_to_other_category():
    result = aggregate([_tx("01/03/2024", "XYZZY", "-1.00")])
    assert list(result.categories) == ["Autres"]


def test_empty_input():
    result = aggregate([])
    assert result.categories == {}
    assert result.summary.total_operations == 0
    assert result.summary.net_amount == 0
    assert result.summary.account_balance is None


def test_text_report_summary_and_blocks(sample_result):
    report = render_text_report(sample_result)
    lines = report.splitlines()

    assert "=== RAPPORT D'ANALYSE DES OPÉRATIONS ===" in lines
    assert "   • Nombre total d'opérations: 4" in lines
    assert "   • Total débits: -68.49€" in lines
    assert "   • Total crédits: +1500.00€" in lines
    assert "   • Solde net: +1431.51€" in lines
    assert "   • Solde du compte: 1234.56€" in lines

    headings = [line for line in lines if line.endswith(":") and line[:1] in "💸💰"]
    assert headings == ["💸 ALIMENTATION:", "💸 LOGEMENT:", "💰 REVENUS:"]

    start = lines.index("💸 ALIMENTATION:")
    assert lines[start + 1 : start + 7] == [
        "   • Nombre d'opérations: 2",
        "   • Montant total: -48.50€",
        "   • Montant moyen: -24.25€",
        "   • Principales opérations:",
        "     - 02/03/2024: CARREFOUR MARKET PARIS (-45.30€)",
        "     - 04/03/2024: BOULANGERIE DU COIN (-3.20€)",
    ]
    assert "     - 01/03/2024: VIREMENT RECU SALAIRE (+1500.00€)" in lines
    assert report.endswith("\n")


def test_text_report_without_balance_omits_line():
    result = aggregate([_tx("01/03/2024", "SALAIRE", "10")])
    assert "Solde du compte" not in render_text_report(result)


def test_text_report_top_operations_and_full_listing():
    txs = [
        _tx("01/03/2024", "LIDL A", "-1.00"),
        _tx("02/03/2024", "LIDL B", "-9.00"),
        _tx("03/03/2024", "LIDL C", "-5.00"),
        _tx("04/03/2024", "LIDL D", "-7.00"),
    ]
    result = aggregate(txs)

    top = render_text_report(result, top_operations=2)
    assert "LIDL B (-9.00€)" in top
    assert "LIDL D (-7.00€)" in top
    assert "LIDL C" not in top
    assert "LIDL A" not in top

    full = render_text_report(result, full_listing=True)
    assert "   • Opérations:" in full
    positions = [full.index(f"LIDL {c}") for c in "ABCD"]
    assert positions == sorted(positions)


def test_text_report_truncates_long_descriptions():
    long = "CARREFOUR " + "X" * 50
    result = aggregate([_tx("01/03/2024", long, "-2.00")])

    report = render_text_report(result, description_width=20)
    assert f"{long[:20]}... (-2.00€)" in report

    short = aggregate([_tx("01/03/2024", "CARREFOUR", "-2.00")])
    assert "CARREFOUR (-2.00€)" in render_text_report(short, description_width=20)


def test_amounts_round_half_up():
    result = aggregate([_tx("01/03/2024", "LIDL", "-1.005")])
    assert "Montant total: -1.01€" in render_text_report(result)


def test_snapshot_uses_camel_case_and_type_key(sample_result):
    data = json.loads(render_json(build_snapshot(sample_result, generated_at=FIXED_NOW)))

    assert data["generatedAt"] == "2024-03-06T12:30:00.123Z"
    assert list(data["categories"]) == ["Revenus", "Alimentation", "Logement"]
    assert data["summary"] == {
        "totalOperations": 4,
        "totalDebit": 68.49,
        "totalCredit": 1500.0,
        "netAmount": 1431.51,
        "accountBalance": 1234.56,
    }

    food = data["categories"]["Alimentation"]
    assert food["count"] == 2
    assert food["totalAmount"] == -48.5
    assert food["operations"][0] == {
        "date": "02/03/2024",
        "description": "CARREFOUR MARKET PARIS",
        "debit": 45.3,
        "credit": 0.0,
        "amount": -45.3,
        "type": "DEBIT",
    }
    assert data["categories"]["Revenus"]["operations"][0]["type"] == "CREDIT"


def test_snapshot_keeps_non_ascii_characters():
    result = aggregate([_tx("01/03/2024", "PHARMACIE DE L'ÉGLISE", "-8.00")])
    text = render_json(build_snapshot(result, generated_at=FIXED_NOW))
    assert "PHARMACIE DE L'ÉGLISE" in text
    assert '"Santé"' in text
    assert json.loads(text)["summary"]["accountBalance"] is None


def test_rendering_is_deterministic(statement_text: str):
    def run() -> tuple[str, str]:
        statement = reassemble(statement_text)
        result = aggregate(
            extract_transactions(statement.records), account_balance=statement.account_balance
        )
        return (
            render_text_report(result),
            render_json(build_snapshot(result, generated_at=FIXED_NOW)),
        )

    assert run() == run()
