from decimal import Decimal

import pytest

from statement_analysis.reassembly import (
    HEADER_SCAN_LINES,
    HeaderNotFoundError,
    ReassemblyState,
    RecordReassembler,
    extract_account_balance,
    find_header_index,
    reassemble,
    split_lines,
)
from tests.helpers.statements import HEADER, build_statement, preamble


def test_sample_statement_records(statement_text: str):
    statement = reassemble(statement_text)

    assert statement.account_balance == Decimal("1234.56")
    assert [r.date for r in statement.records] == [
        "01/03/2024",
        "02/03/2024",
        "03/03/2024",
        "04/03/2024",
    ]
    # Multi-line record: date line, wrapped description, amount line.
    assert statement.records[1].lines == (
        '02/03/2024;"CARTE X1234 02/03',
        "CARREFOUR MARKET PARIS",
        '";45,30;;',
    )
    # Blank line between records is skipped, not appended.
    assert "" not in statement.records[2].lines
    # 1-based physical line number of the record's first line.
    assert statement.records[0].line_number == 12


def test_header_missing_is_fatal():
    text = build_statement(["01/03/2024;VIREMENT RECU SALAIRE;;1500,00;"], header=None)
    with pytest.raises(HeaderNotFoundError, match="Header row not found"):
        reassemble(text)


def test_header_must_be_within_scan_window():
    filler = [";"] * (HEADER_SCAN_LINES - 1)
    assert find_header_index([*filler, HEADER]) == HEADER_SCAN_LINES - 1
    with pytest.raises(HeaderNotFoundError):
        find_header_index([*filler, ";", HEADER])


def test_header_with_corrupted_accents_is_recognized():
    lines = ["Date;Libell\ufffd;D\ufffdbit euros;Cr\ufffddit euros;"]
    assert find_header_index(lines) == 0
    assert find_header_index(["Date;Label;Dbit euros;Crdit euros;"]) == 0


def test_balance_with_stray_space_glyph():
    lines = preamble("Solde au 01/03/2024   1\u202f234,56 €")
    assert extract_account_balance(split_lines("\n".join(lines))) == Decimal("1234.56")


def test_balance_with_corrupted_euro_sign():
    lines = preamble("Solde au 01/03/2024 987,10 \ufffd")
    assert extract_account_balance(lines) == Decimal("987.10")


def test_balance_absent_is_not_fatal(caplog: pytest.LogCaptureFixture):
    text = build_statement(
        ["01/03/2024;VIREMENT RECU SALAIRE;;1500,00;"], balance_line="Solde indisponible"
    )
    with caplog.at_level("WARNING", logger="statement_analysis"):
        statement = reassemble(text)
    assert statement.account_balance is None
    assert len(statement.records) == 1
    assert "Could not extract account balance" in caplog.text


def test_short_file_has_no_balance():
    assert extract_account_balance([HEADER]) is None


def test_state_machine_transitions():
    machine = RecordReassembler()
    assert machine.state is ReassemblyState.SEEKING_RECORD_START

    machine.feed("ligne hors enregistrement;")
    assert machine.state is ReassemblyState.SEEKING_RECORD_START

    machine.feed('05/03/2024;"PRLV SEPA')
    assert machine.state is ReassemblyState.ACCUMULATING_UNTIL_AMOUNTS
    machine.feed("   ")
    machine.feed("ASSURANCE")
    assert machine.state is ReassemblyState.ACCUMULATING_UNTIL_AMOUNTS
    machine.feed('HABITATION";25,00;;')
    assert machine.state is ReassemblyState.SEEKING_RECORD_START

    records = machine.finish()
    assert len(records) == 1
    assert records[0].lines == ('05/03/2024;"PRLV SEPA', "ASSURANCE", 'HABITATION";25,00;;')


def test_single_line_record_is_emitted_immediately():
    machine = RecordReassembler()
    machine.feed("01/03/2024;VIREMENT RECU SALAIRE;;1500,00;")
    assert machine.state is ReassemblyState.SEEKING_RECORD_START
    machine.feed("02/03/2024;FRAIS TENUE DE COMPTE;2,50;;")
    assert [r.date for r in machine.finish()] == ["01/03/2024", "02/03/2024"]


@pytest.mark.parametrize(
    "tail",
    ['";12,00;;', '";;12,00;', '";12,00;3,00;'],
)
def test_all_amount_terminators_close_a_record(tail: str):
    machine = RecordReassembler()
    machine.feed('01/03/2024;"OPERATION')
    machine.feed(tail)
    assert len(machine.finish()) == 1


def test_unterminated_trailing_record_is_dropped():
    machine = RecordReassembler()
    machine.feed("01/03/2024;VIREMENT RECU SALAIRE;;1500,00;")
    machine.feed('06/03/2024;"RETRAIT DAB')
    machine.feed("AGENCE CENTRE")
    records = machine.finish()
    assert [r.date for r in records] == ["01/03/2024"]
    assert machine.dropped == 1
    assert machine.state is ReassemblyState.SEEKING_RECORD_START


def test_header_only_file_yields_no_records():
    assert reassemble(build_statement([])).records == []


def test_balance_with_fallback_character_separator():
    lines = preamble("Solde au 01/03/2024 1é234,56 é")
    assert extract_account_balance(lines) == Decimal("1234.56")


def test_amount_line_outside_a_record_is_ignored():
    machine = RecordReassembler()
    machine.feed('";12,00;;')
    assert machine.state is ReassemblyState.SEEKING_RECORD_START
    machine.feed("01/03/2024;VIREMENT RECU SALAIRE;;1500,00;")
    assert [r.date for r in machine.finish()] == ["01/03/2024"]
