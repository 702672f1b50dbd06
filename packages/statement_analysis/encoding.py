"""Best-effort repair of mis-decoded French bank exports.

Exports are nominally UTF-8 but regularly arrive as Windows-1252, or as a mix
of both (a UTF-8 file with a handful of single-byte accented characters).
:func:`decode_statement_bytes` decodes as UTF-8 first and, only when that
yields U+FFFD replacement characters, redecodes the same bytes as
Windows-1252 and runs :func:`repair_text` over the result.

The repair is a heuristic lookup, not a transcoder. It is lossy: anything the
tables below do not know about and that still shows up as a replacement
character is mapped to :data:`FALLBACK_CHARACTER` ("é", the most frequent
accent in French labels), which can be wrong.
"""

from __future__ import annotations

from .logging_setup import get_logger

_logger = get_logger("statement_analysis.encoding")

REPLACEMENT_CHARACTER = "\ufffd"

FALLBACK_CHARACTER = "é"

# UTF-8 byte pairs read back as Windows-1252 ("Ã©" instead of "é"). These
# appear when a file mixes UTF-8 text with stray single-byte characters and
# the whole file had to be decoded as Windows-1252. Longest sequences first.
MOJIBAKE_REPAIRS: tuple[tuple[str, str], ...] = (
    ("ï¿½", REPLACEMENT_CHARACTER),  # an already-corrupted U+FFFD in the export
    ("â‚¬", "€"),
    ("â€¯", " "),
    ("â€™", "'"),
    ("â€˜", "'"),
    ("â€œ", '"'),
    ("â€" + REPLACEMENT_CHARACTER, '"'),
    ("â€“", "-"),
    ("â€”", "-"),
    ("â€¦", "..."),
    ("Ã\xa0", "à"),
    ("Ã¢", "â"),
    ("Ã¤", "ä"),
    ("Ã©", "é"),
    ("Ã¨", "è"),
    ("Ãª", "ê"),
    ("Ã«", "ë"),
    ("Ã®", "î"),
    ("Ã¯", "ï"),
    ("Ã´", "ô"),
    ("Ã¶", "ö"),
    ("Ã¹", "ù"),
    ("Ã»", "û"),
    ("Ã¼", "ü"),
    ("Ã§", "ç"),
    ("Ã€", "À"),
    ("Ã‚", "Â"),
    ("Ã‰", "É"),
    ("Ãˆ", "È"),
    ("ÃŠ", "Ê"),
    ("Ã‹", "Ë"),
    ("ÃŽ", "Î"),
    ("Ã”", "Ô"),
    ("Ã™", "Ù"),
    ("Ã›", "Û"),
    ("Ã‡", "Ç"),
    ("Â\xa0", " "),
    ("Â«", "«"),
    ("Â»", "»"),
    ("Â°", "°"),
)

# Single code point -> replacement. Typographic punctuation is flattened so
# downstream separators and keyword matching only deal with ASCII forms.
CHARACTER_REPAIRS: dict[str, str] = {
    "’": "'",
    "‘": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "—": "-",
    "…": "...",
    "\xa0": " ",
    "\u202f": " ",
}

# Known corrupted words from Crédit Agricole exports, applied before the
# single-character fallback so they get the right accent.
WORD_PATCHES: tuple[tuple[str, str], ...] = (
    (f"Compte {REPLACEMENT_CHARACTER} composer", "Compte à composer"),
    (f"op{REPLACEMENT_CHARACTER}ration", "opération"),
    (f"cr{REPLACEMENT_CHARACTER}dit", "crédit"),
    (f"d{REPLACEMENT_CHARACTER}bit", "débit"),
    (f"pr{REPLACEMENT_CHARACTER}l{REPLACEMENT_CHARACTER}vement", "prélèvement"),
    (f"Libell{REPLACEMENT_CHARACTER}", "Libellé"),
)

_CHARACTER_TABLE = str.maketrans(CHARACTER_REPAIRS)


def repair_text(text: str) -> str:
    """Apply the repair tables to ``text`` and return the patched string.

    Order: multi-character mojibake, single code points, known words, then the
    fallback for whatever replacement characters remain.
    """

    for broken, fixed in MOJIBAKE_REPAIRS:
        text = text.replace(broken, fixed)
    text = text.translate(_CHARACTER_TABLE)
    for broken, fixed in WORD_PATCHES:
        text = text.replace(broken, fixed)
    return text.replace(REPLACEMENT_CHARACTER, FALLBACK_CHARACTER)


def decode_statement_bytes(raw: bytes) -> str:
    """Decode raw export bytes into text free of decode artifacts.

    UTF-8 output is returned untouched when it contains no replacement
    character. Otherwise the bytes are decoded as Windows-1252 (undefined
    bytes become U+FFFD and are handled by the fallback rule) and repaired.
    """

    text = raw.decode("utf-8", errors="replace")
    if REPLACEMENT_CHARACTER not in text:
        return text

    _logger.warning("Corrupted characters detected, retrying with Windows-1252 decoding")
    return repair_text(raw.decode("cp1252", errors="replace"))


__all__ = [
    "CHARACTER_REPAIRS",
    "FALLBACK_CHARACTER",
    "MOJIBAKE_REPAIRS",
    "REPLACEMENT_CHARACTER",
    "WORD_PATCHES",
    "decode_statement_bytes",
    "repair_text",
]
