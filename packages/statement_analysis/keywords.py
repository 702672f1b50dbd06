"""Keyword table driving first-match-wins categorization.

The table is an ordered sequence of ``(category, keywords)`` pairs. Order is
part of the contract: :meth:`CategoryKeywordTable.match` walks categories in
declaration order and keywords in list order, and the first keyword found in
the uppercased description wins. Moving a category up therefore raises its
priority over every category below it.

Keywords are uppercase substrings. The only mutators are
:meth:`~CategoryKeywordTable.add_keyword` and
:meth:`~CategoryKeywordTable.remove_keyword`; callers must not mutate a table
while a categorization run is using it.

A replacement table can be loaded from a JSON object
(``{"Category": ["KEYWORD", ...]}``); object key order sets the priority.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from os import PathLike
from pathlib import Path

from pydantic import RootModel, field_validator

from .logging_setup import get_logger

_logger = get_logger("statement_analysis.keywords")

# Tuned for French retail banking labels. Income first so that salary and
# transfer labels are not captured by the broader expense keywords below.
DEFAULT_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Revenus",
        (
            "SALAIRE",
            "REMUNERATION",
            "PRIME",
            "INDEMNITE",
            "VIREMENT RECU",
            "VERSEMENT",
            "ALLOCATION",
            "PENSION",
            "DEPOT",
            "CREDIT",
        ),
    ),
    (
        "Logement",
        (
            "LOYER",
            "MIALLET",
            "EDF",
            "ELECTRICITE",
            "GDF",
            "ENGIE",
            "GAZ",
            "ORANGE",
            "SFR",
            "FREE",
            "BOUYGUES",
            "INTERNET",
            "MOBILE",
            "FIBRE",
            "ASSURANCE HABITATION",
            "SYNDIC",
            "CHARGES",
            "COPROPRIETE",
            "HOTEL",
            "APPART CITY",
            "IBIS",
            "BOOKING",
            "AIRBNB",
            "TRIPADVISOR",
            "TRIVAGO",
        ),
    ),
    (
        "Alimentation",
        (
            "CARREFOUR",
            "LECLERC",
            "AUCHAN",
            "INTERMARCHE",
            "SUPER U",
            "CASINO",
            "MONOPRIX",
            "FRANPRIX",
            "PICARD",
            "LIDL",
            "ALDI",
            "BIOCOOP",
            "BOULANGERIE",
            "BOUCHERIE",
            "EPICERIE",
            "MARCHE",
            "COURSES",
            "MCDONALDS",
            "QUICK",
            "KFC",
            "BURGER",
            "PATAPAIN",
            "PAUL",
        ),
    ),
    (
        "Transport",
        (
            "SNCF",
            "RATP",
            "UBER",
            "TAXI",
            "BLABLACAR",
            "TOTAL",
            "BP",
            "SHELL",
            "ESSO",
            "ESSENCE",
            "CARBURANT",
            "AUTOROUTE",
            "PEAGE",
            "COFIROUTE",
            "PARKING",
            "STATIONNEMENT",
            "ASSURANCE AUTO",
            "GARAGE",
            "REPARATION",
        ),
    ),
    (
        "Santé",
        (
            "PHARMACIE",
            "MEDECIN",
            "DENTISTE",
            "HOPITAL",
            "CLINIQUE",
            "LABORATOIRE",
            "MUTUELLE",
            "HARMONIE",
            "MGEN",
            "MAAF",
            "SECU",
            "CPAM",
            "OPTIQUE",
            "LUNETTES",
        ),
    ),
    (
        "Loisirs",
        (
            "RESTAURANT",
            "CAFE",
            "BAR",
            "BRASSERIE",
            "PIZZERIA",
            "CINEMA",
            "THEATRE",
            "CONCERT",
            "SPECTACLE",
            "NETFLIX",
            "AMAZON PRIME",
            "CRUNCHYROLL",
            "ANIMEDIGITALNETWORK",
            "DISNEY",
            "SPOTIFY",
            "DEEZER",
            "FNAC",
            "CULTURA",
            "LIVRE",
            "MUSIQUE",
            "SPORT",
            "SALLE DE SPORT",
            "FITNESS",
            "PISCINE",
            "TENNIS",
        ),
    ),
    (
        "Shopping",
        (
            "AMAZON",
            "CDISCOUNT",
            "ZALANDO",
            "VENTE-PRIVEE",
            "EBAY",
            "LEBONCOIN",
            "DECATHLON",
            "IKEA",
            "LEROY MERLIN",
            "CASTORAMA",
            "BRICORAMA",
            "ZARA",
            "H&M",
            "UNIQLO",
            "VETEMENT",
            "MODE",
            "DARTY",
            "BOULANGER",
            "ELECTROMENAGER",
        ),
    ),
    (
        "Divertissement",
        (
            "STEAM",
            "GOG",
            "EPIC",
            "DISCORD",
            "PLAYSTATION",
            "XBOX",
            "NINTENDO",
            "CRUNCHYROLL",
            "TWITCH",
            "YOUTUBE",
            "PATREON",
            "JEUX",
            "GAMING",
            "CONSOLE",
        ),
    ),
    (
        "Banque",
        (
            "FRAIS",
            "COMMISSION",
            "COTISATION",
            "AGIOS",
            "CARTE",
            "COMPTE",
            "VIREMENT EMIS",
            "CHEQUE",
            "RETRAIT",
            "DEPOT",
            "TRANSFER",
        ),
    ),
    (
        "Impôts",
        (
            "IMPOT",
            "TAXE",
            "TRESOR PUBLIC",
            "DGFIP",
            "URSSAF",
            "POLE EMPLOI",
            "CAF",
            "PREFECTURE",
            "AMENDES",
        ),
    ),
    ("Divers", ("PAYPAL", "WESTERN UNION", "MANDAT", "ESPECES")),
)


class CategoryKeywordTable:
    """Ordered ``category -> [KEYWORD, ...]`` table."""

    def __init__(
        self,
        categories: Iterable[tuple[str, Iterable[str]]] | Mapping[str, Iterable[str]] = (),
    ) -> None:
        pairs = categories.items() if isinstance(categories, Mapping) else categories
        self._entries: list[tuple[str, list[str]]] = [
            (name, [kw.upper() for kw in keywords]) for name, keywords in pairs
        ]

    def __iter__(self) -> Iterator[tuple[str, tuple[str, ...]]]:
        for name, keywords in self._entries:
            yield name, tuple(keywords)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return any(n == name for n, _ in self._entries)

    def _keywords_ref(self, name: str) -> list[str] | None:
        for n, keywords in self._entries:
            if n == name:
                return keywords
        return None

    def names(self) -> list[str]:
        return [name for name, _ in self._entries]

    def keywords(self, name: str) -> list[str]:
        """Return a copy of the keywords for ``name`` (empty when unknown)."""

        keywords = self._keywords_ref(name)
        return list(keywords) if keywords is not None else []

    def add_keyword(self, name: str, keyword: str) -> bool:
        """Append ``keyword`` (uppercased) to ``name``.

        Returns ``False`` and leaves the table untouched when the category
        does not exist.
        """

        keywords = self._keywords_ref(name)
        if keywords is None:
            _logger.warning("Cannot add keyword %r: unknown category %r", keyword, name)
            return False
        keywords.append(keyword.upper())
        return True

    def remove_keyword(self, name: str, keyword: str) -> bool:
        """Remove the first exact (uppercased) occurrence of ``keyword``.

        Returns whether something was removed.
        """

        keywords = self._keywords_ref(name)
        if keywords is None:
            return False
        try:
            keywords.remove(keyword.upper())
        except ValueError:
            return False
        return True

    def match(self, description: str) -> tuple[str, str] | None:
        """Return ``(category, keyword)`` for the first hit, or ``None``."""

        upper = description.upper()
        for name, keywords in self._entries:
            for keyword in keywords:
                if keyword in upper:
                    return name, keyword
        return None

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(keywords) for name, keywords in self._entries}

    def copy(self) -> CategoryKeywordTable:
        return CategoryKeywordTable(self._entries)

    def __repr__(self) -> str:
        return f"CategoryKeywordTable({self.names()!r})"


def default_keyword_table() -> CategoryKeywordTable:
    """Return a fresh, independently mutable copy of the default table."""

    return CategoryKeywordTable(DEFAULT_CATEGORIES)


class KeywordTableFile(RootModel[dict[str, list[str]]]):
    """Validated JSON keyword table (key order = category priority)."""

    @field_validator("root")
    @classmethod
    def _normalize(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {}
        for raw_name, raw_keywords in v.items():
            name = " ".join(raw_name.split())
            if not name:
                raise ValueError("category name must be non-empty")
            keywords: list[str] = []
            for raw in raw_keywords:
                kw = raw.strip().upper()
                if not kw:
                    raise ValueError(f"blank keyword in category {name!r}")
                keywords.append(kw)
            out[name] = keywords
        return out


def load_keyword_table(path: str | PathLike[str]) -> CategoryKeywordTable:
    """Load a keyword table from a JSON file.

    Raises ``OSError`` when the file cannot be read and
    ``pydantic.ValidationError`` (a ``ValueError``) when its content is not a
    valid table.
    """

    p = Path(path)
    parsed = KeywordTableFile.model_validate_json(p.read_text(encoding="utf-8"))
    _logger.info("Loaded %d categories from %s", len(parsed.root), p)
    return CategoryKeywordTable(parsed.root)


__all__ = [
    "DEFAULT_CATEGORIES",
    "CategoryKeywordTable",
    "KeywordTableFile",
    "default_keyword_table",
    "load_keyword_table",
]
