"""Runtime settings resolved from the environment.

The CLI loads a local ``.env`` (``python-dotenv``, without overriding variables
already set) before calling :meth:`Settings.from_env`; explicit CLI options
then take precedence over these values.

Variables
---------
- ``SA_TOP_OPERATIONS``: transactions listed per category in the text report
  (default 3).
- ``SA_FULL_LISTING``: ``1/true/yes`` to list every transaction instead.
- ``SA_DESCRIPTION_WIDTH``: description truncation width (default 40).
- ``SA_KEYWORDS_FILE``: JSON keyword table replacing the built-in one.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from .logging_setup import get_logger
from .report import DEFAULT_DESCRIPTION_WIDTH, DEFAULT_TOP_OPERATIONS

_logger = get_logger("statement_analysis.settings")


def _env_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        _logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value <= 0:
        _logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value


def _env_bool(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    v = raw.strip().lower()
    if v in {"1", "true", "yes"}:
        return True
    if v in {"0", "false", "no"}:
        return False
    return None


@dataclass(frozen=True, slots=True)
class Settings:
    top_operations: int = DEFAULT_TOP_OPERATIONS
    full_listing: bool = False
    description_width: int = DEFAULT_DESCRIPTION_WIDTH
    keywords_file: Path | None = None

    @classmethod
    def from_env(cls) -> Settings:
        keywords_raw = os.getenv("SA_KEYWORDS_FILE")
        return cls(
            top_operations=_env_positive_int("SA_TOP_OPERATIONS", DEFAULT_TOP_OPERATIONS),
            full_listing=bool(_env_bool("SA_FULL_LISTING")),
            description_width=_env_positive_int(
                "SA_DESCRIPTION_WIDTH", DEFAULT_DESCRIPTION_WIDTH
            ),
            keywords_file=(
                Path(keywords_raw).expanduser()
                if keywords_raw and keywords_raw.strip()
                else None
            ),
        )

    def with_overrides(
        self,
        *,
        top_operations: int | None = None,
        full_listing: bool | None = None,
        keywords_file: Path | None = None,
    ) -> Settings:
        """Return a copy with every non-``None`` override applied."""

        changes: dict[str, object] = {}
        if top_operations is not None:
            changes["top_operations"] = top_operations
        if full_listing is not None:
            changes["full_listing"] = full_listing
        if keywords_file is not None:
            changes["keywords_file"] = keywords_file
        return replace(self, **changes)


__all__ = ["Settings"]
