"""Pytest configuration for test isolation.

Tests run against the installed ``statement_analysis`` (``pip install -e .``)
and must not leak state into each other: the CLI configures the package
logger once per process and reads ``SA_*`` variables and a local ``.env``.
The autouse fixture below resets all of it per test.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from statement_analysis.logging_setup import reset_logging

from tests.helpers.statements import SAMPLE_STATEMENT

_ENV_VARS = (
    "STATEMENT_ANALYSIS_LOG_LEVEL",
    "SA_TOP_OPERATIONS",
    "SA_FULL_LISTING",
    "SA_DESCRIPTION_WIDTH",
    "SA_KEYWORDS_FILE",
)


@pytest.fixture(autouse=True)
def _isolate_state(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Clear package env vars, run from an empty directory, reset logging."""

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def statement_text() -> str:
    return SAMPLE_STATEMENT


@pytest.fixture
def statement_file(tmp_path: Path) -> Path:
    path = tmp_path / "export" / "operations.csv"
    path.parent.mkdir()
    path.write_bytes(SAMPLE_STATEMENT.encode("utf-8"))
    return path
