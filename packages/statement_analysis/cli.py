"""CLI for the ``statement_analysis`` package.

``statement-analysis <csv_path>`` categorizes a bank CSV export, writes
``<basename>_categorized.json`` and ``<basename>_report.txt`` beside it, and
echoes the text report to stdout. A local ``.env`` is loaded with
``python-dotenv`` (without overriding existing variables) before settings are
read; business logic lives in :mod:`statement_analysis.api`.

Exit status is ``0`` on success, including the "no operations found" case
where nothing is written, and ``1`` on any fatal error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from .api import process_csv_file, resolve_keyword_table
from .logging_setup import configure_logging, get_logger
from .reassembly import HeaderNotFoundError
from .settings import Settings

_logger = get_logger("statement_analysis.cli")

USAGE = (
    "Usage: statement-analysis <path-to-csv-file>\n"
    "Example: statement-analysis ./operations.csv"
)


def cmd_categorize_statement(
    csv_path: str | Path,
    *,
    top_operations: int | None = None,
    full_listing: bool | None = None,
    keywords_file: Path | None = None,
) -> int:
    """Categorize ``csv_path`` and print the report; return an exit status.

    Settings come from the environment, with any non-``None`` argument taking
    precedence. Fatal errors are logged at error level and produce ``1``.
    """

    settings = Settings.from_env().with_overrides(
        top_operations=top_operations,
        full_listing=full_listing,
        keywords_file=keywords_file,
    )

    try:
        table = resolve_keyword_table(settings)
    except (OSError, ValueError) as e:
        _logger.error("Invalid keyword table %s: %s", settings.keywords_file, e)
        return 1

    try:
        outputs = process_csv_file(csv_path, settings=settings, table=table)
    except FileNotFoundError:
        _logger.error("File not found: %s", csv_path)
        return 1
    except HeaderNotFoundError as e:
        _logger.error("Processing failed: %s", e)
        return 1
    except OSError as e:
        _logger.error("Error reading %s: %s", csv_path, e)
        return 1

    if outputs is None:
        return 0

    typer.echo(outputs.report)
    _logger.info("Processing completed successfully")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    add_completion=False,
    help=(
        "Categorize the operations of a French bank CSV export by keyword and "
        "write a JSON snapshot and a text report beside the input file."
    ),
)


@app.command()
def categorize_statement_cmd(
    csv_path: Annotated[
        Path | None,
        typer.Argument(help="Path to the bank CSV export.", dir_okay=False),
    ] = None,
    top: Annotated[
        int | None,
        typer.Option("--top", min=1, help="Operations listed per category (SA_TOP_OPERATIONS)."),
    ] = None,
    full: Annotated[
        bool | None,
        typer.Option("--full/--no-full", help="List every operation (SA_FULL_LISTING)."),
    ] = None,
    keywords: Annotated[
        Path | None,
        typer.Option("--keywords", help="JSON keyword table (SA_KEYWORDS_FILE)."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (STATEMENT_ANALYSIS_LOG_LEVEL)."),
    ] = None,
) -> None:
    """Categorize a bank CSV export."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)

    if csv_path is None:
        typer.echo(USAGE)
        raise typer.Exit(1)

    code = cmd_categorize_statement(
        csv_path, top_operations=top, full_listing=full, keywords_file=keywords
    )
    if code:
        raise typer.Exit(code)


if __name__ == "__main__":  # pragma: no cover
    app()
