"""Developer CLI for the ``takeout_wrapped`` package.

Loads ``.env`` from the working directory (without overriding the existing
environment), configures logging once, and exposes two commands:

- ``summary ARCHIVE [--year Y]``: per-channel counts and the category
  breakdown of the year-scoped view;
- ``categorize TEXT...``: the category assigned to each description.

Business logic lives in :mod:`takeout_wrapped.store` and friends.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .archive import extract_archive_file
from .categories import categorize, category_breakdown
from .config import Settings
from .currency import display_currency, sum_in_primary
from .errors import TakeoutWrappedError
from .logging_setup import configure_logging
from .models import Money
from .snapshot import available_years, filter_by_year
from .store import DataStore, State

app = typer.Typer(
    name="takeout-wrapped",
    add_completion=False,
    help="Inspect a Google Pay Takeout export.",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def _root() -> None:
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(Settings.from_env().log_level)


def _fail(message: object, code: int = 1) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(str(message))}")
    return typer.Exit(code)


@app.command()
def summary(
    archive: Annotated[
        Path,
        typer.Argument(help="Path to the Takeout .zip", dir_okay=False, file_okay=True),
    ],
    year: Annotated[
        str | None,
        typer.Option("--year", "-y", help="'all' or a four-digit year"),
    ] = None,
) -> None:
    """Parse ARCHIVE and print what it contains for the selected year."""

    store = DataStore()
    try:
        raw = extract_archive_file(archive)
    except TakeoutWrappedError as exc:
        raise _fail(exc) from exc

    store.set_raw_data(raw)
    store.parse_raw_data()
    snapshot = store.parsed_data
    if store.state is not State.PARSED or snapshot is None:
        raise _fail(store.error or "No data was parsed from the archive")

    if year is not None:
        try:
            store.set_selected_year(year)
        except ValueError as exc:
            raise _fail(exc, code=2) from exc

    view = filter_by_year(snapshot, store.selected_year)
    years = available_years(snapshot)

    console.print(f"Year: {store.selected_year} (available: {', '.join(years) or 'none'})")
    for channel, count in view.counts().items():
        console.print(f"  {channel}: {count}")

    spent = sum_in_primary(t.amount for t in view.transactions)
    console.print(f"Total spent: {display_currency(Money(spent))}")

    shares = category_breakdown(view.transactions)
    if not shares:
        return
    table = Table(title="Categories")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Count", justify="right")
    for share in shares:
        table.add_row(
            escape(share.category.value),
            display_currency(Money(share.amount)),
            f"{share.percentage:.1f}%",
            str(share.count),
        )
    console.print(table)


@app.command("categorize")
def categorize_cmd(
    descriptions: Annotated[list[str], typer.Argument(help="Transaction descriptions")],
) -> None:
    """Print the spending category of each DESCRIPTION."""

    for text in descriptions:
        typer.echo(f"{categorize(text).value}\t{text}")


def main() -> None:  # pragma: no cover - console script
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
