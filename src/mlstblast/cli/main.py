"""
Main CLI entry point for mlstblast.

Provides subcommands for each stage of BLAST-based ST typing:
- st: Call sequence types from BLAST output
- catalog: Convert and inspect ST profile catalogs
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console

from mlstblast import __version__

app = typer.Typer(
    name="mlstblast",
    help="Multi-locus sequence typing from per-locus BLAST results",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"mlstblast version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    mlstblast: assign sequence types to strains from BLAST best hits.

    Each strain's per-locus best hits are compared against a species-prefixed
    ST profile catalog, masked to the loci the strain was typed at.
    """


# Import subcommands
from mlstblast.cli import catalog, st  # noqa: E402

app.add_typer(st.app, name="st")
app.add_typer(catalog.app, name="catalog")


if __name__ == "__main__":
    app()
