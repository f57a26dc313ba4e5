"""
Profile catalog commands.

Converts raw PubMLST profile tables into the species-prefixed catalog
format and summarises existing catalogs.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from mlstblast.cli.utils import QuietConsole, configure_logging
from mlstblast.core.exceptions import MlstBlastError
from mlstblast.core.profiles import (
    ProfileCatalog,
    convert_pubmlst_profiles,
    write_catalog,
)

app = typer.Typer(
    name="catalog",
    help="Convert and inspect ST profile catalogs",
    no_args_is_help=True,
)

console = Console()


@app.command(name="convert")
def convert(
    input_path: Path = typer.Option(
        ...,
        "--input", "-i",
        help="Raw PubMLST profile table (tab-separated, header starting with 'ST')",
        exists=True,
        dir_okay=False,
    ),
    species: str = typer.Option(
        ...,
        "--species", "-s",
        help="Species acronym used as prefix, e.g. 'ecoli'",
    ),
    output: Path = typer.Option(
        ...,
        "--output", "-o",
        help="Catalog file to write",
    ),
    append: bool = typer.Option(
        False,
        "--append", "-a",
        help="Append to an existing catalog instead of overwriting it",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Convert a PubMLST profile table into catalog format.

    Example:

        mlstblast catalog convert -i ecoli_profiles.txt -s ecoli -o PROFILES.txt
        mlstblast catalog convert -i saureus.txt -s saureus -o PROFILES.txt --append
    """
    configure_logging(quiet=quiet)
    out = QuietConsole(console, quiet=quiet)

    try:
        profiles = convert_pubmlst_profiles(input_path, species)
    except MlstBlastError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        if e.suggestion:
            console.print(f"[dim]{e.suggestion}[/dim]")
        raise typer.Exit(code=1) from None
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from None

    written = write_catalog(profiles, output, append=append)
    action = "Appended" if append else "Wrote"
    out.print(f"[green]{action} {written} {species} profiles to {output}[/green]")


@app.command(name="info")
def info(
    profiles: Path = typer.Option(
        ...,
        "--profiles", "-p",
        help="Species-prefixed ST profile catalog",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Show species, profile counts and loci of a catalog.
    """
    configure_logging()
    try:
        catalog = ProfileCatalog.from_file(profiles)
    except MlstBlastError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        if e.suggestion:
            console.print(f"[dim]{e.suggestion}[/dim]")
        raise typer.Exit(code=1) from None

    table = Table(title=f"Profile Catalog: {profiles.name}")
    table.add_column("Species", style="cyan")
    table.add_column("Profiles", justify="right")
    table.add_column("Loci")
    for species in catalog.species():
        table.add_row(
            species,
            str(len(catalog.profiles(species))),
            ", ".join(catalog.loci(species)),
        )
    console.print(table)
    console.print(f"Total: {len(catalog)} profiles, {len(catalog.species())} species")
