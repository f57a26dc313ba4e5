"""
ST calling command.

Reads BLAST tabular output of per-locus queries, filters each query's best
hit, and resolves every strain against the ST profile catalog.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from mlstblast.cli.utils import (
    QuietConsole,
    configure_logging,
    default_hit_table_path,
    default_report_path,
    spinner_progress,
)
from mlstblast.core.exceptions import MlstBlastError
from mlstblast.core.pipeline import STTypingPipeline
from mlstblast.models.config import TypingConfig
from mlstblast.models.results import CallStatus, TypingResult

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="st",
    help="Call sequence types from BLAST results",
    no_args_is_help=True,
)

console = Console()

STATUS_STYLES = {
    CallStatus.EXACT: "green",
    CallStatus.AMBIGUOUS: "yellow",
    CallStatus.NOT_ASSIGNED: "red",
}


def _load_config(
    config_path: Path | None,
    length: int | None,
    similarity: float | None,
    no_report: bool,
    ambiguous_loci: str | None,
    threads: int | None,
) -> TypingConfig:
    base = TypingConfig.from_yaml(config_path) if config_path else TypingConfig()
    return base.with_overrides(
        min_alignment_length=length,
        min_percent_identity=similarity,
        report_enabled=False if no_report else None,
        ambiguous_locus_policy=ambiguous_loci,
        max_workers=threads,
    )


def _summary_table(result: TypingResult) -> Table:
    table = Table(title="ST Calls")
    table.add_column("Strain", style="cyan")
    table.add_column("Species")
    table.add_column("ST")
    table.add_column("Alleles", style="dim")
    for call in result.calls:
        style = STATUS_STYLES[call.status]
        table.add_row(
            call.strain,
            call.species,
            f"[{style}]{call.st_label}[/{style}]",
            " ".join(f"{locus}_{allele}" for locus, allele in call.allele_map().items()),
        )
    return table


@app.command(name="call")
def call(
    blast: Path = typer.Option(
        ...,
        "--blast", "-b",
        help="BLAST tabular output (-outfmt 7 or 6, optionally .gz)",
        exists=True,
        dir_okay=False,
    ),
    profiles: Path | None = typer.Option(
        None,
        "--profiles", "-p",
        help="Species-prefixed ST profile catalog (required unless --no-report)",
        exists=True,
        dir_okay=False,
    ),
    output: Path | None = typer.Option(
        None,
        "--output", "-o",
        help="ST report path (default: <blast>.mlst-blast.out)",
    ),
    hit_table: Path | None = typer.Option(
        None,
        "--hit-table",
        help="Hit table path (default: <blast>.blast.out.tab)",
    ),
    summary: Path | None = typer.Option(
        None,
        "--summary", "-s",
        help="Tidy per-call summary (.csv, .tsv or .parquet)",
    ),
    length: int | None = typer.Option(
        None,
        "--length", "-l",
        help="Accept alignments longer than this many bp [default: 200]",
        min=0,
    ),
    similarity: float | None = typer.Option(
        None,
        "--similarity",
        help="Minimum percent identity of an accepted alignment [default: 95]",
        min=0.0,
        max=100.0,
    ),
    no_report: bool = typer.Option(
        False,
        "--no-report",
        help="Only write the hit table; skip ST resolution",
    ),
    config: Path | None = typer.Option(
        None,
        "--config", "-c",
        help="YAML configuration file; command-line options take precedence",
        exists=True,
        dir_okay=False,
    ),
    ambiguous_loci: str | None = typer.Option(
        None,
        "--ambiguous-loci",
        help="Loci with several allele types: 'enumerate' or 'fail'",
    ),
    threads: int | None = typer.Option(
        None,
        "--threads", "-t",
        help="Threads used to resolve strains",
        min=1,
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress progress output (for scripting)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    """
    Assign sequence types to strains from per-locus BLAST hits.

    Query ids must start with the strain label followed by '_'
    (e.g. 'B250_adk'); subject ids must be 'species|locus_alleleType'.

    Example:

        mlstblast st call \\
            --blast query.fas.blast.out.raw \\
            --profiles PROFILES.txt

        # Relaxed filters and a Parquet summary:
        mlstblast st call \\
            --blast query.fas.blast.out.raw \\
            --profiles PROFILES.txt \\
            --length 150 --similarity 90 \\
            --summary calls.parquet
    """
    configure_logging(verbose=verbose, quiet=quiet)
    out = QuietConsole(console, quiet=quiet)

    out.print("\n[bold blue]mlstblast ST Calling[/bold blue]\n")

    if ambiguous_loci is not None and ambiguous_loci not in ("enumerate", "fail"):
        console.print(
            f"[red]Error: Invalid --ambiguous-loci '{ambiguous_loci}'. "
            f"Use 'enumerate' or 'fail'.[/red]"
        )
        raise typer.Exit(code=1) from None

    try:
        typing_config = _load_config(config, length, similarity, no_report, ambiguous_loci, threads)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Error: Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from None

    logger.debug("Typing config: %s", typing_config.model_dump())

    if typing_config.report_enabled and profiles is None:
        console.print("[red]Error: --profiles is required unless --no-report is set[/red]")
        raise typer.Exit(code=1) from None

    report_path = output or default_report_path(blast)
    hit_table_path = hit_table or default_hit_table_path(blast)

    if verbose:
        out.print(
            f"[dim]Filters: length > {typing_config.min_alignment_length}, "
            f"identity >= {typing_config.min_percent_identity}%[/dim]"
        )

    pipeline = STTypingPipeline(typing_config)
    try:
        with spinner_progress("Calling sequence types...", console, quiet):
            result = pipeline.run(
                blast,
                profiles,
                report_path=report_path,
                hit_table_path=hit_table_path,
                summary_path=summary,
            )
    except MlstBlastError as e:
        console.print(f"\n[red]Error: {e.message}[/red]")
        if e.suggestion:
            console.print(f"[dim]{e.suggestion}[/dim]")
        raise typer.Exit(code=1) from None

    out.print(
        f"[green]Parsed {len(result.outcomes)} queries "
        f"({result.num_accepted} accepted)[/green]"
    )
    if typing_config.write_hit_table:
        out.print(f"Hit table: {hit_table_path}")

    if not typing_config.report_enabled:
        out.print("[dim]ST resolution skipped (--no-report)[/dim]")
        return

    if result.calls:
        out.print(_summary_table(result))
    else:
        out.print("[yellow]No strain could be typed[/yellow]")

    for diagnostic in result.diagnostics:
        out.print(f"[yellow]Warning ({diagnostic.kind.value}):[/yellow] {diagnostic.message}")

    out.print(f"\nReport: {report_path}")
    if summary:
        out.print(f"Summary: {summary}")
