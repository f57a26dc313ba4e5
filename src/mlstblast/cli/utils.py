"""
Shared CLI utilities for mlstblast commands.

Provides common functionality used across CLI modules.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from mlstblast.core.constants import HIT_TABLE_SUFFIX, REPORT_SUFFIX


@contextmanager
def spinner_progress(
    description: str,
    console: Console | None = None,
    quiet: bool = False,
) -> Generator[Progress, None, None]:
    """Context manager for spinner-style progress display.

    The spinner is suppressed when quiet mode is enabled.

    Args:
        description: Task description to display.
        console: Rich Console instance. If None and not quiet, creates one.
        quiet: If True, suppress the progress display entirely.

    Yields:
        Progress instance (even when quiet, for API consistency).
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console if not quiet else None,
        disable=quiet,
    ) as progress:
        progress.add_task(description=description, total=None)
        yield progress


def _strip_raw_suffix(path: Path) -> str:
    name = path.name
    for suffix in (".gz", ".blast.out.raw"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return name


def default_report_path(blast_path: Path) -> Path:
    """Report path next to the BLAST output.

    Example:
        >>> default_report_path(Path("run/query.fas.blast.out.raw"))
        PosixPath('run/query.fas.mlst-blast.out')
    """
    return blast_path.with_name(_strip_raw_suffix(blast_path) + REPORT_SUFFIX)


def default_hit_table_path(blast_path: Path) -> Path:
    """Hit table path next to the BLAST output.

    Example:
        >>> default_hit_table_path(Path("run/query.fas.blast.out.raw"))
        PosixPath('run/query.fas.blast.out.tab')
    """
    return blast_path.with_name(_strip_raw_suffix(blast_path) + HIT_TABLE_SUFFIX)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route library logging through rich; DEBUG when verbose."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


class QuietConsole:
    """Console wrapper that suppresses output in quiet mode.

    Example:
        >>> console = Console()
        >>> qc = QuietConsole(console, quiet=True)
        >>> qc.print("This won't be shown")  # Suppressed
    """

    def __init__(self, console: Console, quiet: bool = False):
        self._console = console
        self._quiet = quiet

    @property
    def console(self) -> Console:
        """The wrapped Console, for output that ignores quiet mode."""
        return self._console

    def print(self, *args: Any, **kwargs: Any) -> None:
        if not self._quiet:
            self._console.print(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._console, name)
