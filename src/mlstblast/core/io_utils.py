"""
I/O utilities for DataFrame serialization.

Writes summary tables as CSV, TSV or Parquet, chosen from the file extension.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import polars as pl

OutputFormat = Literal["csv", "tsv", "parquet"]


def format_from_path(path: Path) -> OutputFormat:
    """
    Guess the output format from a file extension.

    Unknown extensions fall back to 'csv'.

    Example:
        >>> format_from_path(Path("calls.parquet"))
        'parquet'
    """
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return "parquet"
    if suffix == ".tsv":
        return "tsv"
    return "csv"


def write_dataframe(
    df: pl.DataFrame,
    path: Path,
    output_format: OutputFormat | None = None,
) -> None:
    """
    Write DataFrame to file in specified format.

    Args:
        df: Polars DataFrame to write.
        path: Output file path.
        output_format: 'csv', 'tsv' or 'parquet'. Detected from the
            extension when omitted.
    """
    output_format = output_format or format_from_path(path)
    if output_format == "parquet":
        df.write_parquet(path, compression="zstd")
    elif output_format == "tsv":
        df.write_csv(path, separator="\t")
    else:
        df.write_csv(path)
