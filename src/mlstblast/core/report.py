"""
Rendering of ST typing results.

Two views of the same calls are produced:

- the comma-separated ST report, one header line per strain followed by
  one row per call:

    # Query,Species,ST-type,adk,fumC
    X,ecoli,ST_1,4,2

- a tidy summary DataFrame with one row per call, for CSV/Parquet export.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import polars as pl

from mlstblast.core.constants import REPORT_HEADER_PREFIX
from mlstblast.core.io_utils import OutputFormat, write_dataframe
from mlstblast.models.results import StrainTyping

logger = logging.getLogger(__name__)

SUMMARY_SCHEMA: dict[str, pl.DataType] = {
    "strain": pl.Utf8,
    "species": pl.Utf8,
    "st": pl.Utf8,
    "status": pl.Utf8,
    "n_candidates": pl.Int64,
    "loci": pl.Utf8,
    "alleles": pl.Utf8,
}

LIST_SEPARATOR = ";"


class ReportFormatter:
    """
    Format strain typings as the ST report or a summary DataFrame.

    Strains are emitted in sorted order regardless of input order.

    Example:
        formatter = ReportFormatter()
        formatter.write(result.typings, Path("query.fas.mlst-blast.out"))
    """

    def render_strain(self, strain_typing: StrainTyping) -> list[str]:
        if not strain_typing.calls:
            return []
        lines = []
        current_loci: tuple[str, ...] | None = None
        for call in strain_typing.calls:
            # Calls of one strain share their loci; repeat the header only if not
            if call.loci != current_loci:
                lines.append(",".join([REPORT_HEADER_PREFIX, *call.loci]))
                current_loci = call.loci
            lines.append(
                ",".join([
                    call.strain,
                    call.species,
                    call.st_label,
                    *(str(allele_type) for allele_type in call.allele_types),
                ])
            )
        return lines

    def render(self, typings: Iterable[StrainTyping]) -> str:
        lines: list[str] = []
        for strain_typing in sorted(typings, key=lambda t: t.strain):
            lines.extend(self.render_strain(strain_typing))
        return "\n".join(lines) + "\n" if lines else ""

    def write(self, typings: Iterable[StrainTyping], path: Path) -> None:
        typings = list(typings)
        path.write_text(self.render(typings))
        logger.info("Wrote ST report for %d strains to %s", len(typings), path)

    def to_dataframe(self, typings: Iterable[StrainTyping]) -> pl.DataFrame:
        """
        One row per call with ';'-joined loci and allele types.

        n_candidates counts the assigned STs of the call's strain, 0 when
        nothing matched.
        """
        columns: dict[str, list] = {name: [] for name in SUMMARY_SCHEMA}
        for strain_typing in sorted(typings, key=lambda t: t.strain):
            for call in strain_typing.calls:
                columns["strain"].append(call.strain)
                columns["species"].append(call.species)
                columns["st"].append(call.st_label)
                columns["status"].append(call.status.value)
                columns["n_candidates"].append(strain_typing.num_candidates)
                columns["loci"].append(LIST_SEPARATOR.join(call.loci))
                columns["alleles"].append(
                    LIST_SEPARATOR.join(str(allele_type) for allele_type in call.allele_types)
                )
        return pl.DataFrame(columns, schema=SUMMARY_SCHEMA)

    def write_summary(
        self,
        typings: Iterable[StrainTyping],
        path: Path,
        output_format: OutputFormat | None = None,
    ) -> pl.DataFrame:
        df = self.to_dataframe(typings)
        write_dataframe(df, path, output_format)
        logger.info("Wrote summary with %d calls to %s", len(df), path)
        return df
