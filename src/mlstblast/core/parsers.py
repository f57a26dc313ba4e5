"""
Parsers for BLAST tabular output of per-locus MLST queries.

Each query (one locus of one strain) is an independent unit. With
-outfmt 7 every query gets a comment block:

    # BLASTN 2.15.0+
    # Query: B250_adk
    # Database: blastdb
    # Fields: query acc.ver, subject acc.ver, % identity, ...
    # 1 hits found
    B250_adk    ecoli|adk_4    100.000    536    0    0    1    536    1    536    0.0    990

Only the first (best) row of a block is considered. A block reporting
zero hits yields an explicit no-hit outcome so queries are never silently
dropped. Plain -outfmt 6 input (no comment lines) is accepted too, but
queries without hits cannot be detected there.
"""

from __future__ import annotations

import gzip
import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import ClassVar

import polars as pl

from mlstblast.core.constants import (
    DEFAULT_MIN_ALIGNMENT_LENGTH,
    DEFAULT_MIN_PERCENT_IDENTITY,
    HIT_TABLE_COLUMNS,
    NO_HITS,
    PERCENT_IDENTITY_DECIMALS,
)
from mlstblast.core.exceptions import (
    EmptyBlastFileError,
    InvalidThresholdError,
    MalformedBlastFileError,
)
from mlstblast.models.blast import (
    BlastHit,
    HitRecord,
    HitStatus,
    QueryOutcome,
    strain_label_from_query,
)

logger = logging.getLogger(__name__)

HITS_FOUND_PATTERN = re.compile(r"^(\d+) hits found")


class BlastReportParser:
    """
    Parse BLAST tabular output into per-query outcomes.

    The subject id of a best hit is parsed before the quality filters are
    applied, so a malformed allele database aborts the run even when the
    offending hit would have been rejected.

    Example:
        parser = BlastReportParser(min_length=200, min_identity=95.0)
        outcomes = parser.parse_file(Path("query.fas.blast.out.raw"))
        accepted = [o.record for o in outcomes if o.accepted]
    """

    QUERY_PREFIX: ClassVar[str] = "Query:"

    def __init__(
        self,
        min_length: int = DEFAULT_MIN_ALIGNMENT_LENGTH,
        min_identity: float = DEFAULT_MIN_PERCENT_IDENTITY,
    ) -> None:
        """
        Initialize parser with alignment quality thresholds.

        Args:
            min_length: Accepted alignments must be strictly longer.
            min_identity: Accepted alignments must reach this percent identity.

        Raises:
            InvalidThresholdError: If a threshold is out of range.
        """
        if min_length < 0:
            raise InvalidThresholdError("min_length", min_length, 0, float("inf"))
        if not 0.0 <= min_identity <= 100.0:
            raise InvalidThresholdError("min_identity", min_identity, 0.0, 100.0)

        self.min_length = min_length
        self.min_identity = min_identity

    def parse_file(self, blast_path: Path) -> list[QueryOutcome]:
        """
        Parse a BLAST output file (optionally gzipped).

        Raises:
            FileNotFoundError: If the file does not exist.
            EmptyBlastFileError: If no query results are found.
            MalformedBlastFileError: If a row cannot be parsed.
            MalformedAlleleIdError: If a subject id is not 'species|locus_N'.
        """
        if not blast_path.exists():
            msg = f"BLAST file not found: {blast_path}"
            raise FileNotFoundError(msg)

        if blast_path.suffix == ".gz":
            file_handle = gzip.open(blast_path, "rt")
        else:
            file_handle = blast_path.open("r")

        with file_handle:
            outcomes = self.parse_lines(file_handle, source=str(blast_path))

        logger.info(
            "Parsed %d queries from %s (%d accepted)",
            len(outcomes),
            blast_path,
            sum(1 for o in outcomes if o.accepted),
        )
        return outcomes

    def parse_text(self, text: str, source: str = "<text>") -> list[QueryOutcome]:
        return self.parse_lines(text.splitlines(), source=source)

    def parse_lines(self, lines: Iterable[str], source: str = "<input>") -> list[QueryOutcome]:
        outcomes = list(self.iter_outcomes(lines, source))
        if not outcomes:
            raise EmptyBlastFileError(source)
        return outcomes

    def iter_outcomes(self, lines: Iterable[str], source: str = "<input>") -> Iterator[QueryOutcome]:
        """
        Yield one QueryOutcome per query, in input order.

        Commented (-outfmt 7) and plain (-outfmt 6) input are told apart by
        whether a '# Query:' line precedes the first data row.
        """
        current_query: str | None = None
        block_has_row = False
        last_plain_query: str | None = None

        for line_num, raw_line in enumerate(lines, start=1):
            line = raw_line.rstrip("\r\n")
            if not line.strip():
                continue

            if line.startswith("#"):
                body = line[1:].strip()
                if body.startswith(self.QUERY_PREFIX):
                    if current_query is not None and not block_has_row:
                        yield self._no_hit(current_query)
                    current_query = self._query_id_from_comment(body, source, line_num)
                    block_has_row = False
                    continue
                hits_match = HITS_FOUND_PATTERN.match(body)
                if hits_match and current_query is not None:
                    logger.debug("%s: %s hits found", current_query, hits_match.group(1))
                continue

            if current_query is not None:
                # Rows after the first one in a block are lower-ranked hits
                if block_has_row:
                    continue
                hit = self._parse_row(line, source, line_num)
                if hit.qseqid != current_query:
                    logger.debug(
                        "Row query id %s differs from block query %s",
                        hit.qseqid,
                        current_query,
                    )
                block_has_row = True
                yield self._evaluate(hit)
            else:
                hit = self._parse_row(line, source, line_num)
                if hit.qseqid == last_plain_query:
                    continue
                last_plain_query = hit.qseqid
                yield self._evaluate(hit)

        if current_query is not None and not block_has_row:
            yield self._no_hit(current_query)

    def _query_id_from_comment(self, body: str, source: str, line_num: int) -> str:
        parts = body[len(self.QUERY_PREFIX):].split()
        if not parts:
            raise MalformedBlastFileError(source, line_num, "'# Query:' line without a query id")
        return parts[0]

    def _parse_row(self, line: str, source: str, line_num: int) -> BlastHit:
        try:
            return BlastHit.from_blast_line(line)
        except ValueError as e:
            raise MalformedBlastFileError(source, line_num, str(e)) from e

    def _evaluate(self, hit: BlastHit) -> QueryOutcome:
        record = HitRecord.from_blast_hit(hit)
        if record.passes(self.min_length, self.min_identity):
            status = HitStatus.ACCEPTED
        else:
            status = HitStatus.BELOW_THRESHOLD
            logger.debug(
                "Rejected %s -> %s (length %d, identity %.2f)",
                record.query_id,
                record.subject_id,
                record.alignment_length,
                record.percent_identity,
            )
        return QueryOutcome(query_id=hit.qseqid, status=status, record=record)

    @staticmethod
    def _no_hit(query_id: str) -> QueryOutcome:
        logger.debug("No hits found for %s", query_id)
        return QueryOutcome(query_id=query_id, status=HitStatus.NO_HITS)


# =============================================================================
# Tabular Export
# =============================================================================

OUTCOME_SCHEMA: dict[str, pl.DataType] = {
    "query_id": pl.Utf8,
    "strain": pl.Utf8,
    "status": pl.Utf8,
    "subject_id": pl.Utf8,
    "species": pl.Utf8,
    "locus": pl.Utf8,
    "allele_type": pl.Int64,
    "alignment_length": pl.Int64,
    "percent_identity": pl.Float64,
}


def outcomes_to_dataframe(outcomes: Iterable[QueryOutcome]) -> pl.DataFrame:
    """
    Flatten query outcomes into a Polars DataFrame.

    No-hit queries carry nulls in every hit column.
    """
    columns: dict[str, list] = {name: [] for name in OUTCOME_SCHEMA}
    for outcome in outcomes:
        record = outcome.record
        columns["query_id"].append(outcome.query_id)
        columns["strain"].append(strain_label_from_query(outcome.query_id))
        columns["status"].append(outcome.status.value)
        columns["subject_id"].append(record.subject_id if record else None)
        columns["species"].append(record.species if record else None)
        columns["locus"].append(record.locus if record else None)
        columns["allele_type"].append(record.allele_type if record else None)
        columns["alignment_length"].append(record.alignment_length if record else None)
        columns["percent_identity"].append(record.percent_identity if record else None)
    return pl.DataFrame(columns, schema=OUTCOME_SCHEMA)


def hit_table_dataframe(outcomes: Iterable[QueryOutcome]) -> pl.DataFrame:
    """
    Build the 4-column accepted/rejected hit table.

    Accepted queries report subject, length and identity; rejected and
    no-hit queries report 'No hits' with empty length and identity.
    """
    accepted = pl.col("status") == HitStatus.ACCEPTED.value
    query_col, hit_col, length_col, identity_col = HIT_TABLE_COLUMNS
    return outcomes_to_dataframe(outcomes).select(
        pl.col("query_id").alias(query_col),
        pl.when(accepted).then(pl.col("subject_id")).otherwise(pl.lit(NO_HITS)).alias(hit_col),
        pl.when(accepted).then(pl.col("alignment_length")).alias(length_col),
        pl.when(accepted).then(pl.col("percent_identity")).alias(identity_col),
    )


def write_hit_table(outcomes: Iterable[QueryOutcome], path: Path) -> None:
    """Write the accepted/rejected hit table as TSV."""
    df = hit_table_dataframe(outcomes)
    df.write_csv(
        path,
        separator="\t",
        null_value="",
        float_precision=PERCENT_IDENTITY_DECIMALS,
    )
    logger.info("Wrote hit table with %d queries to %s", len(df), path)
