"""
End-to-end ST typing: BLAST output + profile catalog -> calls.

    outcomes = parse(blast output)                 per-query accept/reject
    index    = aggregate(accepted outcomes)        strain -> species -> locus
    typings  = match(single-species strains)       masked catalog lookup
    report   = render(typings)

Multi-species strains are excluded before matching and only surface as
diagnostics.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from mlstblast.core.matcher import ProfileMatcher
from mlstblast.core.parsers import BlastReportParser, write_hit_table
from mlstblast.core.profiles import ProfileCatalog
from mlstblast.core.report import ReportFormatter
from mlstblast.core.strain_index import StrainHitIndexBuilder
from mlstblast.models.blast import QueryOutcome
from mlstblast.models.config import TypingConfig
from mlstblast.models.results import TypingResult

logger = logging.getLogger(__name__)


class STTypingPipeline:
    """
    Run the typing stages with one configuration.

    Example:
        pipeline = STTypingPipeline(TypingConfig(min_alignment_length=150))
        result = pipeline.run(
            Path("query.fas.blast.out.raw"),
            Path("PROFILES.txt"),
            report_path=Path("query.fas.mlst-blast.out"),
        )
        for call in result.calls:
            print(call.strain, call.st_label)
    """

    def __init__(self, config: TypingConfig | None = None) -> None:
        self.config = config or TypingConfig()
        self.parser = BlastReportParser(
            min_length=self.config.min_alignment_length,
            min_identity=self.config.min_percent_identity,
        )
        self.formatter = ReportFormatter()

    def type_outcomes(
        self,
        outcomes: Iterable[QueryOutcome],
        catalog: ProfileCatalog,
    ) -> TypingResult:
        """
        Aggregate accepted outcomes and resolve every single-species strain.

        Raises:
            AmbiguousLocusError: Under the 'fail' policy.
        """
        outcomes = tuple(outcomes)
        if not self.config.report_enabled:
            return TypingResult(outcomes=outcomes)

        builder = StrainHitIndexBuilder()
        builder.add_outcomes(outcomes)
        index = builder.build()

        exclusions = index.exclusion_diagnostics()
        matcher = ProfileMatcher(catalog, self.config.ambiguous_locus_policy)
        typings = matcher.match_all(index.resolvable(), max_workers=self.config.max_workers)

        diagnostics = [*exclusions]
        for strain_typing in typings:
            diagnostics.extend(strain_typing.diagnostics)

        logger.info(
            "Typed %d strains (%d excluded, %d diagnostics)",
            len(typings),
            len(exclusions),
            len(diagnostics),
        )
        return TypingResult(
            outcomes=outcomes,
            typings=tuple(typings),
            diagnostics=tuple(diagnostics),
            excluded_strains=index.multi_species_strains(),
        )

    def run_text(self, blast_text: str, catalog: ProfileCatalog) -> TypingResult:
        """In-memory variant of run(); nothing is written."""
        return self.type_outcomes(self.parser.parse_text(blast_text), catalog)

    def run(
        self,
        blast_path: Path,
        catalog_path: Path | None,
        report_path: Path | None = None,
        hit_table_path: Path | None = None,
        summary_path: Path | None = None,
    ) -> TypingResult:
        """
        Parse, match and write the requested outputs.

        The hit table is written only when hit_table_path is given and
        write_hit_table is enabled; the report and summary only when
        report_enabled is set, which also requires catalog_path.

        Raises:
            FileNotFoundError: If an input file is missing.
            ValueError: If report_enabled is set without catalog_path.
            MlstBlastError: On malformed input or under the 'fail' policy.
        """
        if self.config.report_enabled and catalog_path is None:
            msg = "A profile catalog is required unless report_enabled is False"
            raise ValueError(msg)

        outcomes = self.parser.parse_file(blast_path)

        if hit_table_path is not None and self.config.write_hit_table:
            write_hit_table(outcomes, hit_table_path)

        if not self.config.report_enabled:
            return TypingResult(outcomes=tuple(outcomes))

        catalog = ProfileCatalog.from_file(catalog_path)
        result = self.type_outcomes(outcomes, catalog)

        if report_path is not None:
            self.formatter.write(result.typings, report_path)
        if summary_path is not None:
            self.formatter.write_summary(result.typings, summary_path)
        return result
