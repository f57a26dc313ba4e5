"""
Per-strain aggregation of accepted BLAST hits.

Accepted hits are collected with StrainHitIndexBuilder and frozen into a
read-only StrainHitIndex before matching starts:

    strain -> species -> locus -> {allele_type, ...}

A locus can legitimately collect more than one allele type when several
queries of a strain hit different alleles of the same locus. The index
keeps all of them; the matcher decides how to treat the ambiguity.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from mlstblast.core.exceptions import MultipleSpeciesWarning
from mlstblast.models.blast import HitRecord, QueryOutcome
from mlstblast.models.results import Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrainHits:
    """
    Observed alleles of a single-species strain, ready for matching.

    Attributes:
        strain: Strain label
        species: The one species this strain hit
        alleles: locus -> sorted tuple of observed allele types
    """

    strain: str
    species: str
    alleles: Mapping[str, tuple[int, ...]] = field(default_factory=dict)

    @property
    def loci(self) -> frozenset[str]:
        return frozenset(self.alleles)

    @property
    def ambiguous_loci(self) -> dict[str, tuple[int, ...]]:
        return {locus: types for locus, types in self.alleles.items() if len(types) > 1}


class StrainHitIndex:
    """
    Immutable strain/species/locus index of accepted hits.

    Built by StrainHitIndexBuilder.build(); all views returned are
    read-only.
    """

    def __init__(self, data: Mapping[str, Mapping[str, Mapping[str, frozenset[int]]]]):
        self._data = MappingProxyType({
            strain: MappingProxyType({
                species: MappingProxyType(dict(loci))
                for species, loci in species_map.items()
            })
            for strain, species_map in data.items()
        })

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, strain: object) -> bool:
        return strain in self._data

    def strains(self) -> list[str]:
        return sorted(self._data)

    def species_for(self, strain: str) -> tuple[str, ...]:
        return tuple(sorted(self._data[strain]))

    def loci_for(self, strain: str, species: str) -> Mapping[str, frozenset[int]]:
        return self._data[strain][species]

    def multi_species_strains(self) -> dict[str, tuple[str, ...]]:
        """Strains whose accepted hits span more than one species."""
        return {
            strain: self.species_for(strain)
            for strain in self.strains()
            if len(self._data[strain]) > 1
        }

    def exclusion_diagnostics(self) -> list[Diagnostic]:
        """
        One diagnostic per multi-species strain.

        Species identity is a precondition for profile matching, so these
        strains are never typed.
        """
        diagnostics = []
        for strain, species in self.multi_species_strains().items():
            warning = MultipleSpeciesWarning(strain, species)
            logger.warning(warning.message)
            diagnostics.append(
                Diagnostic(
                    strain=strain,
                    kind=DiagnosticKind.MULTIPLE_SPECIES,
                    message=warning.message,
                )
            )
        return diagnostics

    def resolvable(self) -> Iterator[StrainHits]:
        """Yield single-species strains in sorted strain order."""
        for strain in self.strains():
            species_map = self._data[strain]
            if len(species_map) != 1:
                continue
            (species, loci), = species_map.items()
            yield StrainHits(
                strain=strain,
                species=species,
                alleles=MappingProxyType({
                    locus: tuple(sorted(types)) for locus, types in sorted(loci.items())
                }),
            )


class StrainHitIndexBuilder:
    """
    Accumulates accepted hits into a StrainHitIndex.

    Example:
        builder = StrainHitIndexBuilder()
        builder.add_outcomes(outcomes)
        index = builder.build()
    """

    def __init__(self) -> None:
        self._data: defaultdict[str, defaultdict[str, defaultdict[str, set[int]]]] = (
            defaultdict(lambda: defaultdict(lambda: defaultdict(set)))
        )
        self._built = False

    def add(self, record: HitRecord) -> None:
        if self._built:
            msg = "StrainHitIndexBuilder has already been built"
            raise RuntimeError(msg)
        self._data[record.strain_label][record.species][record.locus].add(record.allele_type)

    def add_records(self, records: Iterable[HitRecord]) -> None:
        for record in records:
            self.add(record)

    def add_outcomes(self, outcomes: Iterable[QueryOutcome]) -> None:
        """Add accepted outcomes; rejected and no-hit queries are skipped."""
        for outcome in outcomes:
            if outcome.accepted and outcome.record is not None:
                self.add(outcome.record)

    def build(self) -> StrainHitIndex:
        self._built = True
        index = StrainHitIndex({
            strain: {
                species: {locus: frozenset(types) for locus, types in loci.items()}
                for species, loci in species_map.items()
            }
            for strain, species_map in self._data.items()
        })
        logger.debug("Built strain index with %d strains", len(index))
        return index
