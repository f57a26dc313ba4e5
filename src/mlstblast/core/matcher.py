"""
Masked-profile matching of strains to sequence types.

A strain is rarely typed at every locus of its species' scheme. To still
match known profiles on the loci it was typed for, every catalog profile
is masked down to the strain's observed locus set and profiles with an
identical masked key are grouped:

    catalog  ecoli|ST_1  adk_4 fumC_2 gyrB_2
             ecoli|ST_7  adk_4 fumC_2 gyrB_9
    strain   adk_4 fumC_2              (typed at adk, fumC only)

    masked index {(adk,4),(fumC,2)} -> [ST_1, ST_7]

so the strain resolves to both ST_1 and ST_7, reported as ambiguous.
Masked indices depend only on (species, locus set) and are cached, since
many strains share the same locus set.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Collection, Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType

from mlstblast.core.constants import SPECIES_SEPARATOR
from mlstblast.core.exceptions import (
    AmbiguousLocusError,
    AmbiguousLocusWarning,
    LookupMiss,
    MultipleSTWarning,
)
from mlstblast.core.profiles import ProfileCatalog
from mlstblast.core.strain_index import StrainHits
from mlstblast.models.config import AmbiguousLocusPolicy
from mlstblast.models.results import (
    CallStatus,
    Diagnostic,
    DiagnosticKind,
    STCall,
    StrainTyping,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaskedKey:
    """
    Comparison key of an allele combination restricted to a locus set.

    Pairs are sorted by locus, then allele type, so catalog keys and
    strain keys built with masked_key() are directly comparable.
    """

    species: str
    pairs: tuple[tuple[str, int], ...]

    @property
    def loci(self) -> tuple[str, ...]:
        return tuple(locus for locus, _ in self.pairs)

    @property
    def allele_types(self) -> tuple[int, ...]:
        return tuple(allele_type for _, allele_type in self.pairs)

    @property
    def label(self) -> str:
        """Concatenated database form, e.g. 'ecoli|adk_4ecoli|fumC_2'."""
        return "".join(
            f"{self.species}{SPECIES_SEPARATOR}{locus}_{allele_type}"
            for locus, allele_type in self.pairs
        )


def masked_key(
    species: str,
    alleles: Iterable[tuple[str, int]],
    loci: Collection[str],
) -> MaskedKey:
    """
    Build the masked key of (locus, allele_type) pairs for a locus set.

    The result depends only on the allele set and the locus set, never on
    input order.
    """
    pairs = sorted((locus, allele_type) for locus, allele_type in alleles if locus in loci)
    return MaskedKey(species=species, pairs=tuple(pairs))


class ProfileMatcher:
    """
    Resolve strains to zero, one or many ST calls.

    The catalog is read-only and may be shared between threads; the only
    mutable state is the lock-protected masked-index cache.

    Example:
        matcher = ProfileMatcher(catalog)
        typing = matcher.match(strain_hits)
        for call in typing.calls:
            print(call.strain, call.species, call.st_label)
    """

    def __init__(
        self,
        catalog: ProfileCatalog,
        ambiguous_locus_policy: AmbiguousLocusPolicy = "enumerate",
    ) -> None:
        if ambiguous_locus_policy not in ("enumerate", "fail"):
            msg = f"Unknown ambiguous locus policy: {ambiguous_locus_policy}"
            raise ValueError(msg)
        self.catalog = catalog
        self.ambiguous_locus_policy = ambiguous_locus_policy
        self._index_cache: dict[tuple[str, frozenset[str]], Mapping[MaskedKey, tuple[str, ...]]] = {}
        self._cache_lock = threading.Lock()

    def masked_index(self, species: str, loci: Collection[str]) -> Mapping[MaskedKey, tuple[str, ...]]:
        """
        Masked key -> ST ids (catalog order) for one species and locus set.
        """
        cache_key = (species, frozenset(loci))
        with self._cache_lock:
            cached = self._index_cache.get(cache_key)
            if cached is None:
                cached = self._build_masked_index(species, cache_key[1])
                self._index_cache[cache_key] = cached
            return cached

    def _build_masked_index(self, species: str, loci: frozenset[str]) -> Mapping[MaskedKey, tuple[str, ...]]:
        grouped: dict[MaskedKey, list[str]] = {}
        for profile in self.catalog.profiles(species):
            key = masked_key(
                species,
                ((allele.locus, allele.allele_type) for allele in profile.alleles),
                loci,
            )
            grouped.setdefault(key, []).append(profile.st_id)
        logger.debug(
            "Masked %s catalog to %d loci: %d distinct keys",
            species,
            len(loci),
            len(grouped),
        )
        return MappingProxyType({key: tuple(st_ids) for key, st_ids in grouped.items()})

    def candidate_keys(self, strain_hits: StrainHits) -> Iterator[MaskedKey]:
        """
        Yield the strain's observed-allele key(s).

        One key when every locus has a single allele type; otherwise one
        key per combination, in sorted order.
        """
        loci = sorted(strain_hits.alleles)
        choices = [strain_hits.alleles[locus] for locus in loci]
        for combination in itertools.product(*choices):
            yield masked_key(strain_hits.species, zip(loci, combination), loci)

    def match(self, strain_hits: StrainHits) -> StrainTyping:
        """
        Resolve one single-species strain.

        Raises:
            AmbiguousLocusError: If a locus has several allele types and
                the policy is 'fail'.
        """
        strain = strain_hits.strain
        species = strain_hits.species
        diagnostics: list[Diagnostic] = []

        for locus, types in sorted(strain_hits.ambiguous_loci.items()):
            if self.ambiguous_locus_policy == "fail":
                raise AmbiguousLocusError(strain, locus, types)
            warning = AmbiguousLocusWarning(strain, locus, types)
            logger.warning(warning.message)
            diagnostics.append(
                Diagnostic(strain=strain, kind=DiagnosticKind.AMBIGUOUS_LOCUS, message=warning.message)
            )

        keys = list(self.candidate_keys(strain_hits))
        species_known = species in self.catalog
        index = self.masked_index(species, strain_hits.loci) if species_known else {}

        matches = [(key, st_id) for key in keys for st_id in index.get(key, ())]

        if matches:
            status = CallStatus.EXACT if len(matches) == 1 else CallStatus.AMBIGUOUS
            if status is CallStatus.AMBIGUOUS:
                warning = MultipleSTWarning(strain, [st_id for _, st_id in matches])
                logger.info(warning.message)
                diagnostics.append(
                    Diagnostic(strain=strain, kind=DiagnosticKind.MULTIPLE_ST, message=warning.message)
                )
            calls = [
                STCall(
                    strain=strain,
                    species=species,
                    st_id=st_id,
                    loci=key.loci,
                    allele_types=key.allele_types,
                    status=status,
                )
                for key, st_id in matches
            ]
        else:
            kind = DiagnosticKind.NO_MATCH if species_known else DiagnosticKind.UNKNOWN_SPECIES
            for key in keys:
                miss = LookupMiss(strain, key.label, species_known=species_known)
                logger.warning(miss.message)
                diagnostics.append(Diagnostic(strain=strain, kind=kind, message=miss.message))
            calls = [
                STCall(
                    strain=strain,
                    species=species,
                    st_id=None,
                    loci=key.loci,
                    allele_types=key.allele_types,
                    status=CallStatus.NOT_ASSIGNED,
                )
                for key in keys
            ]

        return StrainTyping(
            strain=strain,
            species=species,
            calls=tuple(calls),
            diagnostics=tuple(diagnostics),
        )

    def match_all(self, strains: Iterable[StrainHits], max_workers: int = 1) -> list[StrainTyping]:
        """
        Resolve strains independently; results keep input order.

        With max_workers > 1 strains are resolved on a thread pool. The
        first exception raised by any strain propagates.
        """
        strain_list = list(strains)
        if max_workers <= 1 or len(strain_list) <= 1:
            return [self.match(strain_hits) for strain_hits in strain_list]

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="st-match") as executor:
            return list(executor.map(self.match, strain_list))
