"""
Pydantic models for ST typing results.

These models represent the output of resolving a strain's observed
allele combination against the masked ST profile catalog.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field

from mlstblast.core.constants import NOT_ASSIGNED
from mlstblast.models.blast import QueryOutcome


class CallStatus(str, Enum):
    """
    Outcome category of a single ST report row.

    Categories:
        EXACT: The masked key matched exactly one ST
        AMBIGUOUS: The masked key matched several STs (one row per ST), or
            an ambiguous locus produced several matching combinations
        NOT_ASSIGNED: No catalog profile matches the masked key, or the
            strain's species is absent from the catalog
    """

    EXACT = "exact"
    AMBIGUOUS = "ambiguous"
    NOT_ASSIGNED = "not_assigned"


class DiagnosticKind(str, Enum):
    """Kinds of non-fatal, strain-scoped findings."""

    MULTIPLE_SPECIES = "multiple_species"
    AMBIGUOUS_LOCUS = "ambiguous_locus"
    MULTIPLE_ST = "multiple_st"
    NO_MATCH = "no_match"
    UNKNOWN_SPECIES = "unknown_species"


class Diagnostic(BaseModel):
    """A warning attached to one strain."""

    strain: str
    kind: DiagnosticKind
    message: str

    model_config = {"frozen": True}


class STCall(BaseModel):
    """
    One row of the ST report.

    Attributes:
        strain: Strain label
        species: Species acronym
        st_id: Matched ST identifier, None when not assigned
        loci: Locus names in masked-key order
        allele_types: Observed allele type per locus, aligned with loci
        status: Exact, ambiguous or not assigned
    """

    strain: str
    species: str
    st_id: str | None = None
    loci: tuple[str, ...] = Field(default_factory=tuple)
    allele_types: tuple[int, ...] = Field(default_factory=tuple)
    status: CallStatus = CallStatus.NOT_ASSIGNED

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def st_label(self) -> str:
        return self.st_id if self.st_id is not None else NOT_ASSIGNED

    @property
    def is_assigned(self) -> bool:
        return self.st_id is not None

    def allele_map(self) -> dict[str, int]:
        return dict(zip(self.loci, self.allele_types))


class StrainTyping(BaseModel):
    """All report rows and diagnostics for one strain."""

    strain: str
    species: str
    calls: tuple[STCall, ...] = Field(default_factory=tuple)
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    @property
    def num_candidates(self) -> int:
        return sum(1 for call in self.calls if call.is_assigned)

    @property
    def is_ambiguous(self) -> bool:
        return self.num_candidates > 1

    @property
    def st_ids(self) -> list[str]:
        return [call.st_id for call in self.calls if call.st_id is not None]


class TypingResult(BaseModel):
    """
    Complete output of one typing run.

    Attributes:
        outcomes: Per-query accept/reject decisions in input order
        typings: Per-strain results in strain order (multi-species strains excluded)
        diagnostics: Every diagnostic of the run, including exclusions
        excluded_strains: Strains skipped for hitting several species
    """

    outcomes: tuple[QueryOutcome, ...] = Field(default_factory=tuple)
    typings: tuple[StrainTyping, ...] = Field(default_factory=tuple)
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)
    excluded_strains: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @property
    def calls(self) -> list[STCall]:
        return [call for strain_typing in self.typings for call in strain_typing.calls]

    @property
    def num_accepted(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.accepted)
