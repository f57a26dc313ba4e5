"""
Pydantic model for ST profile catalog entries.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from mlstblast.core.constants import SPECIES_SEPARATOR
from mlstblast.models.blast import AlleleCall


class STProfile(BaseModel):
    """
    One sequence-type definition from the catalog.

    Attributes:
        species: Species acronym shared by the ST and all its alleles
        st_id: ST identifier as written after the species prefix (e.g. 'ST_1')
        alleles: Allele calls in catalog column order
    """

    species: str = Field(description="Species acronym, e.g. 'ecoli'")
    st_id: str = Field(description="ST identifier, e.g. 'ST_131'")
    alleles: tuple[AlleleCall, ...] = Field(
        default_factory=tuple,
        description="Allele calls in catalog column order",
    )

    model_config = {"frozen": True}

    @property
    def label(self) -> str:
        """Catalog column 1 form, e.g. 'ecoli|ST_1'."""
        return f"{self.species}{SPECIES_SEPARATOR}{self.st_id}"

    @property
    def loci(self) -> tuple[str, ...]:
        return tuple(allele.locus for allele in self.alleles)

    def to_catalog_line(self) -> str:
        """Serialize back to one tab-separated catalog row."""
        return "\t".join([self.label, *(allele.label for allele in self.alleles)])
