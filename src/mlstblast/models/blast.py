"""
Pydantic models for BLAST results parsing.

These models represent BLAST tabular output (-outfmt 6/7) for per-locus
queries searched against a multi-species allele database whose headers
follow the 'species|locus_alleleType' convention.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field, PrivateAttr, computed_field, field_validator

from mlstblast.core.constants import BLAST_COLUMNS, SPECIES_SEPARATOR, STRAIN_SEPARATOR
from mlstblast.core.exceptions import MalformedAlleleIdError


# The locus is everything up to the last "_<digits>" suffix:
#   ecoli|fumC_40            -> ("ecoli", "fumC", 40)
#   abaumannii|Oxf_cpn60_39  -> ("abaumannii", "Oxf_cpn60", 39)
ALLELE_ID_PATTERN = re.compile(r"^(?P<species>[^|\s]+)\|(?P<locus>\S+?)_(?P<allele>\d+)$")


class AlleleCall(NamedTuple):
    """
    Structured form of an allele database identifier.

    'ecoli|adk_4' becomes AlleleCall("ecoli", "adk", 4). The pipe and
    underscore string is only produced at the I/O boundary via ``label``,
    so locus names containing digits or underscores stay unambiguous.
    """

    species: str
    locus: str
    allele_type: int

    @classmethod
    def parse(cls, identifier: str, context: str = "BLAST subject") -> AlleleCall:
        """
        Parse 'species|locus_alleleType'.

        Raises:
            MalformedAlleleIdError: If the identifier does not conform.
        """
        match = ALLELE_ID_PATTERN.match(identifier.strip())
        if match is None:
            raise MalformedAlleleIdError(identifier, context)
        return cls(
            species=match.group("species"),
            locus=match.group("locus"),
            allele_type=int(match.group("allele")),
        )

    @property
    def label(self) -> str:
        """Serialized database form, e.g. 'ecoli|adk_4'."""
        return f"{self.species}{SPECIES_SEPARATOR}{self.locus}_{self.allele_type}"


def strain_label_from_query(query_id: str) -> str:
    """
    Derive the strain label from a query id.

    Queries are named '<strain>_<locus-or-id>', so the label is the text
    before the first underscore. Ids without an underscore are their own
    strain.

    Example:
        >>> strain_label_from_query("B250_purA")
        'B250'
    """
    return query_id.split(STRAIN_SEPARATOR, 1)[0]


class BlastHit(BaseModel):
    """
    Single BLAST alignment row from tabular output.

    Attributes:
        qseqid: Query sequence identifier ('<strain>_<id>')
        sseqid: Subject sequence identifier ('species|locus_alleleType')
        pident: Percent identity (0-100)
        length: Alignment length in base pairs
        mismatch: Number of mismatches
        gapopen: Number of gap openings
        qstart: Start position in query
        qend: End position in query
        sstart: Start position in subject
        send: End position in subject
        evalue: Expectation value
        bitscore: Bit score
    """

    qseqid: str = Field(description="Query sequence ID")
    sseqid: str = Field(description="Subject sequence ID (allele)")
    pident: float = Field(ge=0, description="Percent identity (0-100, clamped)")
    length: int = Field(ge=0, description="Alignment length")
    mismatch: int = Field(ge=0, description="Number of mismatches")
    gapopen: int = Field(ge=0, description="Number of gap openings")
    qstart: int = Field(ge=1, description="Query start position")
    qend: int = Field(ge=1, description="Query end position")
    sstart: int = Field(ge=1, description="Subject start position")
    send: int = Field(ge=1, description="Subject end position")
    evalue: float = Field(ge=0, description="Expectation value")
    bitscore: float = Field(ge=0, description="Bit score")

    @field_validator("pident", mode="before")
    @classmethod
    def clamp_pident(cls, v: float) -> float:
        """
        Clamp percent identity to valid range [0, 100].

        BLAST can occasionally report pident > 100 due to floating-point
        rounding artifacts in alignment scoring.
        """
        if isinstance(v, (int, float)):
            return max(0.0, min(100.0, float(v)))
        return v

    model_config = {"frozen": True}

    @classmethod
    def from_blast_line(cls, line: str) -> BlastHit:
        """
        Parse a single line from BLAST tabular output.

        Expected format (outfmt 6/7):
        qseqid sseqid pident length mismatch gapopen qstart qend sstart send evalue bitscore

        Raises:
            ValueError: If the line does not have 12 fields or a field
                cannot be converted.
        """
        fields = line.rstrip("\r\n").split("\t")
        if len(fields) != len(BLAST_COLUMNS):
            msg = f"Expected {len(BLAST_COLUMNS)} fields in BLAST line, got {len(fields)}"
            raise ValueError(msg)

        return cls(
            qseqid=fields[0],
            sseqid=fields[1],
            pident=float(fields[2]),
            length=int(fields[3]),
            mismatch=int(fields[4]),
            gapopen=int(fields[5]),
            qstart=int(fields[6]),
            qend=int(fields[7]),
            sstart=int(fields[8]),
            send=int(fields[9]),
            evalue=float(fields[10]),
            bitscore=float(fields[11]),
        )


class HitRecord(BaseModel):
    """
    Best hit of one query, reduced to the fields used for typing.

    The subject id is validated on construction; a malformed id raises
    MalformedAlleleIdError rather than a pydantic ValidationError so the
    caller sees the format problem directly.
    """

    query_id: str
    subject_id: str
    alignment_length: int = Field(ge=0)
    percent_identity: float = Field(ge=0, le=100)

    _allele: AlleleCall = PrivateAttr()

    model_config = {"frozen": True}

    def model_post_init(self, __context: object) -> None:
        self._allele = AlleleCall.parse(self.subject_id)

    @classmethod
    def from_blast_hit(cls, hit: BlastHit) -> HitRecord:
        return cls(
            query_id=hit.qseqid,
            subject_id=hit.sseqid,
            alignment_length=hit.length,
            percent_identity=hit.pident,
        )

    @property
    def allele(self) -> AlleleCall:
        return self._allele

    @computed_field  # type: ignore[prop-decorator]
    @property
    def species(self) -> str:
        return self.allele.species

    @computed_field  # type: ignore[prop-decorator]
    @property
    def locus(self) -> str:
        return self.allele.locus

    @computed_field  # type: ignore[prop-decorator]
    @property
    def allele_type(self) -> int:
        return self.allele.allele_type

    @property
    def strain_label(self) -> str:
        return strain_label_from_query(self.query_id)

    def passes(self, min_length: int, min_identity: float) -> bool:
        """Length must exceed min_length; identity must reach min_identity."""
        return self.alignment_length > min_length and self.percent_identity >= min_identity


class HitStatus(str, Enum):
    """Decision taken for one query."""

    ACCEPTED = "accepted"
    BELOW_THRESHOLD = "below_threshold"
    NO_HITS = "no_hits"


class QueryOutcome(BaseModel):
    """
    Result of one query block.

    ``record`` holds the best hit for accepted and below-threshold queries
    and is None when BLAST reported zero hits.
    """

    query_id: str
    status: HitStatus
    record: HitRecord | None = None

    model_config = {"frozen": True}

    @property
    def accepted(self) -> bool:
        return self.status is HitStatus.ACCEPTED

    @property
    def strain_label(self) -> str:
        return strain_label_from_query(self.query_id)
