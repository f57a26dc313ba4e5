"""
Constants used throughout the mlstblast package.

Centralizes magic strings, default values, and file naming conventions
to improve maintainability and consistency.
"""

from __future__ import annotations

# =============================================================================
# Alignment Filter Defaults
# =============================================================================

# Alignments must be strictly longer than this to be accepted
DEFAULT_MIN_ALIGNMENT_LENGTH = 200

# Alignments must reach at least this percent identity to be accepted
DEFAULT_MIN_PERCENT_IDENTITY = 95.0

# =============================================================================
# Identifier Conventions
# =============================================================================

# Separates species from locus/ST in database headers: "ecoli|adk_4"
SPECIES_SEPARATOR = "|"

# Separates strain label from the rest of a query id: "B250_adk"
STRAIN_SEPARATOR = "_"

# Reported in place of an ST id when no catalog profile matches
NOT_ASSIGNED = "NA"

# Written to the hit table for queries without an accepted hit
NO_HITS = "No hits"

# Header names of catalog columns that never carry allele types.
# Everything from the first of these onward is dropped.
NON_ALLELE_COLUMNS = frozenset({"clonal_complex", "CC", "lineage", "species"})

# First header token of a raw PubMLST profile table
PUBMLST_ST_COLUMN = "ST"

# =============================================================================
# BLAST Tabular Format
# =============================================================================

BLAST_COLUMNS = (
    "qseqid",
    "sseqid",
    "pident",
    "length",
    "mismatch",
    "gapopen",
    "qstart",
    "qend",
    "sstart",
    "send",
    "evalue",
    "bitscore",
)

HIT_TABLE_COLUMNS = ("Query", "Hit", "Length", "Percent_id")

# BLAST prints percent identity with three decimals
PERCENT_IDENTITY_DECIMALS = 3

# =============================================================================
# Output File Naming
# =============================================================================

HIT_TABLE_SUFFIX = ".blast.out.tab"
REPORT_SUFFIX = ".mlst-blast.out"

REPORT_HEADER_PREFIX = "# Query,Species,ST-type"
