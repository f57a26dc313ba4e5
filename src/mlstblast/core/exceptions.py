"""
Custom exceptions with actionable guidance.

Provides specific error types for common failure scenarios,
each with helpful suggestions for resolution.

Format errors are fatal: the allele database and the ST catalog are
treated as authoritative, so a violation means the input is corrupted
or incompatible. Ambiguity warnings are never raised; they format the
messages attached to per-strain diagnostics.
"""

from __future__ import annotations


class MlstBlastError(Exception):
    """Base exception for mlstblast errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


# =============================================================================
# Fatal Format Errors
# =============================================================================


class FormatError(MlstBlastError):
    """Base class for malformed input that aborts the run."""



class BlastFileError(FormatError):
    """Base class for BLAST file errors."""



class EmptyBlastFileError(BlastFileError):
    """Raised when BLAST output holds no query blocks or alignments."""

    def __init__(self, path: str):
        super().__init__(
            message=f"BLAST output is empty or contains no query results: {path}",
            suggestion=(
                "Check that blastn completed successfully. Verify that:\n"
                "  - The query file is FASTA with one record per locus\n"
                "  - The database was built with makeblastdb\n"
                "  - Output format is -outfmt 7 (tabular with comment lines)"
            ),
        )
        self.path = path


class MalformedBlastFileError(BlastFileError):
    """Raised when a BLAST tabular row cannot be parsed."""

    def __init__(self, path: str, line_num: int, detail: str):
        super().__init__(
            message=f"Malformed BLAST output '{path}' at line {line_num}: {detail}",
            suggestion=(
                "BLAST rows must have 12 tab-separated columns:\n"
                "  qseqid sseqid pident length mismatch gapopen qstart qend "
                "sstart send evalue bitscore\n\n"
                "Run blastn with -outfmt 7 and do not edit the file by hand."
            ),
        )
        self.path = path
        self.line_num = line_num


class MalformedAlleleIdError(FormatError):
    """Raised when a subject id is not 'species|locus_alleleType'."""

    def __init__(self, identifier: str, context: str = "BLAST subject"):
        super().__init__(
            message=(
                f"Could not parse species, locus and allele type from "
                f"{context} '{identifier}'"
            ),
            suggestion=(
                "Allele database headers must look like 'species|locus_N', "
                "e.g. 'ecoli|adk_4'. Rebuild the BLAST database from a FASTA "
                "file whose headers carry the species prefix."
            ),
        )
        self.identifier = identifier


class CatalogFormatError(FormatError):
    """Raised when an ST catalog row is malformed."""

    def __init__(self, line_num: int, detail: str):
        super().__init__(
            message=f"Malformed ST profile catalog at line {line_num}: {detail}",
            suggestion=(
                "Catalog rows are tab separated: 'species|ST_n' followed by "
                "'species|locus_alleleType' columns. Header rows must start "
                "with 'ST' or '#'."
            ),
        )
        self.line_num = line_num


class CatalogSpeciesMismatchError(CatalogFormatError):
    """Raised when an allele column names a different species than its row."""

    def __init__(self, line_num: int, row_species: str, column_species: str):
        super().__init__(
            line_num,
            f"allele column species '{column_species}' does not match "
            f"profile species '{row_species}'",
        )
        self.row_species = row_species
        self.column_species = column_species


# =============================================================================
# Matching Errors
# =============================================================================


class AmbiguousLocusError(MlstBlastError):
    """Raised when a locus has several allele types and the policy is 'fail'."""

    def __init__(self, strain: str, locus: str, allele_types: tuple[int, ...]):
        types = ", ".join(str(t) for t in allele_types)
        super().__init__(
            message=(
                f"Strain {strain} has {len(allele_types)} allele types "
                f"({types}) at locus {locus}"
            ),
            suggestion=(
                "Several queries of this strain hit different alleles of the "
                "same locus. Check the query sequences, or use "
                "--ambiguous-loci enumerate to report every combination."
            ),
        )
        self.strain = strain
        self.locus = locus
        self.allele_types = allele_types


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(MlstBlastError):
    """Raised when configuration is invalid."""



class InvalidThresholdError(ConfigurationError):
    """Raised when a threshold parameter is out of valid range."""

    def __init__(self, param_name: str, value: float, min_val: float, max_val: float):
        super().__init__(
            message=f"{param_name} = {value} is out of valid range [{min_val}, {max_val}]",
            suggestion=f"Set {param_name} to a value between {min_val} and {max_val}.",
        )


# =============================================================================
# Non-fatal Ambiguity Messages
# =============================================================================


class AmbiguityWarning(MlstBlastError):
    """Base class for strain-scoped ambiguity that does not stop the run."""



class MultipleSpeciesWarning(AmbiguityWarning):
    """A strain has accepted hits in more than one species."""

    def __init__(self, strain: str, species: tuple[str, ...]):
        super().__init__(
            message=(
                f"More than one species found ({', '.join(species)}) "
                f"for strain {strain}; strain not typed"
            ),
            suggestion=(
                "Check for contamination or mislabelled queries. Queries must "
                "be named '<strain>_<id>'."
            ),
        )
        self.strain = strain
        self.species = species


class AmbiguousLocusWarning(AmbiguityWarning):
    """A locus collected more than one allele type."""

    def __init__(self, strain: str, locus: str, allele_types: tuple[int, ...]):
        types = ", ".join(str(t) for t in allele_types)
        super().__init__(
            message=(
                f"Strain {strain} has several allele types at locus {locus} "
                f"({types}); every combination was tried"
            ),
        )
        self.strain = strain
        self.locus = locus


class MultipleSTWarning(AmbiguityWarning):
    """The masked allele key matches several catalog STs."""

    def __init__(self, strain: str, st_ids: list[str]):
        super().__init__(
            message=(
                f"More than one ST-type ({', '.join(st_ids)}) for strain "
                f"{strain}; typed loci cannot distinguish them"
            ),
        )
        self.strain = strain
        self.st_ids = st_ids


class LookupMiss(AmbiguityWarning):
    """No catalog profile matches the strain's masked key."""

    def __init__(self, strain: str, key_label: str, species_known: bool = True):
        if species_known:
            message = f"No ST profile matches strain {strain} (key {key_label})"
        else:
            message = (
                f"Species of strain {strain} is absent from the catalog "
                f"(key {key_label})"
            )
        super().__init__(message=message)
        self.strain = strain
        self.species_known = species_known
