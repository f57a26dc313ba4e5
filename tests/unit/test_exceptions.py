"""Unit tests for custom exceptions module."""

import pytest

from mlstblast.core.exceptions import (
    AmbiguityWarning,
    AmbiguousLocusError,
    AmbiguousLocusWarning,
    BlastFileError,
    CatalogFormatError,
    CatalogSpeciesMismatchError,
    ConfigurationError,
    EmptyBlastFileError,
    FormatError,
    InvalidThresholdError,
    LookupMiss,
    MalformedAlleleIdError,
    MalformedBlastFileError,
    MlstBlastError,
    MultipleSpeciesWarning,
    MultipleSTWarning,
)


class TestMlstBlastError:
    """Tests for base exception class."""

    def test_basic_message(self):
        error = MlstBlastError("Test error")
        assert error.message == "Test error"
        assert error.suggestion is None
        assert str(error) == "Test error"

    def test_message_with_suggestion(self):
        error = MlstBlastError("Test error", suggestion="Try this fix")
        assert error.suggestion == "Try this fix"
        assert "Suggestion: Try this fix" in str(error)


class TestFormatErrors:
    def test_empty_blast_file(self):
        error = EmptyBlastFileError("query.out")
        assert "query.out" in str(error)
        assert "-outfmt 7" in error.suggestion
        assert isinstance(error, BlastFileError)

    def test_malformed_blast_file(self):
        error = MalformedBlastFileError("query.out", 12, "Expected 12 fields")
        assert "line 12" in error.message
        assert error.line_num == 12

    def test_malformed_allele_id(self):
        error = MalformedAlleleIdError("adk-4")
        assert "'adk-4'" in error.message
        assert "species|locus_N" in error.suggestion

    def test_catalog_species_mismatch(self):
        error = CatalogSpeciesMismatchError(3, "ecoli", "saureus")
        assert isinstance(error, CatalogFormatError)
        assert "line 3" in error.message
        assert "saureus" in error.message

    @pytest.mark.parametrize(
        "error",
        [
            EmptyBlastFileError("x"),
            MalformedBlastFileError("x", 1, "d"),
            MalformedAlleleIdError("x"),
            CatalogFormatError(1, "d"),
        ],
    )
    def test_all_are_format_errors(self, error):
        assert isinstance(error, FormatError)
        assert isinstance(error, MlstBlastError)


class TestMatchingErrors:
    def test_ambiguous_locus_error(self):
        error = AmbiguousLocusError("B250", "adk", (4, 7))
        assert "B250" in error.message
        assert "(4, 7)" in error.message
        assert "--ambiguous-loci enumerate" in error.suggestion

    def test_invalid_threshold(self):
        error = InvalidThresholdError("min_identity", 120.0, 0.0, 100.0)
        assert isinstance(error, ConfigurationError)
        assert "120.0" in error.message


class TestAmbiguityWarnings:
    def test_multiple_species(self):
        warning = MultipleSpeciesWarning("Z", ("abaumannii", "ecoli"))
        assert "abaumannii, ecoli" in warning.message
        assert isinstance(warning, AmbiguityWarning)

    def test_ambiguous_locus(self):
        assert "fumC" in AmbiguousLocusWarning("A", "fumC", (2, 7)).message

    def test_multiple_st(self):
        warning = MultipleSTWarning("M", ["ST_3", "ST_4"])
        assert "ST_3, ST_4" in warning.message
        assert warning.st_ids == ["ST_3", "ST_4"]

    def test_lookup_miss(self):
        assert "No ST profile" in LookupMiss("Y", "ecoli|adk_9").message
        assert "absent from the catalog" in LookupMiss("S", "x|a_1", species_known=False).message
