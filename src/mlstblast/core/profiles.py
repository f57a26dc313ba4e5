"""
ST profile catalog loading and conversion.

The catalog is a tab-separated file with species prefixes on every
column so that several species can share one file:

    ecoli|ST_1    ecoli|adk_4    ecoli|fumC_2    ecoli|gyrB_2    ...
    ecoli|ST_2    ecoli|adk_5    ecoli|fumC_3    ecoli|gyrB_2    ...

A header row (first token 'ST', optionally prefixed with '#') may name
the columns. Columns from the first non-allele header token (such as
'clonal_complex') onward are ignored for the rows that follow it. A header
only applies to one species: the prefix of its first token ('ecoli|ST'),
or else the species of the first row after it.

Raw PubMLST profile tables ('ST<TAB>adk<TAB>...<TAB>clonal_complex')
can be converted into this format with convert_pubmlst_profiles().
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path

import polars as pl

from mlstblast.core.constants import (
    NON_ALLELE_COLUMNS,
    PUBMLST_ST_COLUMN,
    SPECIES_SEPARATOR,
)
from mlstblast.core.exceptions import (
    CatalogFormatError,
    CatalogSpeciesMismatchError,
    MalformedAlleleIdError,
)
from mlstblast.models.blast import AlleleCall
from mlstblast.models.profiles import STProfile

logger = logging.getLogger(__name__)


def _strip_species(token: str) -> str:
    return token.strip().split(SPECIES_SEPARATOR)[-1]


class _CatalogHeader:
    """
    Column layout declared by a header row.

    A header applies to one species only: the prefix of its first token
    ('ecoli|ST') if present, otherwise the species of the first row after it.
    """

    def __init__(self, tokens: Sequence[str]):
        species, sep, _ = tokens[0].strip().lstrip("#").partition(SPECIES_SEPARATOR)
        self.species: str | None = species if sep else None
        names = [_strip_species(token) for token in tokens[1:]]
        cutoff = next(
            (i for i, name in enumerate(names) if name in NON_ALLELE_COLUMNS),
            None,
        )
        self.allele_limit = cutoff
        self.loci = names if cutoff is None else names[:cutoff]

    @staticmethod
    def is_header(first_token: str) -> bool:
        return _strip_species(first_token.lstrip("#")) == PUBMLST_ST_COLUMN


class ProfileCatalog:
    """
    Immutable species -> ST profiles mapping.

    Profiles keep their catalog order, which is also the order in which
    several candidate STs are reported.

    Example:
        catalog = ProfileCatalog.from_file(Path("PROFILES.txt"))
        for profile in catalog.profiles("ecoli"):
            print(profile.st_id, profile.loci)
    """

    def __init__(self, profiles: Mapping[str, Sequence[STProfile]] | None = None):
        self._profiles: dict[str, tuple[STProfile, ...]] = {
            species: tuple(entries) for species, entries in (profiles or {}).items()
        }

    @classmethod
    def from_profiles(cls, profiles: Iterable[STProfile]) -> ProfileCatalog:
        grouped: dict[str, list[STProfile]] = defaultdict(list)
        for profile in profiles:
            grouped[profile.species].append(profile)
        return cls(grouped)

    @classmethod
    def from_file(cls, path: Path) -> ProfileCatalog:
        """
        Load a species-prefixed catalog file.

        Raises:
            FileNotFoundError: If the file does not exist.
            CatalogFormatError: If any row is malformed.
        """
        if not path.exists():
            msg = f"Profile catalog not found: {path}"
            raise FileNotFoundError(msg)

        with path.open("r") as handle:
            catalog = cls.from_lines(handle)

        logger.info(
            "Loaded %d ST profiles for %d species from %s",
            len(catalog),
            len(catalog.species()),
            path,
        )
        return catalog

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> ProfileCatalog:
        catalog = cls.from_profiles(parse_catalog_lines(lines))
        if not len(catalog):
            logger.warning("Profile catalog contains no ST profiles")
        return catalog

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._profiles.values())

    def __contains__(self, species: object) -> bool:
        return species in self._profiles

    def species(self) -> list[str]:
        return sorted(self._profiles)

    def profiles(self, species: str) -> tuple[STProfile, ...]:
        return self._profiles.get(species, ())

    def loci(self, species: str) -> list[str]:
        """Union of loci used by a species' profiles, in first-seen order."""
        seen: dict[str, None] = {}
        for profile in self.profiles(species):
            for locus in profile.loci:
                seen.setdefault(locus, None)
        return list(seen)


def parse_catalog_lines(lines: Iterable[str]) -> Iterator[STProfile]:
    """
    Parse catalog rows into STProfile entries.

    Raises:
        CatalogFormatError: On a malformed ST token, allele column or a
            column that disagrees with the header.
        CatalogSpeciesMismatchError: If a column names another species.
    """
    header: _CatalogHeader | None = None

    for line_num, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            continue

        tokens = line.split("\t")
        first = tokens[0].strip()

        if _CatalogHeader.is_header(first):
            header = _CatalogHeader(tokens)
            continue
        if first.startswith("#"):
            continue

        species, sep, st_id = first.partition(SPECIES_SEPARATOR)
        if not sep or not species or not st_id:
            raise CatalogFormatError(
                line_num, f"first column '{first}' is not 'species|ST_id'"
            )

        if header is not None and header.species is None:
            header.species = species
        layout = header if header is not None and header.species == species else None

        columns = tokens[1:]
        if layout is not None and layout.allele_limit is not None:
            columns = columns[: layout.allele_limit]
        while columns and not columns[-1].strip():
            columns.pop()
        if not columns:
            raise CatalogFormatError(line_num, f"profile {first} has no allele columns")

        alleles = []
        for position, column in enumerate(columns):
            try:
                allele = AlleleCall.parse(column, context="catalog column")
            except MalformedAlleleIdError as e:
                raise CatalogFormatError(
                    line_num,
                    f"column {position + 2} '{column.strip()}' is not "
                    "'species|locus_alleleType'",
                ) from e
            if allele.species != species:
                raise CatalogSpeciesMismatchError(line_num, species, allele.species)
            if layout is not None and position < len(layout.loci):
                expected = layout.loci[position]
                if allele.locus != expected:
                    raise CatalogFormatError(
                        line_num,
                        f"column {position + 2} has locus '{allele.locus}' "
                        f"but the header names '{expected}'",
                    )
            alleles.append(allele)

        yield STProfile(species=species, st_id=st_id, alleles=tuple(alleles))


# =============================================================================
# PubMLST Conversion
# =============================================================================


def convert_pubmlst_profiles(path: Path, species: str) -> list[STProfile]:
    """
    Convert a raw PubMLST profile table into species-prefixed profiles.

    The table header starts with 'ST' followed by locus names; a trailing
    'clonal_complex' (or other non-allele column) and everything after it
    is dropped. ST n becomes 'species|ST_n'.

    Args:
        path: Tab-separated PubMLST profiles file
        species: Species acronym to prefix, e.g. 'ecoli'

    Returns:
        Profiles in file order

    Raises:
        CatalogFormatError: If the header does not start with 'ST' or an
            allele value is not an integer.
    """
    if SPECIES_SEPARATOR in species or not species.strip():
        msg = f"Invalid species acronym: {species!r}"
        raise ValueError(msg)

    df = pl.read_csv(path, separator="\t", infer_schema=False)
    if not df.columns or df.columns[0] != PUBMLST_ST_COLUMN:
        raise CatalogFormatError(
            1, f"PubMLST header must start with '{PUBMLST_ST_COLUMN}', got {df.columns[:1]}"
        )

    loci = []
    for name in df.columns[1:]:
        if name in NON_ALLELE_COLUMNS:
            break
        loci.append(name)

    profiles = []
    # +2: header line plus 1-based numbering
    for row_num, row in enumerate(df.select([PUBMLST_ST_COLUMN, *loci]).iter_rows(), start=2):
        st_value, *allele_values = row
        if st_value is None or not st_value.strip():
            raise CatalogFormatError(row_num, "missing ST value")
        alleles = []
        for locus, value in zip(loci, allele_values):
            if value is None or not value.strip().isdigit():
                raise CatalogFormatError(
                    row_num, f"allele '{value}' at locus {locus} is not an integer"
                )
            alleles.append(AlleleCall(species, locus, int(value)))
        profiles.append(
            STProfile(
                species=species,
                st_id=f"{PUBMLST_ST_COLUMN}_{st_value.strip()}",
                alleles=tuple(alleles),
            )
        )

    logger.info("Converted %d %s profiles over %d loci from %s", len(profiles), species, len(loci), path)
    return profiles


def write_catalog(profiles: Iterable[STProfile], path: Path, append: bool = False) -> int:
    """
    Write profiles in the species-prefixed catalog format.

    Returns:
        Number of profiles written
    """
    count = 0
    with path.open("a" if append else "w") as handle:
        for profile in profiles:
            handle.write(profile.to_catalog_line() + "\n")
            count += 1
    logger.info("Wrote %d profiles to %s", count, path)
    return count
