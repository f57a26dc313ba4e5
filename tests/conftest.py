"""
Shared pytest fixtures for mlstblast tests.

Provides a small two-species catalog and a BLAST report whose strains
exercise every typing outcome:

    X  adk_4 fumC_2            -> ST_1 (masked match)
    M  adk_4 fumC_7            -> ST_3 and ST_4 (several STs)
    Y  adk_9                   -> NA (no profile)
    F  adk_5 fumC_3 gyrB_2     -> ST_2 (full profile)
    Z  ecoli + abaumannii hits -> excluded
"""

from __future__ import annotations

from pathlib import Path

import pytest

from mlstblast.core.profiles import ProfileCatalog
from tests.factories import BlastReportBuilder, blast_record

CATALOG_TEXT = "\n".join([
    "ecoli|ST_1\tecoli|adk_4\tecoli|fumC_2\tecoli|gyrB_2",
    "ecoli|ST_2\tecoli|adk_5\tecoli|fumC_3\tecoli|gyrB_2",
    "ecoli|ST_3\tecoli|adk_4\tecoli|fumC_7\tecoli|gyrB_2",
    "ecoli|ST_4\tecoli|adk_4\tecoli|fumC_7\tecoli|gyrB_5",
    "abaumannii|ST_1\tabaumannii|Oxf_cpn60_1\tabaumannii|Oxf_gdhB_3",
]) + "\n"


# =============================================================================
# BLAST Test Data Fixtures
# =============================================================================


@pytest.fixture
def valid_blast_line() -> str:
    """Single valid BLAST tabular output line."""
    return "X_adk\tecoli|adk_4\t99.81\t536\t1\t0\t1\t536\t1\t536\t0.0\t985"


@pytest.fixture
def example_report_builder() -> BlastReportBuilder:
    """Builder preloaded with the strains described in the module docstring."""
    builder = BlastReportBuilder()
    builder.add_hit("X_adk", "ecoli|adk_4")
    builder.add_hit("X_fumC", "ecoli|fumC_2", pident=99.2)
    # X_gyrB falls below the length filter
    builder.add_hit("X_gyrB", "ecoli|gyrB_2", length=150)
    builder.add_hit("M_adk", "ecoli|adk_4")
    builder.add_hit("M_fumC", "ecoli|fumC_7")
    builder.add_hit("Y_adk", "ecoli|adk_9")
    builder.add_no_hit("Y_fumC")
    builder.add_hit("F_adk", "ecoli|adk_5")
    builder.add_hit("F_fumC", "ecoli|fumC_3")
    builder.add_hit("F_gyrB", "ecoli|gyrB_2")
    builder.add_hit("Z_adk", "ecoli|adk_4")
    builder.add_hit("Z_cpn60", "abaumannii|Oxf_cpn60_1")
    return builder


@pytest.fixture
def example_blast_text(example_report_builder: BlastReportBuilder) -> str:
    return example_report_builder.render()


@pytest.fixture
def multi_row_blast_text() -> str:
    """One block with three rows; only the first counts."""
    builder = BlastReportBuilder()
    builder.add_query(
        "X_adk",
        [
            blast_record("X_adk", "ecoli|adk_4", pident=100.0, length=536),
            blast_record("X_adk", "ecoli|adk_9", pident=99.0, length=536),
            blast_record("X_adk", "ecoli|adk_1", pident=98.0, length=536),
        ],
    )
    return builder.render()


# =============================================================================
# Catalog Fixtures
# =============================================================================


@pytest.fixture
def catalog_text() -> str:
    return CATALOG_TEXT


@pytest.fixture
def catalog(catalog_text: str) -> ProfileCatalog:
    return ProfileCatalog.from_lines(catalog_text.splitlines())


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Temporary directory for test files."""
    return tmp_path


@pytest.fixture
def blast_file(temp_dir: Path, example_blast_text: str) -> Path:
    path = temp_dir / "query.fas.blast.out.raw"
    path.write_text(example_blast_text)
    return path


@pytest.fixture
def catalog_file(temp_dir: Path, catalog_text: str) -> Path:
    path = temp_dir / "PROFILES.txt"
    path.write_text(catalog_text)
    return path
