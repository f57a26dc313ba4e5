"""
E2E test fixtures for mlstblast CLI testing.

Provides fixtures that combine test factories with CLI invocation
helpers for end-to-end testing.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable

import pytest
from typer.testing import CliRunner

from mlstblast.cli.main import app
from tests.factories import TypingDataset

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def e2e_runner() -> CliRunner:
    """Provide a CLI runner for E2E tests."""
    return CliRunner()


@pytest.fixture
def e2e_temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for E2E test files."""
    return tmp_path


@pytest.fixture
def test_dataset(e2e_temp_dir: Path) -> TypingDataset:
    """Provide a seeded test dataset generator."""
    return TypingDataset(e2e_temp_dir, seed=42)


@pytest.fixture
def full_locus_dataset(test_dataset: TypingDataset) -> tuple[Path, Path, dict[str, str]]:
    return test_dataset.create_full_locus_dataset(n_strains=12)


@pytest.fixture
def run_st_call(e2e_runner: CliRunner, e2e_temp_dir: Path) -> Callable[..., Result]:
    """Invoke 'st call' with outputs placed in the temp directory."""

    def _run(blast: Path, profiles: Path, *extra: str) -> Result:
        args = [
            "st", "call",
            "--blast", str(blast),
            "--profiles", str(profiles),
            "--output", str(e2e_temp_dir / "report.out"),
            "--hit-table", str(e2e_temp_dir / "hits.tab"),
            *extra,
        ]
        return e2e_runner.invoke(app, args)

    return _run
