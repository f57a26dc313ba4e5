"""
E2E happy path tests for mlstblast CLI.

Tests full runs on seeded datasets where every strain's expected ST is
known in advance.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import polars as pl
import pytest

from mlstblast.core.pipeline import STTypingPipeline
from mlstblast.core.profiles import ProfileCatalog
from mlstblast.models.config import TypingConfig

pytestmark = pytest.mark.e2e


def _report_calls(path: Path) -> dict[str, list[str]]:
    calls: dict[str, list[str]] = {}
    for line in path.read_text().splitlines():
        if line.startswith("#"):
            continue
        strain, _species, st = line.split(",")[:3]
        calls.setdefault(strain, []).append(st)
    return calls


class TestFullLocusTyping:
    def test_every_strain_gets_its_st(self, full_locus_dataset, run_st_call: Callable, e2e_temp_dir):
        blast, profiles, expected = full_locus_dataset

        result = run_st_call(blast, profiles)

        assert result.exit_code == 0, result.output
        calls = _report_calls(e2e_temp_dir / "report.out")
        assert calls == {strain: [st_id] for strain, st_id in expected.items()}

    def test_threaded_run_matches(self, full_locus_dataset, run_st_call: Callable, e2e_temp_dir):
        blast, profiles, expected = full_locus_dataset

        result = run_st_call(blast, profiles, "--threads", "4", "--quiet")

        assert result.exit_code == 0, result.output
        calls = _report_calls(e2e_temp_dir / "report.out")
        assert {strain: sts[0] for strain, sts in calls.items()} == expected

    def test_hit_table_lists_every_query(self, full_locus_dataset, run_st_call: Callable, e2e_temp_dir):
        blast, profiles, expected = full_locus_dataset

        run_st_call(blast, profiles, "--quiet")

        df = pl.read_csv(e2e_temp_dir / "hits.tab", separator="\t")
        assert len(df) == len(expected) * 7
        assert (df["Hit"] != "No hits").all()

    def test_strict_identity_rejects_everything(self, full_locus_dataset, run_st_call: Callable, e2e_temp_dir):
        blast, profiles, _expected = full_locus_dataset

        result = run_st_call(blast, profiles, "--similarity", "100", "--length", "600")

        assert result.exit_code == 0, result.output
        assert (e2e_temp_dir / "report.out").read_text() == ""


class TestPartialLocusTyping:
    def test_masking_keeps_full_profile_call_or_widens_it(self, full_locus_dataset):
        """Dropping loci can only add candidate STs, never lose the true one."""
        blast, profiles, expected = full_locus_dataset
        catalog = ProfileCatalog.from_file(profiles)
        text = blast.read_text()
        partial = "\n".join(
            line for line in text.splitlines() if "_recA" not in line and "_mdh" not in line
        )

        result = STTypingPipeline(TypingConfig()).run_text(partial, catalog)

        for strain_typing in result.typings:
            assert expected[strain_typing.strain] in strain_typing.st_ids
