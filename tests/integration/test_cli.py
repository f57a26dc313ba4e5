"""
Integration tests for mlstblast CLI.

Tests the command-line interface using Typer's CliRunner for:
- Main entry point and version display
- st call with default and explicit outputs
- catalog convert and info
- Error handling for invalid inputs
"""

from __future__ import annotations

from pathlib import Path

import polars as pl
import pytest
from typer.testing import CliRunner

from mlstblast.cli.main import app
from tests.factories import BlastReportBuilder, pubmlst_table

runner = CliRunner()


class TestMainApp:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "mlstblast version" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "st" in result.output
        assert "catalog" in result.output


class TestStCall:
    def test_default_outputs(self, blast_file: Path, catalog_file: Path, temp_dir: Path):
        result = runner.invoke(
            app, ["st", "call", "--blast", str(blast_file), "--profiles", str(catalog_file)]
        )

        assert result.exit_code == 0, result.output
        report = temp_dir / "query.fas.mlst-blast.out"
        hit_table = temp_dir / "query.fas.blast.out.tab"
        assert report.exists()
        assert hit_table.exists()
        lines = report.read_text().splitlines()
        assert "X,ecoli,ST_1,4,2" in lines
        assert "Y,ecoli,NA,9" in lines
        assert not any(line.startswith("Z,") for line in lines)

    def test_explicit_outputs_and_summary(self, blast_file, catalog_file, temp_dir):
        report = temp_dir / "custom.out"
        summary = temp_dir / "calls.parquet"
        result = runner.invoke(
            app,
            [
                "st", "call",
                "--blast", str(blast_file),
                "--profiles", str(catalog_file),
                "--output", str(report),
                "--summary", str(summary),
                "--quiet",
            ],
        )

        assert result.exit_code == 0, result.output
        assert report.exists()
        df = pl.read_parquet(summary)
        assert sorted(df["strain"].unique().to_list()) == ["F", "M", "X", "Y"]

    def test_quiet_suppresses_tables(self, blast_file, catalog_file):
        result = runner.invoke(
            app,
            ["st", "call", "-b", str(blast_file), "-p", str(catalog_file), "--quiet"],
        )
        assert result.exit_code == 0
        assert "ST Calls" not in result.output

    def test_no_report(self, blast_file, catalog_file, temp_dir):
        result = runner.invoke(
            app,
            ["st", "call", "-b", str(blast_file), "-p", str(catalog_file), "--no-report"],
        )

        assert result.exit_code == 0, result.output
        assert (temp_dir / "query.fas.blast.out.tab").exists()
        assert not (temp_dir / "query.fas.mlst-blast.out").exists()

    def test_no_report_without_profiles(self, blast_file, temp_dir):
        result = runner.invoke(app, ["st", "call", "-b", str(blast_file), "--no-report"])

        assert result.exit_code == 0, result.output
        assert (temp_dir / "query.fas.blast.out.tab").exists()
        assert not (temp_dir / "query.fas.mlst-blast.out").exists()

    def test_profiles_required_for_report(self, blast_file, temp_dir):
        result = runner.invoke(app, ["st", "call", "-b", str(blast_file)])

        assert result.exit_code == 1
        assert "--profiles is required" in result.output
        assert not (temp_dir / "query.fas.blast.out.tab").exists()

    def test_length_option(self, blast_file, catalog_file, temp_dir):
        report = temp_dir / "relaxed.out"
        result = runner.invoke(
            app,
            [
                "st", "call", "-b", str(blast_file), "-p", str(catalog_file),
                "-o", str(report), "--length", "100",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "X,ecoli,ST_1,4,2,2" in report.read_text().splitlines()

    def test_config_file_with_cli_precedence(self, blast_file, catalog_file, temp_dir):
        config = temp_dir / "config.yaml"
        config.write_text("filters:\n  min_length: 100\n  min_identity: 99.5\n")
        report = temp_dir / "configured.out"

        result = runner.invoke(
            app,
            [
                "st", "call", "-b", str(blast_file), "-p", str(catalog_file),
                "-o", str(report), "--config", str(config), "--similarity", "95",
            ],
        )

        assert result.exit_code == 0, result.output
        # length from the file, identity from the command line
        assert "X,ecoli,ST_1,4,2,2" in report.read_text().splitlines()

    def test_invalid_ambiguous_loci_value(self, blast_file, catalog_file):
        result = runner.invoke(
            app,
            [
                "st", "call", "-b", str(blast_file), "-p", str(catalog_file),
                "--ambiguous-loci", "first",
            ],
        )
        assert result.exit_code == 1
        assert "Invalid --ambiguous-loci" in result.output

    def test_fail_policy_exits_with_error(self, catalog_file, temp_dir):
        blast = BlastReportBuilder().add_hit("A_adk", "ecoli|adk_4").add_hit(
            "A_adk2", "ecoli|adk_5"
        ).write(temp_dir / "ambiguous.blast.out.raw")

        result = runner.invoke(
            app,
            [
                "st", "call", "-b", str(blast), "-p", str(catalog_file),
                "--ambiguous-loci", "fail",
            ],
        )

        assert result.exit_code == 1
        assert "allele types" in result.output

    def test_malformed_subject_exits_with_error(self, catalog_file, temp_dir):
        blast = BlastReportBuilder().add_hit("A_adk", "adk-4").write(temp_dir / "bad.blast.out.raw")

        result = runner.invoke(app, ["st", "call", "-b", str(blast), "-p", str(catalog_file)])

        assert result.exit_code == 1
        assert "Could not parse" in result.output

    def test_empty_blast_file(self, catalog_file, temp_dir):
        blast = temp_dir / "empty.blast.out.raw"
        blast.write_text("")

        result = runner.invoke(app, ["st", "call", "-b", str(blast), "-p", str(catalog_file)])

        assert result.exit_code == 1
        assert "empty" in result.output

    def test_missing_blast_file(self, catalog_file, temp_dir):
        result = runner.invoke(
            app,
            ["st", "call", "-b", str(temp_dir / "missing.out"), "-p", str(catalog_file)],
        )
        assert result.exit_code != 0

    def test_malformed_catalog(self, blast_file, temp_dir):
        catalog = temp_dir / "bad_profiles.txt"
        catalog.write_text("ecoli|ST_1\tecoli|adk_4\tsaureus|arcC_1\n")

        result = runner.invoke(app, ["st", "call", "-b", str(blast_file), "-p", str(catalog)])

        assert result.exit_code == 1
        assert "catalog" in result.output


class TestCatalogCommands:
    @pytest.fixture
    def pubmlst_file(self, temp_dir: Path) -> Path:
        path = temp_dir / "ecoli_profiles.txt"
        path.write_text(pubmlst_table(("adk", "fumC"), [(1, (4, 2)), (2, (5, 3))]))
        return path

    def test_convert(self, pubmlst_file, temp_dir):
        output = temp_dir / "PROFILES.txt"
        result = runner.invoke(
            app,
            ["catalog", "convert", "-i", str(pubmlst_file), "-s", "ecoli", "-o", str(output)],
        )

        assert result.exit_code == 0, result.output
        assert output.read_text().splitlines()[0] == "ecoli|ST_1\tecoli|adk_4\tecoli|fumC_2"

    def test_convert_append(self, pubmlst_file, catalog_file):
        result = runner.invoke(
            app,
            [
                "catalog", "convert", "-i", str(pubmlst_file), "-s", "kpneumoniae",
                "-o", str(catalog_file), "--append",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "kpneumoniae|ST_2" in catalog_file.read_text()

    def test_convert_bad_table(self, temp_dir):
        raw = temp_dir / "bad.txt"
        raw.write_text("id\tadk\n1\t4\n")
        result = runner.invoke(
            app,
            ["catalog", "convert", "-i", str(raw), "-s", "ecoli", "-o", str(temp_dir / "out.txt")],
        )
        assert result.exit_code == 1

    def test_info(self, catalog_file):
        result = runner.invoke(app, ["catalog", "info", "--profiles", str(catalog_file)])

        assert result.exit_code == 0, result.output
        assert "abaumannii" in result.output
        assert "Total: 5 profiles, 2 species" in result.output
