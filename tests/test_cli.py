"""Tests for the command line interface."""

import logging

import pandas as pd
import pytest
from click.testing import CliRunner

from gwasenrich.cli import main


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger("gwasenrich").handlers.clear()


@pytest.fixture
def inputs(tmp_path):
    binding = tmp_path / "peaks.bed"
    binding.write_text("chr1\t100\t200\nchr1\t5000\t5100\nchr2\t300\t400\n")
    catalog = tmp_path / "gwas.bed"
    catalog.write_text(
        "chr1\t150\t160\tHeight\n"
        "chr1\t150\t170\tBMI\n"
        "chr1\t5050\t5051\tHeight\n"
        "chr2\t9000\t9001\tAsthma\n"
    )
    genome = tmp_path / "test.genome"
    genome.write_text("chr1\t20000\nchr2\t10000\n")
    return {"binding": binding, "catalog": catalog, "genome": genome, "dir": tmp_path}


class TestCLICommands:
    """Test CLI command availability."""

    def test_help(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("enrich", "reduce", "phenotypes"):
            assert command in result.output

    def test_enrich_help(self):
        result = CliRunner().invoke(main, ["enrich", "--help"])
        assert result.exit_code == 0
        assert "Permutation test" in result.output


class TestEnrich:
    """Tests for the enrich command."""

    def test_enrich_writes_results(self, inputs):
        out = inputs["dir"] / "out"
        result = CliRunner().invoke(main, [
            "enrich",
            "-b", str(inputs["binding"]),
            "-c", str(inputs["catalog"]),
            "-g", str(inputs["genome"]),
            "-o", str(out),
            "-n", "20",
            "-s", "1",
            "--label", "gwas",
        ])
        assert result.exit_code == 0, result.output
        assert "observed=2" in result.output

        results = out / "results"
        summary = pd.read_csv(results / "gwas_summary.tsv", sep="\t")
        assert summary.loc[0, "observed"] == 2
        assert summary.loc[0, "iterations"] == 20
        null = pd.read_csv(results / "gwas_null_distribution.tsv", sep="\t")
        assert len(null) == 20
        assert (results / "gwas_report.md").exists()

        freq = pd.read_csv(results / "gwas_phenotypes.csv")
        assert freq.values.tolist() == [["Height", 2], ["BMI", 1]]
        assert (results / "gwas_phenotypes_loci.csv").exists()

    def test_allow_cross_chrom(self, inputs):
        """Cross-chromosome shuffling changes the null, not the observed count."""
        out = inputs["dir"] / "cross"
        args = [
            "enrich",
            "-b", str(inputs["binding"]),
            "-c", str(inputs["catalog"]),
            "-g", str(inputs["genome"]),
            "-o", str(out),
            "-n", "10",
            "-s", "3",
            "--allow-cross-chrom",
        ]
        result = CliRunner().invoke(main, args)
        assert result.exit_code == 0, result.output
        assert "observed=2" in result.output

        null = pd.read_csv(out / "results" / "catalog_null_distribution.tsv", sep="\t")
        assert len(null) == 10
        assert null["overlaps"].ge(0).all()

        rerun = CliRunner().invoke(main, args)
        assert rerun.output.splitlines()[-1] == result.output.splitlines()[-1]

    def test_config_file(self, inputs, tmp_path):
        """Settings come from the YAML file unless overridden on the command line."""
        config = tmp_path / "run.yaml"
        config.write_text(f"iterations: 7\ngenome_file: {inputs['genome']}\n")
        out = tmp_path / "out"
        result = CliRunner().invoke(main, [
            "enrich",
            "-b", str(inputs["binding"]),
            "-c", str(inputs["catalog"]),
            "-o", str(out),
            "--config", str(config),
        ])
        assert result.exit_code == 0, result.output
        null = pd.read_csv(out / "results" / "catalog_null_distribution.tsv", sep="\t")
        assert len(null) == 7

    def test_missing_chromosome_fails(self, inputs, tmp_path):
        """A genome file without a binding-site chromosome is reported, not ignored."""
        genome = tmp_path / "chr1_only.genome"
        genome.write_text("chr1\t20000\n")
        result = CliRunner().invoke(main, [
            "enrich",
            "-b", str(inputs["binding"]),
            "-c", str(inputs["catalog"]),
            "-g", str(genome),
            "-o", str(tmp_path / "out"),
            "-n", "5",
        ])
        assert result.exit_code == 1
        assert "chr2" in result.output

    def test_bad_iterations(self, inputs, tmp_path):
        result = CliRunner().invoke(main, [
            "enrich",
            "-b", str(inputs["binding"]),
            "-c", str(inputs["catalog"]),
            "-g", str(inputs["genome"]),
            "-o", str(tmp_path / "out"),
            "-n", "0",
        ])
        assert result.exit_code != 0
        assert "iterations" in result.output


class TestReduceAndPhenotypes:
    """Tests for the reduce and phenotypes commands."""

    def test_reduce(self, inputs):
        out = inputs["dir"] / "reduced.bed"
        result = CliRunner().invoke(main, ["reduce", "-c", str(inputs["catalog"]), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text().splitlines() == [
            "chr1\t150\t170",
            "chr1\t5050\t5051",
            "chr2\t9000\t9001",
        ]

    def test_phenotypes(self, inputs):
        out = inputs["dir"] / "phenotypes.csv"
        result = CliRunner().invoke(main, [
            "phenotypes",
            "-b", str(inputs["binding"]),
            "-c", str(inputs["catalog"]),
            "-o", str(out),
        ])
        assert result.exit_code == 0, result.output
        loci = pd.read_csv(inputs["dir"] / "phenotypes_loci.csv")
        assert loci["locus"].tolist() == ["chr1:150-170", "chr1:5050-5051"]
        assert loci["phenotypes"].tolist() == ["BMI; Height", "Height"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
