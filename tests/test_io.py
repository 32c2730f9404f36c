"""Tests for file readers and writers."""

import gzip
from pathlib import Path

import pandas as pd
import pytest

from gwasenrich.exceptions import InvalidInput
from gwasenrich.intervals import SequenceCatalog
from gwasenrich.utils.config import SEX_CHROMOSOMES
from gwasenrich.utils.io import (
    load_bed,
    load_catalog,
    load_chrom_sizes,
    load_gwas_catalog,
    save_bed,
)
from gwasenrich.utils.validation import filter_chromosomes

GWAS_HEADER = "PUBMEDID\tDISEASE/TRAIT\tCHR_ID\tCHR_POS\tSNPS\n"


class TestLoadBed:
    """Tests for BED parsing."""

    def test_headers_skipped(self, tmp_path):
        """Track and comment lines are ignored."""
        bed = tmp_path / "peaks.bed"
        bed.write_text("track name=peaks\n# comment\nchr1\t100\t200\tpeak1\nchr2\t5\t50\tpeak2\n")

        df = load_bed(bed)
        assert list(df.columns) == ["chrom", "start", "end", "name"]
        assert df["start"].tolist() == [100, 5]
        assert df["start"].dtype == "int64"

    def test_gzipped(self, tmp_path):
        bed = tmp_path / "peaks.bed.gz"
        with gzip.open(bed, "wt") as f:
            f.write("chr1\t100\t200\n")
        assert len(load_bed(bed)) == 1

    def test_bad_coordinates(self, tmp_path):
        bed = tmp_path / "bad.bed"
        bed.write_text("chr1\tabc\t200\n")
        with pytest.raises(InvalidInput):
            load_bed(bed)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_bed(tmp_path / "nope.bed")

    def test_save_roundtrip(self, tmp_path):
        df = pd.DataFrame({"chrom": ["chr1"], "start": [1], "end": [9], "extra": ["x"]})
        out = tmp_path / "sub" / "out.bed"
        save_bed(df, out)
        assert out.read_text() == "chr1\t1\t9\n"


class TestLoadGwasCatalog:
    """Tests for GWAS Catalog parsing."""

    def _write(self, tmp_path: Path) -> Path:
        path = tmp_path / "gwas.tsv"
        path.write_text(
            GWAS_HEADER
            + "1\tHeight\t1\t1000\trs1\n"
            + "2\tBMI\tX\t500\trs2\n"
            + "3\tAsthma\t1;2\t100;200\trs3; rs4\n"
            + "4\tLupus\t\t\trs5\n"
        )
        return path

    def test_single_base_intervals(self, tmp_path):
        """1-based positions become half-open single-base intervals."""
        df = load_gwas_catalog(self._write(tmp_path))
        assert df[["chrom", "start", "end"]].values.tolist() == [
            ["chr1", 999, 1000],
            ["chrX", 499, 500],
        ]
        assert df["phenotype"].tolist() == ["Height", "BMI"]
        assert df["name"].tolist() == ["rs1", "rs2"]

    def test_fractional_positions_dropped(self, tmp_path):
        """Positions that are not whole bases are dropped, not truncated."""
        path = tmp_path / "gwas.tsv"
        path.write_text(
            GWAS_HEADER
            + "1\tHeight\t1\t1000\trs1\n"
            + "2\tCrohn\t2\t123.7\trs2\n"
            + "3\tGout\t3\t0\trs3\n"
        )
        df = load_gwas_catalog(path)
        assert df["name"].tolist() == ["rs1"]
        assert df["start"].tolist() == [999]

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "gwas.tsv"
        path.write_text("CHR_ID\tSNPS\n1\trs1\n")
        with pytest.raises(InvalidInput):
            load_gwas_catalog(path)

    def test_load_catalog_detects_format(self, tmp_path):
        """load_catalog reads GWAS TSVs and BEDs, taking BED names as phenotypes."""
        assert len(load_catalog(self._write(tmp_path))) == 2

        bed = tmp_path / "catalog.bed"
        bed.write_text("chr1\t10\t20\tHeight\n")
        df = load_catalog(bed)
        assert df["phenotype"].tolist() == ["Height"]


class TestFilterChromosomes:
    """Tests for chromosome filtering."""

    def _frame(self):
        return pd.DataFrame({
            "chrom": ["chr1", "chrX", "chrY", "chrM", "chr1_KI270706v1_random"],
            "start": [0, 0, 0, 0, 0],
            "end": [10, 10, 10, 10, 10],
        })

    def test_default_keeps_sex(self):
        df = filter_chromosomes(self._frame())
        assert df["chrom"].tolist() == ["chr1", "chrX", "chrY"]

    def test_drop_sex_only(self):
        """The --exclude-sex-chr filter keeps mitochondrial and alt contigs."""
        df = filter_chromosomes(self._frame(), keep_sex=False, keep_mito=True, keep_alt=True)
        assert df["chrom"].tolist() == ["chr1", "chrM", "chr1_KI270706v1_random"]
        assert not df["chrom"].isin(SEX_CHROMOSOMES).any()


class TestChromSizes:
    """Tests for genome file parsing."""

    def test_fai_style(self, tmp_path):
        """Extra FASTA index columns are ignored."""
        fai = tmp_path / "genome.fa.fai"
        fai.write_text("chr1\t1000\t6\t60\t61\nchr2\t500\t1100\t60\t61\n")
        assert load_chrom_sizes(fai) == {"chr1": 1000, "chr2": 500}

    def test_sequence_catalog_from_file(self, tmp_path):
        genome = tmp_path / "hg.genome"
        genome.write_text("chr1\t1000\n")
        assert SequenceCatalog.from_genome_file(str(genome))["chr1"] == 1000

    def test_bad_length(self, tmp_path):
        genome = tmp_path / "hg.genome"
        genome.write_text("chr1\tlong\n")
        with pytest.raises(InvalidInput):
            load_chrom_sizes(genome)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
