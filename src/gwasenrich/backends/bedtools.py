"""Interval backend that shells out to bedtools."""

import io
import logging
import tempfile
from pathlib import Path
from typing import Optional

import pandas as pd

from gwasenrich.backends.base import (
    INTERVAL_COLS,
    PAIR_COLS,
    IntervalBackend,
    normalize_merged,
    normalize_pairs,
)
from gwasenrich.utils.subprocess_utils import require_tools, run_command

logger = logging.getLogger(__name__)


def write_bed(frame: pd.DataFrame, path: Path, with_index: bool = False) -> Path:
    """
    Write intervals as a headerless BED file.

    Args:
        frame: DataFrame with chrom, start, end
        path: Output path
        with_index: Store each row position in the name column

    Returns:
        Path to the written file
    """
    df = frame[INTERVAL_COLS].reset_index(drop=True)
    if with_index:
        df = df.assign(name=range(len(df)))
    df.to_csv(path, sep="\t", index=False, header=False)
    return path


class BedtoolsBackend(IntervalBackend):
    """
    Interval algebra through the bedtools command-line suite.

    Each call writes its inputs to a private temporary directory which is
    removed afterwards.
    """

    def __init__(self, tmp_dir: Optional[str] = None):
        require_tools(["bedtools"])
        self.tmp_dir = tmp_dir

    @property
    def name(self) -> str:
        return "bedtools"

    def merge(self, frame: pd.DataFrame) -> pd.DataFrame:
        if len(frame) == 0:
            return normalize_merged(pd.DataFrame(columns=INTERVAL_COLS))
        with tempfile.TemporaryDirectory(dir=self.tmp_dir) as tmp:
            bed = write_bed(frame, Path(tmp) / "input.bed")
            sorted_bed = Path(tmp) / "sorted.bed"
            result = run_command(["bedtools", "sort", "-i", str(bed)])
            sorted_bed.write_text(result.stdout)
            result = run_command(["bedtools", "merge", "-d", "0", "-i", str(sorted_bed)])

        merged = pd.read_csv(
            io.StringIO(result.stdout),
            sep="\t",
            header=None,
            names=INTERVAL_COLS,
            dtype={"chrom": str},
        )
        logger.debug(f"bedtools merge: {len(frame)} -> {len(merged)} intervals")
        return normalize_merged(merged)

    def overlap_index(self, query: pd.DataFrame, subject: pd.DataFrame) -> pd.DataFrame:
        if len(query) == 0 or len(subject) == 0:
            return pd.DataFrame({col: pd.Series(dtype="int64") for col in PAIR_COLS})

        with tempfile.TemporaryDirectory(dir=self.tmp_dir) as tmp:
            a_file = write_bed(query, Path(tmp) / "a.bed", with_index=True)
            b_file = write_bed(subject, Path(tmp) / "b.bed", with_index=True)
            result = run_command(
                ["bedtools", "intersect", "-a", str(a_file), "-b", str(b_file), "-wa", "-wb"]
            )

        if not result.stdout.strip():
            return pd.DataFrame({col: pd.Series(dtype="int64") for col in PAIR_COLS})

        # -wa -wb rows: a.chrom a.start a.end a.name b.chrom b.start b.end b.name
        hits = pd.read_csv(io.StringIO(result.stdout), sep="\t", header=None)
        pairs = pd.DataFrame({"query_idx": hits[3], "subject_idx": hits[7]})
        return normalize_pairs(pairs)
