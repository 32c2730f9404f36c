"""
Genomic interval data structures.

Coordinates are 0-based and half-open (BED convention): an interval covers
positions ``start .. end - 1``. Two intervals overlap when they share a
chromosome and ``a.start < b.end and b.start < a.end``.

Design:
1. Single intervals are frozen dataclasses
2. Interval sets are backed by a pandas DataFrame and never mutated in place
3. A SequenceCatalog bounds every valid position
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

import numpy as np
import pandas as pd

from gwasenrich.exceptions import InvalidInput
from gwasenrich.utils.validation import (
    INTERVAL_COLS,
    missing_chromosomes,
    validate_interval_columns,
)

OPTIONAL_COLS = ["strand", "name", "phenotype"]
VALID_STRANDS = ("+", "-")


@dataclass(frozen=True)
class GenomicInterval:
    """A half-open interval on one chromosome."""
    chrom: str
    start: int
    end: int
    strand: Optional[str] = None
    name: Optional[str] = None
    phenotype: Optional[str] = None   # e.g. GWAS trait label

    def __post_init__(self):
        if not self.chrom:
            raise InvalidInput("Chromosome name must be non-empty")
        if isinstance(self.start, bool) or not isinstance(self.start, (int, np.integer)):
            raise InvalidInput(f"start must be an integer, got {self.start!r}")
        if isinstance(self.end, bool) or not isinstance(self.end, (int, np.integer)):
            raise InvalidInput(f"end must be an integer, got {self.end!r}")
        if self.start < 0:
            raise InvalidInput(f"Negative start in {self.chrom}:{self.start}-{self.end}")
        if self.end <= self.start:
            raise InvalidInput(f"Empty interval {self.chrom}:{self.start}-{self.end}")
        if self.strand == ".":
            object.__setattr__(self, "strand", None)
        elif self.strand is not None and self.strand not in VALID_STRANDS:
            raise InvalidInput(f"Invalid strand {self.strand!r}")

    @property
    def width(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "GenomicInterval") -> bool:
        return (
            self.chrom == other.chrom
            and self.start < other.end
            and other.start < self.end
        )

    def __str__(self) -> str:
        return f"{self.chrom}:{self.start}-{self.end}"


class SequenceCatalog(Mapping):
    """Read-only mapping of chromosome name to chromosome length."""

    def __init__(self, lengths: Mapping[str, int]):
        checked: Dict[str, int] = {}
        for chrom, length in lengths.items():
            if isinstance(length, bool) or not isinstance(length, (int, np.integer)):
                raise InvalidInput(f"Length of {chrom} must be an integer, got {length!r}")
            if length <= 0:
                raise InvalidInput(f"Length of {chrom} must be positive, got {length}")
            checked[str(chrom)] = int(length)
        self._lengths = checked

    @classmethod
    def from_assembly(cls, assembly: str = "hg38") -> "SequenceCatalog":
        from gwasenrich.utils.config import get_genome_sizes

        try:
            return cls(get_genome_sizes(assembly))
        except ValueError as e:
            raise InvalidInput(str(e)) from e

    @classmethod
    def from_genome_file(cls, path: str) -> "SequenceCatalog":
        """Load a two-column chromosome sizes file (``.genome``, ``.fai``)."""
        from gwasenrich.utils.io import load_chrom_sizes

        return cls(load_chrom_sizes(path))

    def __getitem__(self, chrom: str) -> int:
        return self._lengths[chrom]

    def __iter__(self) -> Iterator[str]:
        return iter(self._lengths)

    def __len__(self) -> int:
        return len(self._lengths)

    def __repr__(self) -> str:
        return f"SequenceCatalog({len(self)} chromosomes)"

    def length(self, chrom: str) -> int:
        """Length of ``chrom``; InvalidInput if it is unknown."""
        if chrom not in self._lengths:
            raise InvalidInput(f"Chromosome {chrom} not in sequence catalog")
        return self._lengths[chrom]

    def missing(self, chroms: Iterable[str]) -> List[str]:
        return missing_chromosomes(chroms, self._lengths)

    def subset(self, chroms: Iterable[str]) -> "SequenceCatalog":
        chroms = list(chroms)
        absent = self.missing(chroms)
        if absent:
            raise InvalidInput(f"Chromosomes not in sequence catalog: {absent}")
        return SequenceCatalog({c: self._lengths[c] for c in chroms})


class IntervalSet:
    """
    Ordered collection of intervals tied to a SequenceCatalog.

    The backing frame always has ``chrom``, ``start`` and ``end`` columns
    (object, int64, int64) and keeps any of ``strand``, ``name`` and
    ``phenotype`` that were supplied. Row order is preserved.
    """

    def __init__(self, frame: pd.DataFrame, sequence_catalog: Optional[SequenceCatalog] = None):
        validate_interval_columns(frame)
        cols = INTERVAL_COLS + [c for c in OPTIONAL_COLS if c in frame.columns]
        df = frame[cols].reset_index(drop=True).copy()
        df["chrom"] = df["chrom"].astype(str).astype(object)
        df["start"] = df["start"].astype("int64")
        df["end"] = df["end"].astype("int64")
        self._df = df
        self.sequence_catalog = sequence_catalog

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        sequence_catalog: Optional[SequenceCatalog] = None,
    ) -> "IntervalSet":
        return cls(frame, sequence_catalog)

    @classmethod
    def from_intervals(
        cls,
        intervals: Iterable[GenomicInterval],
        sequence_catalog: Optional[SequenceCatalog] = None,
    ) -> "IntervalSet":
        records = [
            {
                "chrom": iv.chrom,
                "start": iv.start,
                "end": iv.end,
                "strand": iv.strand,
                "name": iv.name,
                "phenotype": iv.phenotype,
            }
            for iv in intervals
        ]
        df = pd.DataFrame(records, columns=INTERVAL_COLS + OPTIONAL_COLS)
        df = df.astype({"start": "int64", "end": "int64"})
        # Drop metadata columns nobody filled in
        for col in OPTIONAL_COLS:
            if df[col].isna().all():
                df = df.drop(columns=col)
        return cls(df, sequence_catalog)

    @property
    def frame(self) -> pd.DataFrame:
        """A copy of the backing DataFrame."""
        return self._df.copy()

    @property
    def chromosomes(self) -> List[str]:
        """Distinct chromosomes in order of first appearance."""
        return list(pd.unique(self._df["chrom"]))

    @property
    def widths(self) -> np.ndarray:
        return (self._df["end"] - self._df["start"]).to_numpy()

    def to_intervals(self) -> List[GenomicInterval]:
        intervals = []
        for row in self._df.itertuples(index=False):
            meta = {
                col: (None if pd.isna(getattr(row, col)) else getattr(row, col))
                for col in OPTIONAL_COLS
                if col in self._df.columns
            }
            intervals.append(GenomicInterval(row.chrom, int(row.start), int(row.end), **meta))
        return intervals

    def with_catalog(self, sequence_catalog: SequenceCatalog) -> "IntervalSet":
        return IntervalSet(self._df, sequence_catalog)

    def __len__(self) -> int:
        return len(self._df)

    def __iter__(self) -> Iterator[GenomicInterval]:
        return iter(self.to_intervals())

    def __repr__(self) -> str:
        return f"IntervalSet({len(self)} intervals on {len(self.chromosomes)} chromosomes)"
