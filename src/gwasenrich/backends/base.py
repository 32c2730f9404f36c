"""
Interval backend interface.

A backend supplies the two interval-algebra capabilities the enrichment
test needs: collapsing overlapping intervals into maximal spans, and listing
overlapping (query, subject) pairs between two interval frames.
"""

from abc import ABC, abstractmethod

import pandas as pd

INTERVAL_COLS = ["chrom", "start", "end"]
PAIR_COLS = ["query_idx", "subject_idx"]


class IntervalBackend(ABC):
    """Base class for interval libraries."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def merge(self, frame: pd.DataFrame) -> pd.DataFrame:
        """
        Collapse overlapping and book-ended intervals per chromosome.

        Args:
            frame: DataFrame with chrom, start, end

        Returns:
            DataFrame with chrom, start, end sorted by chromosome then start,
            with a fresh RangeIndex
        """

    @abstractmethod
    def overlap_index(self, query: pd.DataFrame, subject: pd.DataFrame) -> pd.DataFrame:
        """
        List overlapping pairs.

        Args:
            query: DataFrame with chrom, start, end
            subject: DataFrame with chrom, start, end

        Returns:
            DataFrame with integer columns query_idx and subject_idx holding
            row positions, one row per overlapping pair, sorted
        """

    def count_overlaps(self, query: pd.DataFrame, subject: pd.DataFrame) -> int:
        """Number of overlapping (query, subject) pairs."""
        return len(self.overlap_index(query, subject))


def normalize_pairs(pairs: pd.DataFrame) -> pd.DataFrame:
    """Cast pair columns to int64 and sort them."""
    pairs = pairs[PAIR_COLS].astype("int64")
    return pairs.sort_values(PAIR_COLS).reset_index(drop=True)


def normalize_merged(merged: pd.DataFrame) -> pd.DataFrame:
    merged = merged[INTERVAL_COLS].astype({"start": "int64", "end": "int64"})
    merged["chrom"] = merged["chrom"].astype(str).astype(object)
    return merged.sort_values(["chrom", "start"]).reset_index(drop=True)
