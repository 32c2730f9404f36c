"""Interval backend built on bioframe."""

import logging

import bioframe as bf
import pandas as pd

from gwasenrich.backends.base import (
    INTERVAL_COLS,
    PAIR_COLS,
    IntervalBackend,
    normalize_merged,
    normalize_pairs,
)
from gwasenrich.exceptions import DependencyFailure

logger = logging.getLogger(__name__)


def _bedframe(frame: pd.DataFrame) -> pd.DataFrame:
    df = frame[INTERVAL_COLS].reset_index(drop=True)
    df["chrom"] = df["chrom"].astype(str)
    return df


class BioframeBackend(IntervalBackend):
    """In-process interval algebra on pandas DataFrames."""

    @property
    def name(self) -> str:
        return "bioframe"

    def merge(self, frame: pd.DataFrame) -> pd.DataFrame:
        try:
            merged = bf.merge(_bedframe(frame), min_dist=0)
        except (KeyError, TypeError, ValueError) as e:
            raise DependencyFailure(f"bioframe merge failed: {e}") from e
        return normalize_merged(merged)

    def overlap_index(self, query: pd.DataFrame, subject: pd.DataFrame) -> pd.DataFrame:
        if len(query) == 0 or len(subject) == 0:
            return pd.DataFrame({col: pd.Series(dtype="int64") for col in PAIR_COLS})
        try:
            pairs = bf.overlap(
                _bedframe(query),
                _bedframe(subject),
                how="inner",
                return_input=False,
                return_index=True,
                suffixes=("", "_"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DependencyFailure(f"bioframe overlap failed: {e}") from e
        pairs = pairs.rename(columns={"index": "query_idx", "index_": "subject_idx"})
        return normalize_pairs(pairs)
