"""Data validation utilities for gwasenrich."""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from gwasenrich.exceptions import InvalidInput
from gwasenrich.utils.config import MITO_CHROMOSOMES, SEX_CHROMOSOMES

logger = logging.getLogger(__name__)

INTERVAL_COLS = ["chrom", "start", "end"]


def validate_interval_columns(
    df: pd.DataFrame,
    required_cols: Optional[List[str]] = None,
) -> None:
    """
    Validate that a DataFrame has interval columns with sane geometry.

    Args:
        df: DataFrame to validate
        required_cols: Required column names (default: chrom, start, end)

    Raises:
        InvalidInput: If columns are missing, coordinates are not integers,
            a start is negative or an interval is empty
    """
    if required_cols is None:
        required_cols = INTERVAL_COLS

    missing = [col for col in required_cols if col not in df.columns]
    if missing:
        raise InvalidInput(f"Missing required columns: {missing}")

    for col in ("start", "end"):
        if not pd.api.types.is_integer_dtype(df[col]):
            raise InvalidInput(f"Column '{col}' must hold integers, got {df[col].dtype}")

    if df["chrom"].isna().any() or (df["chrom"].astype(str) == "").any():
        raise InvalidInput("Chromosome names must be non-empty")

    negative = df["start"] < 0
    if negative.any():
        row = df[negative].iloc[0]
        raise InvalidInput(
            f"{int(negative.sum())} interval(s) have a negative start, "
            f"e.g. {row['chrom']}:{row['start']}-{row['end']}"
        )

    empty = df["end"] <= df["start"]
    if empty.any():
        row = df[empty].iloc[0]
        raise InvalidInput(
            f"{int(empty.sum())} interval(s) have end <= start, "
            f"e.g. {row['chrom']}:{row['start']}-{row['end']}"
        )


def filter_chromosomes(
    df: pd.DataFrame,
    chr_col: str = "chrom",
    keep_sex: bool = True,
    keep_mito: bool = False,
    keep_alt: bool = False,
) -> pd.DataFrame:
    """
    Filter DataFrame by chromosome.

    Args:
        df: DataFrame with chromosome column
        chr_col: Name of chromosome column
        keep_sex: Keep sex chromosomes (chrX, chrY)
        keep_mito: Keep mitochondrial chromosome
        keep_alt: Keep alternative/unplaced contigs (containing "_")

    Returns:
        Filtered DataFrame
    """
    original_len = len(df)
    filtered = df.copy()
    chrom = filtered[chr_col].astype(str)

    keep = pd.Series(True, index=filtered.index)
    if not keep_mito:
        keep &= ~chrom.isin(MITO_CHROMOSOMES)
    if not keep_sex:
        keep &= ~chrom.isin(SEX_CHROMOSOMES)
    if not keep_alt:
        keep &= ~chrom.str.contains("_", regex=False)
    filtered = filtered[keep]

    removed = original_len - len(filtered)
    if removed > 0:
        logger.info(f"Filtered {removed} records by chromosome")

    return filtered.reset_index(drop=True)


def missing_chromosomes(chroms: Iterable[str], known: Iterable[str]) -> List[str]:
    """Sorted chromosome names from ``chroms`` that are absent from ``known``."""
    known = set(known)
    return sorted({c for c in chroms if c not in known})

