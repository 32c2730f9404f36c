"""Phenotypes of reduced catalog loci hit by binding sites."""

import logging
from typing import Optional

import pandas as pd

from gwasenrich.backends import IntervalBackend, get_backend
from gwasenrich.intervals import IntervalSet

logger = logging.getLogger(__name__)

TABLE_COLS = ["locus", "chrom", "start", "end", "n_binding_sites", "phenotypes"]


def phenotype_overlap_table(
    binding_sites: IntervalSet,
    catalog: IntervalSet,
    backend: Optional[IntervalBackend] = None,
) -> pd.DataFrame:
    """
    List reduced catalog loci overlapped by binding sites with their phenotypes.

    Args:
        binding_sites: Binding-site intervals
        catalog: Catalog records; a ``phenotype`` column supplies the labels
        backend: Interval backend (default: bioframe)

    Returns:
        DataFrame with locus, chrom, start, end, n_binding_sites and
        phenotypes (sorted tuple of distinct labels), one row per hit locus
    """
    backend = backend or get_backend()
    catalog_frame = catalog.frame
    reduced = backend.merge(catalog_frame)

    hits = backend.overlap_index(reduced, binding_sites.frame)
    if hits.empty:
        logger.info("No catalog locus overlaps a binding site")
        return pd.DataFrame(columns=TABLE_COLS)

    n_sites = hits.groupby("query_idx").size()
    table = reduced.iloc[n_sites.index].reset_index(drop=True)
    table["n_binding_sites"] = n_sites.to_numpy()

    if "phenotype" in catalog_frame.columns:
        members = backend.overlap_index(table, catalog_frame)
        labels = catalog_frame["phenotype"].iloc[members["subject_idx"]].to_numpy()
        members = members.assign(phenotype=labels).dropna(subset=["phenotype"])
        by_locus = members.groupby("query_idx")["phenotype"].agg(lambda s: tuple(sorted(set(s))))
        table["phenotypes"] = [by_locus.get(i, ()) for i in range(len(table))]
    else:
        table["phenotypes"] = [() for _ in range(len(table))]

    table["locus"] = (
        table["chrom"] + ":" + table["start"].astype(str) + "-" + table["end"].astype(str)
    )
    logger.info(f"{len(table)} of {len(reduced)} catalog loci overlap binding sites")
    return table[TABLE_COLS]


def phenotype_frequencies(table: pd.DataFrame) -> pd.DataFrame:
    """
    Tally how many hit loci carry each phenotype.

    Args:
        table: Output of phenotype_overlap_table

    Returns:
        DataFrame with phenotype and n_loci, most frequent first
    """
    exploded = table["phenotypes"].explode().dropna()
    if exploded.empty:
        return pd.DataFrame({"phenotype": pd.Series(dtype=object), "n_loci": pd.Series(dtype="int64")})

    counts = exploded.value_counts()
    freq = pd.DataFrame({"phenotype": counts.index.astype(str), "n_loci": counts.to_numpy()})
    freq = freq.sort_values(["n_loci", "phenotype"], ascending=[False, True])
    return freq.reset_index(drop=True)
