"""Enrichment analysis module - permutation tests for binding-site overlap."""

from gwasenrich.enrich.permtest import (
    EnrichmentResult,
    reduce_catalog,
    run_enrichment_test,
    shuffle_intervals,
)
from gwasenrich.enrich.phenotype import phenotype_frequencies, phenotype_overlap_table

__all__ = [
    "EnrichmentResult",
    "phenotype_frequencies",
    "phenotype_overlap_table",
    "reduce_catalog",
    "run_enrichment_test",
    "shuffle_intervals",
]
