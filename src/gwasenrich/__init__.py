"""
gwasenrich: overlap enrichment of annotated genomic intervals at TF binding sites.

This package provides tools for:
- Loading binding-site peaks, GWAS Catalog hits and chromosome sizes
- Reducing redundant catalog records to non-overlapping loci
- Permutation testing of catalog/binding-site overlap enrichment
- Tabulating the phenotypes of catalog loci hit by binding sites
"""

__version__ = "0.3.0"
__author__ = "gwasenrich Team"
