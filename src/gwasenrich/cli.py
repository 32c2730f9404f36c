"""
gwasenrich CLI - Command Line Interface for binding-site overlap enrichment.

Usage:
    gwasenrich <command> [options]
"""

import logging

import click

from gwasenrich import __version__
from gwasenrich.exceptions import EnrichmentError

logger = logging.getLogger(__name__)


def _load_inputs(binding, catalog, exclude_sex_chr=False):
    from gwasenrich.intervals import IntervalSet
    from gwasenrich.utils.io import load_bed, load_catalog
    from gwasenrich.utils.validation import filter_chromosomes

    binding_df = load_bed(binding)
    catalog_df = load_catalog(catalog)
    if exclude_sex_chr:
        binding_df = filter_chromosomes(binding_df, keep_sex=False, keep_mito=True, keep_alt=True)
        catalog_df = filter_chromosomes(catalog_df, keep_sex=False, keep_mito=True, keep_alt=True)
    return IntervalSet(binding_df), IntervalSet(catalog_df)


def _progress_logger(total):
    step = max(1, total // 10)

    def report(done, total):
        if done % step == 0 or done == total:
            logger.info(f"  {done}/{total} permutations done")

    return report


@click.group()
@click.version_option(version=__version__, prog_name="gwasenrich")
@click.option("-v", "--verbose", is_flag=True, help="Log debug messages")
@click.option("--log-file", help="Also write the log to this file")
def main(verbose, log_file):
    """gwasenrich - overlap enrichment of annotated loci at TF binding sites.

    Use 'gwasenrich <command> --help' for detailed usage of each command.
    """
    from gwasenrich.utils.logging_utils import setup_logger
    setup_logger(log_file=log_file, level=logging.DEBUG if verbose else logging.INFO)


@main.command()
@click.option("-b", "--binding", required=True, help="Binding-site peaks BED file")
@click.option("-c", "--catalog", required=True, help="GWAS Catalog TSV or annotation BED file")
@click.option("-o", "--output", required=True, help="Output directory")
@click.option("-g", "--genome", help="Chromosome sizes file (overrides --assembly)")
@click.option("--assembly", help="Built-in chromosome sizes: hg38, hg19")
@click.option("-n", "--iterations", type=int, help="Number of permutations")
@click.option("-s", "--seed", type=int, help="Random seed")
@click.option("-t", "--threads", type=int, help="Number of worker processes")
@click.option("--backend", type=click.Choice(["bioframe", "bedtools"]), help="Interval backend")
@click.option("--allow-cross-chrom", is_flag=True, help="Let shuffled sites move between chromosomes")
@click.option("--exclude-sex-chr", is_flag=True, help="Drop chrX/chrY intervals from both inputs")
@click.option("--label", default="catalog", help="Name used for output files")
@click.option("--config", "config_file", help="YAML file with run settings")
def enrich(binding, catalog, output, genome, assembly, iterations, seed, threads,
           backend, allow_cross_chrom, exclude_sex_chr, label, config_file):
    """Permutation test for catalog overlap enrichment at binding sites.

    Writes the summary, null distribution, report and phenotype tables.
    """
    from gwasenrich.backends import get_backend
    from gwasenrich.enrich.permtest import run_enrichment_test
    from gwasenrich.enrich.phenotype import phenotype_frequencies, phenotype_overlap_table
    from gwasenrich.enrich.report import write_phenotype_tables, write_results
    from gwasenrich.intervals import SequenceCatalog
    from gwasenrich.utils.config import EnrichConfig

    try:
        config = EnrichConfig.from_yaml(config_file) if config_file else EnrichConfig()
        config = config.update(
            iterations=iterations,
            seed=seed,
            n_workers=threads,
            backend=backend,
            assembly=assembly,
            genome_file=genome,
            keep_chromosome=False if allow_cross_chrom else None,
            exclude_sex_chr=True if exclude_sex_chr else None,
        )
        problems = config.validate()
        if problems:
            raise click.UsageError("; ".join(problems))

        if config.genome_file:
            sequence_catalog = SequenceCatalog.from_genome_file(config.genome_file)
        else:
            sequence_catalog = SequenceCatalog.from_assembly(config.assembly)

        binding_sites, catalog_set = _load_inputs(binding, catalog, config.exclude_sex_chr)
        interval_backend = get_backend(config.backend)

        result = run_enrichment_test(
            binding_sites,
            catalog_set,
            sequence_catalog,
            config.iterations,
            config.seed,
            backend=interval_backend,
            n_workers=config.n_workers,
            keep_chromosome=config.keep_chromosome,
            progress=_progress_logger(config.iterations),
        )
        paths = write_results(result, output, label, metadata={
            "Binding sites": f"{binding} ({len(binding_sites):,} intervals)",
            "Catalog file": f"{catalog} ({len(catalog_set):,} records)",
            "Seed": config.seed,
            "Backend": config.backend,
        })
        table = phenotype_overlap_table(binding_sites, catalog_set, interval_backend)
        write_phenotype_tables(
            table,
            phenotype_frequencies(table),
            paths["summary"].parent / f"{label}_phenotypes.csv",
        )
    except (EnrichmentError, ValueError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(
        f"observed={result.observed} expected={result.expected_mean:.2f} "
        f"p_value={result.p_value:.4g}"
    )


@main.command()
@click.option("-c", "--catalog", required=True, help="GWAS Catalog TSV or annotation BED file")
@click.option("-o", "--output", required=True, help="Output BED file")
@click.option("--backend", type=click.Choice(["bioframe", "bedtools"]), default="bioframe",
              help="Interval backend")
def reduce(catalog, output, backend):
    """Merge overlapping catalog records into non-overlapping loci."""
    from gwasenrich.backends import get_backend
    from gwasenrich.enrich.permtest import reduce_catalog
    from gwasenrich.intervals import IntervalSet
    from gwasenrich.utils.io import load_catalog, save_bed

    try:
        reduced = reduce_catalog(IntervalSet(load_catalog(catalog)), get_backend(backend))
        save_bed(reduced.frame, output)
    except (EnrichmentError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.option("-b", "--binding", required=True, help="Binding-site peaks BED file")
@click.option("-c", "--catalog", required=True, help="GWAS Catalog TSV or annotation BED file")
@click.option("-o", "--output", required=True, help="Output CSV file")
@click.option("--backend", type=click.Choice(["bioframe", "bedtools"]), default="bioframe",
              help="Interval backend")
def phenotypes(binding, catalog, output, backend):
    """Tabulate phenotypes of catalog loci hit by binding sites."""
    from gwasenrich.backends import get_backend
    from gwasenrich.enrich.phenotype import phenotype_frequencies, phenotype_overlap_table
    from gwasenrich.enrich.report import write_phenotype_tables

    try:
        binding_sites, catalog_set = _load_inputs(binding, catalog)
        table = phenotype_overlap_table(binding_sites, catalog_set, get_backend(backend))
        write_phenotype_tables(table, phenotype_frequencies(table), output)
    except (EnrichmentError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    main()
