"""Tables and markdown report for enrichment results."""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from gwasenrich.enrich.permtest import EnrichmentResult
from gwasenrich.utils.io import create_output_dirs

logger = logging.getLogger(__name__)


def significance_stars(p_value: float) -> str:
    if p_value < 0.001:
        return "***"
    if p_value < 0.01:
        return "**"
    if p_value < 0.05:
        return "*"
    return "ns"


def summary_frame(result: EnrichmentResult, label: str = "catalog") -> pd.DataFrame:
    """One-row summary of an enrichment result."""
    row = {"annotation": label}
    row.update(result.to_dict())
    row["significance"] = significance_stars(result.p_value)
    return pd.DataFrame([row])


def null_distribution_frame(result: EnrichmentResult) -> pd.DataFrame:
    return pd.DataFrame({
        "iteration": range(1, result.iterations + 1),
        "overlaps": list(result.samples),
    })


def render_report(
    result: EnrichmentResult,
    label: str,
    metadata: Optional[Dict[str, object]] = None,
) -> str:
    """
    Render a markdown report.

    Args:
        result: Enrichment result
        label: Name of the tested catalog
        metadata: Extra ``key: value`` lines for the analysis summary
    """
    timestamp = pd.Timestamp.now().strftime("%Y-%m-%d %H:%M")
    lines = [
        "# Binding-site overlap enrichment",
        "",
        "## Analysis Summary",
        f"- **Date**: {timestamp}",
        f"- **Catalog**: {label}",
        f"- **Permutations**: {result.iterations:,}",
    ]
    for key, value in (metadata or {}).items():
        lines.append(f"- **{key}**: {value}")

    lines += [
        "",
        "## Methods",
        "Overlapping catalog records were merged into non-overlapping loci. The",
        "observed statistic is the number of overlapping (binding site, locus)",
        f"pairs. Binding sites were repositioned at random {result.iterations:,} times,",
        "keeping widths and chromosomes, to build the null distribution. The",
        "empirical p-value is the share of permutations with more overlaps than",
        "observed.",
        "",
        "## Results",
        "",
        "| Observed | Expected (mean±std) | Fold Enrichment | Z-score | P-value | Significance |",
        "|----------|---------------------|-----------------|---------|---------|--------------|",
        (
            f"| {result.observed} | {result.expected_mean:.1f}±{result.expected_std:.1f} | "
            f"{result.fold_enrichment:.2f} | {result.z_score:.2f} | "
            f"{result.p_value:.4f} | {significance_stars(result.p_value)} |"
        ),
        "",
    ]
    return "\n".join(lines)


def write_results(
    result: EnrichmentResult,
    output_dir: Union[str, Path],
    label: str = "catalog",
    metadata: Optional[Dict[str, object]] = None,
) -> Dict[str, Path]:
    """
    Write summary, null distribution and report under ``output_dir/results``.

    Returns:
        Mapping of output kind to written path
    """
    results_dir = create_output_dirs(output_dir, ["results"])["results"]
    paths = {
        "summary": results_dir / f"{label}_summary.tsv",
        "null_distribution": results_dir / f"{label}_null_distribution.tsv",
        "report": results_dir / f"{label}_report.md",
    }

    summary_frame(result, label).to_csv(paths["summary"], sep="\t", index=False)
    null_distribution_frame(result).to_csv(paths["null_distribution"], sep="\t", index=False)
    paths["report"].write_text(render_report(result, label, metadata))

    for path in paths.values():
        logger.info(f"Saved {path}")
    return paths


def write_phenotype_tables(
    table: pd.DataFrame,
    frequencies: pd.DataFrame,
    output_file: Union[str, Path],
) -> Dict[str, Path]:
    """
    Write phenotype frequencies to ``output_file`` and the per-locus table
    next to it with a ``_loci`` suffix.
    """
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    loci_file = output_file.with_name(f"{output_file.stem}_loci{output_file.suffix}")

    frequencies.to_csv(output_file, index=False)
    loci = table.assign(phenotypes=table["phenotypes"].map("; ".join))
    loci.to_csv(loci_file, index=False)

    logger.info(f"Saved {len(frequencies)} phenotypes to {output_file.name}")
    return {"frequencies": output_file, "loci": loci_file}
