"""File I/O utilities for gwasenrich."""

import gzip
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from gwasenrich.exceptions import InvalidInput

logger = logging.getLogger(__name__)

BED_COLS = ["chrom", "start", "end", "name", "score", "strand"]

# GWAS Catalog associations file columns
GWAS_CHR_COL = "CHR_ID"
GWAS_POS_COL = "CHR_POS"
GWAS_TRAIT_COL = "DISEASE/TRAIT"
GWAS_SNP_COL = "SNPS"


def _require_file(filepath: Union[str, Path]) -> Path:
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")
    return filepath


def _is_header_line(line: str) -> bool:
    return not line.strip() or line.startswith(("#", "track", "browser"))


def load_bed(
    filepath: Union[str, Path],
    names: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Load a BED format file.

    Comment, ``track`` and ``browser`` lines are skipped.

    Args:
        filepath: Path to BED file (plain or gzipped)
        names: Column names (default: standard BED names by column count)

    Returns:
        DataFrame with at least chrom, start, end
    """
    filepath = _require_file(filepath)

    rows = []
    with _open_text(filepath) as f:
        for line in f:
            if _is_header_line(line):
                continue
            rows.append(line.rstrip("\n").split("\t"))

    if not rows:
        raise InvalidInput(f"No intervals in BED file: {filepath}")

    n_cols = max(len(r) for r in rows)
    if n_cols < 3:
        raise InvalidInput(f"BED file needs at least 3 columns: {filepath}")

    if names is None:
        names = BED_COLS[:n_cols] + [f"col{i}" for i in range(len(BED_COLS), n_cols)]

    df = pd.DataFrame(rows, columns=names[:n_cols])
    try:
        df["start"] = df["start"].astype("int64")
        df["end"] = df["end"].astype("int64")
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Non-integer coordinates in {filepath}: {e}") from e

    logger.info(f"Loaded {len(df)} records from {filepath.name}")
    return df


def _open_text(filepath: Path):
    if filepath.suffix == ".gz":
        return gzip.open(filepath, "rt")
    return open(filepath, "r")


def load_gwas_catalog(
    filepath: Union[str, Path],
    trait_col: str = GWAS_TRAIT_COL,
) -> pd.DataFrame:
    """
    Load a GWAS Catalog associations TSV as single-base intervals.

    Each association at 1-based ``CHR_POS`` becomes ``[pos - 1, pos)`` on
    ``chr<CHR_ID>``. Rows without a usable chromosome or position (e.g.
    multi-SNP haplotype entries such as ``"1;5"``) are dropped and counted
    in the log.

    Args:
        filepath: Path to the associations file
        trait_col: Column holding the phenotype label

    Returns:
        DataFrame with chrom, start, end, name, phenotype
    """
    filepath = _require_file(filepath)
    df = pd.read_csv(filepath, sep="\t", dtype=str, low_memory=False)

    missing = [c for c in (GWAS_CHR_COL, GWAS_POS_COL, trait_col) if c not in df.columns]
    if missing:
        raise InvalidInput(f"Missing required columns in {filepath.name}: {missing}")

    pos = pd.to_numeric(df[GWAS_POS_COL], errors="coerce")
    chrom = df[GWAS_CHR_COL].str.strip()
    # Fractional or non-positive positions are not single mapped bases
    usable = pos.notna() & (pos == pos.round()) & (pos >= 1)
    usable &= chrom.notna() & (chrom != "") & ~chrom.str.contains(r";| x ", na=True)

    dropped = int((~usable).sum())
    if dropped:
        logger.info(f"Dropped {dropped} associations without a single mapped position")

    pos = pos[usable].astype("int64")
    chrom = chrom[usable]
    out = pd.DataFrame({
        "chrom": chrom.where(chrom.str.startswith("chr"), "chr" + chrom),
        "start": pos - 1,
        "end": pos,
        "name": df.loc[usable, GWAS_SNP_COL] if GWAS_SNP_COL in df.columns else None,
        "phenotype": df.loc[usable, trait_col].str.strip(),
    }).reset_index(drop=True)

    if out.empty:
        raise InvalidInput(f"No mapped associations in {filepath}")

    logger.info(f"Loaded {len(out)} associations from {filepath.name}")
    return out


def load_catalog(filepath: Union[str, Path]) -> pd.DataFrame:
    """
    Load an annotation catalog from a GWAS Catalog TSV or a BED file.

    For BED input the name column, when present, is taken as the phenotype.
    """
    filepath = _require_file(filepath)
    with _open_text(filepath) as f:
        first = f.readline().rstrip("\n").split("\t")
    if GWAS_CHR_COL in first and GWAS_POS_COL in first:
        return load_gwas_catalog(filepath)

    df = load_bed(filepath)
    if "name" in df.columns:
        df = df.rename(columns={"name": "phenotype"})
    return df


def load_chrom_sizes(filepath: Union[str, Path]) -> Dict[str, int]:
    """
    Load chromosome sizes from a genome file or FASTA index.

    Only the first two tab-separated columns are used.

    Returns:
        Dictionary mapping chromosome names to lengths
    """
    filepath = _require_file(filepath)

    sizes: Dict[str, int] = {}
    with open(filepath, "r") as f:
        for lineno, line in enumerate(f, start=1):
            if _is_header_line(line):
                continue
            parts = line.rstrip("\n").split("\t")
            if len(parts) < 2:
                raise InvalidInput(f"{filepath.name}:{lineno}: expected chrom<TAB>length")
            try:
                sizes[parts[0]] = int(parts[1])
            except ValueError as e:
                raise InvalidInput(f"{filepath.name}:{lineno}: bad length {parts[1]!r}") from e

    if not sizes:
        raise InvalidInput(f"No chromosome sizes in {filepath}")

    logger.info(f"Loaded sizes of {len(sizes)} chromosomes from {filepath.name}")
    return sizes


def save_bed(
    df: pd.DataFrame,
    filepath: Union[str, Path],
    cols: Optional[List[str]] = None,
) -> None:
    """
    Save DataFrame to BED format (no header).

    Args:
        df: DataFrame to save
        filepath: Output file path
        cols: Columns to write (default: chrom, start, end)
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    if cols is None:
        cols = ["chrom", "start", "end"]

    df[cols].to_csv(filepath, sep="\t", index=False, header=False)
    logger.info(f"Saved {len(df)} records to {filepath.name}")


def create_output_dirs(
    base_dir: Union[str, Path],
    subdirs: Optional[List[str]] = None,
) -> dict:
    """
    Create output directory structure.

    Args:
        base_dir: Base output directory
        subdirs: List of subdirectory names

    Returns:
        Dictionary mapping subdir names to Path objects
    """
    base_dir = Path(base_dir)

    if subdirs is None:
        subdirs = ["results"]

    dirs = {}
    for subdir in subdirs:
        dir_path = base_dir / subdir
        dir_path.mkdir(parents=True, exist_ok=True)
        dirs[subdir] = dir_path

    return dirs
