"""Configuration constants and run settings for gwasenrich."""

import os
from dataclasses import asdict, dataclass, fields
from typing import List, Optional

import yaml

# Default parameters
DEFAULT_ITERATIONS = 1000
DEFAULT_RANDOM_SEED = 42
DEFAULT_WORKERS = 1
DEFAULT_BACKEND = "bioframe"
DEFAULT_ASSEMBLY = "hg38"

SUPPORTED_BACKENDS = ("bioframe", "bedtools")

# Human genome sizes (hg38/GRCh38)
HG38_GENOME_SIZES = {
    "chr1": 248956422,
    "chr2": 242193529,
    "chr3": 198295559,
    "chr4": 190214555,
    "chr5": 181538259,
    "chr6": 170805979,
    "chr7": 159345973,
    "chr8": 145138636,
    "chr9": 138394717,
    "chr10": 133797422,
    "chr11": 135086622,
    "chr12": 133275309,
    "chr13": 114364328,
    "chr14": 107043718,
    "chr15": 101991189,
    "chr16": 90338345,
    "chr17": 83257441,
    "chr18": 80373285,
    "chr19": 58617616,
    "chr20": 64444167,
    "chr21": 46709983,
    "chr22": 50818468,
    "chrX": 156040895,
    "chrY": 57227415,
}

# Human genome sizes (hg19/GRCh37)
HG19_GENOME_SIZES = {
    "chr1": 249250621,
    "chr2": 243199373,
    "chr3": 198022430,
    "chr4": 191154276,
    "chr5": 180915260,
    "chr6": 171115067,
    "chr7": 159138663,
    "chr8": 146364022,
    "chr9": 141213431,
    "chr10": 135534747,
    "chr11": 135006516,
    "chr12": 133851895,
    "chr13": 115169878,
    "chr14": 107349540,
    "chr15": 102531392,
    "chr16": 90354753,
    "chr17": 81195210,
    "chr18": 78077248,
    "chr19": 59128983,
    "chr20": 63025520,
    "chr21": 48129895,
    "chr22": 51304566,
    "chrX": 155270560,
    "chrY": 59373566,
}

GENOME_SIZES = {
    "hg38": HG38_GENOME_SIZES,
    "GRCh38": HG38_GENOME_SIZES,
    "hg19": HG19_GENOME_SIZES,
    "GRCh37": HG19_GENOME_SIZES,
}

SEX_CHROMOSOMES = ["chrX", "chrY"]
MITO_CHROMOSOMES = ["chrM", "chrMT"]


def setup_thread_limits(n_threads: int = 1) -> None:
    """
    Pin BLAS/OpenMP thread counts so permutation workers do not oversubscribe.

    Args:
        n_threads: Number of threads each process may use
    """
    thread_vars = [
        "OMP_NUM_THREADS",
        "OPENBLAS_NUM_THREADS",
        "MKL_NUM_THREADS",
        "VECLIB_MAXIMUM_THREADS",
        "NUMEXPR_NUM_THREADS",
    ]
    for var in thread_vars:
        os.environ[var] = str(n_threads)


def get_genome_sizes(assembly: str = DEFAULT_ASSEMBLY) -> dict:
    """
    Get chromosome sizes for a built-in assembly.

    Args:
        assembly: Genome assembly name (hg38, hg19, GRCh38, GRCh37)

    Returns:
        Dictionary mapping chromosome names to sizes

    Raises:
        ValueError: If assembly is not supported
    """
    if assembly not in GENOME_SIZES:
        raise ValueError(
            f"Unsupported assembly: {assembly}. "
            f"Supported assemblies: {list(GENOME_SIZES.keys())}"
        )
    return GENOME_SIZES[assembly].copy()


@dataclass
class EnrichConfig:
    """Settings for one enrichment run."""
    iterations: int = DEFAULT_ITERATIONS
    seed: int = DEFAULT_RANDOM_SEED
    n_workers: int = DEFAULT_WORKERS
    backend: str = DEFAULT_BACKEND
    keep_chromosome: bool = True   # False lets sites move between chromosomes
    assembly: str = DEFAULT_ASSEMBLY
    genome_file: Optional[str] = None
    exclude_sex_chr: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "EnrichConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        return cls(**d)

    @classmethod
    def from_yaml(cls, path: str) -> "EnrichConfig":
        with open(path, "r") as f:
            d = yaml.safe_load(f) or {}
        if not isinstance(d, dict):
            raise ValueError(f"Configuration file must contain a mapping: {path}")
        return cls.from_dict(d)

    def to_yaml(self, path: str) -> None:
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    def update(self, **overrides) -> "EnrichConfig":
        """Return a copy with every non-None override applied."""
        d = self.to_dict()
        d.update({k: v for k, v in overrides.items() if v is not None})
        return EnrichConfig.from_dict(d)

    def validate(self) -> List[str]:
        """Check the settings, returning a list of problems (empty when valid)."""
        problems = []
        if not isinstance(self.iterations, int) or self.iterations < 1:
            problems.append("iterations must be a positive integer")
        if not isinstance(self.seed, int):
            problems.append("seed must be an integer")
        if not isinstance(self.n_workers, int) or self.n_workers < 1:
            problems.append("n_workers must be a positive integer")
        if self.backend not in SUPPORTED_BACKENDS:
            problems.append(
                f"unknown backend: {self.backend} (choose from {list(SUPPORTED_BACKENDS)})"
            )
        if self.genome_file is None and self.assembly not in GENOME_SIZES:
            problems.append(f"unsupported assembly: {self.assembly}")
        return problems
