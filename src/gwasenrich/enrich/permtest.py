"""
Permutation test for overlap enrichment of catalog loci at binding sites.

The catalog (e.g. GWAS Catalog hits) is first reduced to non-overlapping
loci so a locus reported by several studies or traits counts once. The
observed statistic is the number of overlapping (binding site, locus) pairs.
The null distribution comes from repositioning every binding site to a
uniformly random start on its own chromosome, keeping its width, and
recounting against the same reduced catalog.

Every iteration draws from its own child stream of the seed
(``numpy.random.SeedSequence(seed, spawn_key=(i,))``), so results do not
depend on the number of worker processes.
"""

import logging
import math
import multiprocessing as mp
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from gwasenrich.backends import IntervalBackend, get_backend
from gwasenrich.exceptions import InvalidInput, OutOfRange
from gwasenrich.intervals import IntervalSet, SequenceCatalog
from gwasenrich.utils.config import setup_thread_limits

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

_WORKER_STATE = None


@dataclass(frozen=True)
class EnrichmentResult:
    """Observed overlap count, null samples in iteration order and p-value."""
    observed: int
    samples: Tuple[int, ...]
    p_value: float

    @property
    def iterations(self) -> int:
        return len(self.samples)

    @property
    def expected_mean(self) -> float:
        return float(np.mean(self.samples))

    @property
    def expected_std(self) -> float:
        return float(np.std(self.samples))

    @property
    def fold_enrichment(self) -> float:
        mean = self.expected_mean
        if mean > 0:
            return self.observed / mean
        return math.inf if self.observed > 0 else math.nan

    @property
    def z_score(self) -> float:
        mean, std = self.expected_mean, self.expected_std
        if std == 0:
            if self.observed == mean:
                return 0.0
            return math.inf if self.observed > mean else -math.inf
        return (self.observed - mean) / std

    @property
    def percentile(self) -> float:
        """Percentage of null samples strictly below the observed count."""
        below = sum(1 for s in self.samples if s < self.observed)
        return below / self.iterations * 100

    def to_dict(self) -> dict:
        return {
            "observed": self.observed,
            "expected_mean": self.expected_mean,
            "expected_std": self.expected_std,
            "fold_enrichment": self.fold_enrichment,
            "z_score": self.z_score,
            "p_value": self.p_value,
            "percentile": self.percentile,
            "iterations": self.iterations,
        }


def empirical_p_value(samples: Sequence[int], observed: int) -> float:
    """Share of null samples strictly greater than the observed count."""
    greater = sum(1 for s in samples if s > observed)
    return greater / len(samples)


def iteration_rng(seed: int, iteration: int) -> np.random.Generator:
    """Generator for one iteration; identical to ``SeedSequence(seed).spawn(n)[iteration]``."""
    return np.random.default_rng(np.random.SeedSequence(seed, spawn_key=(iteration,)))


def shuffle_intervals(
    frame: pd.DataFrame,
    sequence_catalog: SequenceCatalog,
    rng: np.random.Generator,
    keep_chromosome: bool = True,
) -> pd.DataFrame:
    """
    Reposition intervals uniformly at random, keeping their widths.

    With ``keep_chromosome`` each interval stays on its chromosome and gets a
    start drawn from ``[0, length - width]``. Otherwise the chromosome is
    drawn with probability proportional to its number of valid starts.

    Args:
        frame: DataFrame with chrom, start, end (not modified)
        sequence_catalog: Chromosome lengths
        rng: Random generator to draw from
        keep_chromosome: Keep every interval on its own chromosome

    Returns:
        Copy of ``frame`` with new coordinates

    Raises:
        OutOfRange: If an interval is wider than every chromosome it may use
    """
    widths = (frame["end"] - frame["start"]).to_numpy(dtype=np.int64)
    shuffled = frame.copy()

    if keep_chromosome:
        lengths = frame["chrom"].map(sequence_catalog.length).to_numpy(dtype=np.int64)
        n_starts = lengths - widths + 1
        if (n_starts < 1).any():
            i = int(np.argmax(n_starts < 1))
            raise OutOfRange(
                f"Interval of width {widths[i]} does not fit on "
                f"{frame['chrom'].iloc[i]} (length {lengths[i]})"
            )
        starts = rng.integers(0, n_starts)
    else:
        names = np.array(list(sequence_catalog), dtype=object)
        sizes = np.array([sequence_catalog[c] for c in names], dtype=np.int64)
        chroms = np.empty(len(widths), dtype=object)
        starts = np.empty(len(widths), dtype=np.int64)
        # One draw per distinct width; groups are visited in sorted width order
        for width in np.unique(widths):
            rows = np.flatnonzero(widths == width)
            n_starts = np.clip(sizes - width + 1, 0, None)
            total = n_starts.sum()
            if total == 0:
                raise OutOfRange(f"Interval of width {width} does not fit on any chromosome")
            picks = rng.choice(len(names), size=len(rows), p=n_starts / total)
            chroms[rows] = names[picks]
            starts[rows] = rng.integers(0, n_starts[picks])
        shuffled["chrom"] = chroms

    shuffled["start"] = starts.astype(np.int64)
    shuffled["end"] = shuffled["start"] + widths
    return shuffled


def reduce_catalog(catalog: IntervalSet, backend: Optional[IntervalBackend] = None) -> IntervalSet:
    """Collapse overlapping catalog records into maximal non-overlapping loci."""
    backend = backend or get_backend()
    reduced = backend.merge(catalog.frame)
    logger.debug(f"Reduced catalog from {len(catalog)} records to {len(reduced)} loci")
    return IntervalSet(reduced, catalog.sequence_catalog)


def _validate_inputs(
    binding_sites: IntervalSet,
    catalog: IntervalSet,
    sequence_catalog: SequenceCatalog,
    iterations: int,
    seed: int,
    n_workers: int,
) -> None:
    if len(binding_sites) == 0:
        raise InvalidInput("Binding-site set is empty")
    if len(catalog) == 0:
        raise InvalidInput("Catalog is empty")
    if isinstance(iterations, bool) or not isinstance(iterations, (int, np.integer)):
        raise InvalidInput(f"iterations must be an integer, got {iterations!r}")
    if iterations < 1:
        raise InvalidInput(f"iterations must be >= 1, got {iterations}")
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise InvalidInput(f"seed must be a non-negative integer, got {seed!r}")
    if isinstance(n_workers, bool) or not isinstance(n_workers, (int, np.integer)) or n_workers < 1:
        raise InvalidInput(f"n_workers must be a positive integer, got {n_workers!r}")

    missing = sequence_catalog.missing(binding_sites.chromosomes)
    if missing:
        raise InvalidInput(
            f"Sequence catalog has no length for binding-site chromosome(s): {missing}"
        )

    lengths = binding_sites.frame["chrom"].map(sequence_catalog.length).to_numpy()
    too_wide = binding_sites.widths > lengths
    if too_wide.any():
        i = int(np.argmax(too_wide))
        site = binding_sites.frame.iloc[i]
        raise OutOfRange(
            f"{int(too_wide.sum())} binding site(s) wider than their chromosome, e.g. "
            f"{site['chrom']}:{site['start']}-{site['end']} on a chromosome of length {lengths[i]}"
        )


def _permutation_sample(
    binding_frame: pd.DataFrame,
    reduced: pd.DataFrame,
    sequence_catalog: SequenceCatalog,
    backend: IntervalBackend,
    keep_chromosome: bool,
    seed: int,
    iteration: int,
) -> int:
    rng = iteration_rng(seed, iteration)
    shuffled = shuffle_intervals(binding_frame, sequence_catalog, rng, keep_chromosome)
    return int(backend.count_overlaps(shuffled, reduced))


def _init_worker(*state):
    global _WORKER_STATE
    setup_thread_limits(1)
    _WORKER_STATE = state


def _worker_sample(iteration: int) -> int:
    if _WORKER_STATE is None:
        raise RuntimeError("Permutation state not initialized in worker process")
    return _permutation_sample(*_WORKER_STATE, iteration)


def run_enrichment_test(
    binding_sites: IntervalSet,
    catalog: IntervalSet,
    sequence_catalog: Optional[SequenceCatalog],
    iterations: int,
    seed: int,
    *,
    backend: Optional[IntervalBackend] = None,
    n_workers: int = 1,
    keep_chromosome: bool = True,
    progress: Optional[ProgressCallback] = None,
) -> EnrichmentResult:
    """
    Test whether catalog loci overlap binding sites more than expected by chance.

    Args:
        binding_sites: Fixed experimental peaks (non-empty)
        catalog: Annotation records to test (non-empty); reduced before counting
        sequence_catalog: Chromosome lengths bounding the random placement;
            falls back to ``binding_sites.sequence_catalog`` when None
        iterations: Number of permutations (>= 1)
        seed: Non-negative seed; equal inputs and seed give an equal result
        backend: Interval backend (default: bioframe)
        n_workers: Worker processes for the permutation loop
        keep_chromosome: Keep each binding site on its own chromosome
        progress: Optional ``progress(done, total)`` callback

    Returns:
        EnrichmentResult

    Raises:
        InvalidInput: Empty sets, bad iteration/seed/worker counts, or
            binding-site chromosomes missing from the sequence catalog
        OutOfRange: A binding site is wider than its chromosome
        DependencyFailure: The interval backend failed
    """
    if sequence_catalog is None:
        sequence_catalog = binding_sites.sequence_catalog
    if sequence_catalog is None:
        raise InvalidInput("No sequence catalog given for the binding sites")

    _validate_inputs(binding_sites, catalog, sequence_catalog, iterations, seed, n_workers)
    backend = backend or get_backend()
    iterations, seed, n_workers = int(iterations), int(seed), int(n_workers)

    reduced = reduce_catalog(catalog, backend).frame
    binding_frame = binding_sites.frame
    logger.info(
        f"Testing {len(binding_frame)} binding sites against {len(reduced)} catalog loci "
        f"({len(catalog)} records) with the {backend.name} backend"
    )

    observed = int(backend.count_overlaps(binding_frame, reduced))
    logger.info(f"  Observed overlaps: {observed}")

    logger.info(f"  Running {iterations} permutations...")
    start_time = time.time()
    state = (binding_frame, reduced, sequence_catalog, backend, keep_chromosome, seed)
    samples = []

    if n_workers == 1:
        for i in range(iterations):
            samples.append(_permutation_sample(*state, i))
            logger.debug(f"  Permutation {i + 1}: {samples[-1]} overlaps")
            if progress is not None:
                progress(i + 1, iterations)
    else:
        n_workers = min(n_workers, iterations)
        logger.info(f"  Using {n_workers} worker processes")
        chunksize = max(1, iterations // (n_workers * 4))
        with mp.Pool(n_workers, initializer=_init_worker, initargs=state) as pool:
            for count in pool.imap(_worker_sample, range(iterations), chunksize=chunksize):
                samples.append(count)
                if progress is not None:
                    progress(len(samples), iterations)

    elapsed_time = time.time() - start_time
    logger.info(f"  Completed in {elapsed_time:.1f} seconds")

    samples = tuple(int(s) for s in samples)
    result = EnrichmentResult(
        observed=observed,
        samples=samples,
        p_value=empirical_p_value(samples, observed),
    )
    logger.info(
        f"  Expected {result.expected_mean:.2f} +/- {result.expected_std:.2f}, "
        f"p-value {result.p_value:.4g}"
    )
    return result
