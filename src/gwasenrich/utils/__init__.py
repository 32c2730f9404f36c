"""Utility modules for gwasenrich."""

from gwasenrich.utils.config import (
    DEFAULT_BACKEND,
    DEFAULT_ITERATIONS,
    DEFAULT_RANDOM_SEED,
    DEFAULT_WORKERS,
    HG19_GENOME_SIZES,
    HG38_GENOME_SIZES,
    EnrichConfig,
    get_genome_sizes,
    setup_thread_limits,
)
from gwasenrich.utils.io import (
    create_output_dirs,
    load_bed,
    load_catalog,
    load_chrom_sizes,
    load_gwas_catalog,
    save_bed,
)
from gwasenrich.utils.validation import (
    filter_chromosomes,
    missing_chromosomes,
    validate_interval_columns,
)
from gwasenrich.utils.logging_utils import setup_logger
from gwasenrich.utils.subprocess_utils import (
    check_tool_installed,
    require_tools,
    run_command,
)
