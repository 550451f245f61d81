"""
Stage 2: Data Cleaning

Applies the record-level stages to the staged phenotype table:

    filter   - drop rows of excluded planting groups
    project  - drop design covariates (plot, block)
    rename   - family -> fam
    derive   - low.d13c = d13c <= threshold
"""

import logging
from pathlib import Path
from typing import Optional

from ..config import (
    STAGING_DIR,
    PHENOTYPES_RAW_PARQUET,
    PHENOTYPES_CLEAN_PARQUET,
    PIPELINE_CONFIG,
    PipelineConfig,
)
from ..cleaning.phenotype_cleaner import PhenotypeCleaner
from ..utils.io import load_parquet, save_parquet

logger = logging.getLogger(__name__)


def run_clean(
    staging_dir: Optional[Path] = None,
    config: Optional[PipelineConfig] = None,
) -> dict:
    """
    Run the data cleaning stage.

    Returns:
        dict: Row counts and the staged clean file path
    """
    logger.info("=" * 60)
    logger.info("STAGE 2: DATA CLEANING")
    logger.info("=" * 60)

    staging_dir = Path(staging_dir or STAGING_DIR)
    config = config or PIPELINE_CONFIG

    raw = load_parquet(staging_dir / PHENOTYPES_RAW_PARQUET.name)
    clean = PhenotypeCleaner(config).clean(raw)
    path = save_parquet(clean, staging_dir / PHENOTYPES_CLEAN_PARQUET.name)

    low_count = int(clean[config.low_column].sum(skipna=True))
    logger.info(
        f"Stage 2 complete: {len(clean):,} of {len(raw):,} rows kept, "
        f"{low_count:,} flagged {config.low_column}"
    )
    return {
        'raw_rows': len(raw),
        'clean_rows': len(clean),
        'low_rows': low_count,
        'clean_path': path,
    }
