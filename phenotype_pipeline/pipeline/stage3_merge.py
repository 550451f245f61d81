"""
Stage 3: Data Merging

Reduces cleaned records to one row per family and joins them onto the
environment table.

Operations:
    - Group-aggregate d13c by fam (count, mean.d13c)
    - Rename environment family -> fam
    - environment LEFT JOIN family means ON fam
    - Drop count and write analysis_family.tsv
"""

import logging
from pathlib import Path
from typing import Optional

from ..config import (
    STAGING_DIR,
    FINAL_DIR,
    PHENOTYPES_CLEAN_PARQUET,
    FAMILY_MEANS_PARQUET,
    PIPELINE_CONFIG,
    PipelineConfig,
)
from ..aggregation.family_means import compute_family_means
from ..assembly.analysis_assembly import AnalysisAssembler
from ..utils.io import load_parquet

logger = logging.getLogger(__name__)


def run_merge(
    staging_dir: Optional[Path] = None,
    final_dir: Optional[Path] = None,
    config: Optional[PipelineConfig] = None,
) -> dict:
    """
    Run the data merging stage.

    Returns:
        dict: Assembly summary plus output paths
    """
    logger.info("=" * 60)
    logger.info("STAGE 3: DATA MERGING")
    logger.info("=" * 60)

    staging_dir = Path(staging_dir or STAGING_DIR)
    final_dir = Path(final_dir or FINAL_DIR)
    config = config or PIPELINE_CONFIG

    clean = load_parquet(staging_dir / PHENOTYPES_CLEAN_PARQUET.name)
    compute_family_means(clean, config, output_path=staging_dir / FAMILY_MEANS_PARQUET.name)

    assembler = AnalysisAssembler(staging_dir=staging_dir, final_dir=final_dir, config=config)
    assembler.assemble()
    tsv_path = assembler.save()

    summary = assembler.get_summary()
    logger.info(
        f"Stage 3 complete: {summary['total_families']:,} families, "
        f"{summary['mean_coverage']:.1%} with {config.mean_column}"
    )
    summary['analysis_path'] = tsv_path
    return summary
