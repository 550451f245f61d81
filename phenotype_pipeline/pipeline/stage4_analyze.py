"""
Stage 4: Analyses

Runs the analysis suite on the cleaned and family-level tables:
    - Per-population summary of individual d13c
    - Correlation of family means with source covariates
    - Mixed models (M1 family means on environment, M2 family variance share)

Results are written to output/results/analysis_results.json for Stage 5.
"""

import logging
from pathlib import Path
from typing import Optional

from ..config import (
    STAGING_DIR,
    FINAL_DIR,
    PHENOTYPES_CLEAN_PARQUET,
    ANALYSIS_PARQUET,
    PIPELINE_CONFIG,
    PipelineConfig,
)
from ..analyses.config import RESULTS_DIR
from ..analyses.summary_stats import summarize_by_population, covariate_correlations
from ..analyses.mixed_model import run_models
from ..analyses.output_generator import save_results_json
from ..utils.io import load_parquet

logger = logging.getLogger(__name__)


def run_analyze(
    staging_dir: Optional[Path] = None,
    final_dir: Optional[Path] = None,
    results_dir: Optional[Path] = None,
    config: Optional[PipelineConfig] = None,
) -> dict:
    """
    Run the analysis stage.

    Returns:
        dict: summary, correlations and models, plus the results path
    """
    logger.info("=" * 60)
    logger.info("STAGE 4: ANALYSES")
    logger.info("=" * 60)

    staging_dir = Path(staging_dir or STAGING_DIR)
    final_dir = Path(final_dir or FINAL_DIR)
    results_dir = Path(results_dir or RESULTS_DIR)
    config = config or PIPELINE_CONFIG

    clean = load_parquet(staging_dir / PHENOTYPES_CLEAN_PARQUET.name)
    analysis = load_parquet(final_dir / ANALYSIS_PARQUET.name)

    logger.info("Summarising populations...")
    summary = summarize_by_population(clean, config)

    logger.info("Correlating family means with covariates...")
    correlations = covariate_correlations(analysis, response=config.mean_column)

    logger.info("Fitting mixed models...")
    models = run_models(analysis, clean)

    path = save_results_json(
        summary, correlations, models,
        output_path=results_dir / "analysis_results.json",
    )

    logger.info(f"Stage 4 complete: {len(models)} models fitted")
    return {
        'summary': summary,
        'correlations': correlations,
        'models': models,
        'results_path': path,
    }
