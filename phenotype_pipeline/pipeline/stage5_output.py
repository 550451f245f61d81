"""
Stage 5: Write Output

Renders the Stage 4 results:
    - output/tables/population_summary.md
    - output/tables/mixed_models.md
    - output/figures/*.png
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config import STAGING_DIR, FINAL_DIR, PHENOTYPES_CLEAN_PARQUET, ANALYSIS_PARQUET
from ..analyses.config import TABLES_DIR, FIGURES_DIR, RESULTS_DIR
from ..analyses.mixed_model import MixedModelResult
from ..analyses.output_generator import (
    generate_population_summary_table,
    generate_mixed_model_table,
    load_results_json,
)
from ..analyses.figures import generate_figures
from ..utils.io import load_parquet

logger = logging.getLogger(__name__)


def run_output(
    staging_dir: Optional[Path] = None,
    final_dir: Optional[Path] = None,
    results_dir: Optional[Path] = None,
    tables_dir: Optional[Path] = None,
    figures_dir: Optional[Path] = None,
    include_figures: bool = True,
) -> dict:
    """
    Run the output stage.

    Returns:
        dict: Paths of generated tables and figures
    """
    logger.info("=" * 60)
    logger.info("STAGE 5: WRITE OUTPUT")
    logger.info("=" * 60)

    staging_dir = Path(staging_dir or STAGING_DIR)
    final_dir = Path(final_dir or FINAL_DIR)
    results_dir = Path(results_dir or RESULTS_DIR)
    tables_dir = Path(tables_dir or TABLES_DIR)
    figures_dir = Path(figures_dir or FIGURES_DIR)

    results = load_results_json(results_dir / "analysis_results.json")
    summary = pd.DataFrame(results["population_summary"])
    correlations = pd.DataFrame(results["correlations"])
    models = {k: MixedModelResult.from_dict(v) for k, v in results["models"].items()}

    tables = [
        generate_population_summary_table(
            summary, correlations, output_path=tables_dir / "population_summary.md"
        ),
        generate_mixed_model_table(models, output_path=tables_dir / "mixed_models.md"),
    ]

    figures = {}
    if include_figures:
        logger.info("Rendering figures...")
        clean = load_parquet(staging_dir / PHENOTYPES_CLEAN_PARQUET.name)
        analysis = load_parquet(final_dir / ANALYSIS_PARQUET.name)
        figures = generate_figures(clean, analysis, output_dir=figures_dir)

    logger.info(f"Stage 5 complete: {len(tables)} tables, {len(figures)} figures")
    return {
        'tables': tables,
        'figures': figures,
    }
