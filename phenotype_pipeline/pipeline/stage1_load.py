"""
Stage 1: Data Load

Reads the two source CSVs and stages them as parquet.

Sources:
    - phenotypes.csv  (group, population, family, plot, block, d13c)
    - environment.csv (family, population, elev, latitude, ...)

Identifier columns are read as text so that family codes match exactly
between the two files.
"""

import logging
from pathlib import Path
from typing import Optional

from ..config import (
    PHENOTYPE_CSV,
    ENVIRONMENT_CSV,
    STAGING_DIR,
    PHENOTYPES_RAW_PARQUET,
    ENVIRONMENT_RAW_PARQUET,
    PIPELINE_CONFIG,
    PipelineConfig,
)
from ..schema import CATEGORICAL, phenotype_schema, environment_schema
from ..utils.io import read_records_csv, save_parquet

logger = logging.getLogger(__name__)


def load_phenotypes(
    path: Optional[Path] = None,
    config: Optional[PipelineConfig] = None,
):
    """Read raw phenotype records and check their columns."""
    config = config or PIPELINE_CONFIG
    path = Path(path or PHENOTYPE_CSV)
    schema = phenotype_schema(config)

    logger.info(f"Loading phenotype records from {path}")
    categorical = [c.name for c in schema.columns if c.kind == CATEGORICAL]
    df = read_records_csv(path, categorical=categorical)
    return schema.conform(df, stage="load phenotypes")


def load_environment(
    path: Optional[Path] = None,
    config: Optional[PipelineConfig] = None,
):
    """Read raw environment records and check their columns."""
    config = config or PIPELINE_CONFIG
    path = Path(path or ENVIRONMENT_CSV)
    schema = environment_schema(config)

    logger.info(f"Loading environment records from {path}")
    categorical = [c.name for c in schema.columns if c.kind == CATEGORICAL]
    df = read_records_csv(path, categorical=categorical)
    return schema.conform(df, stage="load environment")


def run_load(
    phenotypes_path: Optional[Path] = None,
    environment_path: Optional[Path] = None,
    staging_dir: Optional[Path] = None,
    config: Optional[PipelineConfig] = None,
) -> dict:
    """
    Run the data load stage.

    Returns:
        dict: Row counts and staged file paths
    """
    logger.info("=" * 60)
    logger.info("STAGE 1: DATA LOAD")
    logger.info("=" * 60)

    staging_dir = Path(staging_dir or STAGING_DIR)

    phenotypes = load_phenotypes(phenotypes_path, config)
    environment = load_environment(environment_path, config)

    ph_path = save_parquet(phenotypes, staging_dir / PHENOTYPES_RAW_PARQUET.name)
    env_path = save_parquet(environment, staging_dir / ENVIRONMENT_RAW_PARQUET.name)

    logger.info(
        f"Stage 1 complete: {len(phenotypes):,} phenotype rows, "
        f"{len(environment):,} environment rows"
    )
    return {
        'phenotype_rows': len(phenotypes),
        'environment_rows': len(environment),
        'phenotypes_path': ph_path,
        'environment_path': env_path,
    }
