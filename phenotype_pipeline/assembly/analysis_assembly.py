"""
Family-level analysis file assembly.

Merges:
- environment (one row per family; family renamed to fam)
- family_means (count, mean.d13c per fam)

The environment table is the left side, so every family with
environment data appears once, in source order, whether or not it
has measured offspring. The count column is dropped before hand-off.

Outputs analysis_family.tsv/.parquet
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Dict, Any
import logging

from ..config import (
    STAGING_DIR,
    FINAL_DIR,
    ENVIRONMENT_RAW_PARQUET,
    FAMILY_MEANS_PARQUET,
    ANALYSIS_TSV,
    PIPELINE_CONFIG,
    PipelineConfig,
)
from ..cleaning.table_ops import drop_columns, rename_columns
from ..schema import analysis_schema, environment_schema, family_mean_schema
from ..utils.io import load_parquet, save_parquet, save_tsv
from .joins import left_join

logger = logging.getLogger(__name__)


def prepare_environment(
    environment: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
) -> pd.DataFrame:
    """Validate environment records and rename family to the join key."""
    config = config or PIPELINE_CONFIG
    env = environment_schema(config).conform(environment, stage="environment")
    return rename_columns(env, config.environment_renames, stage="rename environment")


def assemble_analysis_table(
    family_means: pd.DataFrame,
    environment: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
) -> pd.DataFrame:
    """
    Build the analysis table from family means and raw environment records.

    environment LEFT JOIN family_means ON fam, then drop count.

    Returns:
        DataFrame with columns population, fam, elev, latitude, ..., mean.d13c
    """
    config = config or PIPELINE_CONFIG

    means = family_mean_schema(config).conform(family_means, stage="join")
    env = prepare_environment(environment, config)

    joined = left_join(env, means, key=config.key_column, stage="join")
    result = drop_columns(joined, config.final_drop_columns, stage="final projection")
    result = analysis_schema(config).conform(result, stage="final projection")

    # schema columns lead, extra environment covariates follow, the mean is last
    leading = ["population", config.key_column, "elev", "latitude"]
    middle = [c for c in result.columns if c not in leading and c != config.mean_column]
    return result[leading + middle + [config.mean_column]]


class AnalysisAssembler:
    """
    Assembles the final family-level analysis file.

    Implements the merge logic:
    - environment RENAME family -> fam
    - LEFT JOIN family_means ON fam
    - DROP count
    """

    def __init__(
        self,
        staging_dir: Optional[Path] = None,
        final_dir: Optional[Path] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.staging_dir = staging_dir or STAGING_DIR
        self.final_dir = final_dir or FINAL_DIR
        self.config = config or PIPELINE_CONFIG

        self._family_means: Optional[pd.DataFrame] = None
        self._environment: Optional[pd.DataFrame] = None
        self._assembled: Optional[pd.DataFrame] = None

    def load_components(self):
        """Load family means and environment records from staging."""
        self._family_means = load_parquet(self.staging_dir / FAMILY_MEANS_PARQUET.name)
        logger.info(f"Loaded family_means: {len(self._family_means)} rows")

        self._environment = load_parquet(self.staging_dir / ENVIRONMENT_RAW_PARQUET.name)
        logger.info(f"Loaded environment: {len(self._environment)} rows")

    def assemble(
        self,
        family_means: Optional[pd.DataFrame] = None,
        environment: Optional[pd.DataFrame] = None,
        force_reload: bool = False,
    ) -> pd.DataFrame:
        """
        Assemble the analysis_family table.

        Components passed in directly take precedence over staging files.

        Returns:
            Family-level analysis DataFrame
        """
        if self._assembled is not None and not force_reload:
            return self._assembled

        if family_means is not None and environment is not None:
            self._family_means = family_means
            self._environment = environment
        else:
            self.load_components()

        logger.info(f"Starting with {len(self._environment)} environment records")

        result = assemble_analysis_table(self._family_means, self._environment, self.config)

        self._assembled = result
        logger.info(f"Assembled analysis_family: {len(result)} rows, {len(result.columns)} columns")

        return result

    def save(self, output_path: Optional[Path] = None) -> Path:
        """Save assembled analysis file as TSV, with a parquet copy."""
        if self._assembled is None:
            self.assemble()

        if output_path is None:
            output_path = self.final_dir / ANALYSIS_TSV.name

        save_tsv(self._assembled, output_path)
        save_parquet(self._assembled, output_path.with_suffix(".parquet"))

        return output_path

    def get_summary(self) -> Dict[str, Any]:
        """Get assembly summary statistics."""
        if self._assembled is None:
            self.assemble()

        df = self._assembled
        mean_col = self.config.mean_column

        return {
            "total_families": len(df),
            "unique_populations": df["population"].nunique(),
            "mean_coverage": df[mean_col].notna().mean() if len(df) > 0 else 0.0,
            "elev_range": (df["elev"].min(), df["elev"].max()),
            "latitude_range": (df["latitude"].min(), df["latitude"].max()),
            "total_columns": len(df.columns),
        }
