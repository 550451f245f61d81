"""
Family-level aggregation of individual phenotype records.

Computes, per family:
- count: number of non-missing d13c observations
- mean.d13c: mean of the non-missing observations

A family whose observations are all missing keeps its row with
count = 0 and a missing mean.
"""

import pandas as pd
from pathlib import Path
from typing import Optional
import logging

from ..config import PIPELINE_CONFIG, PipelineConfig
from ..schema import family_mean_schema, require_columns

logger = logging.getLogger(__name__)


def aggregate_by_group(
    df: pd.DataFrame,
    key: str,
    value: str,
    count_name: str = "count",
    mean_name: str = "mean",
    stage: str = "aggregate",
) -> pd.DataFrame:
    """
    Count and average the non-missing values of ``value`` per ``key``.

    Groups appear in first-seen key order. Rows with a missing key form
    their own group rather than being dropped.

    Args:
        df: Records to aggregate
        key: Grouping column
        value: Numeric column to count and average
        count_name: Name of the output count column
        mean_name: Name of the output mean column
        stage: Stage name used in error messages

    Returns:
        DataFrame with columns [key, count_name, mean_name], one row per group
    """
    require_columns(df, [key, value], stage=stage)

    values = pd.to_numeric(df[value], errors="coerce")
    grouped = values.groupby(df[key], sort=False, dropna=False)

    stats = pd.DataFrame({
        count_name: grouped.count().astype("int64"),
        "_total": grouped.sum(),
    })

    # Zero-count groups divide by NaN instead of zero
    stats[mean_name] = stats["_total"] / stats[count_name].where(stats[count_name] > 0)

    out = stats.drop(columns="_total").rename_axis(key).reset_index()
    return out[[key, count_name, mean_name]]


def compute_family_means(
    clean_df: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
    output_path: Optional[Path] = None,
) -> pd.DataFrame:
    """
    Aggregate cleaned phenotype records to family means.

    Args:
        clean_df: Cleaned phenotype records with the family key and d13c
        config: Pipeline configuration (column names)
        output_path: Optional parquet path to save results

    Returns:
        DataFrame with one row per family: fam, count, mean.d13c
    """
    config = config or PIPELINE_CONFIG

    if len(clean_df) == 0:
        logger.warning("No phenotype records to aggregate")

    logger.info(f"Computing family means from {len(clean_df):,} records")

    means = aggregate_by_group(
        clean_df,
        key=config.key_column,
        value=config.measurement_column,
        count_name=config.count_column,
        mean_name=config.mean_column,
        stage="aggregate",
    )
    means = family_mean_schema(config).conform(means, stage="aggregate")

    empty = (means[config.count_column] == 0).sum()
    logger.info(f"Computed means for {len(means):,} families")
    if len(means) > 0:
        logger.info(f"  Mean observations per family: {means[config.count_column].mean():.1f}")
        logger.info(f"  Grand mean of family means: {means[config.mean_column].mean():.3f}")
    if empty:
        logger.warning(f"  {empty:,} families have no measured individuals (mean left missing)")

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        means.to_parquet(output_path, index=False)
        logger.info(f"Saved family means to {output_path}")

    return means
