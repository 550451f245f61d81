"""
Phenotype table cleaning.

Applies the configured cleaning sequence to raw phenotype records:
    1. filter  - drop rows from excluded planting groups (unplanted trees)
    2. project - drop experimental-design columns not used downstream
    3. rename  - family -> fam, the key shared with the environment table
    4. derive  - low.d13c threshold indicator
"""

import logging
from typing import Optional

import pandas as pd

from ..config import PIPELINE_CONFIG, PipelineConfig
from ..schema import clean_phenotype_schema, phenotype_schema
from .table_ops import (
    derive_column,
    drop_columns,
    filter_rows,
    rename_columns,
    threshold_indicator,
)

logger = logging.getLogger(__name__)


class PhenotypeCleaner:
    """
    Cleans raw phenotype records into individual-level analysis rows.

    Each step returns a new DataFrame, so every intermediate table can be
    inspected or tested on its own.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PIPELINE_CONFIG

    def filter(self, df: pd.DataFrame) -> pd.DataFrame:
        return filter_rows(
            df,
            column=self.config.group_column,
            excluded=self.config.excluded_groups,
            stage="filter",
        )

    def project(self, df: pd.DataFrame) -> pd.DataFrame:
        return drop_columns(df, self.config.drop_columns, stage="project")

    def rename(self, df: pd.DataFrame) -> pd.DataFrame:
        return rename_columns(df, self.config.phenotype_renames, stage="rename")

    def derive(self, df: pd.DataFrame) -> pd.DataFrame:
        return derive_column(
            df,
            name=self.config.low_column,
            func=threshold_indicator(
                self.config.measurement_column, self.config.low_threshold
            ),
            requires=[self.config.measurement_column],
            stage="derive",
        )

    def clean(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Run filter, project, rename and derive in order.

        Args:
            df: Raw phenotype records

        Returns:
            Cleaned records conforming to the clean phenotype schema
        """
        raw = phenotype_schema(self.config).conform(df, stage="ingest")
        logger.info(f"Cleaning {len(raw):,} phenotype records")

        out = self.derive(self.rename(self.project(self.filter(raw))))
        out = clean_phenotype_schema(self.config).conform(out, stage="derive")

        measured = out[self.config.measurement_column].notna().sum()
        low = out[self.config.low_column].sum(skipna=True)
        logger.info(f"  Retained rows: {len(out):,} ({measured:,} with {self.config.measurement_column})")
        logger.info(f"  Rows with {self.config.low_column} = 1: {int(low):,}")
        return out


def clean_phenotypes(
    df: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
) -> pd.DataFrame:
    """Clean raw phenotype records with the given (or default) config."""
    return PhenotypeCleaner(config).clean(df)
