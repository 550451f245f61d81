"""
Table Pipeline

In-memory composition of the six table stages:

    filter -> project -> rename -> derive -> group-aggregate -> join

Each stage returns a new DataFrame and validates its output against the
schema of the next boundary. Any failure propagates immediately; there
is no partial result.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from ..config import PIPELINE_CONFIG, PipelineConfig
from ..cleaning.phenotype_cleaner import PhenotypeCleaner
from ..aggregation.family_means import compute_family_means
from ..assembly.analysis_assembly import assemble_analysis_table

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Intermediate and final tables of one pipeline run."""
    clean: pd.DataFrame
    family_means: pd.DataFrame
    analysis: pd.DataFrame

    def summary(self) -> dict:
        return {
            "clean_rows": len(self.clean),
            "families": len(self.family_means),
            "analysis_rows": len(self.analysis),
        }


class TablePipeline:
    """
    Converts raw phenotype and environment records into the family-level
    analysis table.

    Usage:
        result = TablePipeline().run(phenotypes, environment)
        result.analysis  # population, fam, elev, latitude, ..., mean.d13c
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PIPELINE_CONFIG
        self.cleaner = PhenotypeCleaner(self.config)

    def clean(self, phenotypes: pd.DataFrame) -> pd.DataFrame:
        """Filter, project, rename and derive."""
        return self.cleaner.clean(phenotypes)

    def aggregate(self, clean: pd.DataFrame) -> pd.DataFrame:
        """Group-aggregate cleaned records to family means."""
        return compute_family_means(clean, self.config)

    def join(self, family_means: pd.DataFrame, environment: pd.DataFrame) -> pd.DataFrame:
        """Join family means onto environment records and drop count."""
        return assemble_analysis_table(family_means, environment, self.config)

    def run(self, phenotypes: pd.DataFrame, environment: pd.DataFrame) -> PipelineResult:
        """
        Run all stages in order.

        Args:
            phenotypes: Raw phenotype records
            environment: Raw environment records, one row per family

        Returns:
            PipelineResult with the clean, family-mean and analysis tables

        Raises:
            ColumnNotFound, NameCollision, AmbiguousJoin
        """
        logger.info(
            f"Running table pipeline on {len(phenotypes):,} phenotype "
            f"and {len(environment):,} environment records"
        )

        clean = self.clean(phenotypes)
        family_means = self.aggregate(clean)
        analysis = self.join(family_means, environment)

        result = PipelineResult(clean=clean, family_means=family_means, analysis=analysis)
        logger.info(f"Table pipeline complete: {result.summary()}")
        return result


def run_table_pipeline(
    phenotypes: pd.DataFrame,
    environment: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
) -> pd.DataFrame:
    """Run the table pipeline and return only the analysis table."""
    return TablePipeline(config).run(phenotypes, environment).analysis
