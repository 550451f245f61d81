"""
Phenotype Pipeline.

Turns raw offspring phenotype records and family source-environment
records into a family-level analysis table, then summarises, models and
plots it.

Public API
----------
Core configuration:
    PROJECT_ROOT, RAW_DIR, STAGING_DIR, FINAL_DIR
    PIPELINE_CONFIG, VALIDATION_CONFIG, PipelineConfig

Errors:
    PipelineError, ColumnNotFound, NameCollision, AmbiguousJoin

Table stages:
    TablePipeline, run_table_pipeline, filter_rows, drop_columns,
    rename_columns, derive_column, aggregate_by_group, left_join

Pipeline:
    run_full_pipeline
"""

__version__ = "0.1.0"


from .config import (
    PROJECT_ROOT,
    RAW_DIR,
    STAGING_DIR,
    FINAL_DIR,
    PIPELINE_CONFIG,
    VALIDATION_CONFIG,
    PipelineConfig,
)

from .errors import PipelineError, ColumnNotFound, NameCollision, AmbiguousJoin

from .cleaning import filter_rows, drop_columns, rename_columns, derive_column
from .aggregation import aggregate_by_group
from .assembly import left_join
from .pipeline.table_pipeline import TablePipeline, PipelineResult, run_table_pipeline


def run_full_pipeline(*args, **kwargs):
    """Run all pipeline stages. See pipeline.runner for details."""
    from .pipeline.runner import run_full_pipeline as _run
    return _run(*args, **kwargs)


__all__ = [
    # Version
    "__version__",
    # Configuration
    "PROJECT_ROOT",
    "RAW_DIR",
    "STAGING_DIR",
    "FINAL_DIR",
    "PIPELINE_CONFIG",
    "VALIDATION_CONFIG",
    "PipelineConfig",
    # Errors
    "PipelineError",
    "ColumnNotFound",
    "NameCollision",
    "AmbiguousJoin",
    # Table stages
    "filter_rows",
    "drop_columns",
    "rename_columns",
    "derive_column",
    "aggregate_by_group",
    "left_join",
    "TablePipeline",
    "PipelineResult",
    "run_table_pipeline",
    # Pipeline
    "run_full_pipeline",
]
