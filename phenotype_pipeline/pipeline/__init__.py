"""
Phenotype Pipeline - 5-Stage Architecture

The pipeline is organized into 5 sequential stages:
    1. LOAD    - Read source CSVs into staging
    2. CLEAN   - Filter, project, rename, derive
    3. MERGE   - Family means joined onto environment records
    4. ANALYZE - Summaries, correlations, mixed models
    5. OUTPUT  - Markdown tables and figures

Usage:
    from phenotype_pipeline.pipeline import run_full_pipeline
    run_full_pipeline()

The table stages alone, in memory:
    from phenotype_pipeline.pipeline import TablePipeline
    result = TablePipeline().run(phenotypes, environment)
"""

from .table_pipeline import TablePipeline, PipelineResult, run_table_pipeline
from .stage1_load import run_load
from .stage2_clean import run_clean
from .stage3_merge import run_merge
from .stage4_analyze import run_analyze
from .stage5_output import run_output
from .runner import run_full_pipeline, run_from_stage, run_single_stage, run_qa

__all__ = [
    'TablePipeline',
    'PipelineResult',
    'run_table_pipeline',
    'run_load',
    'run_clean',
    'run_merge',
    'run_analyze',
    'run_output',
    'run_full_pipeline',
    'run_from_stage',
    'run_single_stage',
    'run_qa',
]
