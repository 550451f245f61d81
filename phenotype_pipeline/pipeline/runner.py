"""
Pipeline Runner

Orchestrates the 5-stage data pipeline plus the QA report.

Stages:
    1. LOAD    - Read source CSVs into staging
    2. CLEAN   - Filter, project, rename, derive
    3. MERGE   - Family means joined onto environment records
    4. ANALYZE - Summaries, correlations, mixed models
    5. OUTPUT  - Markdown tables and figures

A failing stage stops the run; later stages never see partial output.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from ..config import STAGING_DIR, FINAL_DIR, OUTPUT_DIR, DOCS_DIR, PipelineConfig

logger = logging.getLogger(__name__)

STAGE_NAMES = {
    1: 'load',
    2: 'clean',
    3: 'merge',
    4: 'analyze',
    5: 'output',
}


def _stage_kwargs(
    stage: int,
    phenotypes_path: Optional[Path] = None,
    environment_path: Optional[Path] = None,
    staging_dir: Optional[Path] = None,
    final_dir: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    config: Optional[PipelineConfig] = None,
) -> dict:
    output_dir = Path(output_dir or OUTPUT_DIR)
    if stage == 1:
        return dict(phenotypes_path=phenotypes_path, environment_path=environment_path,
                    staging_dir=staging_dir, config=config)
    if stage == 2:
        return dict(staging_dir=staging_dir, config=config)
    if stage == 3:
        return dict(staging_dir=staging_dir, final_dir=final_dir, config=config)
    if stage == 4:
        return dict(staging_dir=staging_dir, final_dir=final_dir,
                    results_dir=output_dir / 'results', config=config)
    return dict(staging_dir=staging_dir, final_dir=final_dir,
                results_dir=output_dir / 'results', tables_dir=output_dir / 'tables',
                figures_dir=output_dir / 'figures')


def _stage_function(stage: int):
    if stage == 1:
        from .stage1_load import run_load
        return run_load
    elif stage == 2:
        from .stage2_clean import run_clean
        return run_clean
    elif stage == 3:
        from .stage3_merge import run_merge
        return run_merge
    elif stage == 4:
        from .stage4_analyze import run_analyze
        return run_analyze
    elif stage == 5:
        from .stage5_output import run_output
        return run_output
    raise ValueError(f"Invalid stage number: {stage}. Must be 1-5.")


def run_single_stage(stage: int, **kwargs) -> dict:
    """
    Run only a single stage.

    Args:
        stage: Stage number to run (1-5)
        **kwargs: phenotypes_path, environment_path, staging_dir, final_dir,
            output_dir, config

    Returns:
        dict: Results from the stage
    """
    func = _stage_function(stage)
    logger.info(f"Running stage {stage}: {STAGE_NAMES[stage]}")
    try:
        return func(**_stage_kwargs(stage, **kwargs))
    except Exception as e:
        logger.error(f"Stage {stage} ({STAGE_NAMES[stage]}) failed: {e}")
        raise


def run_qa(
    staging_dir: Optional[Path] = None,
    final_dir: Optional[Path] = None,
    docs_dir: Optional[Path] = None,
) -> dict:
    """Write docs/qa_report.md from the staged and final files."""
    from ..qa.reporters import generate_qa_report

    logger.info("=" * 60)
    logger.info("QA REPORT")
    logger.info("=" * 60)

    path = Path(docs_dir or DOCS_DIR) / 'qa_report.md'
    report = generate_qa_report(
        output_path=path,
        staging_dir=Path(staging_dir or STAGING_DIR),
        final_dir=Path(final_dir or FINAL_DIR),
    )
    return {'report_path': path, 'failed_checks': report.count('| FAIL |')}


def run_full_pipeline(
    start_stage: int = 1,
    end_stage: int = 5,
    include_qa: bool = True,
    docs_dir: Optional[Path] = None,
    **kwargs,
) -> dict:
    """
    Run stages ``start_stage`` through ``end_stage`` in order.

    Args:
        start_stage: First stage to run (1-5)
        end_stage: Last stage to run (1-5)
        include_qa: Write the QA report after the last stage
        docs_dir: Directory for the QA report
        **kwargs: Passed to every stage, see run_single_stage

    Returns:
        dict: Results keyed by stage name
    """
    if not 1 <= start_stage <= end_stage <= 5:
        raise ValueError(f"Invalid stage range: {start_stage}-{end_stage}")

    start_time = time.time()

    logger.info("=" * 70)
    logger.info("PHENOTYPE PIPELINE")
    logger.info("=" * 70)

    results = {}
    for stage in range(start_stage, end_stage + 1):
        results[STAGE_NAMES[stage]] = run_single_stage(stage, **kwargs)

    if include_qa:
        results['qa'] = run_qa(
            staging_dir=kwargs.get('staging_dir'),
            final_dir=kwargs.get('final_dir'),
            docs_dir=docs_dir,
        )

    elapsed = time.time() - start_time
    logger.info("=" * 70)
    logger.info("PIPELINE COMPLETE")
    logger.info("=" * 70)
    logger.info(f"Total time: {elapsed:.1f} seconds")
    logger.info(f"Stages completed: {end_stage - start_stage + 1}/5")

    return results


def run_from_stage(start_stage: int, **kwargs) -> dict:
    """Run pipeline starting from a specific stage."""
    return run_full_pipeline(start_stage=start_stage, **kwargs)
