#!/usr/bin/env python3
"""
Phenotype Pipeline - Main Runner

Usage:
    python run_pipeline.py --help
    python run_pipeline.py load       # Stage source CSVs as parquet
    python run_pipeline.py clean      # Filter, project, rename, derive
    python run_pipeline.py merge      # Family means joined onto environment
    python run_pipeline.py analyze    # Summaries, correlations, mixed models
    python run_pipeline.py output     # Markdown tables and figures
    python run_pipeline.py qa         # Generate QA report
    python run_pipeline.py all        # Run full pipeline
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from phenotype_pipeline.config import PIPELINE_CONFIG, PHENOTYPE_CSV, ENVIRONMENT_CSV
from phenotype_pipeline.errors import PipelineError
from phenotype_pipeline.pipeline.runner import (
    STAGE_NAMES,
    run_full_pipeline,
    run_single_stage,
    run_qa,
)

logger = logging.getLogger(__name__)

STAGE_NUMBERS = {name: number for number, name in STAGE_NAMES.items()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Phenotype Pipeline - family-level d13c analysis table"
    )

    parser.add_argument(
        "stage",
        choices=list(STAGE_NUMBERS) + ["qa", "all"],
        help="Pipeline stage to run"
    )

    parser.add_argument(
        "--phenotypes",
        type=Path,
        default=PHENOTYPE_CSV,
        help="Phenotype records CSV"
    )

    parser.add_argument(
        "--environment",
        type=Path,
        default=ENVIRONMENT_CSV,
        help="Environment records CSV"
    )

    parser.add_argument(
        "--exclude-groups",
        nargs="+",
        default=sorted(PIPELINE_CONFIG.excluded_groups),
        help="Planting group codes removed by the filter stage"
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=PIPELINE_CONFIG.low_threshold,
        help="d13c values at or below this are flagged low.d13c = 1"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity"
    )

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = dataclasses.replace(
        PIPELINE_CONFIG,
        excluded_groups=set(args.exclude_groups),
        low_threshold=args.threshold,
    )
    stage_kwargs = dict(
        phenotypes_path=args.phenotypes,
        environment_path=args.environment,
        config=config,
    )

    try:
        if args.stage == "all":
            run_full_pipeline(**stage_kwargs)
        elif args.stage == "qa":
            run_qa()
        else:
            run_single_stage(STAGE_NUMBERS[args.stage], **stage_kwargs)
    except PipelineError as e:
        logger.error(f"Pipeline failed: {e}")
        return 1
    except FileNotFoundError as e:
        logger.error(f"Missing input: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
