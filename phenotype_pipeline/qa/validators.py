"""
Data validation functions for source and analysis files.

Implements plausibility and consistency checks. Validators report; they
never modify or reject data.
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Dict, List, Any
from dataclasses import dataclass
import logging

from ..config import (
    VALIDATION_CONFIG,
    PIPELINE_CONFIG,
    PHENOTYPES_RAW_PARQUET,
    ENVIRONMENT_RAW_PARQUET,
    ANALYSIS_PARQUET,
    ValidationConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    check_name: str
    passed: bool
    message: str
    affected_count: int = 0
    affected_fraction: float = 0.0
    details: Dict[str, Any] = None


def _fraction(count: int, total: int) -> float:
    return count / total if total > 0 else 0.0


def _range_check(
    values: pd.Series,
    name: str,
    low: float,
    high: float,
) -> ValidationResult:
    v = pd.to_numeric(values, errors="coerce")
    present = int(v.notna().sum())
    outside = int(((v < low) | (v > high)).sum())
    return ValidationResult(
        check_name=f"{name}_range",
        passed=(outside == 0),
        message=f"{outside} values outside [{low:g}, {high:g}]",
        affected_count=outside,
        affected_fraction=_fraction(outside, present),
    )


def _uniqueness_check(df: pd.DataFrame, column: str) -> ValidationResult:
    dup_mask = df[column].duplicated(keep=False) & df[column].notna()
    duplicates = int(df[column].duplicated().sum())
    return ValidationResult(
        check_name=f"{column}_uniqueness",
        passed=(duplicates == 0),
        message=f"{duplicates} duplicate {column} values found",
        affected_count=duplicates,
        affected_fraction=_fraction(duplicates, len(df)),
        details={"duplicated": sorted(df.loc[dup_mask, column].astype(str).unique().tolist())},
    )


def validate_phenotypes(
    df: pd.DataFrame,
    config: ValidationConfig = VALIDATION_CONFIG,
) -> List[ValidationResult]:
    """
    Validate raw phenotype records.

    Checks:
    - rows of the unplanted group carry no d13c
    - d13c within the plausible C3 range
    - share of missing d13c

    Returns:
        List of ValidationResult objects
    """
    results = []
    value = PIPELINE_CONFIG.measurement_column
    group = PIPELINE_CONFIG.group_column

    if group in df.columns and value in df.columns:
        unplanted = df[df[group].astype("string") == config.unplanted_group]
        measured = int(pd.to_numeric(unplanted[value], errors="coerce").notna().sum())
        results.append(ValidationResult(
            check_name="unplanted_group_unmeasured",
            passed=(measured == 0),
            message=f"{measured} of {len(unplanted)} group {config.unplanted_group} rows have {value}",
            affected_count=measured,
            affected_fraction=_fraction(measured, len(unplanted)),
        ))

    if value in df.columns:
        results.append(_range_check(df[value], value, config.min_d13c, config.max_d13c))

        missing = int(pd.to_numeric(df[value], errors="coerce").isna().sum())
        results.append(ValidationResult(
            check_name=f"{value}_missing",
            passed=True,
            message=f"{missing} of {len(df)} rows missing {value}",
            affected_count=missing,
            affected_fraction=_fraction(missing, len(df)),
        ))

    return results


def validate_environment(
    df: pd.DataFrame,
    config: ValidationConfig = VALIDATION_CONFIG,
) -> List[ValidationResult]:
    """
    Validate environment records.

    Checks:
    - one row per family (a duplicate would make the join ambiguous)
    - elevation and latitude ranges
    """
    results = []

    for key in ("family", PIPELINE_CONFIG.key_column):
        if key in df.columns:
            results.append(_uniqueness_check(df, key))
            break

    if "elev" in df.columns:
        results.append(_range_check(df["elev"], "elev", config.min_elev, config.max_elev))
    if "latitude" in df.columns:
        results.append(_range_check(df["latitude"], "latitude", config.min_latitude, config.max_latitude))

    return results


def validate_analysis_table(
    df: pd.DataFrame,
    config: ValidationConfig = VALIDATION_CONFIG,
) -> List[ValidationResult]:
    """
    Validate the analysis_family table.

    Checks:
    - fam uniqueness
    - count column absent
    - coverage of mean.d13c
    - mean.d13c within the plausible range
    """
    results = []
    key = PIPELINE_CONFIG.key_column
    mean_col = PIPELINE_CONFIG.mean_column

    if key in df.columns:
        results.append(_uniqueness_check(df, key))

    leftover = [c for c in PIPELINE_CONFIG.final_drop_columns if c in df.columns]
    results.append(ValidationResult(
        check_name="dropped_columns_absent",
        passed=not leftover,
        message=f"Unexpected columns present: {leftover}" if leftover else "No dropped columns present",
        affected_count=len(leftover),
    ))

    if mean_col in df.columns:
        without = int(df[mean_col].isna().sum())
        results.append(ValidationResult(
            check_name="mean_coverage",
            passed=True,
            message=f"{without} of {len(df)} families without {mean_col}",
            affected_count=without,
            affected_fraction=_fraction(without, len(df)),
        ))
        results.append(_range_check(df[mean_col], mean_col, config.min_d13c, config.max_d13c))

    return results


def run_all_validations(
    phenotypes_path: Optional[Path] = None,
    environment_path: Optional[Path] = None,
    analysis_path: Optional[Path] = None,
) -> Dict[str, List[ValidationResult]]:
    """
    Run all validations on staged and final files that exist.

    Returns:
        Dict mapping file type to list of validation results
    """
    results = {}

    phenotypes_path = Path(phenotypes_path or PHENOTYPES_RAW_PARQUET)
    if phenotypes_path.exists():
        results["phenotypes"] = validate_phenotypes(pd.read_parquet(phenotypes_path))

    environment_path = Path(environment_path or ENVIRONMENT_RAW_PARQUET)
    if environment_path.exists():
        results["environment"] = validate_environment(pd.read_parquet(environment_path))

    analysis_path = Path(analysis_path or ANALYSIS_PARQUET)
    if analysis_path.exists():
        results["analysis_family"] = validate_analysis_table(pd.read_parquet(analysis_path))

    for file_type, checks in results.items():
        failed = [c.check_name for c in checks if not c.passed]
        if failed:
            logger.warning(f"{file_type}: failed checks {failed}")
        else:
            logger.info(f"{file_type}: {len(checks)} checks passed")

    return results
