"""
QA report generation for the phenotype pipeline.

Produces qa_report.md with join coverage, validation results and
missingness for the staged and final tables.
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Dict, List
from datetime import datetime
import logging

from ..config import (
    FINAL_DIR,
    STAGING_DIR,
    DOCS_DIR,
    PHENOTYPES_RAW_PARQUET,
    ENVIRONMENT_RAW_PARQUET,
    FAMILY_MEANS_PARQUET,
    ANALYSIS_PARQUET,
    PIPELINE_CONFIG,
)
from ..utils.io import ensure_dir
from .validators import (
    validate_phenotypes,
    validate_environment,
    validate_analysis_table,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def compute_missingness(df: pd.DataFrame) -> Dict[str, float]:
    """Compute missingness rate for each column."""
    return {
        col: float(df[col].isna().mean()) if len(df) > 0 else 0.0
        for col in df.columns
    }


def compute_join_coverage(
    family_means: pd.DataFrame,
    analysis: pd.DataFrame,
) -> Dict[str, float]:
    """Share of environment families with a mean, and of measured families with environment data."""
    key = PIPELINE_CONFIG.key_column
    mean_col = PIPELINE_CONFIG.mean_column
    rates = {}

    if len(analysis) > 0 and mean_col in analysis.columns:
        rates["environment_families_with_mean"] = float(analysis[mean_col].notna().mean())

    if len(family_means) > 0 and key in analysis.columns:
        measured = family_means[family_means[mean_col].notna()]
        if len(measured) > 0:
            rates["measured_families_with_environment"] = float(
                measured[key].isin(analysis[key]).mean()
            )

    return rates


def _validation_section(title: str, checks: List[ValidationResult]) -> str:
    rows = [f"""
### {title}

| Check | Status | Details |
|-------|--------|---------|"""]
    for v in checks:
        status = "Pass" if v.passed else "FAIL"
        rows.append(f"| {v.check_name} | {status} | {v.message} |")
    return "\n".join(rows)


def generate_qa_report(
    output_path: Optional[Path] = None,
    staging_dir: Optional[Path] = None,
    final_dir: Optional[Path] = None,
) -> str:
    """
    Generate the QA report from whatever staged and final files exist.

    Returns:
        Markdown report string
    """
    output_path = Path(output_path or DOCS_DIR / "qa_report.md")
    staging_dir = Path(staging_dir or STAGING_DIR)
    final_dir = Path(final_dir or FINAL_DIR)

    sections = [f"""# Data Quality Assurance Report

Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}

This report summarizes data quality metrics for the phenotype pipeline outputs.
"""]

    tables = {}
    for name, path in [
        ("phenotypes", staging_dir / PHENOTYPES_RAW_PARQUET.name),
        ("environment", staging_dir / ENVIRONMENT_RAW_PARQUET.name),
        ("family_means", staging_dir / FAMILY_MEANS_PARQUET.name),
        ("analysis_family", final_dir / ANALYSIS_PARQUET.name),
    ]:
        if path.exists():
            tables[name] = pd.read_parquet(path)

    if "phenotypes" in tables:
        ph = tables["phenotypes"]
        sections.append(f"""
## Phenotype Records

- **Rows**: {len(ph):,}
- **Populations**: {ph['population'].nunique() if 'population' in ph.columns else 'N/A'}
- **Families**: {ph['family'].nunique() if 'family' in ph.columns else 'N/A'}
""")

    if "analysis_family" in tables:
        af = tables["analysis_family"]
        sections.append(f"""
## Analysis Family Summary

- **Families**: {len(af):,}
- **Columns**: {', '.join(af.columns)}
""")

    if "family_means" in tables and "analysis_family" in tables:
        rates = compute_join_coverage(tables["family_means"], tables["analysis_family"])
        sections.append("""
## Join Coverage

| Metric | Rate |
|--------|------|""")
        for metric, rate in rates.items():
            sections.append(f"| {metric} | {rate:.1%} |")

    sections.append("""
## Validation Checks
""")
    validators = [
        ("phenotypes", "Phenotype Validations", validate_phenotypes),
        ("environment", "Environment Validations", validate_environment),
        ("analysis_family", "Analysis Table Validations", validate_analysis_table),
    ]
    for name, title, validate in validators:
        if name in tables:
            sections.append(_validation_section(title, validate(tables[name])))

    if "analysis_family" in tables:
        missing = compute_missingness(tables["analysis_family"])
        sections.append("""
## Missingness Summary (Analysis Table)

| Column | Missing Rate |
|--------|--------------|""")
        for col, rate in sorted(missing.items(), key=lambda x: x[1], reverse=True):
            sections.append(f"| {col} | {rate:.1%} |")

    report = "\n".join(sections) + "\n"

    ensure_dir(output_path.parent)
    with open(output_path, "w") as f:
        f.write(report)

    logger.info(f"Generated QA report: {output_path}")
    return report
