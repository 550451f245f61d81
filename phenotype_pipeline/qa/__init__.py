"""Quality assurance utilities."""

from .validators import (
    ValidationResult,
    validate_phenotypes,
    validate_environment,
    validate_analysis_table,
    run_all_validations,
)
from .reporters import generate_qa_report, compute_missingness

__all__ = [
    "ValidationResult",
    "validate_phenotypes",
    "validate_environment",
    "validate_analysis_table",
    "run_all_validations",
    "generate_qa_report",
    "compute_missingness",
]
