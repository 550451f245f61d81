"""
Global configuration for the Phenotype Pipeline.

Implements project conventions for:
- File paths and constants
- Column names shared between the phenotype and environment tables
- Cleaning rules (excluded planting groups, low-d13c threshold)
- Plausibility bounds used by the QA validators
"""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Set

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"
STAGING_DIR = DATA_DIR / "staging"
FINAL_DIR = DATA_DIR / "final"
OUTPUT_DIR = PROJECT_ROOT / "output"
DOCS_DIR = PROJECT_ROOT / "docs"

# Raw inputs
PHENOTYPE_CSV = RAW_DIR / "phenotypes.csv"
ENVIRONMENT_CSV = RAW_DIR / "environment.csv"

# Staging files
PHENOTYPES_RAW_PARQUET = STAGING_DIR / "phenotypes_raw.parquet"
ENVIRONMENT_RAW_PARQUET = STAGING_DIR / "environment_raw.parquet"
PHENOTYPES_CLEAN_PARQUET = STAGING_DIR / "phenotypes_clean.parquet"
FAMILY_MEANS_PARQUET = STAGING_DIR / "family_means.parquet"

# Final analysis table
ANALYSIS_TSV = FINAL_DIR / "analysis_family.tsv"
ANALYSIS_PARQUET = FINAL_DIR / "analysis_family.parquet"

# =============================================================================
# MISSING VALUE CONVENTIONS
# =============================================================================

# Tokens read as missing from the raw CSVs
NA_VALUES = ["NA", "N/A", "NaN", "nan", ""]

# Token written for missing values in the TSV output
NA_REP = "NA"

# =============================================================================
# PIPELINE CONFIGURATION
# =============================================================================

@dataclass
class PipelineConfig:
    """Configuration for the table transformation sequence."""

    # Filter: drop rows whose group code is in this set
    group_column: str = "group"
    excluded_groups: Set[str] = field(default_factory=lambda: {"2"})

    # Projection: design covariates not used downstream
    drop_columns: List[str] = field(default_factory=lambda: ["plot", "block"])

    # Rename: shared join key
    key_column: str = "fam"
    phenotype_renames: Dict[str, str] = field(default_factory=lambda: {
        "family": "fam",
    })
    environment_renames: Dict[str, str] = field(default_factory=lambda: {
        "family": "fam",
    })

    # Derive: threshold indicator for low (more negative) isotope ratio
    measurement_column: str = "d13c"
    low_threshold: float = -30.0
    low_column: str = "low.d13c"

    # Aggregate: family-level output columns
    count_column: str = "count"
    mean_column: str = "mean.d13c"

    # Final hand-off: columns removed before plotting/modeling
    final_drop_columns: List[str] = field(default_factory=lambda: ["count"])


PIPELINE_CONFIG = PipelineConfig()

# =============================================================================
# VALIDATION CONFIGURATION
# =============================================================================

@dataclass
class ValidationConfig:
    """Configuration for data validation checks."""

    # Plausible range for C3 plant tissue d13c (per mil)
    min_d13c: float = -40.0
    max_d13c: float = -18.0

    # Geographic plausibility
    min_elev: float = -100.0
    max_elev: float = 5000.0
    min_latitude: float = -90.0
    max_latitude: float = 90.0

    # Group code whose rows should carry no measurement
    unplanted_group: str = "2"


VALIDATION_CONFIG = ValidationConfig()

# =============================================================================
# FIGURE CONFIGURATION
# =============================================================================

@dataclass
class FigureConfig:
    """Configuration for matplotlib output."""

    dpi: int = 300
    scatter_size: tuple = (7, 5)
    boxplot_size: tuple = (10, 6)
    histogram_size: tuple = (7, 5)
    histogram_bins: int = 30


FIGURE_CONFIG = FigureConfig()
