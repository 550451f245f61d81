"""
Configuration for model specifications and analysis parameters.

Contains output paths, mixed-model definitions and summary settings
for the phenotype analysis module.
"""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List

# =============================================================================
# Path Configuration
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
OUTPUT_DIR = PROJECT_ROOT / "output"

# Output subdirectories
TABLES_DIR = OUTPUT_DIR / "tables"
FIGURES_DIR = OUTPUT_DIR / "figures"
RESULTS_DIR = OUTPUT_DIR / "results"


# =============================================================================
# Mixed Model Specifications
# =============================================================================

@dataclass
class ModelSpec:
    """Specification for a single random-intercept linear mixed model."""

    id: str
    name: str
    response: str
    group: str
    fixed_effects: List[str] = field(default_factory=list)
    table: str = "analysis"  # "analysis" (family means) or "clean" (individuals)
    reml: bool = True
    max_iter: int = 200
    description: str = ""


MODELS: Dict[str, ModelSpec] = {
    "M1": ModelSpec(
        id="M1",
        name="Family mean d13c on source environment",
        response="mean.d13c",
        group="population",
        fixed_effects=["elev", "latitude"],
        table="analysis",
        description="Clinal variation in water-use efficiency with a random population intercept",
    ),
    "M2": ModelSpec(
        id="M2",
        name="Family variance component of individual d13c",
        response="d13c",
        group="fam",
        fixed_effects=[],
        table="clean",
        description="Intercept-only model partitioning individual variance among families",
    ),
}


# =============================================================================
# Summary Settings
# =============================================================================

@dataclass
class SummaryConfig:
    """Configuration for descriptive summaries."""

    # Covariates correlated against family means
    covariates: List[str] = field(default_factory=lambda: ["elev", "latitude"])

    # Minimum complete pairs for a correlation to be reported
    min_pairs: int = 3


DEFAULT_SUMMARY = SummaryConfig()
