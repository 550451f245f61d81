"""
Analyses module for family-level d13c.

Descriptive summaries, covariate correlations, random-intercept mixed
models (M1, M2), figures and markdown/JSON output.
"""

from . import config
from . import summary_stats
from . import mixed_model
from . import figures
from . import output_generator

from .summary_stats import summarize_by_population, covariate_correlations
from .mixed_model import (
    MixedModelResult,
    fit_mixed_model,
    fit_family_mean_model,
    partition_family_variance,
    run_models,
)
from .figures import generate_figures

__all__ = [
    "config",
    "summary_stats",
    "mixed_model",
    "figures",
    "output_generator",
    "summarize_by_population",
    "covariate_correlations",
    "MixedModelResult",
    "fit_mixed_model",
    "fit_family_mean_model",
    "partition_family_variance",
    "run_models",
    "generate_figures",
]
