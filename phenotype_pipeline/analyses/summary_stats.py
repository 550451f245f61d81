"""
Descriptive summaries of the cleaned and family-level tables.
"""

from typing import List, Optional
import logging

import numpy as np
import pandas as pd
from scipy import stats

from ..config import PIPELINE_CONFIG, PipelineConfig
from ..schema import require_columns
from .config import DEFAULT_SUMMARY

logger = logging.getLogger(__name__)


def summarize_by_population(
    clean: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
) -> pd.DataFrame:
    """
    Per-population counts and d13c moments.

    Parameters
    ----------
    clean : pd.DataFrame
        Cleaned individual records (population, fam, d13c, low.d13c).
    config : PipelineConfig, optional
        Column names.

    Returns
    -------
    pd.DataFrame
        One row per population: n_families, n_individuals, n_measured,
        mean_d13c, sd_d13c, prop_low. prop_low is computed over measured
        individuals only.
    """
    config = config or PIPELINE_CONFIG
    value = config.measurement_column
    low = config.low_column
    require_columns(clean, ["population", config.key_column, value, low], stage="population summary")

    df = clean.assign(
        _value=pd.to_numeric(clean[value], errors="coerce"),
        _low=pd.array(clean[low], dtype="Float64").to_numpy(dtype="float64", na_value=np.nan),
    )
    summary = df.groupby("population", dropna=False).agg(
        n_families=(config.key_column, "nunique"),
        n_individuals=(config.key_column, "size"),
        n_measured=("_value", "count"),
        mean_d13c=("_value", "mean"),
        sd_d13c=("_value", "std"),
        prop_low=("_low", "mean"),
    ).reset_index()

    logger.info(f"Summarised {len(summary)} populations")
    return summary


def covariate_correlations(
    analysis: pd.DataFrame,
    response: Optional[str] = None,
    covariates: Optional[List[str]] = None,
    min_pairs: Optional[int] = None,
) -> pd.DataFrame:
    """
    Pearson correlation of the family mean with each covariate.

    Covariates with fewer than ``min_pairs`` complete (response, covariate)
    pairs, or with no variance, are reported with n but r and p left missing.

    Returns
    -------
    pd.DataFrame
        Columns: covariate, n, r, p_value.
    """
    response = response or PIPELINE_CONFIG.mean_column
    covariates = covariates or DEFAULT_SUMMARY.covariates
    min_pairs = min_pairs if min_pairs is not None else DEFAULT_SUMMARY.min_pairs
    require_columns(analysis, [response] + list(covariates), stage="correlations")

    rows = []
    for cov in covariates:
        pair = analysis[[response, cov]].apply(pd.to_numeric, errors="coerce").dropna()
        n = len(pair)
        r, p = np.nan, np.nan
        if n >= min_pairs and pair[cov].nunique() > 1 and pair[response].nunique() > 1:
            r, p = stats.pearsonr(pair[cov], pair[response])
            r, p = float(r), float(p)
        rows.append({"covariate": cov, "n": n, "r": r, "p_value": p})

        if np.isnan(r):
            logger.info(f"  {response} ~ {cov}: not enough data (n={n})")
        else:
            logger.info(f"  {response} ~ {cov}: r = {r:.3f}, p = {p:.4f} (n={n})")

    return pd.DataFrame(rows, columns=["covariate", "n", "r", "p_value"])
