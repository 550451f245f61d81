"""
Random-intercept linear mixed models.

Two models are run on the pipeline outputs:

- M1: family mean d13c on source elevation and latitude, with a random
  intercept per population (analysis table).
- M2: intercept-only model of individual d13c with a random intercept per
  family (clean table). The family variance share is a rough broad-sense
  heritability for open-pollinated progeny.

Both use ``statsmodels.MixedLM`` through the array interface, since the
dotted column names do not survive formula parsing.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional
import logging
import warnings

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from .config import MODELS, ModelSpec

logger = logging.getLogger(__name__)


@dataclass
class MixedModelResult:
    """Fitted random-intercept model, reduced to plain values."""

    model_id: str
    response: str
    group: str
    params: Dict[str, float] = field(default_factory=dict)
    bse: Dict[str, float] = field(default_factory=dict)
    pvalues: Dict[str, float] = field(default_factory=dict)
    group_variance: float = np.nan
    residual_variance: float = np.nan
    n_obs: int = 0
    n_groups: int = 0
    converged: bool = False
    llf: float = np.nan

    @property
    def group_share(self) -> float:
        """Fraction of total variance attributable to the grouping factor."""
        total = self.group_variance + self.residual_variance
        if not np.isfinite(total) or total <= 0:
            return np.nan
        return self.group_variance / total

    def to_dict(self) -> Dict:
        out = asdict(self)
        out["group_share"] = self.group_share
        return out

    @classmethod
    def from_dict(cls, data: Dict) -> "MixedModelResult":
        """Rebuild from :meth:`to_dict` output, e.g. after a JSON round trip."""
        kwargs = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        for key in ("group_variance", "residual_variance", "llf"):
            if kwargs.get(key) is None:
                kwargs[key] = np.nan
        return cls(**kwargs)


def fit_mixed_model(
    df: pd.DataFrame,
    response: str,
    fixed_effects: Optional[List[str]] = None,
    group: str = "population",
    reml: bool = True,
    max_iter: int = 200,
    model_id: str = "",
) -> MixedModelResult:
    """
    Fit ``response ~ 1 + fixed_effects`` with a random intercept per group.

    Rows with any missing value in the response, fixed effects or group are
    dropped first.

    Raises
    ------
    KeyError
        If a named column is absent.
    ValueError
        If fewer than two groups or too few observations remain.
    """
    fixed_effects = list(fixed_effects or [])
    cols = [response] + fixed_effects + [group]
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found for mixed model: {missing}")

    data = df[cols].copy()
    for col in [response] + fixed_effects:
        data[col] = pd.to_numeric(data[col], errors="coerce").astype("float64")
    data = data.dropna()

    n_groups = data[group].nunique()
    n_params = len(fixed_effects) + 1
    if n_groups < 2 or len(data) <= n_params + 1:
        raise ValueError(
            f"Not enough data for {response} ~ {fixed_effects} | {group}: "
            f"{len(data)} observations in {n_groups} groups"
        )

    endog = data[response]
    if fixed_effects:
        exog = sm.add_constant(data[fixed_effects], has_constant="add")
    else:
        exog = pd.DataFrame({"const": 1.0}, index=data.index)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        model = sm.MixedLM(endog, exog, groups=data[group].astype(str))
        fit = model.fit(reml=reml, maxiter=max_iter)

    # fixed effects come first in params, bse and pvalues
    names = list(exog.columns)
    k_fe = len(names)
    fe = np.asarray(fit.fe_params, dtype=float)
    bse = np.asarray(fit.bse, dtype=float)[:k_fe]
    pvalues = np.asarray(fit.pvalues, dtype=float)[:k_fe]

    result = MixedModelResult(
        model_id=model_id,
        response=response,
        group=group,
        params=dict(zip(names, map(float, fe))),
        bse=dict(zip(names, map(float, bse))),
        pvalues=dict(zip(names, map(float, pvalues))),
        group_variance=float(np.asarray(fit.cov_re)[0, 0]),
        residual_variance=float(fit.scale),
        n_obs=len(data),
        n_groups=int(n_groups),
        converged=bool(fit.converged),
        llf=float(fit.llf),
    )

    logger.info(
        f"  {model_id or response}: N = {result.n_obs:,}, groups = {result.n_groups}, "
        f"group share = {result.group_share:.3f}"
    )
    if not result.converged:
        logger.warning(f"  {model_id or response}: optimizer did not converge")

    return result


def fit_model_spec(spec: ModelSpec, df: pd.DataFrame) -> MixedModelResult:
    """Fit a configured model specification."""
    return fit_mixed_model(
        df,
        response=spec.response,
        fixed_effects=spec.fixed_effects,
        group=spec.group,
        reml=spec.reml,
        max_iter=spec.max_iter,
        model_id=spec.id,
    )


def fit_family_mean_model(analysis: pd.DataFrame) -> MixedModelResult:
    """M1: mean.d13c ~ elev + latitude, random intercept by population."""
    return fit_model_spec(MODELS["M1"], analysis)


def partition_family_variance(clean: pd.DataFrame) -> MixedModelResult:
    """M2: individual d13c split into among-family and within-family variance."""
    return fit_model_spec(MODELS["M2"], clean)


def run_models(
    analysis: pd.DataFrame,
    clean: pd.DataFrame,
    model_ids: Optional[List[str]] = None,
) -> Dict[str, MixedModelResult]:
    """
    Fit the configured models against the table each one names.

    A model that cannot be estimated is logged and skipped; the rest still run.
    """
    tables = {"analysis": analysis, "clean": clean}
    results = {}

    for model_id in model_ids or list(MODELS):
        spec = MODELS[model_id]
        logger.info(f"Fitting {spec.id}: {spec.name}")
        try:
            results[model_id] = fit_model_spec(spec, tables[spec.table])
        except ValueError as e:
            logger.warning(f"  {spec.id} skipped: {e}")

    return results
