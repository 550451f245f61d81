"""
Output generation for analysis exhibits.

Writes markdown tables for the population summary, covariate
correlations and mixed models, and a JSON dump of all results.
"""

from pathlib import Path
from typing import Dict, Optional
import json
import logging

import numpy as np
import pandas as pd

from ..utils.io import ensure_dir
from .config import TABLES_DIR, RESULTS_DIR, MODELS
from .mixed_model import MixedModelResult

logger = logging.getLogger(__name__)


def format_coefficient(value: float, se: Optional[float] = None, stars: str = "") -> str:
    """Format coefficient for table display."""
    if pd.isna(value):
        return ""
    formatted = f"{value:.4f}{stars}"
    if se is not None and not pd.isna(se):
        formatted += f" ({se:.4f})"
    return formatted


def get_significance_stars(pvalue: float) -> str:
    """Get significance stars based on p-value."""
    if pd.isna(pvalue):
        return ""
    if pvalue < 0.01:
        return "***"
    elif pvalue < 0.05:
        return "**"
    elif pvalue < 0.10:
        return "*"
    return ""


def _fmt(value, digits: int = 3) -> str:
    if value is None or pd.isna(value):
        return "NA"
    if isinstance(value, (int, np.integer)):
        return f"{value:,}"
    return f"{value:.{digits}f}"


def _markdown_table(df: pd.DataFrame, digits: int = 3) -> str:
    header = "| " + " | ".join(str(c) for c in df.columns) + " |"
    rule = "|" + "|".join("---" for _ in df.columns) + "|"
    body = [
        "| " + " | ".join(_fmt(v, digits) if not isinstance(v, str) else v for v in row) + " |"
        for row in df.itertuples(index=False)
    ]
    return "\n".join([header, rule] + body)


def generate_population_summary_table(
    summary: pd.DataFrame,
    correlations: Optional[pd.DataFrame] = None,
    output_path: Optional[Path] = None,
) -> Path:
    """
    Write the per-population summary (and covariate correlations) as markdown.

    Parameters
    ----------
    summary : pd.DataFrame
        Output of summarize_by_population.
    correlations : pd.DataFrame, optional
        Output of covariate_correlations.
    output_path : Path, optional
        Defaults to output/tables/population_summary.md.
    """
    if output_path is None:
        output_path = TABLES_DIR / "population_summary.md"
    output_path = Path(output_path)
    ensure_dir(output_path.parent)

    lines = ["# Population Summary", ""]
    lines.append(_markdown_table(summary))
    lines.append("")

    if correlations is not None and len(correlations) > 0:
        lines += ["## Family Mean Correlations", ""]
        lines.append(_markdown_table(correlations))
        lines.append("")

    output_path.write_text("\n".join(lines))
    logger.info(f"Population summary saved to {output_path}")
    return output_path


def generate_mixed_model_table(
    results: Dict[str, MixedModelResult],
    output_path: Optional[Path] = None,
) -> Path:
    """Write one coefficient block per fitted mixed model as markdown."""
    if output_path is None:
        output_path = TABLES_DIR / "mixed_models.md"
    output_path = Path(output_path)
    ensure_dir(output_path.parent)

    lines = ["# Mixed Models", ""]
    if not results:
        lines.append("No model could be estimated.")

    for model_id, res in results.items():
        spec = MODELS.get(model_id)
        title = f"{model_id}: {spec.name}" if spec else model_id
        lines += [f"## {title}", ""]
        lines.append(f"Response `{res.response}`, random intercept by `{res.group}`.")
        lines.append("")
        lines.append("| Term | Estimate (SE) | p |")
        lines.append("|---|---|---|")
        for term, coef in res.params.items():
            p = res.pvalues.get(term, np.nan)
            cell = format_coefficient(coef, res.bse.get(term), get_significance_stars(p))
            lines.append(f"| {term} | {cell} | {_fmt(p, 4)} |")
        lines.append("")
        lines.append(f"- Group variance: {_fmt(res.group_variance, 4)}")
        lines.append(f"- Residual variance: {_fmt(res.residual_variance, 4)}")
        lines.append(f"- Group share: {_fmt(res.group_share)}")
        lines.append(f"- N = {res.n_obs:,}, groups = {res.n_groups:,}, converged = {res.converged}")
        lines.append("")

    lines.append("*Significance: \\*\\*\\* p<0.01, \\*\\* p<0.05, \\* p<0.10*")
    output_path.write_text("\n".join(lines) + "\n")
    logger.info(f"Mixed model table saved to {output_path}")
    return output_path


def _json_default(obj):
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return None if np.isnan(obj) else float(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if obj is pd.NA:
        return None
    raise TypeError(f"Not JSON serializable: {type(obj).__name__}")


def _clean_nans(obj):
    if isinstance(obj, dict):
        return {k: _clean_nans(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_clean_nans(v) for v in obj]
    if isinstance(obj, float) and np.isnan(obj):
        return None
    return obj


def save_results_json(
    summary: pd.DataFrame,
    correlations: pd.DataFrame,
    models: Dict[str, MixedModelResult],
    output_path: Optional[Path] = None,
) -> Path:
    """Dump all analysis results to JSON; missing numbers become null."""
    if output_path is None:
        output_path = RESULTS_DIR / "analysis_results.json"
    output_path = Path(output_path)
    ensure_dir(output_path.parent)

    payload = {
        "population_summary": summary.astype(object).where(summary.notna(), None).to_dict(orient="records"),
        "correlations": correlations.astype(object).where(correlations.notna(), None).to_dict(orient="records"),
        "models": {k: v.to_dict() for k, v in models.items()},
    }
    with open(output_path, "w") as f:
        json.dump(_clean_nans(payload), f, indent=2, default=_json_default)

    logger.info(f"Analysis results saved to {output_path}")
    return output_path


def load_results_json(path: Optional[Path] = None) -> Dict:
    """Load results written by :func:`save_results_json`."""
    path = Path(path or RESULTS_DIR / "analysis_results.json")
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")
    with open(path) as f:
        return json.load(f)
