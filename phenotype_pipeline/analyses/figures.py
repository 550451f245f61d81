"""
Descriptive figures for the phenotype analysis.

- F1: histogram of individual d13c
- F2: boxplot of individual d13c by population
- F3: family mean d13c against each source covariate, with OLS trend line
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple
import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..config import FIGURE_CONFIG, PIPELINE_CONFIG, FigureConfig
from ..utils.io import ensure_dir
from .config import FIGURES_DIR, DEFAULT_SUMMARY

logger = logging.getLogger(__name__)

plt.rcParams.update({
    'font.size': 11,
    'axes.labelsize': 12,
    'axes.titlesize': 13,
    'legend.fontsize': 10,
    'font.family': 'serif',
})

D13C_LABEL = r'$\delta^{13}$C (‰)'


def plot_d13c_histogram(
    clean: pd.DataFrame,
    config: FigureConfig = FIGURE_CONFIG,
) -> Tuple[plt.Figure, str]:
    """F1: distribution of measured d13c with the low-value threshold marked."""
    values = pd.to_numeric(clean[PIPELINE_CONFIG.measurement_column], errors="coerce").dropna()

    fig, ax = plt.subplots(figsize=config.histogram_size)
    ax.hist(values, bins=config.histogram_bins, color='#1f77b4', alpha=0.7,
            edgecolor='white', linewidth=0.5)
    ax.axvline(PIPELINE_CONFIG.low_threshold, color='red', linestyle='--',
               linewidth=2, label=f'Low threshold ({PIPELINE_CONFIG.low_threshold:g})')

    ax.set_xlabel(D13C_LABEL)
    ax.set_ylabel('Individuals')
    ax.set_title(f'Offspring {D13C_LABEL} (N = {len(values):,})')
    ax.legend()

    return fig, 'F1_d13c_histogram'


def plot_d13c_by_population(
    clean: pd.DataFrame,
    config: FigureConfig = FIGURE_CONFIG,
) -> Tuple[plt.Figure, str]:
    """F2: d13c by population, populations in first-seen order."""
    value = PIPELINE_CONFIG.measurement_column
    df = clean.assign(_value=pd.to_numeric(clean[value], errors="coerce"))
    df = df.dropna(subset=["_value", "population"])

    populations = list(pd.unique(df["population"]))
    data = [df.loc[df["population"] == p, "_value"].to_numpy() for p in populations]

    fig, ax = plt.subplots(figsize=config.boxplot_size)
    if data:
        ax.boxplot(data, showfliers=True)
        ax.set_xticks(range(1, len(populations) + 1))
        ax.set_xticklabels([str(p) for p in populations], rotation=45, ha='right')
    ax.set_xlabel('Population')
    ax.set_ylabel(D13C_LABEL)
    ax.set_title(f'{D13C_LABEL} by population')
    plt.tight_layout()

    return fig, 'F2_d13c_by_population'


def plot_family_means_vs_covariate(
    analysis: pd.DataFrame,
    covariate: str,
    config: FigureConfig = FIGURE_CONFIG,
) -> Tuple[plt.Figure, str]:
    """F3: family mean d13c against a source covariate."""
    response = PIPELINE_CONFIG.mean_column
    pair = analysis[[covariate, response]].apply(pd.to_numeric, errors="coerce").dropna()

    fig, ax = plt.subplots(figsize=config.scatter_size)
    ax.scatter(pair[covariate], pair[response], s=20, alpha=0.7, color='#ff7f0e')

    if len(pair) >= 2 and pair[covariate].nunique() > 1:
        slope, intercept = np.polyfit(pair[covariate], pair[response], 1)
        xs = np.linspace(pair[covariate].min(), pair[covariate].max(), 100)
        ax.plot(xs, intercept + slope * xs, color='black', linewidth=1.5,
                label=f'OLS slope = {slope:.4g}')
        ax.legend()

    ax.set_xlabel(covariate)
    ax.set_ylabel(f'Family mean {D13C_LABEL}')
    ax.set_title(f'Family mean {D13C_LABEL} vs {covariate} (N = {len(pair)})')

    return fig, f'F3_family_mean_vs_{covariate}'


def generate_figures(
    clean: pd.DataFrame,
    analysis: pd.DataFrame,
    output_dir: Optional[Path] = None,
    covariates: Optional[List[str]] = None,
    config: FigureConfig = FIGURE_CONFIG,
) -> Dict[str, Path]:
    """
    Render all figures to PNG.

    Returns
    -------
    Dict[str, Path]
        Figure name -> saved path.
    """
    output_dir = ensure_dir(Path(output_dir or FIGURES_DIR))
    covariates = covariates or DEFAULT_SUMMARY.covariates

    figures = [
        plot_d13c_histogram(clean, config),
        plot_d13c_by_population(clean, config),
    ]
    figures += [plot_family_means_vs_covariate(analysis, cov, config) for cov in covariates]

    saved = {}
    for fig, fname in figures:
        path = output_dir / f'{fname}.png'
        fig.savefig(path, dpi=config.dpi, bbox_inches='tight')
        plt.close(fig)
        saved[fname] = path
        logger.info(f"  Saved {path.name}")

    return saved
