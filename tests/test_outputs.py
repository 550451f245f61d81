"""
Tests for figures, markdown tables and the results JSON.
"""

import json

import pytest
import numpy as np
import pandas as pd

from phenotype_pipeline.analyses import MixedModelResult, generate_figures
from phenotype_pipeline.analyses.figures import plot_family_means_vs_covariate
from phenotype_pipeline.analyses.output_generator import (
    format_coefficient,
    get_significance_stars,
    generate_population_summary_table,
    generate_mixed_model_table,
    save_results_json,
    load_results_json,
)
from phenotype_pipeline.analyses.summary_stats import summarize_by_population, covariate_correlations
from phenotype_pipeline.pipeline import TablePipeline


def make_model_result() -> MixedModelResult:
    return MixedModelResult(
        model_id="M1",
        response="mean.d13c",
        group="population",
        params={"const": -25.0, "elev": -0.002},
        bse={"const": 0.5, "elev": 0.0004},
        pvalues={"const": 1e-6, "elev": 0.03},
        group_variance=0.2,
        residual_variance=0.1,
        n_obs=96,
        n_groups=12,
        converged=True,
        llf=-12.5,
    )


class TestFormatting:

    def test_significance_stars(self):
        assert get_significance_stars(0.001) == "***"
        assert get_significance_stars(0.03) == "**"
        assert get_significance_stars(0.07) == "*"
        assert get_significance_stars(0.5) == ""
        assert get_significance_stars(np.nan) == ""

    def test_format_coefficient(self):
        assert format_coefficient(-0.002, 0.0004, "**") == "-0.0020** (0.0004)"
        assert format_coefficient(np.nan) == ""


class TestTables:

    def test_population_summary_markdown(self, raw_phenotypes, environment, tmp_path):
        result = TablePipeline().run(raw_phenotypes, environment)
        summary = summarize_by_population(result.clean)
        corr = covariate_correlations(result.analysis)

        path = generate_population_summary_table(summary, corr, output_path=tmp_path / "pop.md")
        text = path.read_text()

        assert text.startswith("# Population Summary")
        assert "| population | n_families |" in text
        assert "## Family Mean Correlations" in text

    def test_mixed_model_markdown(self, tmp_path):
        path = generate_mixed_model_table({"M1": make_model_result()}, output_path=tmp_path / "mm.md")
        text = path.read_text()

        assert "## M1: Family mean d13c on source environment" in text
        assert "| elev | -0.0020** (0.0004) | 0.0300 |" in text
        assert "N = 96, groups = 12" in text

    def test_empty_model_table(self, tmp_path):
        text = generate_mixed_model_table({}, output_path=tmp_path / "mm.md").read_text()
        assert "No model could be estimated." in text


def test_results_json_round_trip(tmp_path):
    summary = pd.DataFrame({
        "population": ["A"], "n_families": [2], "sd_d13c": [np.nan],
    })
    corr = pd.DataFrame({"covariate": ["elev"], "n": [2], "r": [np.nan], "p_value": [np.nan]})
    model = make_model_result()

    path = save_results_json(summary, corr, {"M1": model}, output_path=tmp_path / "res.json")
    raw = json.loads(path.read_text())
    assert raw["population_summary"][0]["sd_d13c"] is None
    assert raw["correlations"][0]["r"] is None

    loaded = load_results_json(path)
    rebuilt = MixedModelResult.from_dict(loaded["models"]["M1"])
    assert rebuilt.params == model.params
    assert rebuilt.group_share == pytest.approx(model.group_share)


class TestFigures:

    def test_generate_figures(self, synthetic_study, tmp_path):
        phenotypes, environment = synthetic_study
        result = TablePipeline().run(phenotypes, environment)

        saved = generate_figures(result.clean, result.analysis, output_dir=tmp_path)

        assert set(saved) == {
            "F1_d13c_histogram",
            "F2_d13c_by_population",
            "F3_family_mean_vs_elev",
            "F3_family_mean_vs_latitude",
        }
        for path in saved.values():
            assert path.exists()
            assert path.stat().st_size > 0

    def test_scatter_with_single_point(self):
        analysis = pd.DataFrame({"elev": [100.0], "mean.d13c": [-30.0]})
        fig, name = plot_family_means_vs_covariate(analysis, "elev")
        assert name == "F3_family_mean_vs_elev"
        assert len(fig.axes[0].lines) == 0
