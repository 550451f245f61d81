"""
Tests for descriptive summaries.
"""

import pytest
import numpy as np
import pandas as pd

from phenotype_pipeline.analyses import summarize_by_population, covariate_correlations
from phenotype_pipeline.pipeline import TablePipeline


class TestSummarizeByPopulation:

    def test_scenario(self, raw_phenotypes, environment):
        clean = TablePipeline().clean(raw_phenotypes)
        summary = summarize_by_population(clean).set_index("population")

        assert summary.loc["A", "n_families"] == 2
        assert summary.loc["A", "n_individuals"] == 6
        assert summary.loc["B", "n_measured"] == 2
        assert summary.loc["B", "mean_d13c"] == pytest.approx(-31.0)
        assert summary.loc["A", "prop_low"] == pytest.approx(2 / 6)
        assert summary.loc["B", "prop_low"] == pytest.approx(1.0)

    def test_prop_low_ignores_unmeasured(self):
        clean = pd.DataFrame({
            "population": ["A", "A", "A"],
            "fam": ["F1", "F1", "F1"],
            "d13c": [-31.0, -29.0, np.nan],
            "low.d13c": pd.array([1, 0, pd.NA], dtype="Int64"),
        })
        summary = summarize_by_population(clean)
        assert summary.loc[0, "n_individuals"] == 3
        assert summary.loc[0, "n_measured"] == 2
        assert summary.loc[0, "prop_low"] == pytest.approx(0.5)


class TestCovariateCorrelations:

    def test_known_cline(self, synthetic_study):
        phenotypes, environment = synthetic_study
        analysis = TablePipeline().run(phenotypes, environment).analysis
        corr = covariate_correlations(analysis).set_index("covariate")

        assert corr.loc["elev", "n"] == len(analysis)
        assert corr.loc["elev", "r"] < -0.5
        assert corr.loc["elev", "p_value"] < 0.01

    def test_too_few_pairs(self):
        analysis = pd.DataFrame({
            "mean.d13c": [-30.0, -29.0, np.nan],
            "elev": [100.0, 200.0, 300.0],
            "latitude": [45.0, 45.0, 46.0],
        })
        corr = covariate_correlations(analysis).set_index("covariate")
        assert corr.loc["elev", "n"] == 2
        assert np.isnan(corr.loc["elev", "r"])
        assert np.isnan(corr.loc["latitude", "p_value"])
