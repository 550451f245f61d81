"""
End-to-end tests for the in-memory table pipeline.
"""

import pytest
import numpy as np
import pandas as pd

from phenotype_pipeline import TablePipeline, run_table_pipeline
from phenotype_pipeline.config import PipelineConfig
from phenotype_pipeline.errors import AmbiguousJoin, ColumnNotFound, NameCollision


class TestScenario:
    """10 raw rows, 2 unplanted, 8 measured across 3 families, 3 environment rows."""

    def test_intermediate_tables(self, raw_phenotypes, environment):
        result = TablePipeline().run(raw_phenotypes, environment)

        assert len(result.clean) == 8
        assert len(result.family_means) == 3
        assert result.family_means["count"].sum() == 8
        assert result.summary() == {"clean_rows": 8, "families": 3, "analysis_rows": 3}

    def test_analysis_table(self, raw_phenotypes, environment):
        analysis = run_table_pipeline(raw_phenotypes, environment)

        assert len(analysis) == 3
        assert "count" not in analysis.columns
        assert "family" not in analysis.columns
        assert analysis["fam"].tolist() == ["F1", "F2", "F3"]
        assert analysis["mean.d13c"].tolist() == pytest.approx([-90.5 / 3, -84.5 / 3, -31.0])
        assert analysis["elev"].tolist() == [100.0, 250.0, 900.0]

    def test_float_group_codes_with_missing(self, raw_phenotypes, environment):
        """Integer codes held as float (a column with gaps) still match the exclusion."""
        raw = raw_phenotypes.assign(
            group=[1.0, 1.0, 2.0, 1.0, 1.0, 1.0, 2.0, 1.0, np.nan, 1.0]
        )
        result = TablePipeline().run(raw, environment)

        assert len(result.clean) == 8
        assert "2" not in result.clean["group"].dropna().tolist()
        assert result.clean["group"].isna().sum() == 1
        pd.testing.assert_frame_equal(
            result.analysis, run_table_pipeline(raw_phenotypes, environment)
        )

    def test_missing_family_never_joins(self, raw_phenotypes, environment):
        raw = raw_phenotypes.assign(family=["F1"] * 4 + ["F2"] * 4 + [None, None])
        env = pd.concat(
            [environment, pd.DataFrame([{
                "family": None, "population": "B", "elev": 900.0, "latitude": 47.0, "mat": 6.0,
            }])],
            ignore_index=True,
        )
        result = TablePipeline().run(raw, env)

        assert result.family_means["fam"].isna().sum() == 1
        assert len(result.analysis) == 4
        assert result.analysis["mean.d13c"].isna().tolist() == [False, False, True, True]

    def test_inputs_not_modified(self, raw_phenotypes, environment):
        ph_before, env_before = raw_phenotypes.copy(), environment.copy()
        TablePipeline().run(raw_phenotypes, environment)
        pd.testing.assert_frame_equal(raw_phenotypes, ph_before)
        pd.testing.assert_frame_equal(environment, env_before)

    def test_deterministic(self, raw_phenotypes, environment):
        first = run_table_pipeline(raw_phenotypes, environment)
        second = run_table_pipeline(raw_phenotypes, environment)
        pd.testing.assert_frame_equal(first, second)


class TestFailures:

    def test_missing_block_column(self, raw_phenotypes, environment):
        with pytest.raises(ColumnNotFound) as exc:
            TablePipeline().run(raw_phenotypes.drop(columns=["block"]), environment)
        assert exc.value.columns == ["block"]
        assert exc.value.stage == "project"

    def test_existing_derived_column(self, raw_phenotypes, environment):
        raw = raw_phenotypes.assign(**{"low.d13c": 0})
        with pytest.raises(NameCollision):
            TablePipeline().run(raw, environment)

    def test_environment_measurement_collides(self, raw_phenotypes, environment):
        env = environment.assign(**{"mean.d13c": -29.0})
        with pytest.raises(NameCollision):
            TablePipeline().run(raw_phenotypes, env)

    def test_duplicate_family_means(self, raw_phenotypes, environment):
        pipeline = TablePipeline()
        means = pipeline.aggregate(pipeline.clean(raw_phenotypes))
        with pytest.raises(AmbiguousJoin):
            pipeline.join(pd.concat([means, means]), environment)


class TestSyntheticStudy:

    def test_every_environment_family_present_once(self, synthetic_study):
        phenotypes, environment = synthetic_study
        analysis = run_table_pipeline(phenotypes, environment)

        assert len(analysis) == len(environment)
        assert analysis["fam"].is_unique
        assert analysis["mean.d13c"].notna().all()

    def test_no_exclusions_leaves_same_means(self, synthetic_study):
        """Unplanted rows carry no d13c, so keeping them does not move the means."""
        phenotypes, environment = synthetic_study
        default = run_table_pipeline(phenotypes, environment)
        kept = run_table_pipeline(phenotypes, environment, PipelineConfig(excluded_groups=set()))
        np.testing.assert_allclose(default["mean.d13c"], kept["mean.d13c"])
