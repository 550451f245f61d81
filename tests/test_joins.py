"""
Tests for the left join and analysis table assembly.
"""

import pytest
import numpy as np
import pandas as pd

from phenotype_pipeline.assembly import left_join, assemble_analysis_table, AnalysisAssembler
from phenotype_pipeline.aggregation import compute_family_means
from phenotype_pipeline.cleaning import clean_phenotypes
from phenotype_pipeline.errors import AmbiguousJoin, ColumnNotFound, NameCollision


def make_left() -> pd.DataFrame:
    return pd.DataFrame({
        "fam": ["F2", "F1", "F9"],
        "elev": [250.0, 100.0, 50.0],
    })


def make_right() -> pd.DataFrame:
    return pd.DataFrame({
        "fam": ["F1", "F2", "F3"],
        "count": [3, 3, 2],
        "mean.d13c": [-30.2, -28.2, -31.0],
    })


class TestLeftJoin:

    def test_minimal_example(self):
        left = pd.DataFrame({"fam": ["A", "B"], "x": [1, 2]})
        right = pd.DataFrame({"fam": ["A"], "y": [10]})
        out = left_join(left, right, "fam")

        assert out["fam"].tolist() == ["A", "B"]
        assert out["x"].tolist() == [1, 2]
        assert out["y"].iloc[0] == 10
        assert pd.isna(out["y"].iloc[1])

    def test_one_row_per_left_row_in_left_order(self):
        out = left_join(make_left(), make_right(), "fam")
        assert out["fam"].tolist() == ["F2", "F1", "F9"]
        assert list(out.columns) == ["fam", "elev", "count", "mean.d13c"]

    def test_unmatched_left_row_gets_missing_values(self):
        out = left_join(make_left(), make_right(), "fam").set_index("fam")
        assert np.isnan(out.loc["F9", "mean.d13c"])
        assert out.loc["F1", "mean.d13c"] == pytest.approx(-30.2)

    def test_unmatched_right_rows_dropped(self):
        out = left_join(make_left(), make_right(), "fam")
        assert "F3" not in out["fam"].tolist()

    def test_duplicate_right_key_raises(self):
        right = pd.concat([make_right(), make_right().iloc[[0]]], ignore_index=True)
        with pytest.raises(AmbiguousJoin) as exc:
            left_join(make_left(), right, "fam")
        assert exc.value.key == "fam"
        assert exc.value.duplicated == ["F1"]

    def test_missing_keys_never_match(self):
        left = pd.DataFrame({"fam": pd.array(["A", None], dtype="string")})
        right = pd.DataFrame({"fam": pd.array([None, "A"], dtype="string"), "y": [10.0, 1.0]})
        out = left_join(left, right, "fam")

        assert len(out) == 2
        assert out["y"].iloc[0] == 1.0
        assert np.isnan(out["y"].iloc[1])

    def test_repeated_missing_right_keys_not_ambiguous(self):
        right = pd.concat(
            [make_right(), pd.DataFrame({"fam": [None, None], "count": [0, 0], "mean.d13c": [np.nan, np.nan]})],
            ignore_index=True,
        )
        out = left_join(make_left(), right, "fam")
        assert out["fam"].tolist() == ["F2", "F1", "F9"]

    def test_duplicate_left_key_is_allowed(self):
        left = pd.DataFrame({"fam": ["F1", "F1"], "elev": [1.0, 2.0]})
        out = left_join(left, make_right(), "fam")
        assert len(out) == 2

    def test_missing_key_on_right_raises(self):
        with pytest.raises(ColumnNotFound) as exc:
            left_join(make_left(), make_right().rename(columns={"fam": "family"}), "fam")
        assert "right" in exc.value.stage

    def test_missing_key_on_left_raises(self):
        with pytest.raises(ColumnNotFound) as exc:
            left_join(make_left().rename(columns={"fam": "family"}), make_right(), "fam")
        assert "left" in exc.value.stage

    def test_shared_non_key_column_raises(self):
        right = make_right().assign(elev=1.0)
        with pytest.raises(NameCollision) as exc:
            left_join(make_left(), right, "fam")
        assert exc.value.columns == ["elev"]


class TestAssembleAnalysisTable:

    def test_scenario(self, raw_phenotypes, environment):
        means = compute_family_means(clean_phenotypes(raw_phenotypes))
        analysis = assemble_analysis_table(means, environment)

        assert len(analysis) == 3
        assert "count" not in analysis.columns
        assert list(analysis.columns) == [
            "population", "fam", "elev", "latitude", "mat", "mean.d13c"
        ]
        assert analysis["mean.d13c"].notna().all()

    def test_environment_family_without_offspring(self, raw_phenotypes, environment):
        extra = pd.DataFrame([{
            "family": "F7", "population": "B", "elev": 1200.0, "latitude": 48.0, "mat": 5.0,
        }])
        env = pd.concat([environment, extra], ignore_index=True)
        means = compute_family_means(clean_phenotypes(raw_phenotypes))
        analysis = assemble_analysis_table(means, env)

        assert len(analysis) == 4
        assert analysis["fam"].tolist()[-1] == "F7"
        assert pd.isna(analysis["mean.d13c"].iloc[-1])

    def test_duplicate_environment_family_is_carried(self, raw_phenotypes, environment):
        means = compute_family_means(clean_phenotypes(raw_phenotypes))
        env = pd.concat([environment, environment.iloc[[1]]], ignore_index=True)
        analysis = assemble_analysis_table(means, env)
        assert len(analysis) == 4

    def test_duplicate_family_mean_raises(self, raw_phenotypes, environment):
        means = compute_family_means(clean_phenotypes(raw_phenotypes))
        means = pd.concat([means, means.iloc[[0]]], ignore_index=True)
        with pytest.raises(AmbiguousJoin):
            assemble_analysis_table(means, environment)

    def test_environment_missing_family_column(self, raw_phenotypes, environment):
        means = compute_family_means(clean_phenotypes(raw_phenotypes))
        with pytest.raises(ColumnNotFound):
            assemble_analysis_table(means, environment.drop(columns=["family"]))


class TestAnalysisAssembler:

    def test_assemble_and_save(self, raw_phenotypes, environment, tmp_path):
        means = compute_family_means(clean_phenotypes(raw_phenotypes))
        assembler = AnalysisAssembler(staging_dir=tmp_path / "staging", final_dir=tmp_path / "final")
        assembler.assemble(family_means=means, environment=environment)
        path = assembler.save()

        assert path == tmp_path / "final" / "analysis_family.tsv"
        assert path.exists()
        assert path.with_suffix(".parquet").exists()

        summary = assembler.get_summary()
        assert summary["total_families"] == 3
        assert summary["unique_populations"] == 2
        assert summary["mean_coverage"] == pytest.approx(1.0)
