"""
Tests for file I/O helpers.
"""

import pytest
import numpy as np
import pandas as pd

from phenotype_pipeline.utils import (
    read_records_csv,
    save_tsv,
    load_tsv,
    save_parquet,
    load_parquet,
    ensure_dir,
)


def test_read_records_csv_keeps_identifier_spelling(tmp_path):
    path = tmp_path / "env.csv"
    path.write_text("family,population,elev\n007,12,100\n010,12,NA\n")

    df = read_records_csv(path, categorical=["family", "population"])

    assert df["family"].tolist() == ["007", "010"]
    assert df["population"].tolist() == ["12", "12"]
    assert np.isnan(df["elev"].iloc[1])


def test_read_records_csv_strips_header_noise(tmp_path):
    path = tmp_path / "ph.csv"
    path.write_text("\ufeffgroup, d13c\n1,-30.1\n", encoding="utf-8")

    df = read_records_csv(path)

    assert list(df.columns) == ["group", "d13c"]


def test_read_records_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_records_csv(tmp_path / "absent.csv")


def test_save_tsv_writes_na_for_missing(tmp_path):
    df = pd.DataFrame({
        "fam": ["F1", "F2"],
        "elev": [100.0, 250.0],
        "mean.d13c": [-30.5, np.nan],
    })
    path = save_tsv(df, tmp_path / "final" / "analysis_family.tsv")

    lines = path.read_text().splitlines()
    assert lines[0] == "fam\telev\tmean.d13c"
    assert lines[2] == "F2\t250.0\tNA"

    loaded = load_tsv(path, categorical=["fam"])
    assert loaded["fam"].tolist() == ["F1", "F2"]
    assert np.isnan(loaded["mean.d13c"].iloc[1])


def test_parquet_keeps_nullable_indicator(tmp_path):
    df = pd.DataFrame({
        "fam": pd.array(["F1", "F2"], dtype="string"),
        "low.d13c": pd.array([1, pd.NA], dtype="Int64"),
    })
    path = save_parquet(df, tmp_path / "staging" / "clean.parquet")
    loaded = load_parquet(path)

    assert str(loaded["low.d13c"].dtype) == "Int64"
    assert loaded["low.d13c"].iloc[1] is pd.NA


def test_load_parquet_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_parquet(tmp_path / "absent.parquet")


def test_ensure_dir(tmp_path):
    path = ensure_dir(tmp_path / "a" / "b")
    assert path.is_dir()
