"""
Shared synthetic data for the phenotype pipeline tests.
"""

import numpy as np
import pandas as pd
import pytest


def make_raw_phenotypes() -> pd.DataFrame:
    """
    Ten offspring records: two in group 2 (unplanted, no d13c), the
    other eight spread over three families.
    """
    return pd.DataFrame({
        "group": ["1", "1", "2", "1", "1", "1", "2", "1", "1", "1"],
        "population": ["A", "A", "A", "A", "A", "A", "A", "A", "B", "B"],
        "family": ["F1", "F1", "F1", "F1", "F2", "F2", "F2", "F2", "F3", "F3"],
        "plot": ["1", "2", "3", "4", "1", "2", "3", "4", "1", "2"],
        "block": ["a", "a", "b", "b", "a", "a", "b", "b", "a", "b"],
        "d13c": [-31.0, -29.0, np.nan, -30.5, -28.0, -27.5, np.nan, -29.0, -32.0, -30.0],
    })


def make_environment() -> pd.DataFrame:
    """One source-environment row per family."""
    return pd.DataFrame({
        "family": ["F1", "F2", "F3"],
        "population": ["A", "A", "B"],
        "elev": [100.0, 250.0, 900.0],
        "latitude": [45.1, 45.3, 47.0],
        "mat": [8.5, 8.1, 6.0],
    })


def make_synthetic_study(
    n_populations: int = 8,
    families_per_population: int = 4,
    offspring_per_family: int = 6,
    seed: int = 42,
):
    """
    Larger phenotype/environment pair with a known elevation cline.

    Returns (phenotypes, environment).
    """
    rng = np.random.default_rng(seed)

    env_rows, ph_rows = [], []
    for p in range(n_populations):
        pop = f"P{p:02d}"
        pop_effect = rng.normal(0, 0.4)
        pop_elev = rng.uniform(0, 2000)
        pop_lat = rng.uniform(40, 50)
        for f in range(families_per_population):
            fam = f"{pop}F{f:02d}"
            elev = pop_elev + rng.normal(0, 50)
            lat = pop_lat + rng.normal(0, 0.1)
            fam_effect = rng.normal(0, 0.5)
            env_rows.append({"family": fam, "population": pop, "elev": elev, "latitude": lat})
            for i in range(offspring_per_family):
                group = "2" if i == 0 else "1"
                d13c = np.nan if group == "2" else (
                    -27.0 - 0.002 * elev + pop_effect + fam_effect + rng.normal(0, 0.5)
                )
                ph_rows.append({
                    "group": group,
                    "population": pop,
                    "family": fam,
                    "plot": str(i),
                    "block": str(i % 2),
                    "d13c": d13c,
                })

    return pd.DataFrame(ph_rows), pd.DataFrame(env_rows)


@pytest.fixture
def raw_phenotypes() -> pd.DataFrame:
    return make_raw_phenotypes()


@pytest.fixture
def environment() -> pd.DataFrame:
    return make_environment()


@pytest.fixture
def synthetic_study():
    return make_synthetic_study()


@pytest.fixture
def source_csvs(tmp_path, synthetic_study):
    """Synthetic study written as the two source CSVs."""
    phenotypes, environment = synthetic_study
    ph_path = tmp_path / "raw" / "phenotypes.csv"
    env_path = tmp_path / "raw" / "environment.csv"
    ph_path.parent.mkdir(parents=True)
    phenotypes.to_csv(ph_path, index=False, na_rep="NA")
    environment.to_csv(env_path, index=False)
    return ph_path, env_path
