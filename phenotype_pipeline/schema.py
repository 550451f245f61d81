"""
Explicit table schemas for each stage boundary.

Each stage of the pipeline consumes and produces a pandas DataFrame.
A TableSchema names the columns a boundary requires and the kind of
values each holds, so that a drifted input fails early with a
ColumnNotFound naming the stage, instead of a KeyError deep inside a
groupby or merge.

Column kinds:
    categorical - identifiers and codes, held as pandas "string"
    numeric     - floating point measurements and covariates
    indicator   - nullable 0/1 integer ("Int64"), missing stays missing
    count       - non-negative integer
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from .config import PIPELINE_CONFIG, PipelineConfig
from .errors import ColumnNotFound

CATEGORICAL = "categorical"
NUMERIC = "numeric"
INDICATOR = "indicator"
COUNT = "count"

_KINDS = {CATEGORICAL, NUMERIC, INDICATOR, COUNT}


@dataclass(frozen=True)
class ColumnSpec:
    """A named, typed column."""
    name: str
    kind: str = NUMERIC
    required: bool = True

    def __post_init__(self):
        if self.kind not in _KINDS:
            raise ValueError(f"Unknown column kind {self.kind!r} for {self.name!r}")


@dataclass(frozen=True)
class TableSchema:
    """Ordered set of typed columns expected at a stage boundary."""
    name: str
    columns: Tuple[ColumnSpec, ...]

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def required(self) -> List[str]:
        return [c.name for c in self.columns if c.required]

    def kind_of(self, column: str) -> Optional[str]:
        for spec in self.columns:
            if spec.name == column:
                return spec.kind
        return None

    def missing_columns(self, df: pd.DataFrame) -> List[str]:
        return [c for c in self.required if c not in df.columns]

    def validate(self, df: pd.DataFrame, stage: Optional[str] = None) -> None:
        """
        Check that every required column is present.

        Raises
        ------
        ColumnNotFound
            If one or more required columns are absent.
        """
        missing = self.missing_columns(df)
        if missing:
            raise ColumnNotFound(
                missing,
                stage=stage or self.name,
                row_count=len(df),
                available=list(df.columns),
            )

    def coerce(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Return a copy with declared columns cast to their kind.

        Columns not declared in the schema are passed through untouched.
        Unparseable numeric values become missing.
        """
        out = df.copy()
        for spec in self.columns:
            if spec.name not in out.columns:
                continue
            out[spec.name] = _cast(out[spec.name], spec.kind)
        return out

    def conform(self, df: pd.DataFrame, stage: Optional[str] = None) -> pd.DataFrame:
        """Validate then coerce."""
        self.validate(df, stage=stage)
        return self.coerce(df)


def as_codes(values: pd.Series) -> pd.Series:
    """
    Hold identifiers and codes as pandas "string".

    A float column whose values are all whole numbers (an integer code
    column with missing entries) is cast through "Int64" first, so 2.0
    becomes "2" rather than "2.0".
    """
    if pd.api.types.is_float_dtype(values):
        present = values.dropna()
        if (present % 1 == 0).all():
            values = values.astype("Int64")
    return values.astype("string")


def _cast(values: pd.Series, kind: str) -> pd.Series:
    if kind == CATEGORICAL:
        return as_codes(values)
    if kind == NUMERIC:
        return pd.to_numeric(values, errors="coerce").astype("float64")
    if kind == INDICATOR:
        return pd.to_numeric(values, errors="coerce").astype("Int64")
    return pd.to_numeric(values, errors="raise").astype("int64")


# =============================================================================
# Stage boundary schemas
# =============================================================================

def phenotype_schema(config: PipelineConfig = PIPELINE_CONFIG) -> TableSchema:
    """Raw phenotype records as read from the source CSV."""
    return TableSchema(
        name="phenotypes",
        columns=(
            ColumnSpec(config.group_column, CATEGORICAL),
            ColumnSpec("population", CATEGORICAL),
            ColumnSpec("family", CATEGORICAL),
            ColumnSpec("plot", CATEGORICAL, required=False),
            ColumnSpec("block", CATEGORICAL, required=False),
            ColumnSpec(config.measurement_column, NUMERIC),
        ),
    )


def clean_phenotype_schema(config: PipelineConfig = PIPELINE_CONFIG) -> TableSchema:
    """Phenotype records after filter, projection, rename and derive."""
    return TableSchema(
        name="phenotypes_clean",
        columns=(
            ColumnSpec(config.group_column, CATEGORICAL),
            ColumnSpec("population", CATEGORICAL),
            ColumnSpec(config.key_column, CATEGORICAL),
            ColumnSpec(config.measurement_column, NUMERIC),
            ColumnSpec(config.low_column, INDICATOR),
        ),
    )


def environment_schema(config: PipelineConfig = PIPELINE_CONFIG) -> TableSchema:
    """Raw environment records, one row per family."""
    return TableSchema(
        name="environment",
        columns=(
            ColumnSpec("family", CATEGORICAL),
            ColumnSpec("population", CATEGORICAL),
            ColumnSpec("elev", NUMERIC),
            ColumnSpec("latitude", NUMERIC),
        ),
    )


def family_mean_schema(config: PipelineConfig = PIPELINE_CONFIG) -> TableSchema:
    """One row per family with the count and mean of the measurement."""
    return TableSchema(
        name="family_means",
        columns=(
            ColumnSpec(config.key_column, CATEGORICAL),
            ColumnSpec(config.count_column, COUNT),
            ColumnSpec(config.mean_column, NUMERIC),
        ),
    )


def analysis_schema(config: PipelineConfig = PIPELINE_CONFIG) -> TableSchema:
    """Final analysis table handed to plotting and modeling."""
    return TableSchema(
        name="analysis",
        columns=(
            ColumnSpec("population", CATEGORICAL),
            ColumnSpec(config.key_column, CATEGORICAL),
            ColumnSpec("elev", NUMERIC),
            ColumnSpec("latitude", NUMERIC),
            ColumnSpec(config.mean_column, NUMERIC),
        ),
    )


def require_columns(
    df: pd.DataFrame,
    columns: Sequence[str],
    stage: Optional[str] = None,
) -> None:
    """Raise ColumnNotFound if any of ``columns`` is absent from ``df``."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ColumnNotFound(
            missing,
            stage=stage,
            row_count=len(df),
            available=list(df.columns),
        )
