"""
Row and column transformations for record tables.

Each function takes a DataFrame and returns a new DataFrame; the input
is never modified. Column references are checked before any work is
done, and failures raise the errors defined in ``errors``:

    filter_rows    - keep rows whose categorical code is not excluded
    drop_columns   - projection by exclusion
    rename_columns - schema key replacement
    derive_column  - add one computed column
"""

from typing import Callable, Iterable, Mapping, Optional, Sequence
import logging

import pandas as pd

from ..errors import ColumnNotFound, NameCollision
from ..schema import as_codes, require_columns

logger = logging.getLogger(__name__)


def filter_rows(
    df: pd.DataFrame,
    column: str,
    excluded: Iterable[str],
    stage: str = "filter",
) -> pd.DataFrame:
    """
    Keep the rows whose value in ``column`` is not in ``excluded``.

    Values are compared as strings, so an integer code 2 and the string
    "2" are treated alike, as is a float code 2.0. Rows with a missing code are kept. An empty
    result is valid output.

    Args:
        df: Input records
        column: Categorical column the predicate applies to
        excluded: Codes to remove
        stage: Stage name used in error messages

    Returns:
        DataFrame with the retained rows in their original order
    """
    require_columns(df, [column], stage=stage)

    excluded = {str(v) for v in excluded}
    codes = as_codes(df[column])
    keep = ~codes.isin(excluded).fillna(False).astype(bool)

    out = df.loc[keep].copy()
    logger.info(
        f"[{stage}] kept {len(out):,}/{len(df):,} rows "
        f"({len(df) - len(out):,} with {column} in {sorted(excluded)})"
    )
    return out


def drop_columns(
    df: pd.DataFrame,
    columns: Sequence[str],
    strict: bool = True,
    stage: str = "project",
) -> pd.DataFrame:
    """
    Remove ``columns`` from every row.

    In strict mode an absent column is a configuration error and raises
    ColumnNotFound. With ``strict=False`` absent columns are skipped,
    which makes re-projection with the same list a no-op.
    """
    if strict:
        require_columns(df, columns, stage=stage)
        to_drop = list(columns)
    else:
        to_drop = [c for c in columns if c in df.columns]

    out = df.drop(columns=to_drop)
    logger.debug(f"[{stage}] dropped columns {to_drop}")
    return out


def rename_columns(
    df: pd.DataFrame,
    mapping: Mapping[str, str],
    stage: str = "rename",
) -> pd.DataFrame:
    """
    Replace column names according to ``mapping`` (old -> new).

    Raises:
        ColumnNotFound: an old name is not in the table
        NameCollision: a new name is already used by a column that is not
            being renamed, or two old names map to the same new name
    """
    require_columns(df, list(mapping.keys()), stage=stage)

    targets = list(mapping.values())
    repeated = sorted({t for t in targets if targets.count(t) > 1})
    untouched = [c for c in df.columns if c not in mapping]
    clashing = [t for t in targets if t in untouched]
    if repeated or clashing:
        raise NameCollision(repeated + clashing, stage=stage, row_count=len(df))

    out = df.rename(columns=dict(mapping))
    logger.debug(f"[{stage}] renamed {dict(mapping)}")
    return out


def derive_column(
    df: pd.DataFrame,
    name: str,
    func: Callable[[pd.DataFrame], pd.Series],
    requires: Optional[Sequence[str]] = None,
    stage: str = "derive",
) -> pd.DataFrame:
    """
    Append one column computed from existing columns.

    Args:
        df: Input records
        name: New column name; must not already exist
        func: Vectorised row function, receives the table and returns a
            Series aligned with its index
        requires: Columns ``func`` reads, checked before it is called
        stage: Stage name used in error messages
    """
    if requires:
        require_columns(df, requires, stage=stage)
    if name in df.columns:
        raise NameCollision([name], stage=stage, row_count=len(df))

    values = func(df)
    if len(values) != len(df):
        raise ValueError(
            f"[{stage}] derived column {name!r} has {len(values)} values for {len(df)} rows"
        )

    out = df.copy()
    out[name] = values
    return out


def threshold_indicator(
    column: str,
    threshold: float,
) -> Callable[[pd.DataFrame], pd.Series]:
    """
    Build a row function returning 1 where ``column <= threshold``, else 0.

    Rows where ``column`` is missing get a missing indicator (pd.NA in a
    nullable "Int64" column), never 0 or 1, so that downstream counts and
    proportions only see measured rows.
    """
    def indicator(df: pd.DataFrame) -> pd.Series:
        values = pd.to_numeric(df[column], errors="coerce")
        flags = (values <= threshold).astype("Int64")
        flags[values.isna()] = pd.NA
        return flags

    return indicator
