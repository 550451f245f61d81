"""
Relational joins between record tables.
"""

import logging

import pandas as pd

from ..errors import AmbiguousJoin, ColumnNotFound, NameCollision

logger = logging.getLogger(__name__)


def left_join(
    left: pd.DataFrame,
    right: pd.DataFrame,
    key: str,
    stage: str = "join",
) -> pd.DataFrame:
    """
    LEFT JOIN ``right`` onto ``left`` ON ``key``.

    Returns one row per row of ``left``, in ``left`` order, with the
    non-key columns of ``right`` appended. Where no right row matches,
    those columns are missing. Right rows without a match are dropped.
    A missing key never matches, not even a missing key on the other side.

    Raises:
        ColumnNotFound: ``key`` is absent from either side
        AmbiguousJoin: ``key`` is duplicated in ``right``
        NameCollision: a non-key column exists on both sides
    """
    if key not in left.columns:
        raise ColumnNotFound([key], stage=f"{stage} (left)", row_count=len(left),
                             available=list(left.columns))
    if key not in right.columns:
        raise ColumnNotFound([key], stage=f"{stage} (right)", row_count=len(right),
                             available=list(right.columns))

    keyed = right[right[key].notna()]
    dup_mask = keyed[key].duplicated(keep=False)
    if dup_mask.any():
        duplicated = keyed.loc[dup_mask, key].drop_duplicates().tolist()
        raise AmbiguousJoin(key, duplicated, stage=stage, row_count=len(right))

    shared = [c for c in right.columns if c != key and c in left.columns]
    if shared:
        raise NameCollision(shared, stage=stage, row_count=len(left))

    out = left.merge(keyed, on=key, how="left", sort=False)

    matched = (left[key].notna() & left[key].isin(keyed[key])).sum()
    logger.info(f"[{stage}] {matched:,}/{len(left):,} left rows matched on {key!r}")

    return out
