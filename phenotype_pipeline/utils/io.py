"""
File I/O utilities.

Helper functions for reading source CSVs and writing staging and
final tables with consistent missing-value handling and logging.
"""

from pathlib import Path
from typing import Iterable, Optional
import logging
import pandas as pd

from ..config import NA_REP, NA_VALUES

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Parameters
    ----------
    path : Path
        Directory path to ensure exists.

    Returns
    -------
    Path
        The input path (for chaining).
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def read_records_csv(
    path: Path,
    categorical: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """
    Read a comma-separated record file with a header row.

    Parameters
    ----------
    path : Path
        CSV file to read.
    categorical : iterable of str, optional
        Columns read as text, so identifiers such as family codes keep
        their exact spelling and compare equal across files.

    Returns
    -------
    pd.DataFrame
        Loaded records.

    Raises
    ------
    FileNotFoundError
        If file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    wanted = set(categorical or [])
    header = pd.read_csv(path, nrows=0).columns
    dtype = {raw: str for raw in header if raw.strip().lstrip("\ufeff") in wanted}
    df = pd.read_csv(path, dtype=dtype, na_values=NA_VALUES, keep_default_na=True)
    df.columns = [c.strip().lstrip("\ufeff") for c in df.columns]
    logger.info(f"Read {len(df):,} rows, {len(df.columns)} columns from {path.name}")
    return df


def save_tsv(df: pd.DataFrame, path: Path) -> Path:
    """
    Save DataFrame as tab-separated text with a header row.

    Missing values are written as ``NA``.
    """
    path = Path(path)
    ensure_dir(path.parent)
    df.to_csv(path, sep="\t", index=False, na_rep=NA_REP)
    logger.info(f"Saved {len(df):,} rows to {path.name}")
    return path


def load_tsv(
    path: Path,
    categorical: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Load a table written by :func:`save_tsv`."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    dtype = {col: str for col in (categorical or [])}
    df = pd.read_csv(path, sep="\t", dtype=dtype, na_values=[NA_REP])
    logger.debug(f"Loaded {len(df):,} rows from {path.name}")
    return df


def save_parquet(
    df: pd.DataFrame,
    path: Path,
    compression: str = "snappy",
) -> Path:
    """
    Save DataFrame to parquet with logging.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to save.
    path : Path
        Output path.
    compression : str
        Compression algorithm.

    Returns
    -------
    Path
        The output path.
    """
    path = Path(path)
    ensure_dir(path.parent)
    df.to_parquet(path, compression=compression, index=False)
    logger.info(f"Saved {len(df):,} rows to {path.name}")
    return path


def load_parquet(
    path: Path,
    columns: Optional[list] = None,
) -> pd.DataFrame:
    """
    Load parquet file with optional column selection.

    Parameters
    ----------
    path : Path
        Path to parquet file.
    columns : list, optional
        Columns to load (loads all if None).

    Returns
    -------
    pd.DataFrame
        Loaded DataFrame.

    Raises
    ------
    FileNotFoundError
        If file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    df = pd.read_parquet(path, columns=columns)
    logger.debug(f"Loaded {len(df):,} rows from {path.name}")
    return df
