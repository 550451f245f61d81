"""Shared utilities for the Phenotype Pipeline."""

from .io import ensure_dir, read_records_csv, save_tsv, load_tsv, save_parquet, load_parquet

__all__ = [
    "ensure_dir",
    "read_records_csv",
    "save_tsv",
    "load_tsv",
    "save_parquet",
    "load_parquet",
]
