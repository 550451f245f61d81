"""Phenotype table cleaning: filter, projection, rename and derive stages."""

from .table_ops import (
    filter_rows,
    drop_columns,
    rename_columns,
    derive_column,
    threshold_indicator,
)
from .phenotype_cleaner import PhenotypeCleaner, clean_phenotypes

__all__ = [
    "filter_rows",
    "drop_columns",
    "rename_columns",
    "derive_column",
    "threshold_indicator",
    "PhenotypeCleaner",
    "clean_phenotypes",
]
