"""Aggregation utilities for family-level metrics."""

from .family_means import aggregate_by_group, compute_family_means

__all__ = ["aggregate_by_group", "compute_family_means"]
