"""Assembly of the family-level analysis table."""

from .joins import left_join
from .analysis_assembly import AnalysisAssembler, assemble_analysis_table, prepare_environment

__all__ = ["left_join", "AnalysisAssembler", "assemble_analysis_table", "prepare_environment"]
