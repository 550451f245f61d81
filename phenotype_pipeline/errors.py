"""
Error definitions for the table transformation stages.

Every fatal error carries the stage that raised it, the offending
column or key, and the number of input rows at the time of failure.
"""

from typing import Any, Dict, Iterable, Optional


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        row_count: Optional[int] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.stage = stage
        self.row_count = row_count
        self.context: Dict[str, Any] = context
        super().__init__(self._format())

    def _format(self) -> str:
        parts = []
        if self.stage:
            parts.append(f"[{self.stage}]")
        parts.append(self.message)
        if self.row_count is not None:
            parts.append(f"(input rows: {self.row_count:,})")
        return " ".join(parts)


class ColumnNotFound(PipelineError):
    """A referenced column is absent from the current schema."""

    def __init__(
        self,
        columns: Iterable[str],
        stage: Optional[str] = None,
        row_count: Optional[int] = None,
        available: Optional[Iterable[str]] = None,
    ) -> None:
        self.columns = list(columns)
        self.available = list(available) if available is not None else None
        message = f"column(s) not found: {', '.join(map(repr, self.columns))}"
        if self.available is not None:
            message += f"; available: {self.available}"
        super().__init__(message, stage=stage, row_count=row_count)


class NameCollision(PipelineError):
    """A new column name already exists in the schema."""

    def __init__(
        self,
        columns: Iterable[str],
        stage: Optional[str] = None,
        row_count: Optional[int] = None,
    ) -> None:
        self.columns = list(columns)
        message = f"column name(s) already in use: {', '.join(map(repr, self.columns))}"
        super().__init__(message, stage=stage, row_count=row_count)


class AmbiguousJoin(PipelineError):
    """The right side of a join holds duplicated keys."""

    def __init__(
        self,
        key: str,
        duplicated: Iterable[Any],
        stage: Optional[str] = None,
        row_count: Optional[int] = None,
    ) -> None:
        self.key = key
        self.duplicated = list(duplicated)
        shown = ", ".join(map(repr, self.duplicated[:10]))
        if len(self.duplicated) > 10:
            shown += f", ... ({len(self.duplicated)} total)"
        message = f"duplicate values of join key {key!r} on right side: {shown}"
        super().__init__(message, stage=stage, row_count=row_count)
