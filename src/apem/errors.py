"""Error taxonomy for the ward mapping pipeline.

Every error carries the pipeline stage it was raised in (``loader``,
``joiner``, ``merger``, ``filter`` or ``presentation``). Stages set it when
they know it; ``run_pipeline`` stamps it on errors that arrive without one.
"""

from __future__ import annotations

from typing import Optional


class ApemError(Exception):
    """Base class for pipeline failures."""

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class DataLoadError(ApemError):
    """Input file missing, unreadable, or lacking required columns."""


class ProjectionError(ApemError):
    """Invalid or unsupported coordinate reference system transform."""


class JoinError(ApemError):
    """Join keys are incompatible, or a site matches several wards under the
    ``error`` tie-break."""
