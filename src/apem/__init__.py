"""Spatial join and mapping of biological monitoring sites to wards and rivers.

Loads ward boundaries, monitoring sites, biological index scores and the
river network, assigns sites to wards, attaches site coordinates to
biological records, selects rivers for the area, and renders maps and
score distributions.
"""

from .errors import ApemError, DataLoadError, JoinError, ProjectionError
from .pipeline import PipelineResult, RunConfig, run_pipeline

__all__ = [
    "ApemError",
    "DataLoadError",
    "JoinError",
    "ProjectionError",
    "PipelineResult",
    "RunConfig",
    "run_pipeline",
]
