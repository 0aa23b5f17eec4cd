"""Restrict the site registry to the area of interest."""

from __future__ import annotations

import logging

import pandas as pd

from ..geo import BoundingBox

logger = logging.getLogger(__name__)


def filter_sites_to_bbox(
    sites: pd.DataFrame,
    bbox: BoundingBox,
    easting_field: str = "FULL_EASTING",
    northing_field: str = "FULL_NORTHING",
) -> pd.DataFrame:
    """Keep sites strictly inside ``bbox``.

    Sites lying exactly on an edge of the box are dropped. Row order and the
    original index are preserved.
    """
    easting = sites[easting_field]
    northing = sites[northing_field]
    inside = (
        (easting > bbox.min_x)
        & (easting < bbox.max_x)
        & (northing > bbox.min_y)
        & (northing < bbox.max_y)
    )
    filtered = sites[inside]
    logger.info(f"Kept {len(filtered)} of {len(sites)} sites inside {tuple(bbox)}")
    return filtered
