"""Coordinate reference system helpers.

Thin wrappers over geopandas so that projection failures surface as
``ProjectionError`` and point geometries are built in one vectorised call.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Union

import geopandas as gpd
import pandas as pd
from pyproj import CRS
from pyproj.exceptions import CRSError

from .errors import ProjectionError

logger = logging.getLogger(__name__)

GeoFrameOrSeries = Union[gpd.GeoDataFrame, gpd.GeoSeries]


class BoundingBox(NamedTuple):
    """Axis-aligned area in projected coordinates (metres)."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float


def parse_crs(crs) -> CRS:
    """Resolve an EPSG-style identifier (``"EPSG:27700"``, ``27700``) to a CRS."""
    try:
        return CRS.from_user_input(crs)
    except CRSError as exc:
        raise ProjectionError(f"Unsupported coordinate reference system: {crs!r}") from exc


def assume_crs(data: GeoFrameOrSeries, crs) -> GeoFrameOrSeries:
    """Assign ``crs`` to data read without CRS metadata; leave others as they are."""
    if data.crs is None:
        target = parse_crs(crs)
        logger.debug(f"Input has no CRS, assigning {target.to_string()}")
        return data.set_crs(target)
    return data


def ensure_crs(data: GeoFrameOrSeries, crs) -> GeoFrameOrSeries:
    """Return ``data`` in ``crs``, assigning it when the input has no CRS."""
    data = assume_crs(data, crs)
    if data.crs != parse_crs(crs):
        return reproject(data, crs)
    return data


def reproject(data: GeoFrameOrSeries, crs) -> GeoFrameOrSeries:
    """Transform geometries to ``crs`` without reordering or dropping rows.

    Raises:
        ProjectionError: If ``crs`` is not a valid CRS or ``data`` has no CRS
    """
    target = parse_crs(crs)
    try:
        result = data.to_crs(target)
    except (CRSError, ValueError) as exc:
        raise ProjectionError(
            f"Cannot reproject from {data.crs} to {target.to_string()}: {exc}"
        ) from exc
    logger.debug(f"Reprojected {len(result)} geometries to {target.to_string()}")
    return result


def points_from_coordinates(
    x: pd.Series, y: pd.Series, crs
) -> gpd.GeoSeries:
    """Build one point per row from coordinate columns.

    Rows where either coordinate is missing get a null geometry, so the
    result always has the same length and index as the inputs.
    """
    x = pd.to_numeric(x, errors="coerce")
    y = pd.to_numeric(y, errors="coerce")
    points = gpd.GeoSeries(
        gpd.points_from_xy(x, y), index=x.index, crs=parse_crs(crs)
    )
    missing = x.isna() | y.isna()
    if missing.any():
        points[missing] = None
    return points
