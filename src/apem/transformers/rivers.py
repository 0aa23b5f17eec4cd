"""Select river segments for the area map.

Two independent selections over the same river network:

* the named river: segments whose name contains a given string, keeping only
  those that lie entirely south of a latitude threshold once reprojected
  (several UK rivers share a name);
* area rivers: every segment whose vertices all fall inside a bounding box
  in the projected CRS.

Both are returned in the geographic CRS. The per-segment predicates are
plain functions over a single geometry.
"""

from __future__ import annotations

import logging

import geopandas as gpd
import numpy as np
import shapely

from ..geo import BoundingBox, assume_crs, ensure_crs, reproject

logger = logging.getLogger(__name__)


def max_latitude(geometry) -> float:
    """Largest y coordinate among the geometry's vertices (NaN when empty)."""
    coords = shapely.get_coordinates(geometry)
    if coords.size == 0:
        return float("nan")
    return float(coords[:, 1].max())


def is_south_of(geometry, latitude: float) -> bool:
    """True when no vertex of ``geometry`` lies north of ``latitude``.

    Empty or missing geometries never qualify.
    """
    highest = max_latitude(geometry)
    return not np.isnan(highest) and highest <= latitude


def is_within_bbox(geometry, bbox: BoundingBox) -> bool:
    """True when every vertex of ``geometry`` lies inside ``bbox``, edges included.

    A segment that only partly overlaps the box does not qualify, nor does an
    empty or missing geometry.
    """
    coords = shapely.get_coordinates(geometry)
    if coords.size == 0:
        return False
    xs, ys = coords[:, 0], coords[:, 1]
    return bool(
        xs.min() >= bbox.min_x
        and xs.max() <= bbox.max_x
        and ys.min() >= bbox.min_y
        and ys.max() <= bbox.max_y
    )


def select_by_name(
    rivers: gpd.GeoDataFrame, name: str, name_field: str = "name1", case: bool = True
) -> gpd.GeoDataFrame:
    """Segments whose ``name_field`` contains ``name`` anywhere (literal match)."""
    matches = (
        rivers[name_field]
        .astype("string")
        .str.contains(name, case=case, regex=False, na=False)
    )
    return rivers[matches.to_numpy(dtype=bool)]


def filter_named_river(
    rivers: gpd.GeoDataFrame,
    name: str,
    name_field: str = "name1",
    max_lat: float = 51.5,
    projected_crs="EPSG:27700",
    geographic_crs="EPSG:4326",
    case: bool = True,
) -> gpd.GeoDataFrame:
    """Select the segments of one named river south of ``max_lat``.

    Rivers without CRS metadata are assumed to be in ``projected_crs``. The
    latitude test is applied to each segment on its own after reprojection
    to ``geographic_crs``.
    """
    named = select_by_name(rivers, name, name_field=name_field, case=case)
    named = reproject(assume_crs(named, projected_crs), geographic_crs)
    keep = np.array([is_south_of(geom, max_lat) for geom in named.geometry], dtype=bool)
    result = named[keep]
    logger.info(
        f"Named river '{name}': {len(named)} matching segments, "
        f"{len(result)} south of {max_lat}"
    )
    return result


def filter_rivers_in_bbox(
    rivers: gpd.GeoDataFrame,
    bbox: BoundingBox,
    projected_crs="EPSG:27700",
    geographic_crs="EPSG:4326",
) -> gpd.GeoDataFrame:
    """Select every segment lying wholly inside ``bbox``.

    The box is tested in ``projected_crs``, before the selection is
    reprojected to ``geographic_crs``.
    """
    projected = ensure_crs(rivers, projected_crs)
    keep = np.array([is_within_bbox(geom, bbox) for geom in projected.geometry], dtype=bool)
    result = reproject(projected[keep], geographic_crs)
    logger.info(f"Area rivers: {len(result)} of {len(rivers)} segments inside {tuple(bbox)}")
    return result
