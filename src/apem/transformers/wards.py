"""Assign monitoring sites to wards and count sites per ward.

Sites and ward polygons are reprojected to a shared geographic CRS, each
site is matched to the wards whose polygon intersects its point, and the
number of sites in every ward is attached to the ward table.
"""

from __future__ import annotations

import logging
from typing import Tuple

import geopandas as gpd
import pandas as pd

from ..errors import JoinError
from ..geo import assume_crs, points_from_coordinates, reproject

logger = logging.getLogger(__name__)

STAGE = "joiner"

# "last" keeps the match with the highest ward position, "first" the lowest
TIE_BREAKS = ("last", "first", "error")

COUNT_FIELD = "Count"


def assign_wards(
    wards: gpd.GeoDataFrame,
    sites: gpd.GeoDataFrame,
    code_field: str = "WD24CD",
    tie_break: str = "last",
    predicate: str = "intersects",
) -> pd.Series:
    """Return the code of the ward containing each site.

    ``wards`` and ``sites`` must share a CRS. A site that no ward contains
    gets a null code. When several wards contain a site (it lies on a shared
    boundary, or the polygons overlap) ``tie_break`` decides: ``"last"``
    takes the last matching ward in ward order, ``"first"`` the first one,
    and ``"error"`` raises ``JoinError``.

    Args:
        wards: Ward polygons with a ``code_field`` column
        sites: Site points
        code_field: Ward code column (default: "WD24CD")
        tie_break: One of ``TIE_BREAKS`` (default: "last")
        predicate: Spatial predicate passed to ``geopandas.sjoin``

    Returns:
        Series of ward codes aligned to ``sites.index``
    """
    if tie_break not in TIE_BREAKS:
        raise JoinError(
            f"Unknown tie_break {tie_break!r}, expected one of {TIE_BREAKS}", stage=STAGE
        )
    if wards.crs != sites.crs:
        raise JoinError(
            f"Wards ({wards.crs}) and sites ({sites.crs}) are not in the same CRS",
            stage=STAGE,
        )

    # Positional indexes so index_right is the ward's position in iteration order
    site_points = gpd.GeoDataFrame(
        geometry=sites.geometry.reset_index(drop=True), crs=sites.crs
    )
    ward_shapes = gpd.GeoDataFrame(
        {code_field: wards[code_field].to_numpy()},
        geometry=wards.geometry.reset_index(drop=True),
        crs=wards.crs,
    )

    pairs = gpd.sjoin(site_points, ward_shapes, how="inner", predicate=predicate)
    pairs = (
        pd.DataFrame(pairs[[code_field, "index_right"]])
        .rename_axis("site_position")
        .reset_index()
        .sort_values(["site_position", "index_right"])
    )

    ambiguous = pairs.loc[pairs["site_position"].duplicated(keep=False), "site_position"]
    if not ambiguous.empty:
        positions = sorted(ambiguous.unique().tolist())
        if tie_break == "error":
            raise JoinError(
                f"{len(positions)} sites fall inside more than one ward "
                f"(site positions {positions})",
                stage=STAGE,
            )
        logger.warning(
            f"{len(positions)} sites fall inside more than one ward, "
            f"keeping the {tie_break} match"
        )

    # No ambiguity remains under "error", so either end of each group will do
    keep = "last" if tie_break == "last" else "first"
    chosen = pairs.drop_duplicates(subset="site_position", keep=keep)

    codes = pd.Series([None] * len(sites), dtype=object, name=code_field)
    codes.iloc[chosen["site_position"].to_numpy()] = chosen[code_field].to_numpy()
    codes.index = sites.index
    return codes


def count_sites_per_ward(ward_codes: pd.Series, code_field: str = "WD24CD") -> pd.DataFrame:
    """Tally sites per ward code; sites without a ward are not counted."""
    return (
        ward_codes.dropna()
        .value_counts(sort=False)
        .rename_axis(code_field)
        .reset_index(name=COUNT_FIELD)
    )


def attach_ward_counts(
    wards: gpd.GeoDataFrame, counts: pd.DataFrame, code_field: str = "WD24CD"
) -> gpd.GeoDataFrame:
    """Left-join site counts onto wards, filling wards with no sites with 0.

    Ward order and every ward attribute are preserved.
    """
    result = wards.drop(columns=[COUNT_FIELD], errors="ignore").merge(
        counts, on=code_field, how="left"
    )
    result[COUNT_FIELD] = result[COUNT_FIELD].fillna(0).astype(int)
    return result


def join_sites_to_wards(
    wards: gpd.GeoDataFrame,
    sites: pd.DataFrame,
    projected_crs="EPSG:27700",
    geographic_crs="EPSG:4326",
    code_field: str = "WD24CD",
    easting_field: str = "FULL_EASTING",
    northing_field: str = "FULL_NORTHING",
    tie_break: str = "last",
) -> Tuple[gpd.GeoDataFrame, gpd.GeoDataFrame]:
    """Assign every site to a ward and count sites per ward.

    Site points are built from easting/northing in ``projected_crs``. Wards
    without CRS metadata are assumed to be in ``projected_crs``. Both are
    reprojected to ``geographic_crs`` before matching.

    Returns:
        Tuple of:
            - sites with point geometry in ``geographic_crs`` and a
              ``code_field`` column (null where no ward contains the site)
            - wards in ``geographic_crs`` with an integer ``Count`` column
    """
    points = points_from_coordinates(sites[easting_field], sites[northing_field], projected_crs)
    site_points = reproject(gpd.GeoDataFrame(sites.copy(), geometry=points), geographic_crs)
    ward_shapes = reproject(assume_crs(wards, projected_crs), geographic_crs)

    site_points[code_field] = assign_wards(
        ward_shapes, site_points, code_field=code_field, tie_break=tie_break
    )
    counts = count_sites_per_ward(site_points[code_field], code_field=code_field)
    ward_shapes = attach_ward_counts(ward_shapes, counts, code_field=code_field)

    matched = int(site_points[code_field].notna().sum())
    logger.info(
        f"Assigned {matched}/{len(site_points)} sites to "
        f"{int((ward_shapes[COUNT_FIELD] > 0).sum())}/{len(ward_shapes)} wards"
    )
    return site_points, ward_shapes
