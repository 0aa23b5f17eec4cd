"""Attach site coordinates and ward codes to biological records."""

from __future__ import annotations

import logging

import geopandas as gpd
import pandas as pd
from pandas.api.types import is_numeric_dtype

from ..errors import JoinError
from ..geo import points_from_coordinates, reproject

logger = logging.getLogger(__name__)

STAGE = "merger"


def _check_key_types(left: pd.Series, right: pd.Series) -> None:
    if is_numeric_dtype(left) != is_numeric_dtype(right):
        raise JoinError(
            f"Cannot join {left.name} ({left.dtype}) to {right.name} ({right.dtype})",
            stage=STAGE,
        )


def merge_bio_with_sites(
    bio: pd.DataFrame,
    sites: pd.DataFrame,
    bio_site_id_field: str = "biol_site_id",
    site_id_field: str = "SITE_ID",
    easting_field: str = "FULL_EASTING",
    northing_field: str = "FULL_NORTHING",
    projected_crs="EPSG:27700",
    geographic_crs="EPSG:4326",
) -> gpd.GeoDataFrame:
    """Left-join biological records to sites and give each record a point.

    Every biological record is kept, in its original order; records whose
    site is not in ``sites`` get null site attributes and a null geometry.
    Sites without records do not appear. Points are built from the joined
    easting/northing in ``projected_crs`` and reprojected to
    ``geographic_crs`` in one batch.

    Args:
        bio: Biological records keyed by ``bio_site_id_field``
        sites: Site attributes keyed by ``site_id_field``; a GeoDataFrame's
            geometry column is ignored
        bio_site_id_field: Site id column in ``bio`` (default: "biol_site_id")
        site_id_field: Site id column in ``sites`` (default: "SITE_ID")
        easting_field: Easting column in ``sites``
        northing_field: Northing column in ``sites``
        projected_crs: CRS of the easting/northing values
        geographic_crs: CRS of the output geometry

    Returns:
        GeoDataFrame with one row per biological record

    Raises:
        JoinError: If the two site id columns have incompatible dtypes
    """
    _check_key_types(bio[bio_site_id_field], sites[site_id_field])

    if isinstance(sites, gpd.GeoDataFrame):
        sites = pd.DataFrame(sites.drop(columns=sites.geometry.name))

    duplicated = sites[site_id_field].duplicated()
    if duplicated.any():
        logger.warning(
            f"Dropping {int(duplicated.sum())} duplicate site rows before joining "
            "biological records"
        )
        sites = sites[~duplicated]

    merged = bio.merge(
        sites,
        how="left",
        left_on=bio_site_id_field,
        right_on=site_id_field,
        validate="many_to_one",
    )
    if site_id_field != bio_site_id_field:
        merged = merged.drop(columns=[site_id_field])

    points = points_from_coordinates(merged[easting_field], merged[northing_field], projected_crs)
    records = reproject(gpd.GeoDataFrame(merged, geometry=points), geographic_crs)

    unmatched = int(points.isna().sum())
    if unmatched:
        logger.warning(f"{unmatched}/{len(records)} biological records have no site coordinates")
    logger.info(f"Merged {len(records)} biological records with site coordinates")
    return records
