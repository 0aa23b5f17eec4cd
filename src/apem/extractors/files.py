"""Readers for the four pipeline inputs.

Each reader returns the file's full attribute schema and validates the
columns the pipeline relies on. Any failure (missing file, unreadable
format, missing or malformed column) is raised as ``DataLoadError``.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import geopandas as gpd
import pandas as pd
import pandera as pa
from pandera import DataFrameSchema

from utils import resolve_date_range

from ..errors import DataLoadError
from ..schemas import bio_schema, river_schema, site_schema, ward_schema

logger = logging.getLogger(__name__)

STAGE = "loader"

# Readers for biological index tables, keyed by file suffix
_TABLE_READERS = {
    ".parquet": pd.read_parquet,
    ".csv": pd.read_csv,
    ".feather": pd.read_feather,
}


def _require_file(path: Path, label: str) -> Path:
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"{label} file not found at {path}", stage=STAGE)
    return path


def _validate(frame: pd.DataFrame, schema: DataFrameSchema, label: str) -> pd.DataFrame:
    missing_cols = [col for col in schema.columns if col not in frame.columns]
    if missing_cols:
        raise DataLoadError(f"{label} is missing required columns: {missing_cols}", stage=STAGE)
    try:
        return schema.validate(frame, lazy=True)
    except pa.errors.SchemaErrors as exc:
        raise DataLoadError(
            f"{label} failed validation:\n{exc.failure_cases.to_string()}", stage=STAGE
        ) from exc


def _read_vector(path: Path, label: str) -> gpd.GeoDataFrame:
    try:
        frame = gpd.read_file(path)
    except Exception as exc:
        raise DataLoadError(f"Could not read {label} from {path}: {exc}", stage=STAGE) from exc
    if not isinstance(frame, gpd.GeoDataFrame):
        raise DataLoadError(f"{label.capitalize()} file {path} has no geometry column", stage=STAGE)
    return frame


def read_wards(path: Path, code_field: str = "WD24CD") -> gpd.GeoDataFrame:
    """Read ward boundary polygons.

    Args:
        path: Vector file (GeoJSON, shapefile, GeoPackage) of ward polygons
        code_field: Unique ward code column (default: "WD24CD")

    Returns:
        GeoDataFrame of wards in the file's own CRS
    """
    path = _require_file(path, "Wards")
    wards = _read_vector(path, "wards")
    _validate(pd.DataFrame(wards.drop(columns=wards.geometry.name)), ward_schema(code_field), "Wards")
    logger.info(f"Loaded {len(wards)} wards from {path} (crs={wards.crs})")
    return wards


def read_sites(
    path: Path,
    id_field: str = "SITE_ID",
    easting_field: str = "FULL_EASTING",
    northing_field: str = "FULL_NORTHING",
) -> pd.DataFrame:
    """Read the monitoring site registry.

    Easting and northing are coerced to floats; every other column is kept
    as read.
    """
    path = _require_file(path, "Sites")
    try:
        sites = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Could not read sites from {path}: {exc}", stage=STAGE) from exc

    sites = _validate(sites, site_schema(id_field, easting_field, northing_field), "Sites")
    logger.info(f"Loaded {len(sites)} sites from {path}")
    return sites


def read_bio_records(
    path: Path,
    site_ids: Optional[Iterable] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    site_id_field: str = "biol_site_id",
    date_field: str = "SAMPLE_DATE",
) -> pd.DataFrame:
    """Read biological index records, optionally filtered by site and date.

    Args:
        path: Parquet, CSV or Feather table of biological metrics
        site_ids: Keep only records for these sites (all sites when None)
        start_date: Inclusive lower bound on ``date_field`` (unbounded when None)
        end_date: Inclusive upper bound on ``date_field`` (today when None)
        site_id_field: Site identifier column (default: "biol_site_id")
        date_field: Sample date column (default: "SAMPLE_DATE")

    Returns:
        DataFrame of biological records with ``date_field`` as datetimes
    """
    path = _require_file(path, "Biological records")
    reader = _TABLE_READERS.get(path.suffix.lower())
    if reader is None:
        raise DataLoadError(
            f"Unsupported biological records format '{path.suffix}' "
            f"(expected one of {sorted(_TABLE_READERS)})",
            stage=STAGE,
        )
    try:
        bio = reader(path)
    except Exception as exc:
        raise DataLoadError(
            f"Could not read biological records from {path}: {exc}", stage=STAGE
        ) from exc

    bio = _validate(bio, bio_schema(site_id_field, date_field), "Biological records")
    total = len(bio)

    if site_ids is not None:
        bio = bio[bio[site_id_field].isin(list(site_ids))]

    try:
        start, end = resolve_date_range(start_date, end_date)
    except ValueError as exc:
        raise DataLoadError(str(exc), stage=STAGE) from exc
    # Compare whole days so records timed later on the end day are kept
    sample_day = bio[date_field].dt.normalize()
    in_range = sample_day <= end
    if start is not None:
        in_range &= sample_day >= start
    bio = bio[in_range].reset_index(drop=True)

    logger.info(f"Loaded {len(bio)} of {total} biological records from {path}")
    return bio


def read_rivers(path: Path, name_field: str = "name1") -> gpd.GeoDataFrame:
    """Read river network linestrings with their name attribute."""
    path = _require_file(path, "Rivers")
    rivers = _read_vector(path, "rivers")
    _validate(pd.DataFrame(rivers.drop(columns=rivers.geometry.name)), river_schema(name_field), "Rivers")
    logger.info(f"Loaded {len(rivers)} river segments from {path} (crs={rivers.crs})")
    return rivers
