"""Configuration module for the APEM ward mapping pipeline.

Loads environment variables, defines input and output paths under the data
root (DATAREPO_ROOT), and holds the coordinate reference systems, area bounds
and river selection used by the pipeline. Every value has a default so the
module can be imported by tests without any environment set.
"""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Data root and input files
ROOT = Path(os.getenv("DATAREPO_ROOT", "data")).expanduser()
WARDS_PATH = Path(os.getenv("WARDS_PATH", str(ROOT / "soton_wards.geojson")))
SITES_PATH = Path(os.getenv("SITES_PATH", str(ROOT / "apem_sites.csv")))
BIO_PATH = Path(
    os.getenv("BIO_PATH", str(ROOT / "INV_OPEN_DATA_METRICS_ALL.parquet"))
)
RIVERS_PATH = Path(os.getenv("RIVERS_PATH", str(ROOT / "WatercourseLink.shp")))

# Rendered maps and plots
FIGURES_DIR = Path(os.getenv("FIGURES_DIR", str(ROOT / "figures")))

# Coordinate reference systems
# Inputs arrive in British National Grid; everything is mapped in WGS 84
PROJECTED_CRS = os.getenv("PROJECTED_CRS", "EPSG:27700")
GEOGRAPHIC_CRS = os.getenv("GEOGRAPHIC_CRS", "EPSG:4326")

# Area of interest in PROJECTED_CRS metres (Southampton)
AREA_MIN_EASTING = float(os.getenv("AREA_MIN_EASTING", "439000"))
AREA_MAX_EASTING = float(os.getenv("AREA_MAX_EASTING", "451000"))
AREA_MIN_NORTHING = float(os.getenv("AREA_MIN_NORTHING", "100000"))
AREA_MAX_NORTHING = float(os.getenv("AREA_MAX_NORTHING", "130000"))

# Named river selection
# Two UK rivers are called Itchen; the Hampshire one lies south of 51.5N
RIVER_NAME = os.getenv("RIVER_NAME", "Itchen")
RIVER_NAME_FIELD = os.getenv("RIVER_NAME_FIELD", "name1")
RIVER_MAX_LATITUDE = float(os.getenv("RIVER_MAX_LATITUDE", "51.5"))

# Which ward wins when a site falls inside several: "last", "first" or "error"
WARD_TIE_BREAK = os.getenv("WARD_TIE_BREAK", "last")

# Inclusive date range for biological records (EDATE defaults to today)
BDATE = date.fromisoformat(os.getenv("BDATE", "1995-01-01"))
EDATE = date.fromisoformat(os.getenv("EDATE") or date.today().isoformat())

# Column names in the source files
WARD_CODE_FIELD = "WD24CD"
SITE_ID_FIELD = "SITE_ID"
EASTING_FIELD = "FULL_EASTING"
NORTHING_FIELD = "FULL_NORTHING"
BIO_SITE_ID_FIELD = "biol_site_id"
BIO_DATE_FIELD = "SAMPLE_DATE"
WATER_BODY_FIELD = "WATER_BODY"
SCORE_FIELD = "LIFE_SCORES_TOTAL"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")
LOG_JSON = os.getenv("LOG_JSON", "false").lower() in ("1", "true", "yes")
LOG_VERBOSE = os.getenv("LOG_VERBOSE", "false").lower() in ("1", "true", "yes")


def ensure_dirs(*paths: Path) -> None:
    """Create directory structures for pipeline outputs.

    Args:
        *paths: One or more Path objects to create
    """
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)
