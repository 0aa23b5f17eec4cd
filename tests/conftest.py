"""Pytest configuration for local package imports and shared fixtures.

This prepends the repository `src` directory to sys.path so tests can import
the `apem` package and its helper modules without installing them, and
switches matplotlib to a non-interactive backend.
"""

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import LineString, box

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

BNG = "EPSG:27700"


@pytest.fixture
def wards() -> gpd.GeoDataFrame:
    """Three non-overlapping 1 km square wards near Southampton (BNG)."""
    return gpd.GeoDataFrame(
        {
            "WD24CD": ["E05000001", "E05000002", "E05000003"],
            "WD24NM": ["Bargate", "Bevois", "Portswood"],
        },
        geometry=[
            box(440000, 110000, 441000, 111000),
            box(442000, 110000, 443000, 111000),
            box(444000, 110000, 445000, 111000),
        ],
        crs=BNG,
    )


@pytest.fixture
def sites() -> pd.DataFrame:
    """Two sites in the first ward, one in the second, two outside every ward."""
    return pd.DataFrame(
        {
            "SITE_ID": [101, 102, 103, 104, 105],
            "SITE_NAME": ["Itchen at Woodmill", "Monks Brook", "Tanners Brook", "Hamble", "Ford Lake"],
            "FULL_EASTING": [440300.0, 440700.0, 442500.0, 446500.0, 448000.0],
            "FULL_NORTHING": [110300.0, 110600.0, 110500.0, 112000.0, 115000.0],
        }
    )


@pytest.fixture
def bio() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "biol_site_id": [101, 103, 101, 104],
            "SAMPLE_DATE": pd.to_datetime(["2001-04-12", "2005-09-30", "2010-05-02", "2019-10-21"]),
            "WATER_BODY": ["Itchen", "Tanners Brook", "Itchen", "Hamble"],
            "LIFE_SCORES_TOTAL": [7.2, 6.1, 7.5, 6.8],
        }
    )


@pytest.fixture
def rivers() -> gpd.GeoDataFrame:
    """Southern Itchen, a northern river with the same name, and other rivers (BNG)."""
    return gpd.GeoDataFrame(
        {
            "name1": ["River Itchen", "River Itchen", "River Test", "Ford Lake", "Hamble"],
        },
        geometry=[
            LineString([(445000, 110000), (445500, 112000), (446000, 115000)]),
            LineString([(440000, 240000), (440500, 245000), (441000, 250000)]),
            LineString([(440000, 105000), (441000, 115000)]),
            LineString([(445000, 110000), (452000, 110000)]),
            LineString([(470000, 105000), (471000, 106000)]),
        ],
        crs=BNG,
    )
