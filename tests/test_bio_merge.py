"""Tests for attaching site coordinates to biological records."""

from __future__ import annotations

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
import shapely

from apem.errors import JoinError
from apem.transformers.bio import merge_bio_with_sites
from apem.transformers.wards import join_sites_to_wards


def _sites(ids):
    return pd.DataFrame(
        {
            "SITE_ID": ids,
            "FULL_EASTING": [440000.0 + 100 * i for i in range(len(ids))],
            "FULL_NORTHING": [110000.0 + 100 * i for i in range(len(ids))],
        }
    )


def test_unmatched_site_keeps_record_with_null_coordinates():
    bio = pd.DataFrame({"biol_site_id": [1, 2, 3], "LIFE_SCORES_TOTAL": [6.5, 7.0, 6.9]})

    merged = merge_bio_with_sites(bio, _sites([1, 2]))

    assert len(merged) == 3
    row = merged[merged["biol_site_id"] == 3].iloc[0]
    assert pd.isna(row["FULL_EASTING"])
    assert pd.isna(row["FULL_NORTHING"])
    assert merged.geometry.isna().tolist() == [False, False, True]


def test_record_count_and_order_are_preserved():
    bio = pd.DataFrame({"biol_site_id": [2, 9, 1, 2, 1], "LIFE_SCORES_TOTAL": [1, 2, 3, 4, 5]})

    merged = merge_bio_with_sites(bio, _sites([1, 2, 3]))

    assert len(merged) == len(bio)
    assert merged["biol_site_id"].tolist() == [2, 9, 1, 2, 1]
    assert merged["LIFE_SCORES_TOTAL"].tolist() == [1, 2, 3, 4, 5]
    # Sites without records are not added
    assert 3 not in merged["biol_site_id"].tolist()
    assert "SITE_ID" not in merged.columns


def test_each_geometry_matches_its_own_coordinates():
    bio = pd.DataFrame({"biol_site_id": [3, 1, 2]})
    sites = _sites([1, 2, 3])

    merged = merge_bio_with_sites(bio, sites)

    assert merged.crs.to_epsg() == 4326
    expected = gpd.GeoSeries(
        gpd.points_from_xy(merged["FULL_EASTING"], merged["FULL_NORTHING"]), crs="EPSG:27700"
    ).to_crs("EPSG:4326")
    np.testing.assert_allclose(
        shapely.get_coordinates(merged.geometry.values),
        shapely.get_coordinates(expected.values),
    )


def test_ward_code_is_carried_from_joined_sites(wards, sites, bio):
    site_points, _ = join_sites_to_wards(wards, sites)

    merged = merge_bio_with_sites(bio, site_points)

    assert merged["WD24CD"].tolist() == ["E05000001", "E05000002", "E05000001", None]
    assert merged["SITE_NAME"].tolist()[0] == "Itchen at Woodmill"


def test_record_for_unknown_site_has_no_ward_or_geometry(wards, sites, bio):
    site_points, _ = join_sites_to_wards(wards, sites)
    records = pd.concat(
        [bio, pd.DataFrame({"biol_site_id": [777], "LIFE_SCORES_TOTAL": [5.0]})],
        ignore_index=True,
    )

    merged = merge_bio_with_sites(records, site_points)

    assert len(merged) == len(records)
    row = merged.iloc[-1]
    assert row["biol_site_id"] == 777
    assert pd.isna(row["WD24CD"])
    assert pd.isna(row["FULL_EASTING"])
    assert pd.isna(row["FULL_NORTHING"])
    assert row.geometry is None or row.geometry.is_empty
    # Known sites still carry their ward
    assert merged["WD24CD"].iloc[0] == "E05000001"


def test_duplicate_sites_do_not_duplicate_records():
    bio = pd.DataFrame({"biol_site_id": [1, 2]})
    sites = pd.concat([_sites([1, 2]), _sites([1])], ignore_index=True)

    merged = merge_bio_with_sites(bio, sites)

    assert len(merged) == 2


def test_incompatible_key_types_raise_join_error():
    bio = pd.DataFrame({"biol_site_id": ["1", "2"]})

    with pytest.raises(JoinError) as excinfo:
        merge_bio_with_sites(bio, _sites([1, 2]))

    assert excinfo.value.stage == "merger"


def test_empty_bio_records():
    bio = pd.DataFrame({"biol_site_id": pd.Series([], dtype="int64")})

    merged = merge_bio_with_sites(bio, _sites([1, 2]))

    assert merged.empty
    assert merged.crs.to_epsg() == 4326
