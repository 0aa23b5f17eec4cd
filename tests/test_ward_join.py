"""Tests for assigning sites to wards and counting sites per ward."""

from __future__ import annotations

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import Point, box

from apem.errors import JoinError
from apem.geo import BoundingBox
from apem.transformers.sites import filter_sites_to_bbox
from apem.transformers.wards import (
    assign_wards,
    attach_ward_counts,
    count_sites_per_ward,
    join_sites_to_wards,
)


def test_counts_per_ward_for_three_wards_and_five_sites(wards, sites):
    site_points, ward_counts = join_sites_to_wards(wards, sites)

    counts = dict(zip(ward_counts["WD24CD"], ward_counts["Count"]))
    assert counts == {"E05000001": 2, "E05000002": 1, "E05000003": 0}
    assert site_points["WD24CD"].isna().sum() == 2
    assert site_points.loc[site_points["SITE_ID"].isin([104, 105]), "WD24CD"].isna().all()


def test_count_matches_assigned_sites_for_every_ward(wards, sites):
    site_points, ward_counts = join_sites_to_wards(wards, sites)

    for code, count in zip(ward_counts["WD24CD"], ward_counts["Count"]):
        assert count == (site_points["WD24CD"] == code).sum()


def test_outputs_are_geographic_and_keep_site_order(wards, sites):
    site_points, ward_counts = join_sites_to_wards(wards, sites)

    assert site_points.crs.to_epsg() == 4326
    assert ward_counts.crs.to_epsg() == 4326
    assert site_points["SITE_ID"].tolist() == sites["SITE_ID"].tolist()
    assert list(site_points.index) == list(sites.index)
    # All source columns survive the join
    assert set(sites.columns) <= set(site_points.columns)
    assert ward_counts["WD24NM"].tolist() == wards["WD24NM"].tolist()
    assert ward_counts["Count"].dtype.kind == "i"


def test_wards_without_crs_are_assumed_projected(wards, sites):
    naive = gpd.GeoDataFrame(wards.drop(columns="geometry"), geometry=list(wards.geometry))
    _, ward_counts = join_sites_to_wards(naive, sites)
    assert ward_counts["Count"].tolist() == [2, 1, 0]


def test_existing_count_column_is_replaced(wards, sites):
    wards = wards.assign(Count=99)
    _, ward_counts = join_sites_to_wards(wards, sites)
    assert ward_counts["Count"].tolist() == [2, 1, 0]


class TestOverlappingWards:
    """A site inside two overlapping wards is resolved by the tie-break."""

    def _build(self, codes=("W1", "W2")):
        wards = gpd.GeoDataFrame(
            {"WD24CD": list(codes)},
            geometry=[box(440000, 110000, 442000, 112000), box(441000, 111000, 443000, 113000)],
            crs="EPSG:27700",
        )
        sites = gpd.GeoDataFrame(
            {"SITE_ID": [1, 2]},
            geometry=[Point(441500, 111500), Point(440200, 110200)],
            crs="EPSG:27700",
        )
        return wards, sites

    def test_last_match_wins_by_default(self):
        wards, sites = self._build()
        codes = assign_wards(wards, sites)
        assert codes.tolist() == ["W2", "W1"]

    def test_last_match_follows_ward_order(self):
        wards, sites = self._build()
        reordered = wards.iloc[::-1].reset_index(drop=True)
        codes = assign_wards(reordered, sites)
        assert codes.tolist() == ["W1", "W1"]

    def test_first_match(self):
        wards, sites = self._build()
        codes = assign_wards(wards, sites, tie_break="first")
        assert codes.tolist() == ["W1", "W1"]

    def test_error_on_ambiguity(self):
        wards, sites = self._build()
        with pytest.raises(JoinError) as excinfo:
            assign_wards(wards, sites, tie_break="error")
        assert excinfo.value.stage == "joiner"

    def test_error_tie_break_without_overlap(self, wards, sites):
        projected = gpd.GeoDataFrame(
            sites,
            geometry=gpd.points_from_xy(sites["FULL_EASTING"], sites["FULL_NORTHING"]),
            crs="EPSG:27700",
        )
        codes = assign_wards(wards, projected, tie_break="error")
        assert codes.tolist() == ["E05000001", "E05000001", "E05000002", None, None]

    def test_unknown_tie_break(self):
        wards, sites = self._build()
        with pytest.raises(JoinError) as excinfo:
            assign_wards(wards, sites, tie_break="random")
        assert excinfo.value.stage == "joiner"

    def test_counts_use_the_chosen_ward(self):
        wards, sites = self._build()
        codes = assign_wards(wards, sites)
        counts = count_sites_per_ward(codes)
        result = attach_ward_counts(wards, counts)
        assert result["Count"].tolist() == [1, 1]


def test_site_on_shared_boundary_takes_last_ward():
    wards = gpd.GeoDataFrame(
        {"WD24CD": ["West", "East"]},
        geometry=[box(0, 0, 10, 10), box(10, 0, 20, 10)],
        crs="EPSG:27700",
    )
    sites = gpd.GeoDataFrame({"SITE_ID": [1]}, geometry=[Point(10, 5)], crs="EPSG:27700")
    assert assign_wards(wards, sites).tolist() == ["East"]


def test_assign_wards_requires_matching_crs(wards):
    sites = gpd.GeoDataFrame({"SITE_ID": [1]}, geometry=[Point(-1.4, 50.9)], crs="EPSG:4326")
    with pytest.raises(JoinError):
        assign_wards(wards, sites)


def test_assign_wards_with_no_sites(wards):
    empty = gpd.GeoDataFrame({"SITE_ID": []}, geometry=[], crs="EPSG:27700")
    codes = assign_wards(wards, empty)
    assert codes.empty
    result = attach_ward_counts(wards, count_sites_per_ward(codes))
    assert result["Count"].tolist() == [0, 0, 0]


def test_count_sites_per_ward_ignores_missing_codes():
    codes = pd.Series(["A", None, "B", "A", None])
    counts = count_sites_per_ward(codes, code_field="WD24CD")
    assert dict(zip(counts["WD24CD"], counts["Count"])) == {"A": 2, "B": 1}


def test_filter_sites_to_bbox_excludes_edges(sites):
    extra = pd.DataFrame(
        {
            "SITE_ID": [201, 202],
            "FULL_EASTING": [439000.0, 460000.0],
            "FULL_NORTHING": [110000.0, 110000.0],
        }
    )
    all_sites = pd.concat([sites, extra], ignore_index=True)
    area = BoundingBox(439000, 451000, 100000, 130000)

    filtered = filter_sites_to_bbox(all_sites, area)

    assert filtered["SITE_ID"].tolist() == [101, 102, 103, 104, 105]
