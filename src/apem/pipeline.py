"""Run the ward / biological record / river pipeline end to end.

Stages run in order: load inputs, restrict sites to the area, join sites to
wards, merge biological records with sites, filter rivers. Each stage only
reads the previous stages' outputs. Any ``ApemError`` aborts the run and is
re-raised with the name of the stage it came from.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterator, List, Optional

import geopandas as gpd

import config
from logging_config import get_logger, log_data_processing, log_error_with_context
from utils import unique_site_ids

from .errors import ApemError
from .extractors import read_bio_records, read_rivers, read_sites, read_wards
from .geo import BoundingBox
from .transformers import (
    filter_named_river,
    filter_rivers_in_bbox,
    filter_sites_to_bbox,
    join_sites_to_wards,
    merge_bio_with_sites,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunConfig:
    """Every parameter of one pipeline run."""

    wards_path: Path
    sites_path: Path
    bio_path: Path
    rivers_path: Path
    projected_crs: str = "EPSG:27700"
    geographic_crs: str = "EPSG:4326"
    area: BoundingBox = BoundingBox(439000, 451000, 100000, 130000)
    river_name: str = "Itchen"
    river_name_field: str = "name1"
    river_max_latitude: float = 51.5
    tie_break: str = "last"
    start_date: Optional[date] = date(1995, 1, 1)
    end_date: Optional[date] = None
    ward_code_field: str = "WD24CD"
    site_id_field: str = "SITE_ID"
    easting_field: str = "FULL_EASTING"
    northing_field: str = "FULL_NORTHING"
    bio_site_id_field: str = "biol_site_id"
    bio_date_field: str = "SAMPLE_DATE"

    @classmethod
    def from_env(cls) -> "RunConfig":
        """Build a run configuration from the ``config`` module."""
        return cls(
            wards_path=config.WARDS_PATH,
            sites_path=config.SITES_PATH,
            bio_path=config.BIO_PATH,
            rivers_path=config.RIVERS_PATH,
            projected_crs=config.PROJECTED_CRS,
            geographic_crs=config.GEOGRAPHIC_CRS,
            area=BoundingBox(
                config.AREA_MIN_EASTING,
                config.AREA_MAX_EASTING,
                config.AREA_MIN_NORTHING,
                config.AREA_MAX_NORTHING,
            ),
            river_name=config.RIVER_NAME,
            river_name_field=config.RIVER_NAME_FIELD,
            river_max_latitude=config.RIVER_MAX_LATITUDE,
            tie_break=config.WARD_TIE_BREAK,
            start_date=config.BDATE,
            end_date=config.EDATE,
            ward_code_field=config.WARD_CODE_FIELD,
            site_id_field=config.SITE_ID_FIELD,
            easting_field=config.EASTING_FIELD,
            northing_field=config.NORTHING_FIELD,
            bio_site_id_field=config.BIO_SITE_ID_FIELD,
            bio_date_field=config.BIO_DATE_FIELD,
        )


@dataclass
class PipelineResult:
    """Joined tables handed to the plotting layer, all in the geographic CRS."""

    wards: gpd.GeoDataFrame
    sites: gpd.GeoDataFrame
    bio: gpd.GeoDataFrame
    named_river: gpd.GeoDataFrame
    area_rivers: gpd.GeoDataFrame


@contextmanager
def pipeline_stage(stage: str) -> Iterator[None]:
    """Label any pipeline error raised inside the block with ``stage``."""
    try:
        yield
    except ApemError as exc:
        if exc.stage is None:
            exc.stage = stage
        log_error_with_context(exc, f"{stage} stage", pipeline_stage=exc.stage)
        raise


def run_pipeline(run_config: RunConfig) -> PipelineResult:
    """Load the four inputs and build the joined tables.

    Raises:
        DataLoadError, ProjectionError, JoinError: From the failing stage,
            with its ``stage`` attribute set
    """
    rc = run_config

    with pipeline_stage("loader"):
        wards = read_wards(rc.wards_path, code_field=rc.ward_code_field)
        sites = read_sites(
            rc.sites_path,
            id_field=rc.site_id_field,
            easting_field=rc.easting_field,
            northing_field=rc.northing_field,
        )
        sites = filter_sites_to_bbox(
            sites, rc.area, easting_field=rc.easting_field, northing_field=rc.northing_field
        )
        bio = read_bio_records(
            rc.bio_path,
            site_ids=unique_site_ids(sites, rc.site_id_field),
            start_date=rc.start_date,
            end_date=rc.end_date,
            site_id_field=rc.bio_site_id_field,
            date_field=rc.bio_date_field,
        )
        rivers = read_rivers(rc.rivers_path, name_field=rc.river_name_field)

    with pipeline_stage("joiner"):
        site_points, ward_counts = join_sites_to_wards(
            wards,
            sites,
            projected_crs=rc.projected_crs,
            geographic_crs=rc.geographic_crs,
            code_field=rc.ward_code_field,
            easting_field=rc.easting_field,
            northing_field=rc.northing_field,
            tie_break=rc.tie_break,
        )
    log_data_processing("sites joined to wards", len(site_points))

    with pipeline_stage("merger"):
        bio_points = merge_bio_with_sites(
            bio,
            site_points,
            bio_site_id_field=rc.bio_site_id_field,
            site_id_field=rc.site_id_field,
            easting_field=rc.easting_field,
            northing_field=rc.northing_field,
            projected_crs=rc.projected_crs,
            geographic_crs=rc.geographic_crs,
        )
    log_data_processing("biological records merged", len(bio_points))

    with pipeline_stage("filter"):
        named_river = filter_named_river(
            rivers,
            rc.river_name,
            name_field=rc.river_name_field,
            max_lat=rc.river_max_latitude,
            projected_crs=rc.projected_crs,
            geographic_crs=rc.geographic_crs,
        )
        area_rivers = filter_rivers_in_bbox(
            rivers,
            rc.area,
            projected_crs=rc.projected_crs,
            geographic_crs=rc.geographic_crs,
        )
    log_data_processing("river segments selected", len(named_river) + len(area_rivers))

    return PipelineResult(
        wards=ward_counts,
        sites=site_points,
        bio=bio_points,
        named_river=named_river,
        area_rivers=area_rivers,
    )


def render_figures(
    result: PipelineResult,
    output_dir: Path,
    ward_code_field: str = "WD24CD",
    water_body_field: str = "WATER_BODY",
    score_field: str = "LIFE_SCORES_TOTAL",
) -> List[Path]:
    """Draw every map and distribution plot into ``output_dir``.

    Score maps and plots are skipped when the biological records have no
    ``score_field`` column, and grouped plots when the group column is absent.
    """
    # Imported here so runs that only need the tables skip matplotlib
    from . import plots

    figures = {
        "base_map.png": plots.plot_base_map(result.wards),
        "ward_counts.png": plots.plot_ward_counts(result.wards),
        "ward_counts_sites.png": plots.plot_ward_counts(result.wards, result.sites),
        "named_river.png": plots.plot_rivers(result.wards, result.named_river),
        "area_rivers.png": plots.plot_rivers(result.wards, result.area_rivers),
    }

    if score_field in result.bio.columns:
        figures["bio_scores.png"] = plots.plot_bio_scores(result.wards, result.bio, score_field)
        figures["bio_scores_rivers.png"] = plots.plot_bio_scores(
            result.wards, result.bio, score_field, rivers=result.area_rivers
        )
        for group_field, label in ((water_body_field, "water_body"), (ward_code_field, "ward")):
            if group_field not in result.bio.columns:
                logger.warning(f"Skipping {label} plots: no '{group_field}' column")
                continue
            figures[f"density_{label}.png"] = plots.plot_score_density(
                result.bio, group_field, score_field
            )
            figures[f"boxplot_{label}.png"] = plots.plot_score_boxplot(
                result.bio, group_field, score_field
            )
    else:
        logger.warning(f"Skipping score plots: no '{score_field}' column")

    return [plots.save_figure(fig, Path(output_dir) / name) for name, fig in figures.items()]
