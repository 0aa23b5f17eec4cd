"""Maps and score distribution plots for the joined tables.

Every plotting function returns the matplotlib Figure it drew on; use
``save_figure`` to write it out. Map layers are expected in the same
geographic CRS.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import geopandas as gpd
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

logger = logging.getLogger(__name__)

DPI = 150
MAP_SIZE = (10, 10)
PLOT_SIZE = (10, 6)
RIVER_COLOR = "#63b8ff"  # steelblue1
WARD_FILL = "snow"
EDGE_COLOR = "black"

SUMMARY_TITLE = "Map of Southampton Wards, Rivers and Total Life Scores at Sampling Sites"
SUMMARY_SUBTITLE = "Data Sources: OS Data Portal, APEM, Environment Agency, GOV.uk"


def _with_geometry(frame: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    return frame[frame.geometry.notna() & ~frame.geometry.is_empty]


def _clean_map_axes(ax) -> None:
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.grid(True, linewidth=0.3, alpha=0.5)
    ax.set_aspect("equal")


def plot_base_map(wards: gpd.GeoDataFrame, ax=None):
    """Ward outlines on a plain fill."""
    if ax is None:
        fig, ax = plt.subplots(figsize=MAP_SIZE, dpi=DPI)
    wards.plot(ax=ax, color=WARD_FILL, edgecolor=EDGE_COLOR, linewidth=0.6)
    _clean_map_axes(ax)
    return ax.figure


def plot_ward_counts(
    wards: gpd.GeoDataFrame,
    sites: Optional[gpd.GeoDataFrame] = None,
    count_field: str = "Count",
):
    """Choropleth of sites per ward, optionally with the site points on top."""
    fig, ax = plt.subplots(figsize=MAP_SIZE, dpi=DPI)
    wards.plot(
        ax=ax,
        column=count_field,
        cmap="Blues",
        edgecolor=EDGE_COLOR,
        linewidth=0.6,
        legend=True,
        legend_kwds={"label": "Sites", "shrink": 0.6},
    )
    if sites is not None:
        _with_geometry(sites).plot(ax=ax, color="white", edgecolor=EDGE_COLOR, markersize=12)
    ax.set_title("Monitoring sites per ward")
    _clean_map_axes(ax)
    return fig


def plot_rivers(wards: gpd.GeoDataFrame, rivers: gpd.GeoDataFrame, title: str = ""):
    """Base map with river segments drawn over it."""
    fig, ax = plt.subplots(figsize=MAP_SIZE, dpi=DPI)
    plot_base_map(wards, ax=ax)
    if not rivers.empty:
        rivers.plot(ax=ax, color=RIVER_COLOR, linewidth=1.5)
    ax.set_title(title)
    return fig


def plot_bio_scores(
    wards: gpd.GeoDataFrame,
    bio: gpd.GeoDataFrame,
    score_field: str = "LIFE_SCORES_TOTAL",
    rivers: Optional[gpd.GeoDataFrame] = None,
    title: str = SUMMARY_TITLE,
    subtitle: str = SUMMARY_SUBTITLE,
):
    """Sampling points coloured by index score over wards (and rivers)."""
    if rivers is not None:
        fig = plot_rivers(wards, rivers)
    else:
        fig = plot_base_map(wards)
    ax = fig.axes[0]

    points = _with_geometry(bio).dropna(subset=[score_field])
    if not points.empty:
        points.plot(
            ax=ax,
            column=score_field,
            cmap="viridis",
            markersize=40,
            legend=True,
            legend_kwds={"label": "Total Life Score", "shrink": 0.6},
        )
    fig.suptitle(title, fontsize=13)
    ax.set_title(subtitle, fontsize=9)
    return fig


def plot_score_density(
    bio: pd.DataFrame, group_field: str, score_field: str = "LIFE_SCORES_TOTAL"
):
    """Kernel density of scores, one curve per group (water body or ward)."""
    fig, ax = plt.subplots(figsize=PLOT_SIZE, dpi=DPI)
    data = bio.dropna(subset=[score_field, group_field])
    # Groups with a single distinct score have no density
    varied = data.groupby(group_field)[score_field].transform("nunique") > 1
    if varied.any():
        sns.kdeplot(data=data[varied], x=score_field, hue=group_field, ax=ax, warn_singular=False)
    ax.set_title(f"{score_field} density by {group_field}")
    ax.set_xlabel(score_field)
    return fig


def plot_score_boxplot(
    bio: pd.DataFrame, group_field: str, score_field: str = "LIFE_SCORES_TOTAL"
):
    """Horizontal box plot of scores per group."""
    fig, ax = plt.subplots(figsize=PLOT_SIZE, dpi=DPI)
    data = bio.dropna(subset=[score_field, group_field])
    if not data.empty:
        sns.boxplot(data=data, x=score_field, y=group_field, ax=ax, color="lightsteelblue")
    ax.set_title(f"{score_field} by {group_field}")
    return fig


def save_figure(fig, path: Path) -> Path:
    """Write ``fig`` as PNG, creating parent folders, and close it."""
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(destination, dpi=DPI, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    logger.info(f"Saved figure {destination}")
    return destination
