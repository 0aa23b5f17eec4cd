"""Spatial join, record merge and river selection stages."""

from .bio import merge_bio_with_sites
from .rivers import (
    filter_named_river,
    filter_rivers_in_bbox,
    is_south_of,
    is_within_bbox,
    max_latitude,
)
from .sites import filter_sites_to_bbox
from .wards import (
    assign_wards,
    attach_ward_counts,
    count_sites_per_ward,
    join_sites_to_wards,
)

__all__ = [
    "assign_wards",
    "attach_ward_counts",
    "count_sites_per_ward",
    "filter_named_river",
    "filter_rivers_in_bbox",
    "filter_sites_to_bbox",
    "is_south_of",
    "is_within_bbox",
    "join_sites_to_wards",
    "max_latitude",
    "merge_bio_with_sites",
]
