"""Readers for ward, site, biological record and river inputs."""

from .files import read_bio_records, read_rivers, read_sites, read_wards

__all__ = [
    "read_bio_records",
    "read_rivers",
    "read_sites",
    "read_wards",
]
