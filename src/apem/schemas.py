"""Pandera schemas for the tabular inputs."""

from __future__ import annotations

import pandera as pa
from pandera import Check, Column, DataFrameSchema


def ward_schema(code_field: str = "WD24CD") -> DataFrameSchema:
    return DataFrameSchema(
        {
            code_field: Column(nullable=False, unique=True),
        }
    )


def site_schema(
    id_field: str = "SITE_ID",
    easting_field: str = "FULL_EASTING",
    northing_field: str = "FULL_NORTHING",
) -> DataFrameSchema:
    return DataFrameSchema(
        {
            id_field: Column(nullable=False),
            easting_field: Column(pa.Float, Check.ge(0), nullable=False, coerce=True),
            northing_field: Column(pa.Float, Check.ge(0), nullable=False, coerce=True),
        }
    )


def bio_schema(
    site_id_field: str = "biol_site_id", date_field: str = "SAMPLE_DATE"
) -> DataFrameSchema:
    return DataFrameSchema(
        {
            site_id_field: Column(nullable=False),
            date_field: Column(pa.DateTime, nullable=True, coerce=True),
        }
    )


def river_schema(name_field: str = "name1") -> DataFrameSchema:
    return DataFrameSchema(
        {
            name_field: Column(nullable=True),
        }
    )
