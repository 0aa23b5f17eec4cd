"""Utility functions for site id lists and date windows.

Provides small helpers shared by the pipeline stages: collecting the unique
site identifiers used to pre-filter biological records, and normalising the
inclusive date window those records are read for.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

import pandas as pd


def unique_site_ids(sites: pd.DataFrame, id_field: str = "SITE_ID") -> List:
    """Return the distinct, non-null site identifiers in first-seen order.

    Args:
        sites: Site registry DataFrame
        id_field: Column holding the site identifier (default: "SITE_ID")

    Returns:
        List of site ids, e.g. [34310, 34316, 157120]

    Raises:
        KeyError: If ``id_field`` is not a column of ``sites``
    """
    return sites[id_field].dropna().drop_duplicates().tolist()


def resolve_date_range(
    start_date: Optional[date] = None, end_date: Optional[date] = None
) -> Tuple[Optional[pd.Timestamp], pd.Timestamp]:
    """Normalise an inclusive date window, defaulting the end to today.

    Example:
        >>> resolve_date_range(date(1995, 1, 1), date(2000, 6, 30))
        (Timestamp('1995-01-01 00:00:00'), Timestamp('2000-06-30 00:00:00'))
    """
    start = pd.Timestamp(start_date).normalize() if start_date is not None else None
    end = pd.Timestamp(end_date).normalize() if end_date is not None else pd.Timestamp(date.today())
    if start is not None and start > end:
        raise ValueError(f"Start date {start.date()} is after end date {end.date()}")
    return start, end
