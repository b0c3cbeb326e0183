"""
Threshold Exceedance Day Counts

Turns per-district daily series (maximum temperature, precipitation) into
the day-count metrics scored for the heat and precipitation hazards.

A district listed in the input without any valid observation is absent
(NaN), which is different from a district whose days never exceed the
threshold (0).
"""

import logging
from typing import Iterable, Optional

import pandas as pd

from hazard_index.exceptions import InputValidationError

logger = logging.getLogger(__name__)


def count_exceedance_days(
    daily: pd.DataFrame,
    threshold: float,
    value_column: str = "value",
    id_column: str = "district_id",
    date_column: str = "date",
    per_year: bool = False,
    district_ids: Optional[Iterable[str]] = None,
) -> pd.Series:
    """
    Count days strictly above a threshold per district.

    Args:
        daily: Long table with one row per district and day
        threshold: Fixed threshold in the units of value_column
        value_column: Column with the daily values
        id_column: District identifier column
        date_column: Date column, needed when per_year is set
        per_year: Return the mean count per calendar year
        district_ids: Master district list, defaulting to the ids in daily;
            ids without valid rows are absent

    Returns:
        Float series indexed by district_id, NaN where absent
    """
    required = [id_column, value_column] + ([date_column] if per_year else [])
    missing = [c for c in required if c not in daily.columns]
    if missing:
        raise InputValidationError("Daily table is missing columns", {"missing": missing})

    frame = daily[required].copy()
    frame[id_column] = frame[id_column].astype(str)
    if district_ids is None:
        district_ids = frame[id_column].unique()
    frame = frame.dropna(subset=[value_column])
    frame["exceeds"] = frame[value_column] > threshold

    if per_year:
        frame["year"] = pd.to_datetime(frame[date_column]).dt.year
        per_year_counts = frame.groupby([id_column, "year"])["exceeds"].sum()
        counts = per_year_counts.groupby(level=0).mean().astype(float)
    else:
        counts = frame.groupby(id_column)["exceeds"].sum().astype(float)

    ids = [str(d) for d in district_ids]
    absent = [d for d in ids if d not in counts.index]
    if absent:
        logger.warning(f"{len(absent)} district(s) have no valid daily values: {absent[:10]}")
    counts = counts.reindex(ids)

    counts.index.name = id_column
    logger.info(
        f"Counted days above {threshold:g} for {counts.notna().sum()} districts"
        + (" (mean per year)" if per_year else "")
    )
    return counts
