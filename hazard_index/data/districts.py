"""
Master district table preparation.
"""

import logging
from typing import Iterator, List, Optional

import geopandas as gpd
import pandas as pd

from hazard_index.config import ColumnConfig
from hazard_index.exceptions import DuplicateDistrictError, InputValidationError
from hazard_index.models import District, DistrictType

logger = logging.getLogger(__name__)

DESCRIPTIVE_COLUMNS = ["district_id", "name", "county", "district_type"]


def prepare_districts(
    gdf: gpd.GeoDataFrame,
    columns: Optional[ColumnConfig] = None,
) -> gpd.GeoDataFrame:
    """
    Normalize a district layer to the canonical column names.

    Args:
        gdf: Raw district layer
        columns: Source column names

    Returns:
        GeoDataFrame with district_id, name, county, district_type,
        passthrough columns and geometry; ids as strings

    Raises:
        InputValidationError: If the id column is missing
        DuplicateDistrictError: If ids are not unique
    """
    columns = columns or ColumnConfig()
    rename = {
        columns.district_id: "district_id",
        columns.name: "name",
        columns.county: "county",
        columns.district_type: "district_type",
    }
    if columns.district_id not in gdf.columns:
        raise InputValidationError(
            f"District layer has no id column '{columns.district_id}'",
            {"columns": list(gdf.columns)},
        )

    out = gdf.rename(columns=rename)
    for col in DESCRIPTIVE_COLUMNS[1:]:
        if col not in out.columns:
            logger.warning(f"District layer has no '{col}' column; leaving it empty")
            out[col] = None

    out["district_id"] = out["district_id"].astype(str).str.strip()
    duplicated = out["district_id"][out["district_id"].duplicated()].unique().tolist()
    if duplicated:
        raise DuplicateDistrictError(duplicated)

    geom_col = out.geometry.name
    extra = [c for c in out.columns if c not in DESCRIPTIVE_COLUMNS and c != geom_col]
    if columns.passthrough is not None:
        missing = [c for c in columns.passthrough if c not in out.columns]
        if missing:
            raise InputValidationError("Passthrough columns not found", {"missing": missing})
        extra = list(columns.passthrough)

    out = out[DESCRIPTIVE_COLUMNS + extra + [geom_col]].reset_index(drop=True)
    logger.info(f"Prepared {len(out)} districts ({len(extra)} passthrough columns)")
    return out


def passthrough_columns(gdf: gpd.GeoDataFrame) -> List[str]:
    """Columns of a prepared layer beyond the descriptive ones and geometry."""
    return [c for c in gdf.columns if c not in DESCRIPTIVE_COLUMNS and c != gdf.geometry.name]


def _parse_type(value) -> Optional[DistrictType]:
    if value is None or pd.isna(value):
        return None
    try:
        return DistrictType.parse(value)
    except ValueError:
        logger.warning(f"Unrecognized district type {value!r}")
        return None


def iter_districts(gdf: gpd.GeoDataFrame) -> Iterator[District]:
    """Yield District records from a prepared layer."""
    extra = passthrough_columns(gdf)
    for row in gdf.to_dict("records"):
        yield District(
            district_id=row["district_id"],
            name=row["name"],
            county=row["county"],
            district_type=_parse_type(row["district_type"]),
            geometry=row[gdf.geometry.name],
            attributes={c: row[c] for c in extra},
        )


def county_geometries(gdf: gpd.GeoDataFrame) -> gpd.GeoSeries:
    """
    County outlines as the union of their districts.

    Returns:
        GeoSeries indexed by county name
    """
    counties = gdf[["county", gdf.geometry.name]].dissolve(by="county")
    return counties.geometry
