"""
Loading of pre-processed inputs.

Rasters and extents are expected to be reprojected to the district CRS
already; loaders check alignment but never reproject.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import geopandas as gpd
import pandas as pd

from hazard_index.analysis.geometry import check_same_crs
from hazard_index.analysis.zonal import RasterGrid
from hazard_index.config import ColumnConfig
from hazard_index.data.districts import prepare_districts
from hazard_index.exceptions import InputValidationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_districts(path: PathLike, columns: Optional[ColumnConfig] = None) -> gpd.GeoDataFrame:
    """Read and normalize the master district layer."""
    gdf = gpd.read_file(path)
    logger.info(f"Read {len(gdf)} district features from {path}")
    return prepare_districts(gdf, columns)


def load_extent(
    path: PathLike,
    target_crs=None,
    period: Optional[str] = None,
    period_column: str = "period",
) -> gpd.GeoDataFrame:
    """
    Read hazard extent polygons.

    Args:
        path: Vector file with extent polygons
        target_crs: CRS the extent must already be in
        period: Keep only rows whose period column equals this tag
        period_column: Column holding the period tag

    Returns:
        GeoDataFrame of extent polygons
    """
    extent = gpd.read_file(path)
    if period is not None:
        if period_column not in extent.columns:
            raise InputValidationError(
                f"Extent {path} has no '{period_column}' column to select period {period}"
            )
        extent = extent[extent[period_column].astype(str) == str(period)]
        if extent.empty:
            logger.warning(f"No extent polygons tagged {period} in {path}")
    if target_crs is not None:
        check_same_crs(extent.crs, target_crs, f"extent {path}")
    logger.info(f"Read {len(extent)} extent polygons from {path}")
    return extent


def load_raster(path: PathLike, band: int = 1, nodata: Optional[float] = None) -> RasterGrid:
    """Read one raster band, optionally overriding its NoData value."""
    grid = RasterGrid.from_file(path, band)
    if nodata is not None:
        grid.nodata = nodata
    return grid


def load_metric_table(
    path: PathLike,
    value_column: str,
    id_column: str = "district_id",
) -> pd.Series:
    """
    Read a per-district metric table from CSV.

    Blank cells are read as absent, never as zero.

    Returns:
        Float series indexed by district_id
    """
    table = pd.read_csv(path, dtype={id_column: str})
    for col in (id_column, value_column):
        if col not in table.columns:
            raise InputValidationError(
                f"Metric table {path} has no '{col}' column",
                {"columns": list(table.columns)},
            )
    if table[id_column].duplicated().any():
        raise InputValidationError(
            f"Metric table {path} lists a district more than once",
            {"district_ids": table.loc[table[id_column].duplicated(), id_column].tolist()},
        )
    series = pd.to_numeric(table[value_column], errors="coerce")
    series.index = pd.Index(table[id_column].str.strip(), name="district_id")
    series.name = value_column
    logger.info(
        f"Read {value_column} for {len(series)} districts from {path} "
        f"({series.isna().sum()} absent)"
    )
    return series
