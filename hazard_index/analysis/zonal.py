"""
Zonal Cell Aggregation

Computes the per-district mean of categorical raster cells (wildfire
hazard potential classes) after reclassification.

Cell membership is inclusive: a cell counts in full for every district it
touches, with no fractional-area weighting. NoData cells are excluded.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd
import rasterio
from rasterio.features import geometry_mask
from rasterio.transform import Affine

from hazard_index.analysis.geometry import check_same_crs
from hazard_index.exceptions import InputValidationError

logger = logging.getLogger(__name__)


@dataclass
class RasterGrid:
    """
    A single-band raster already reprojected and cropped to the districts.

    Attributes:
        values: 2D cell values, shape (H, W)
        transform: Affine transform from cell to CRS coordinates
        crs: Coordinate reference system of the grid
        nodata: NoData value, if any
    """
    values: np.ndarray
    transform: Affine
    crs: Any = None
    nodata: Optional[float] = None

    def __post_init__(self):
        if self.values.ndim != 2:
            raise ValueError(f"Expected 2D raster, got shape {self.values.shape}")

    @property
    def shape(self):
        return self.values.shape

    @property
    def cell_area(self) -> float:
        """Area of one cell in CRS units squared."""
        return abs(self.transform.a * self.transform.e - self.transform.b * self.transform.d)

    @classmethod
    def from_file(cls, path: Union[str, Path], band: int = 1) -> "RasterGrid":
        """Read one band of a raster file."""
        with rasterio.open(path) as src:
            values = src.read(band)
            grid = cls(values=values, transform=src.transform, crs=src.crs, nodata=src.nodata)
        logger.info(f"Loaded raster {path}: {grid.shape[1]}x{grid.shape[0]} cells")
        return grid


def reclassify(
    values: np.ndarray,
    reclass_map: Dict[int, float],
    nodata: Optional[float] = None,
) -> np.ndarray:
    """
    Map raw cell classes to numeric hazard values.

    Args:
        values: Raw cell values
        reclass_map: Raw class to hazard value
        nodata: NoData value; such cells become NaN

    Returns:
        Float array with NaN for NoData and unmapped cells
    """
    out = np.full(values.shape, np.nan, dtype=float)
    valid = np.ones(values.shape, dtype=bool)
    if nodata is not None:
        valid &= values != nodata
    if np.issubdtype(values.dtype, np.floating):
        valid &= np.isfinite(values)

    mapped = np.zeros(values.shape, dtype=bool)
    for raw_class, hazard_value in reclass_map.items():
        hit = valid & (values == raw_class)
        out[hit] = hazard_value
        mapped |= hit

    unmapped = int(np.sum(valid & ~mapped))
    if unmapped:
        found = np.unique(values[valid & ~mapped])[:10].tolist()
        logger.warning(f"{unmapped} cell(s) with unmapped classes {found} treated as NoData")
    return out


@dataclass
class ZonalResult:
    """
    Results from zonal aggregation.

    Attributes:
        mean: Mean cell value per district_id, NaN where no valid cell
        cell_count: Number of valid cells attributed per district_id
        empty_districts: Districts touching no valid cell
    """
    mean: pd.Series
    cell_count: pd.Series
    empty_districts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary format."""
        return {
            "mean": self.mean.to_dict(),
            "cell_count": self.cell_count.to_dict(),
            "empty_districts": self.empty_districts,
        }


class ZonalCellAggregator:
    """
    Per-district mean of raster cells touching the district.

    Uses rasterio's all_touched rasterization, so a cell crossing a
    district boundary counts in full for each district it touches.
    """

    def __init__(self, id_column: str = "district_id"):
        self.id_column = id_column

    def compute_zonal_mean(
        self,
        raster: RasterGrid,
        districts: gpd.GeoDataFrame,
        reclass_map: Optional[Dict[int, float]] = None,
        name: Optional[str] = None,
    ) -> ZonalResult:
        """
        Compute the mean of reclassified cells per district.

        Args:
            raster: Categorical or numeric raster
            districts: District polygons with id column
            reclass_map: Raw class to value mapping applied before averaging;
                None keeps raw values
            name: Name given to the returned series

        Returns:
            ZonalResult with the mean per district
        """
        if self.id_column not in districts.columns:
            raise InputValidationError(
                f"District layer has no '{self.id_column}' column",
                {"columns": list(districts.columns)},
            )
        check_same_crs(districts.crs, raster.crs, "districts and raster")

        if reclass_map is not None:
            cells = reclassify(raster.values, reclass_map, raster.nodata)
        else:
            cells = raster.values.astype(float)
            if raster.nodata is not None:
                cells[raster.values == raster.nodata] = np.nan
        valid = np.isfinite(cells)

        ids = list(districts[self.id_column])
        means = []
        counts = []
        empty = []
        for district_id, geom in zip(ids, districts.geometry):
            if geom is None or geom.is_empty:
                touched = np.zeros(raster.shape, dtype=bool)
            else:
                touched = geometry_mask(
                    [geom],
                    out_shape=raster.shape,
                    transform=raster.transform,
                    all_touched=True,
                    invert=True,
                )
            selected = cells[touched & valid]
            counts.append(int(selected.size))
            if selected.size == 0:
                empty.append(district_id)
                means.append(np.nan)
            else:
                means.append(float(selected.mean()))

        if empty:
            logger.warning(f"{len(empty)} district(s) touch no valid raster cell: {empty[:10]}")
        logger.info(f"Zonal mean computed for {len(ids) - len(empty)}/{len(ids)} districts")

        index = pd.Index(ids, name=self.id_column)
        return ZonalResult(
            mean=pd.Series(means, index=index, name=name, dtype=float),
            cell_count=pd.Series(counts, index=index, dtype=int),
            empty_districts=empty,
        )
