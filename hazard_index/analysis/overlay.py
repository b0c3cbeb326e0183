"""
Area Overlay Aggregation

Derives percent-of-area hazard metrics (sea-level-rise inundation, flood
zones) by intersecting district polygons with hazard extent polygons.

Intersection areas from multiple extent polygons are summed per district,
not unioned, so overlapping extent polygons are counted once each.
Districts without any intersection receive exactly 0.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import geopandas as gpd
import pandas as pd

from hazard_index.analysis.geometry import (
    check_same_crs,
    repair_geometries,
    require_valid,
    warn_if_geographic,
)
from hazard_index.config import OverlayConfig
from hazard_index.exceptions import InputValidationError, ZeroAreaError

logger = logging.getLogger(__name__)

# Float noise allowed above 100% before a district counts as double-covered
OVERLAP_TOLERANCE = 1e-6


@dataclass
class CoverageResult:
    """
    Results from an area overlay.

    Attributes:
        percent: Coverage percent per district_id, NaN for districts
            excluded because they have no geometry
        intersection_area: Summed intersection area per district_id
        district_area: District area per district_id
        invalid_districts: Districts excluded for missing geometry
        dropped_extents: Number of extent polygons dropped as unrepairable
        clamped_districts: Districts whose summed coverage exceeded 100
    """
    percent: pd.Series
    intersection_area: pd.Series
    district_area: pd.Series
    invalid_districts: List[str] = field(default_factory=list)
    dropped_extents: int = 0
    clamped_districts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary format."""
        return {
            "percent": self.percent.to_dict(),
            "invalid_districts": self.invalid_districts,
            "dropped_extents": self.dropped_extents,
            "clamped_districts": self.clamped_districts,
        }


class AreaOverlayAggregator:
    """
    Computes the share of each district covered by a hazard extent.

    Requirements:
        - District and extent layers in the same projected CRS
        - District table with a unique district_id column
    """

    def __init__(self, config: Optional[OverlayConfig] = None, id_column: str = "district_id"):
        self.config = config or OverlayConfig()
        self.id_column = id_column

    def compute_coverage_percent(
        self,
        districts: gpd.GeoDataFrame,
        extent: gpd.GeoDataFrame,
        name: Optional[str] = None,
    ) -> CoverageResult:
        """
        Compute coverage percent of every district by the extent.

        Args:
            districts: District polygons with id column
            extent: Hazard extent polygons
            name: Name given to the returned series

        Returns:
            CoverageResult with percent in [0, 100] per district
        """
        if self.id_column not in districts.columns:
            raise InputValidationError(
                f"District layer has no '{self.id_column}' column",
                {"columns": list(districts.columns)},
            )
        check_same_crs(districts.crs, extent.crs, "districts and hazard extent")
        warn_if_geographic(districts, "District layer")

        all_ids = list(districts[self.id_column])
        invalid_ids: List[str] = []
        collapsed: List[str] = []
        dropped = 0
        if self.config.repair_invalid:
            missing = set(districts.loc[districts.geometry.isna(), self.id_column])
            districts, failed = repair_geometries(districts, self.id_column)
            # A present geometry that repairs to nothing polygonal has zero area
            invalid_ids = [i for i in failed if i in missing]
            collapsed = [i for i in failed if i not in missing]
            n_extent = len(extent)
            extent, _ = repair_geometries(extent)
            dropped = n_extent - len(extent)
            if dropped:
                logger.warning(f"Dropped {dropped} unrepairable extent polygon(s)")
        else:
            require_valid(districts, self.id_column)

        district_area = pd.Series(
            districts.geometry.area.to_numpy(), index=districts[self.id_column]
        )
        zero = collapsed + list(district_area[district_area <= 0].index)
        if zero:
            raise ZeroAreaError(zero)

        extent = extent[~extent.geometry.is_empty]
        if len(extent) == 0:
            logger.info("Hazard extent is empty; all districts have 0% coverage")
            summed = pd.Series(0.0, index=district_area.index)
        else:
            pieces = gpd.overlay(
                districts[[self.id_column, districts.geometry.name]],
                extent[[extent.geometry.name]],
                how="intersection",
                keep_geom_type=True,
            )
            if pieces.empty:
                summed = pd.Series(0.0, index=district_area.index)
            else:
                summed = (
                    pieces.geometry.area.groupby(pieces[self.id_column].to_numpy()).sum()
                    .reindex(district_area.index, fill_value=0.0)
                )

        percent = summed / district_area * 100.0

        clamped: List[str] = []
        over = percent[percent > 100.0 + OVERLAP_TOLERANCE]
        if len(over):
            clamped = list(over.index)
            logger.warning(
                f"{len(clamped)} district(s) exceed 100% coverage from overlapping "
                f"extent polygons (max {over.max():.2f}%)"
            )
        if self.config.clamp_percent:
            percent = percent.clip(upper=100.0)

        percent = percent.reindex(all_ids)
        percent.index.name = self.id_column
        percent.name = name

        covered = int((percent > 0).sum())
        logger.info(
            f"Overlay complete: {covered}/{len(all_ids)} districts intersect the extent"
            + (f", {len(invalid_ids)} excluded for missing geometry" if invalid_ids else "")
        )

        return CoverageResult(
            percent=percent,
            intersection_area=summed,
            district_area=district_area,
            invalid_districts=invalid_ids,
            dropped_extents=dropped,
            clamped_districts=clamped,
        )
