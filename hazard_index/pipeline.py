"""
End-to-end district hazard index run.

    districts + rasters + extents + day-count tables
        -> zonal means / coverage percents   (analysis)
        -> 0-5 scores per hazard and period  (scoring)
        -> per-district summary              (summary)
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

import geopandas as gpd
import pandas as pd

from hazard_index.analysis.overlay import AreaOverlayAggregator
from hazard_index.analysis.zonal import RasterGrid, ZonalCellAggregator
from hazard_index.config import HazardIndexConfig
from hazard_index.models import Hazard, Period
from hazard_index.scoring.binning import BinEdges, IntervalBinner
from hazard_index.scoring.edges import EdgeStore
from hazard_index.scoring.hazards import BINNED_HAZARDS, HazardMetrics, HazardScorer
from hazard_index.summary.aggregator import HazardSummary, HazardSummaryAggregator

logger = logging.getLogger(__name__)


@dataclass
class PipelineInputs:
    """
    Pre-processed inputs, all aligned to the district CRS.

    Attributes:
        districts: Prepared master district layer
        wildfire: Projected wildfire hazard raster
        wildfire_hist: Historical wildfire hazard raster
        slr_extent: Projected sea-level-rise inundation polygons
        slr_extent_hist: Historical sea-level-rise inundation polygons
        flood_extent: Flood zone polygons
        heat: Projected heat day counts per district_id
        heat_hist: Historical heat day counts per district_id
        precip: Projected precipitation day counts per district_id
        precip_hist: Historical precipitation day counts per district_id
    """
    districts: gpd.GeoDataFrame
    wildfire: Optional[RasterGrid] = None
    wildfire_hist: Optional[RasterGrid] = None
    slr_extent: Optional[gpd.GeoDataFrame] = None
    slr_extent_hist: Optional[gpd.GeoDataFrame] = None
    flood_extent: Optional[gpd.GeoDataFrame] = None
    heat: Optional[pd.Series] = None
    heat_hist: Optional[pd.Series] = None
    precip: Optional[pd.Series] = None
    precip_hist: Optional[pd.Series] = None


@dataclass
class PipelineDiagnostics:
    """Per-stage findings worth reporting alongside the summary."""
    invalid_districts: Dict[str, List[str]] = field(default_factory=dict)
    empty_districts: Dict[str, List[str]] = field(default_factory=dict)
    reused_edges: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0


class HazardIndexPipeline:
    """Runs analysis, scoring and summary for one region."""

    def __init__(self, config: Optional[HazardIndexConfig] = None):
        self.config = config or HazardIndexConfig()
        self.overlay = AreaOverlayAggregator(self.config.overlay)
        self.zonal = ZonalCellAggregator()
        self.scorer = HazardScorer(
            self.config.flood, IntervalBinner(strict=self.config.strict_fit)
        )
        self.aggregator = HazardSummaryAggregator(self.config.summary)
        self.diagnostics = PipelineDiagnostics()

    def compute_metrics(self, inputs: PipelineInputs) -> HazardMetrics:
        """Derive raw per-district metrics from the geospatial inputs."""
        metrics = HazardMetrics()
        districts = inputs.districts
        reclass = self.config.wildfire.reclass_map

        for period, raster in (
            (Period.PROJECTED, inputs.wildfire),
            (Period.HISTORICAL, inputs.wildfire_hist),
        ):
            if raster is None:
                continue
            if self.config.wildfire.nodata is not None:
                raster = replace(raster, nodata=self.config.wildfire.nodata)
            result = self.zonal.compute_zonal_mean(raster, districts, reclass, "wildfire")
            self._store(metrics, Hazard.WILDFIRE, period, result.mean)
            if result.empty_districts:
                self.diagnostics.empty_districts[f"wildfire_{period.value}"] = result.empty_districts

        for hazard, period, extent in (
            (Hazard.SLR, Period.PROJECTED, inputs.slr_extent),
            (Hazard.SLR, Period.HISTORICAL, inputs.slr_extent_hist),
            (Hazard.FLOOD, Period.PROJECTED, inputs.flood_extent),
        ):
            if extent is None:
                continue
            result = self.overlay.compute_coverage_percent(districts, extent, hazard.value)
            self._store(metrics, hazard, period, result.percent)
            if result.invalid_districts:
                self.diagnostics.invalid_districts[f"{hazard.value}_{period.value}"] = (
                    result.invalid_districts
                )

        for hazard, period, table in (
            (Hazard.HEAT, Period.PROJECTED, inputs.heat),
            (Hazard.HEAT, Period.HISTORICAL, inputs.heat_hist),
            (Hazard.PRECIP, Period.PROJECTED, inputs.precip),
            (Hazard.PRECIP, Period.HISTORICAL, inputs.precip_hist),
        ):
            if table is not None:
                self._store(metrics, hazard, period, table)

        return metrics

    @staticmethod
    def _store(metrics: HazardMetrics, hazard: Hazard, period: Period, series: pd.Series):
        target = metrics.projected if period is Period.PROJECTED else metrics.historical
        target[hazard] = series

    def _stored_edges(self) -> Dict[str, BinEdges]:
        if not self.config.edges_path:
            return {}
        store = EdgeStore(self.config.edges_path)
        names = [h.value for h in BINNED_HAZARDS]
        return {name: store.load(name) for name in store.names() if name in names}

    def run(self, inputs: PipelineInputs) -> HazardSummary:
        """
        Execute the full run.

        Args:
            inputs: Pre-processed inputs

        Returns:
            HazardSummary with one row per input district
        """
        start = time.time()
        self.diagnostics = PipelineDiagnostics()
        logger.info(f"Starting hazard index run for {len(inputs.districts)} districts")

        metrics = self.compute_metrics(inputs)

        stored = self._stored_edges()
        self.diagnostics.reused_edges = sorted(stored)
        scores = self.scorer.score_all(metrics, stored)

        if self.config.edges_path:
            store = EdgeStore(self.config.edges_path)
            for hazard in BINNED_HAZARDS:
                if hazard in scores and hazard.value not in stored:
                    store.save(scores[hazard].edges)

        summary = self.aggregator.aggregate(inputs.districts, scores)
        self.diagnostics.duration_seconds = time.time() - start
        logger.info(f"Hazard index run finished in {self.diagnostics.duration_seconds:.2f}s")
        return summary
