"""
End-to-end tests of the hazard index pipeline on synthetic inputs.
"""

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import box

from hazard_index.config import HazardIndexConfig
from hazard_index.data.districts import prepare_districts
from hazard_index.exceptions import DegenerateDistributionError
from hazard_index.models import Hazard, Period
from hazard_index.pipeline import HazardIndexPipeline, PipelineInputs
from hazard_index.scoring.edges import EdgeStore


def series(values):
    return pd.Series(values, dtype=float).rename_axis("district_id")


@pytest.fixture
def inputs(square_districts, uniform_grid, slr_extent, slr_extent_hist, flood_extent, heat_days):
    """
    Complete inputs with known scores.

        projected  wildfire heat precip slr flood  sum
        A          3        0    1      0   3      7
        B          3        1    5      0   0      9
        C          3        5    0      1   5      14

        historical wildfire heat precip slr flood* sum
        A          1        0    1      0   3      5
        B          1        1    5      0   0      7
        C          1        3    0      1   5      10
    """
    return PipelineInputs(
        districts=prepare_districts(square_districts),
        wildfire=uniform_grid(3),
        wildfire_hist=uniform_grid(1),
        slr_extent=slr_extent,
        slr_extent_hist=slr_extent_hist,
        flood_extent=flood_extent,
        heat=heat_days,
        heat_hist=series({"A": 0.0, "B": 10.0, "C": 30.0}),
        precip=series({"A": 2.0, "B": 12.0, "C": 0.0}),
        precip_hist=series({"A": 2.0, "B": 12.0, "C": 0.0}),
    )


class TestComputeMetrics:

    def test_raw_metrics(self, inputs):
        metrics = HazardIndexPipeline().compute_metrics(inputs)

        assert metrics.get(Hazard.WILDFIRE, Period.PROJECTED).tolist() == [3.0, 3.0, 3.0]
        assert metrics.get(Hazard.SLR, Period.PROJECTED)["C"] == pytest.approx(25.0)
        assert metrics.get(Hazard.SLR, Period.HISTORICAL)["C"] == pytest.approx(10.0)
        assert metrics.get(Hazard.FLOOD, Period.PROJECTED)["A"] == pytest.approx(50.0)
        assert metrics.get(Hazard.FLOOD, Period.HISTORICAL) is None
        assert metrics.get(Hazard.HEAT, Period.PROJECTED) is inputs.heat

    def test_nodata_override_leaves_inputs_untouched(self, inputs):
        config = HazardIndexConfig()
        config.wildfire.nodata = 3
        metrics = HazardIndexPipeline(config).compute_metrics(inputs)

        assert inputs.wildfire.nodata == 255
        assert metrics.get(Hazard.WILDFIRE, Period.PROJECTED).isna().all()
        assert metrics.get(Hazard.WILDFIRE, Period.HISTORICAL).tolist() == [1.0, 1.0, 1.0]

    def test_missing_inputs_skipped(self, square_districts):
        inputs = PipelineInputs(districts=prepare_districts(square_districts))
        metrics = HazardIndexPipeline().compute_metrics(inputs)
        assert metrics.projected == {}
        assert metrics.historical == {}


class TestRun:

    def test_scores(self, inputs):
        summary = HazardIndexPipeline().run(inputs)
        table = summary.table.set_index("district_id")

        assert list(table["wildfire_score"]) == [3, 3, 3]
        assert list(table["slr_score"]) == [0, 0, 1]
        assert list(table["flood_score"]) == [3, 0, 5]
        assert list(table["hazard_score"]) == [7, 9, 14]
        assert list(table["hazard_score_hist"]) == [5, 7, 10]
        assert set(table["missing_hazards"]) == {""}

    def test_missing_hazard_flagged(self, inputs):
        inputs.flood_extent = None
        summary = HazardIndexPipeline().run(inputs)
        assert summary.table["hazard_score"].isna().all()
        assert set(summary.table["missing_hazards"]) == {"flood"}

    def test_strict_fit_raises_on_all_zero(self, inputs, crs):
        inputs.slr_extent = gpd.GeoDataFrame(geometry=[box(500, 500, 510, 510)], crs=crs)
        config = HazardIndexConfig(strict_fit=True)
        with pytest.raises(DegenerateDistributionError):
            HazardIndexPipeline(config).run(inputs)

    def test_edges_saved_then_reused(self, inputs, tmp_path):
        edges_path = tmp_path / "edges.json"
        config = HazardIndexConfig(edges_path=str(edges_path))

        first = HazardIndexPipeline(config)
        first.run(inputs)
        assert first.diagnostics.reused_edges == []
        assert EdgeStore(edges_path).names() == ["heat", "precip", "slr"]

        inputs.heat = series({"A": 0.0, "B": 20.0, "C": 100.0})
        second = HazardIndexPipeline(config)
        table = second.run(inputs).table.set_index("district_id")

        assert second.diagnostics.reused_edges == ["heat", "precip", "slr"]
        assert table.loc["B", "heat_score"] == 2
        assert table.loc["C", "heat_score"] == 5

    def test_empty_districts_reported(self, inputs, crs):
        inputs.districts = pd.concat([
            inputs.districts,
            gpd.GeoDataFrame(
                {"district_id": ["far"], "name": ["Far"], "county": ["East"],
                 "district_type": ["Unified"], "enrollment": [10]},
                geometry=[box(500, 500, 510, 510)],
                crs=crs,
            ),
        ], ignore_index=True)
        pipeline = HazardIndexPipeline()
        summary = pipeline.run(inputs)

        assert pipeline.diagnostics.empty_districts["wildfire_projected"] == ["far"]
        row = summary.table.set_index("district_id").loc["far"]
        assert pd.isna(row["wildfire_score"])
        assert "wildfire" in row["missing_hazards"].split(",")
        assert pd.isna(row["hazard_score"])
