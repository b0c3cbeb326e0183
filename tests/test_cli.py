"""
Tests for the hazard-index command-line interface.
"""

import json

import numpy as np
import pandas as pd
import pytest
import rasterio
from click.testing import CliRunner
from rasterio.transform import from_origin

from cli.main import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def input_files(tmp_path, square_districts, flood_extent, slr_extent, crs):
    """District layer, extents, raster and metric tables on disk."""
    paths = {
        "districts": tmp_path / "districts.gpkg",
        "flood": tmp_path / "flood.gpkg",
        "slr": tmp_path / "slr.gpkg",
        "wildfire": tmp_path / "whp.tif",
        "heat": tmp_path / "heat.csv",
        "precip": tmp_path / "precip.csv",
    }
    square_districts.to_file(paths["districts"], driver="GPKG")
    flood_extent.to_file(paths["flood"], driver="GPKG")
    slr_extent.to_file(paths["slr"], driver="GPKG")

    with rasterio.open(
        paths["wildfire"], "w", driver="GTiff", height=10, width=30, count=1,
        dtype="uint8", crs=crs, transform=from_origin(0, 10, 1, 1), nodata=255,
    ) as dst:
        dst.write(np.full((10, 30), 2, dtype=np.uint8), 1)

    pd.DataFrame({"district_id": ["A", "B", "C"], "value": [0, 10, 50]}).to_csv(
        paths["heat"], index=False
    )
    pd.DataFrame({"district_id": ["A", "B", "C"], "value": [2, 12, 0]}).to_csv(
        paths["precip"], index=False
    )
    return paths


def score_args(paths, output):
    return [
        "score",
        "--districts", str(paths["districts"]),
        "--wildfire", str(paths["wildfire"]),
        "--slr", str(paths["slr"]),
        "--flood", str(paths["flood"]),
        "--heat", str(paths["heat"]),
        "--precip", str(paths["precip"]),
        "--output", str(output),
    ]


class TestScoreCommand:

    def test_projected_scores(self, runner, input_files, tmp_path):
        output = tmp_path / "out"
        result = runner.invoke(app, score_args(input_files, output))

        assert result.exit_code == 0, result.output
        assert "Districts: 3" in result.output

        table = pd.read_csv(output / "district_hazard_summary.csv", dtype={"district_id": str})
        table = table.set_index("district_id")
        # wildfire 2, heat 0/1/5, precip 1/5/0, slr 0/0/1, flood 3/0/5
        assert list(table["hazard_score"]) == [6, 8, 13]
        # no historical inputs were given
        assert table["hazard_score_hist"].isna().all()
        assert (output / "district_hazard_summary_report.json").exists()

    def test_zero_policy(self, runner, input_files, tmp_path):
        output = tmp_path / "out"
        result = runner.invoke(
            app, score_args(input_files, output) + ["--missing-policy", "zero"]
        )
        assert result.exit_code == 0, result.output

        table = pd.read_csv(output / "district_hazard_summary.csv")
        assert list(table["hazard_score_hist"]) == [3, 0, 5]
        assert table["missing_hazards"].str.contains("heat_hist").all()

    def test_fail_policy_exits_nonzero(self, runner, input_files, tmp_path):
        result = runner.invoke(
            app, score_args(input_files, tmp_path / "out") + ["--missing-policy", "fail"]
        )
        assert result.exit_code != 0
        assert "missing hazard scores" in result.output

    def test_daily_tables(self, runner, input_files, tmp_path, daily_tmax):
        daily_path = tmp_path / "tmax.csv"
        daily_tmax.to_csv(daily_path, index=False)
        args = score_args(input_files, tmp_path / "out")
        args[args.index("--heat") + 1] = str(daily_path)

        result = runner.invoke(app, args + ["--daily"])
        assert result.exit_code == 0, result.output

        table = pd.read_csv(tmp_path / "out" / "district_hazard_summary.csv")
        assert table["heat_days"].iloc[0] == pytest.approx(1.5)
        assert np.isnan(table["heat_days"].iloc[2])

    def test_unknown_format(self, runner, input_files, tmp_path):
        result = runner.invoke(
            app, score_args(input_files, tmp_path / "out") + ["--format", "csv,xlsx"]
        )
        assert result.exit_code == 2
        assert "Unknown formats: xlsx" in result.output

    def test_edges_file_written_and_reused(self, runner, input_files, tmp_path):
        edges_path = tmp_path / "edges.json"
        args = score_args(input_files, tmp_path / "out") + ["--edges", str(edges_path)]

        first = runner.invoke(app, args)
        assert first.exit_code == 0, first.output
        with open(edges_path) as f:
            assert set(json.load(f)) == {"heat", "precip", "slr"}

        second = runner.invoke(app, args)
        assert second.exit_code == 0, second.output
        assert "Reused stored edges: heat, precip, slr" in second.output


class TestEdgesCommand:

    @pytest.fixture
    def edges_file(self, runner, input_files, tmp_path):
        output = tmp_path / "out"
        result = runner.invoke(app, score_args(input_files, output))
        assert result.exit_code == 0, result.output
        return output / "district_hazard_summary_edges.json"

    def test_lists_intervals(self, runner, edges_file):
        result = runner.invoke(app, ["edges", str(edges_file)])
        assert result.exit_code == 0, result.output
        assert "flood" in result.output
        assert "1: [0, 20]" in result.output
        assert "5: (80, 100]" in result.output

    def test_single_hazard_json(self, runner, edges_file):
        result = runner.invoke(app, ["edges", str(edges_file), "--hazard", "heat", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["heat"]["edges"][0] == 10.0
        assert payload["heat"]["edges"][-1] == 50.0

    def test_unknown_hazard(self, runner, edges_file):
        result = runner.invoke(app, ["edges", str(edges_file), "--hazard", "storm"])
        assert result.exit_code == 1
        assert "No edges stored for 'storm'" in result.output


class TestGroup:

    def test_info(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(app, ["info"])
        assert result.exit_code == 0, result.output
        assert "missing_policy: flag" in result.output

    def test_config_file(self, runner, tmp_path):
        config_path = tmp_path / "hazard.yaml"
        config_path.write_text("summary:\n  missing_policy: zero\n")
        result = runner.invoke(app, ["-c", str(config_path), "info"])
        assert result.exit_code == 0, result.output
        assert "missing_policy: zero" in result.output

    def test_verbose_and_quiet_conflict(self, runner):
        result = runner.invoke(app, ["-v", "-q", "info"])
        assert result.exit_code == 2
        assert "Cannot use both" in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("score", "edges", "info"):
            assert command in result.output
