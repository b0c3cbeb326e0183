"""
Pytest configuration and fixtures for hazard_index tests.

Markers:
    @pytest.mark.binning - Equal-interval binning and edge persistence
    @pytest.mark.scoring - Per-hazard scoring rules
    @pytest.mark.overlay - Area overlay coverage
    @pytest.mark.zonal - Raster zonal means
    @pytest.mark.summary - Summary aggregation and export
    @pytest.mark.cli - Command-line interface
    @pytest.mark.data - District tables, loaders, day counts and retrieval
    @pytest.mark.slow - Tests that take longer to run

Usage:
    pytest -m binning             # Run only binning tests
    pytest -m "not slow"          # Skip slow tests
    pytest -m "overlay or zonal"  # Spatial aggregation only
"""

import pytest
import sys
from pathlib import Path

import geopandas as gpd
import numpy as np
import pandas as pd
from rasterio.transform import from_origin
from shapely.geometry import box

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# California Albers, a projected CRS in meters
CRS = "EPSG:3310"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "binning: Interval binning and edge tests")
    config.addinivalue_line("markers", "scoring: Hazard scoring tests")
    config.addinivalue_line("markers", "overlay: Area overlay tests")
    config.addinivalue_line("markers", "zonal: Zonal mean tests")
    config.addinivalue_line("markers", "summary: Summary aggregation tests")
    config.addinivalue_line("markers", "cli: Command-line tests")
    config.addinivalue_line("markers", "data: District table, loader and day-count tests")
    config.addinivalue_line("markers", "slow: Slow-running tests")


def pytest_collection_modifyitems(config, items):
    """Auto-apply markers based on test file names."""
    by_file = {
        "binning": "binning",
        "scoring": "scoring",
        "overlay": "overlay",
        "zonal": "zonal",
        "summary": "summary",
        "cli": "cli",
        "districts": "data",
        "exceedance": "data",
        "retrieval": "data",
    }
    for item in items:
        basename = item.fspath.basename
        for fragment, marker in by_file.items():
            if fragment in basename:
                item.add_marker(getattr(pytest.mark, marker))

        test_name = item.name.lower()
        if "pipeline" in basename or "large" in test_name:
            item.add_marker(pytest.mark.slow)


@pytest.fixture
def crs():
    return CRS


@pytest.fixture
def square_districts():
    """
    Three adjacent 10 x 10 districts in a row.

        A: [0, 10]  B: [10, 20]  C: [20, 30]   (x), all y in [0, 10]
    """
    return gpd.GeoDataFrame(
        {
            "district_id": ["A", "B", "C"],
            "name": ["Alder Unified", "Birch Elementary", "Cedar High"],
            "county": ["North", "North", "South"],
            "district_type": ["Unified", "Elementary", "High"],
            "enrollment": [1200, 450, 800],
        },
        geometry=[box(0, 0, 10, 10), box(10, 0, 20, 10), box(20, 0, 30, 10)],
        crs=CRS,
    )


@pytest.fixture
def raw_district_layer(square_districts):
    """The square districts with source-style column names."""
    return square_districts.rename(columns={
        "district_id": "CDSCode",
        "name": "DistrictName",
        "county": "CountyName",
        "district_type": "DistrictType",
    })


@pytest.fixture
def flood_extent():
    """Covers the west half of A and all of C; touches B only along a line."""
    return gpd.GeoDataFrame(
        {"zone": ["AE", "X"]},
        geometry=[box(0, 0, 5, 10), box(20, 0, 30, 10)],
        crs=CRS,
    )


@pytest.fixture
def slr_extent():
    """Covers a quarter of C."""
    return gpd.GeoDataFrame(geometry=[box(25, 0, 30, 5)], crs=CRS)


@pytest.fixture
def slr_extent_hist():
    """Covers a tenth of C."""
    return gpd.GeoDataFrame(geometry=[box(29, 0, 30, 10)], crs=CRS)


@pytest.fixture
def inset_districts():
    """
    Districts inset from the 10-unit cell grid so touched cells are unambiguous.

        A touches cell 0, S straddles cells 0 and 1, C touches cell 2
    """
    return gpd.GeoDataFrame(
        {"district_id": ["A", "S", "C"]},
        geometry=[box(1, 1, 9, 9), box(8, 1, 12, 9), box(21, 1, 29, 9)],
        crs=CRS,
    )


@pytest.fixture
def wildfire_grid():
    """One row of three 10 x 10 cells over x in [0, 30], classes 1, 3, 7."""
    from hazard_index.analysis.zonal import RasterGrid

    return RasterGrid(
        values=np.array([[1, 3, 7]], dtype=np.uint8),
        transform=from_origin(0, 10, 10, 10),
        crs=CRS,
        nodata=255,
    )


@pytest.fixture
def uniform_grid():
    """Factory for a 1-unit grid over the square districts with one value."""
    from hazard_index.analysis.zonal import RasterGrid

    def make(value):
        return RasterGrid(
            values=np.full((10, 30), value, dtype=np.uint8),
            transform=from_origin(0, 10, 1, 1),
            crs=CRS,
            nodata=255,
        )

    return make


@pytest.fixture
def heat_days():
    """Projected heat days: zero, the minimum and the maximum."""
    return pd.Series(
        {"A": 0.0, "B": 10.0, "C": 50.0},
        name="heat_days",
    ).rename_axis("district_id")


@pytest.fixture
def daily_tmax():
    """Two years of daily maxima for A and B; C has only blanks."""
    dates = pd.to_datetime(["2020-07-01", "2020-07-02", "2020-07-03", "2021-07-01", "2021-07-02"])
    rows = []
    for date, a, b in zip(dates, [96, 97, 90, 101, 80], [80, 81, 82, 83, 84]):
        rows.append({"district_id": "A", "date": date, "value": a})
        rows.append({"district_id": "B", "date": date, "value": b})
        rows.append({"district_id": "C", "date": date, "value": np.nan})
    return pd.DataFrame(rows)
