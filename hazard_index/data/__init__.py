"""
District inputs: master table, metric loaders, day counts and retrieval.
"""

from hazard_index.data.districts import (
    DESCRIPTIVE_COLUMNS,
    county_geometries,
    iter_districts,
    prepare_districts,
)
from hazard_index.data.exceedance import count_exceedance_days
from hazard_index.data.io import load_districts, load_extent, load_metric_table, load_raster
from hazard_index.data.retrieval import CollectionResult, collect_district_metrics

__all__ = [
    "DESCRIPTIVE_COLUMNS",
    "county_geometries",
    "iter_districts",
    "prepare_districts",
    "count_exceedance_days",
    "load_districts",
    "load_extent",
    "load_metric_table",
    "load_raster",
    "CollectionResult",
    "collect_district_metrics",
]
