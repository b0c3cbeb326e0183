"""
School District Climate-Hazard Index

Scores every school district 0-5 on five climate hazards (extreme heat,
extreme precipitation, wildfire, sea-level-rise inundation, flooding)
for a projected and a historical period and sums them into composite
hazard scores.

Example:
    from hazard_index import HazardIndexPipeline, PipelineInputs, load_config
    from hazard_index.data import load_districts, load_extent

    config = load_config()
    districts = load_districts("districts.gpkg", config.columns)
    inputs = PipelineInputs(
        districts=districts,
        flood_extent=load_extent("flood_zones.gpkg", districts.crs),
    )
    summary = HazardIndexPipeline(config).run(inputs)
"""

__version__ = "0.1.0"

from hazard_index.config import HazardIndexConfig, MissingDataPolicy, load_config
from hazard_index.exceptions import (
    DegenerateDistributionError,
    DuplicateDistrictError,
    HazardIndexError,
    InputValidationError,
    InvalidGeometryError,
    MissingScoreError,
    ZeroAreaError,
)
from hazard_index.models import District, Hazard, Period, ScoreRecord
from hazard_index.pipeline import HazardIndexPipeline, PipelineInputs

__all__ = [
    "__version__",
    # Configuration
    "HazardIndexConfig",
    "MissingDataPolicy",
    "load_config",
    # Exceptions
    "HazardIndexError",
    "InputValidationError",
    "DuplicateDistrictError",
    "ZeroAreaError",
    "InvalidGeometryError",
    "DegenerateDistributionError",
    "MissingScoreError",
    # Models
    "District",
    "Hazard",
    "Period",
    "ScoreRecord",
    # Pipeline
    "HazardIndexPipeline",
    "PipelineInputs",
]
