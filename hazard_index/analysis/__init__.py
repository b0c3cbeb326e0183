"""
Spatial aggregation of hazard layers to districts.

- Overlay: percent of district area covered by extent polygons
- Zonal: mean of raster cells touching each district
"""

from hazard_index.analysis.overlay import (
    OVERLAP_TOLERANCE,
    AreaOverlayAggregator,
    CoverageResult,
)
from hazard_index.analysis.zonal import (
    RasterGrid,
    ZonalCellAggregator,
    ZonalResult,
    reclassify,
)

__all__ = [
    "OVERLAP_TOLERANCE",
    "AreaOverlayAggregator",
    "CoverageResult",
    "RasterGrid",
    "ZonalCellAggregator",
    "ZonalResult",
    "reclassify",
]
