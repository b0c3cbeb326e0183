"""
Conversion of raw hazard metrics to 0-5 scores.
"""

from hazard_index.scoring.binning import N_BINS, BinEdges, IntervalBinner
from hazard_index.scoring.edges import EdgeStore
from hazard_index.scoring.hazards import (
    BINNED_HAZARDS,
    HazardMetrics,
    HazardScorer,
    HazardScores,
    score_wildfire_value,
)

__all__ = [
    "N_BINS",
    "BinEdges",
    "IntervalBinner",
    "EdgeStore",
    "BINNED_HAZARDS",
    "HazardMetrics",
    "HazardScorer",
    "HazardScores",
    "score_wildfire_value",
]
