"""
Per-district hazard summary and its export.
"""

from hazard_index.summary.aggregator import HazardSummary, HazardSummaryAggregator
from hazard_index.summary.export import EXPORT_FORMATS, available_formats, export_summary

__all__ = [
    "HazardSummary",
    "HazardSummaryAggregator",
    "EXPORT_FORMATS",
    "available_formats",
    "export_summary",
]
