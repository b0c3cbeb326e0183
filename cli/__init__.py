"""
Hazard Index CLI Package

Command-line interface for district climate-hazard scoring.

Usage:
    hazard-index score --districts districts.gpkg --flood flood.gpkg --output ./out/
    hazard-index edges ./out/district_hazard_summary_edges.json
    hazard-index info
"""

from cli.main import app

__all__ = ["app"]
