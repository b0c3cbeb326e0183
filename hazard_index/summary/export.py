"""
Export of hazard summaries for downstream reporting and mapping.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Sequence, Union

from hazard_index.scoring.edges import EdgeStore
from hazard_index.summary.aggregator import HazardSummary

logger = logging.getLogger(__name__)


# Supported table formats
EXPORT_FORMATS = {
    "csv": {"extension": ".csv", "description": "Flat table without geometry"},
    "gpkg": {"extension": ".gpkg", "description": "GeoPackage", "driver": "GPKG"},
    "geojson": {"extension": ".geojson", "description": "GeoJSON", "driver": "GeoJSON"},
}


def export_summary(
    summary: HazardSummary,
    output_dir: Union[str, Path],
    formats: Sequence[str] = ("csv",),
    name: str = "district_hazard_summary",
) -> Dict[str, Path]:
    """
    Write the summary table, report statistics and bin edges.

    Args:
        summary: Result of HazardSummaryAggregator.aggregate
        output_dir: Directory to write into (created if needed)
        formats: Table formats, any of EXPORT_FORMATS
        name: Base file name

    Returns:
        Written paths keyed by format, plus "report" and, when any
        hazard was binned, "edges"
    """
    unknown = [f for f in formats if f not in EXPORT_FORMATS]
    if unknown:
        raise ValueError(f"Unknown export format(s): {unknown}. Available: {list(EXPORT_FORMATS)}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written: Dict[str, Path] = {}

    for fmt in formats:
        path = output_dir / f"{name}{EXPORT_FORMATS[fmt]['extension']}"
        if fmt == "csv":
            summary.table.drop(columns=summary.table.geometry.name).to_csv(path, index=False)
        else:
            summary.table.to_file(path, driver=EXPORT_FORMATS[fmt]["driver"])
        written[fmt] = path
        logger.info(f"Wrote {fmt} summary to {path}")

    report_path = output_dir / f"{name}_report.json"
    with open(report_path, "w") as f:
        json.dump(summary.to_dict(), f, indent=2)
    written["report"] = report_path

    if summary.edges:
        edges_path = output_dir / f"{name}_edges.json"
        store = EdgeStore(edges_path)
        for hazard_name, edges in summary.edges.items():
            store.save(edges, hazard_name)
        written["edges"] = edges_path

    return written


def available_formats() -> List[str]:
    return list(EXPORT_FORMATS)
