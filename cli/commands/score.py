"""
Score Command - Run the district hazard index from pre-processed files.

Usage:
    hazard-index score --districts districts.gpkg --wildfire whp.tif --flood flood.gpkg \
        --heat heat.csv --precip precip.csv --output ./out/
"""

import logging
from pathlib import Path
from typing import Optional

import click
import pandas as pd

from cli.main import pass_context
from hazard_index.config import MissingDataPolicy
from hazard_index.data.exceedance import count_exceedance_days
from hazard_index.data.io import load_districts, load_extent, load_metric_table, load_raster
from hazard_index.exceptions import HazardIndexError
from hazard_index.pipeline import HazardIndexPipeline, PipelineInputs
from hazard_index.summary.export import EXPORT_FORMATS, export_summary

logger = logging.getLogger("hazard_index.cli.score")

existing_file = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.command("score")
@click.option(
    "--districts",
    "-d",
    "districts_path",
    type=existing_file,
    required=True,
    help="Master district layer (any vector format geopandas reads).",
)
@click.option("--wildfire", type=existing_file, help="Projected wildfire hazard raster.")
@click.option("--wildfire-hist", type=existing_file, help="Historical wildfire hazard raster.")
@click.option("--slr", type=existing_file, help="Projected sea-level-rise extent polygons.")
@click.option("--slr-hist", type=existing_file, help="Historical sea-level-rise extent polygons.")
@click.option("--flood", type=existing_file, help="Flood zone polygons.")
@click.option("--heat", type=existing_file, help="Projected heat table (CSV).")
@click.option("--heat-hist", type=existing_file, help="Historical heat table (CSV).")
@click.option("--precip", type=existing_file, help="Projected precipitation table (CSV).")
@click.option("--precip-hist", type=existing_file, help="Historical precipitation table (CSV).")
@click.option(
    "--value-column",
    default="value",
    show_default=True,
    help="Value column of the heat and precipitation tables.",
)
@click.option(
    "--daily",
    is_flag=True,
    default=False,
    help="Heat and precipitation tables hold daily values (district_id, date, value) "
         "and are counted against the configured thresholds.",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Output directory.",
)
@click.option(
    "--format",
    "-f",
    "formats",
    type=str,
    default="csv",
    show_default=True,
    help="Comma-separated table formats: " + ", ".join(EXPORT_FORMATS) + ".",
)
@click.option(
    "--name",
    "-n",
    default="district_hazard_summary",
    show_default=True,
    help="Base name of the output files.",
)
@click.option(
    "--missing-policy",
    type=click.Choice([p.value for p in MissingDataPolicy]),
    default=None,
    help="Treatment of districts without a hazard score (default from config: flag).",
)
@click.option(
    "--edges",
    "edges_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file of bin edges to reuse; newly fit edges are added to it.",
)
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Fail when a hazard has no value above zero.",
)
@pass_context
def score(
    ctx,
    districts_path: Path,
    wildfire: Optional[Path],
    wildfire_hist: Optional[Path],
    slr: Optional[Path],
    slr_hist: Optional[Path],
    flood: Optional[Path],
    heat: Optional[Path],
    heat_hist: Optional[Path],
    precip: Optional[Path],
    precip_hist: Optional[Path],
    value_column: str,
    daily: bool,
    output_path: Path,
    formats: str,
    name: str,
    missing_policy: Optional[str],
    edges_path: Optional[Path],
    strict: Optional[bool],
):
    """
    Score every district on every supplied hazard.

    Inputs must already share the district layer's CRS. Hazards without
    an input are reported as missing for every district.

    \b
    Examples:
        # Projected and historical scores from metric tables
        hazard-index score -d districts.gpkg --wildfire whp.tif --wildfire-hist whp_hist.tif \\
            --slr slr.gpkg --slr-hist slr_hist.gpkg --flood flood.gpkg \\
            --heat heat.csv --heat-hist heat_hist.csv \\
            --precip precip.csv --precip-hist precip_hist.csv -o ./out/

        # Count exceedance days from daily series
        hazard-index score -d districts.gpkg --heat tmax_daily.csv --daily -o ./out/
    """
    format_list = [f.strip().lower() for f in formats.split(",") if f.strip()]
    invalid_formats = [f for f in format_list if f not in EXPORT_FORMATS]
    if invalid_formats:
        valid = ", ".join(EXPORT_FORMATS)
        raise click.BadParameter(
            f"Unknown formats: {', '.join(invalid_formats)}. Valid: {valid}",
            param_hint="--format",
        )

    config = ctx.config
    if missing_policy:
        config.summary.missing_policy = MissingDataPolicy(missing_policy)
    if edges_path:
        config.edges_path = str(edges_path)
    if strict is not None:
        config.strict_fit = strict

    click.echo("\n=== District Hazard Scoring ===")
    click.echo(f"  Districts: {districts_path}")
    click.echo(f"  Output: {output_path}")
    click.echo(f"  Missing data policy: {config.summary.missing_policy.value}")

    try:
        districts = load_districts(districts_path, config.columns)
        ids = list(districts["district_id"])

        def table(path: Optional[Path], threshold: float) -> Optional[pd.Series]:
            if path is None:
                return None
            if daily:
                return count_exceedance_days(
                    pd.read_csv(path, dtype={"district_id": str}),
                    threshold,
                    value_column=value_column,
                    per_year=config.exceedance.per_year,
                    district_ids=ids,
                )
            return load_metric_table(path, value_column)

        def extent(path: Optional[Path]):
            return load_extent(path, districts.crs) if path is not None else None

        def raster(path: Optional[Path]):
            return load_raster(path, nodata=config.wildfire.nodata) if path is not None else None

        heat_threshold = config.exceedance.heat_threshold
        precip_threshold = config.exceedance.precip_threshold
        inputs = PipelineInputs(
            districts=districts,
            wildfire=raster(wildfire),
            wildfire_hist=raster(wildfire_hist),
            slr_extent=extent(slr),
            slr_extent_hist=extent(slr_hist),
            flood_extent=extent(flood),
            heat=table(heat, heat_threshold),
            heat_hist=table(heat_hist, heat_threshold),
            precip=table(precip, precip_threshold),
            precip_hist=table(precip_hist, precip_threshold),
        )

        pipeline = HazardIndexPipeline(config)
        summary = pipeline.run(inputs)
        written = export_summary(summary, output_path, format_list, name)
    except HazardIndexError as e:
        logger.error(f"Scoring failed: {e}")
        raise click.ClickException(str(e))

    table_frame = summary.table
    complete = int(table_frame["hazard_score"].notna().sum())
    click.echo("\n=== Scoring Summary ===")
    click.echo(f"  Districts: {len(table_frame)}")
    click.echo(f"  Complete hazard_score: {complete}")
    stats = summary.statistics["hazard_score"]
    if stats["count"]:
        click.echo(
            f"  hazard_score: min {stats['min']:g}, max {stats['max']:g}, mean {stats['mean']:.2f}"
        )
    if pipeline.diagnostics.reused_edges:
        click.echo(f"  Reused stored edges: {', '.join(pipeline.diagnostics.reused_edges)}")
    for kind, path in written.items():
        click.echo(f"  {kind}: {path}")
