"""
Hazard Index CLI - Main Entry Point

Command-line interface for scoring school districts on climate hazards.
Built with Click for argument parsing and help generation.
"""

import sys
import logging
from pathlib import Path
from typing import Optional

import click

from hazard_index import __version__
from hazard_index.config import HazardIndexConfig, load_config

# Configure logging for CLI
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("hazard_index")


class HazardIndexContext:
    """Context object for passing global options to subcommands."""

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        config_path: Optional[Path] = None,
    ):
        self.verbose = verbose
        self.quiet = quiet
        self.config_path = config_path
        self._config = None

        # Configure logging based on verbosity
        if quiet:
            logger.setLevel(logging.WARNING)
        elif verbose:
            logger.setLevel(logging.DEBUG)
        else:
            logger.setLevel(logging.INFO)

    @property
    def config(self) -> HazardIndexConfig:
        """Lazy load configuration from file, defaults and environment."""
        if self._config is None:
            self._config = load_config(str(self.config_path) if self.config_path else None)
            if self.verbose:
                logger.debug(f"Loaded config: {self._config.to_dict()}")
        return self._config


class HazardIndexGroup(click.Group):
    """Click group with an examples section in its help."""

    def format_help(self, ctx, formatter):
        formatter.write_paragraph()
        formatter.write_text("Hazard Index - Climate hazard scores for school districts")
        formatter.write_paragraph()

        super().format_help(ctx, formatter)

        formatter.write_paragraph()
        formatter.write_text("Examples:")
        formatter.indent()

        examples = [
            "# Score districts on every hazard and write CSV + GeoPackage",
            "hazard-index score --districts districts.gpkg --wildfire whp.tif \\",
            "    --slr slr.gpkg --flood flood.gpkg --heat heat.csv --precip precip.csv \\",
            "    --output ./out/ --format csv,gpkg",
            "",
            "# Show bin edges stored by a previous run",
            "hazard-index edges ./out/district_hazard_summary_edges.json",
        ]

        for line in examples:
            formatter.write_text(line)

        formatter.dedent()


pass_context = click.make_pass_decorator(HazardIndexContext, ensure=True)


@click.group(cls=HazardIndexGroup)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable verbose output (debug logging).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Quiet mode (only warnings and errors).",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML configuration file.",
)
@click.version_option(
    version=__version__,
    prog_name="hazard-index",
    message="%(prog)s version %(version)s",
)
@click.pass_context
def app(ctx, verbose: bool, quiet: bool, config_path: Optional[Path]):
    """
    Hazard Index CLI - District Climate-Hazard Scoring

    Scores every school district 0-5 on extreme heat, extreme
    precipitation, wildfire, sea-level rise and flooding, and sums the
    scores into projected and historical composite indexes.
    """
    if verbose and quiet:
        raise click.UsageError("Cannot use both --verbose and --quiet")

    ctx.obj = HazardIndexContext(
        verbose=verbose,
        quiet=quiet,
        config_path=config_path,
    )


def register_commands():
    """Register all subcommands."""
    from cli.commands import edges, score

    app.add_command(score.score)
    app.add_command(edges.edges)


@app.command("info")
@pass_context
def info(ctx):
    """Display package versions and the active configuration."""
    import importlib.metadata
    import platform

    import yaml

    click.echo("\n=== Hazard Index Info ===\n")

    click.echo(f"Python: {platform.python_version()}")
    click.echo(f"Platform: {platform.system()} {platform.release()}")
    click.echo(f"hazard-index: {__version__}")

    click.echo("\n--- Package Versions ---")
    packages = ["numpy", "pandas", "geopandas", "shapely", "rasterio", "click"]
    for pkg in packages:
        try:
            version = importlib.metadata.version(pkg)
        except importlib.metadata.PackageNotFoundError:
            version = "not installed"
        click.echo(f"  {pkg}: {version}")

    click.echo("\n--- Configuration ---")
    click.echo(yaml.safe_dump(ctx.config.to_dict(), sort_keys=False).rstrip())
    click.echo()


register_commands()


def main():
    """Main entry point for the CLI."""
    try:
        app()
    except Exception as e:
        logger.error(f"Error: {e}")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
