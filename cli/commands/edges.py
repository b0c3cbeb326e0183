"""
Edges Command - Show bin edges stored by a scoring run.

Usage:
    hazard-index edges ./out/district_hazard_summary_edges.json --hazard heat
"""

import json
from pathlib import Path
from typing import Optional

import click

from hazard_index.scoring.edges import EdgeStore


@click.command("edges")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--hazard", "hazard", default=None, help="Only show this hazard.")
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the stored edges as JSON.",
)
def edges(path: Path, hazard: Optional[str], as_json: bool):
    """
    Print the score intervals of stored bin edges.

    Each hazard lists the five (lower, upper] intervals scored 1-5;
    0 is reserved for a raw value of exactly zero.
    """
    store = EdgeStore(path)
    if hazard:
        try:
            stored = {hazard: store.load(hazard)}
        except KeyError as e:
            raise click.ClickException(e.args[0])
    else:
        stored = store.load_all()

    if as_json:
        click.echo(json.dumps({k: v.to_dict() for k, v in stored.items()}, indent=2))
        return

    if not stored:
        click.echo(f"No edges stored in {path}")
        return

    for name, bin_edges in stored.items():
        flag = " (degenerate: no values above zero)" if bin_edges.degenerate else ""
        click.echo(f"\n{name}{flag}")
        click.echo("  0: exactly 0")
        for score_value, lower, upper in bin_edges.intervals():
            opener = "[" if score_value == 1 else "("
            click.echo(f"  {score_value}: {opener}{lower:g}, {upper:g}]")
