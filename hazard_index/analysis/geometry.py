"""
Geometry validity checks and repair shared by the area and zonal layers.
"""

import logging
from typing import List, Optional, Tuple

import geopandas as gpd
import shapely
from shapely.geometry import MultiPolygon, Polygon
from shapely.ops import unary_union
from shapely.validation import explain_validity

from hazard_index.exceptions import InputValidationError, InvalidGeometryError

logger = logging.getLogger(__name__)

POLYGONAL = (Polygon, MultiPolygon)


def polygonal_part(geom):
    """Keep only the polygonal parts of a geometry; None if there are none."""
    if geom is None or geom.is_empty:
        return None
    if isinstance(geom, POLYGONAL):
        return geom
    parts = [g for g in getattr(geom, "geoms", []) if isinstance(g, POLYGONAL)]
    if not parts:
        return None
    return unary_union(parts)


def repair_geometry(geom):
    """
    Repair one geometry with make_valid.

    Returns:
        A valid polygonal geometry, or None if repair fails
    """
    if geom is None or geom.is_empty:
        return None
    if geom.is_valid:
        return polygonal_part(geom)
    fixed = polygonal_part(shapely.make_valid(geom))
    if fixed is None or fixed.is_empty or not fixed.is_valid:
        return None
    return fixed


def repair_geometries(
    gdf: gpd.GeoDataFrame,
    label_column: Optional[str] = None,
) -> Tuple[gpd.GeoDataFrame, List]:
    """
    Repair invalid geometries in a layer.

    Args:
        gdf: Layer to repair
        label_column: Column used to report failures; the index if None

    Returns:
        (layer with failed rows removed, labels of failed rows)
    """
    invalid = gdf.geometry.isna() | ~gdf.geometry.is_valid
    if not invalid.any():
        return gdf, []

    gdf = gdf.copy()
    geometries = list(gdf.geometry)
    keep = []
    failed = []
    for pos, (is_bad, geom) in enumerate(zip(invalid, geometries)):
        if not is_bad:
            keep.append(pos)
            continue
        label = gdf[label_column].iloc[pos] if label_column else gdf.index[pos]
        reason = "missing geometry" if geom is None else explain_validity(geom)
        fixed = repair_geometry(geom)
        if fixed is None:
            logger.warning(f"Could not repair geometry {label}: {reason}")
            failed.append(label)
        else:
            logger.info(f"Repaired geometry {label}: {reason}")
            geometries[pos] = fixed
            keep.append(pos)

    gdf[gdf.geometry.name] = gpd.GeoSeries(geometries, index=gdf.index, crs=gdf.crs)
    return gdf.iloc[keep], failed


def require_valid(gdf: gpd.GeoDataFrame, label_column: Optional[str] = None) -> None:
    """Raise InvalidGeometryError for the first invalid non-empty geometry."""
    geoms = gdf.geometry
    bad = list(geoms.notna() & ~geoms.is_empty & ~geoms.is_valid)
    if True in bad:
        pos = bad.index(True)
        label = gdf[label_column].iloc[pos] if label_column else gdf.index[pos]
        raise InvalidGeometryError(str(label), explain_validity(geoms.iloc[pos]))


def check_same_crs(left_crs, right_crs, what: str) -> None:
    """
    Raise InputValidationError when two layers use different CRS.

    left_crs must be a pyproj CRS (a GeoDataFrame's .crs); right_crs may
    be anything pyproj accepts as user input.
    """
    if left_crs is None or right_crs is None:
        logger.warning(f"CRS missing for {what}; assuming layers are aligned")
        return
    if not left_crs.equals(right_crs):
        raise InputValidationError(
            f"CRS mismatch for {what}; reproject before scoring",
            {"left": str(left_crs), "right": str(right_crs)},
        )


def warn_if_geographic(gdf: gpd.GeoDataFrame, what: str) -> None:
    """Areas in a geographic CRS are in square degrees."""
    if gdf.crs is not None and gdf.crs.is_geographic:
        logger.warning(
            f"{what} uses geographic CRS {gdf.crs.to_string()}; "
            f"areas are in square degrees, use a projected CRS for area metrics"
        )
