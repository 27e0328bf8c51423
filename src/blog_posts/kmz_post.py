"""
Post: polygons from a KMZ archive.

Fetch a KMZ, extract its KML, read all folders/layers, check which geometry
types it holds, union the polygons into one multipolygon (or one per group)
and compute their area in an equal-area projection.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from geofiles.constants import AREA_CRS
from geofiles.errors import SourceReadError
from geofiles.fetch import resolve_source
from geofiles.plotting import plot_polygons
from geofiles.vector import (
    area_km2,
    explode_parts,
    extract_archive,
    find_kml,
    geometry_types,
    read_vector,
    union_polygons,
)

from .constants import DEFAULT_WORKDIR, MAP_FIGSIZE

logger = logging.getLogger(__name__)


def locate_kml(path: Path, workdir: Union[str, Path]) -> Path:
    """Return the KML inside a KMZ (extracted under ``workdir``) or the KML itself."""
    suffix = path.suffix.lower()
    if suffix == ".kml":
        return path
    if suffix in (".kmz", ".zip"):
        extracted = extract_archive(path, Path(workdir) / path.stem)
        return find_kml(extracted)
    raise SourceReadError(f"Expected a .kmz or .kml file, got {path.name}")


def run(
    source: Union[str, Path],
    workdir: Union[str, Path] = DEFAULT_WORKDIR,
    group_by: Optional[str] = None,
    area_crs: str = AREA_CRS,
    show: bool = False,
    output_path: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    """
    Run the KMZ post end to end.

    Parameters
    ----------
    source : str or Path
        URL or local path of a .kmz (or .kml) file
    workdir : str or Path, optional
        Directory for downloads and extracted archive contents
    group_by : str, optional
        Attribute to union by (e.g. ``"layer"`` or ``"Name"``); everything is
        merged into a single multipolygon when None
    area_crs : str, optional
        Equal-area CRS used for the area computation
    show : bool, optional
        Display the figure instead of returning it
    output_path : str or Path, optional
        Save the figure here

    Returns
    -------
    dict
        ``kml_file``, ``n_features``, ``geometry_types``, ``n_parts``,
        ``total_area_km2``, ``polygons`` (GeoDataFrame) and ``figure``
    """
    path = resolve_source(source, workdir)
    kml = locate_kml(path, workdir)

    features = read_vector(kml, all_layers=True)
    types = geometry_types(features)
    logger.info(f"Geometry types in {kml.name}: {types.to_dict()}")

    polygons = union_polygons(features, by=group_by)
    polygons["area_km2"] = area_km2(polygons, crs=area_crs)
    n_parts = len(explode_parts(polygons))
    total = float(polygons["area_km2"].sum())
    logger.info(f"{len(polygons)} multipolygon(s), {n_parts} part(s), {total:,.2f} km²")

    figure = plot_polygons(
        polygons,
        column="area_km2" if group_by else None,
        title=f"{kml.stem}: {total:,.1f} km²",
        figsize=MAP_FIGSIZE,
        show=show,
        output_path=output_path,
    )

    return {
        "kml_file": str(kml),
        "n_features": len(features),
        "geometry_types": {str(k): int(v) for k, v in types.items()},
        "n_parts": n_parts,
        "total_area_km2": total,
        "polygons": polygons,
        "figure": figure,
    }
