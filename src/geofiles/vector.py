"""
KMZ/KML archives and polygon geometry.

A KMZ is a zip archive holding a ``doc.kml`` (plus icons/overlays). The
helpers extract it, read the KML layers into a GeoDataFrame, inspect the
geometry types, union polygons into a multipolygon and compute areas in an
equal-area projection.
"""
from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import geopandas as gpd
import pandas as pd
from shapely.geometry import MultiPolygon

from .constants import AREA_CRS, GEOGRAPHIC_CRS, POLYGON_TYPES
from .errors import SourceReadError

logger = logging.getLogger(__name__)


def extract_archive(archive_path: Union[str, Path], destination_dir: Union[str, Path]) -> List[Path]:
    """
    Extract a zip/KMZ archive.

    Parameters
    ----------
    archive_path : str or Path
        Archive file
    destination_dir : str or Path
        Directory receiving the archive contents (created if needed)

    Returns
    -------
    list of Path
        Extracted files (directories excluded), sorted

    Raises
    ------
    SourceReadError
        If the archive is missing or not a valid zip file
    """
    archive_path = Path(archive_path)
    destination_dir = Path(destination_dir)
    if not archive_path.exists():
        raise SourceReadError(f"Archive not found: {archive_path}")

    destination_dir.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive_path) as zf:
            # extract() sanitizes "../" and absolute member names; keep the path it wrote
            extracted = sorted(
                Path(zf.extract(member, destination_dir))
                for member in zf.infolist()
                if not member.is_dir()
            )
    except zipfile.BadZipFile as e:
        raise SourceReadError(f"{archive_path} is not a valid zip/KMZ archive: {e}") from e

    logger.info(f"Extracted {len(extracted)} file(s) from {archive_path.name} into {destination_dir}")
    return extracted


def find_kml(paths: Iterable[Union[str, Path]]) -> Path:
    """
    Pick the KML document among extracted files.

    ``doc.kml`` wins when present (the KMZ convention), otherwise the first
    ``.kml`` file in order.

    Raises
    ------
    SourceReadError
        If no ``.kml`` file is among ``paths``
    """
    kml_files = [Path(p) for p in paths if Path(p).suffix.lower() == ".kml"]
    if not kml_files:
        raise SourceReadError("No .kml file found among extracted files")
    for path in kml_files:
        if path.name.lower() == "doc.kml":
            return path
    return kml_files[0]


def list_layers(path: Union[str, Path]) -> List[str]:
    """Return the layer names of a (multi-layer) vector source such as a KML."""
    try:
        layers = gpd.list_layers(path)
    except (OSError, RuntimeError, ValueError) as e:
        raise SourceReadError(f"Cannot list layers of {path}: {e}") from e
    return [str(name) for name in layers["name"]]


def read_vector(
    path: Union[str, Path],
    layer: Optional[str] = None,
    all_layers: bool = False,
    drop_z: bool = True,
) -> gpd.GeoDataFrame:
    """
    Read a vector file into a GeoDataFrame.

    Parameters
    ----------
    path : str or Path
        KML, GeoJSON, shapefile, ...
    layer : str, optional
        Layer to read; the first layer when None
    all_layers : bool, optional
        Read every layer and concatenate them with a ``layer`` column
        (KML folders become separate layers)
    drop_z : bool, optional
        Drop the Z coordinate KML stores with every vertex (default: True)

    Raises
    ------
    SourceReadError
        If the file is missing or cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise SourceReadError(f"Vector file not found: {path}")

    try:
        if all_layers:
            frames = []
            for name in list_layers(path):
                part = gpd.read_file(path, layer=name)
                part["layer"] = name
                frames.append(part)
            if not frames:
                raise SourceReadError(f"{path} has no layers")
            frame = gpd.GeoDataFrame(pd.concat(frames, ignore_index=True), crs=frames[0].crs)
        else:
            frame = gpd.read_file(path, layer=layer)
    except SourceReadError:
        raise
    except (OSError, RuntimeError, ValueError) as e:
        raise SourceReadError(f"Cannot read vector file {path}: {e}") from e

    if frame.crs is None and path.suffix.lower() == ".kml":
        frame = frame.set_crs(GEOGRAPHIC_CRS)
    if drop_z and len(frame) and frame.geometry.has_z.any():
        frame = frame.set_geometry(frame.geometry.force_2d())

    logger.info(f"Read {len(frame):,} feature(s) from {path.name}")
    return frame


def geometry_types(frame: gpd.GeoDataFrame) -> pd.Series:
    """Count features per geometry type tag (Point, Polygon, MultiPolygon, ...)."""
    return frame.geom_type.value_counts()


def keep_geometry_types(frame: gpd.GeoDataFrame, types: Sequence[str]) -> gpd.GeoDataFrame:
    """Keep only the features whose geometry type is in ``types``."""
    kept = frame[frame.geom_type.isin(list(types))]
    if len(kept) < len(frame):
        logger.debug(f"Dropped {len(frame) - len(kept)} feature(s) not of type {list(types)}")
    return kept


def union_polygons(frame: gpd.GeoDataFrame, by: Optional[str] = None) -> gpd.GeoDataFrame:
    """
    Union the polygon features of ``frame``.

    Parameters
    ----------
    frame : gpd.GeoDataFrame
        Features of any type; non-polygons are ignored
    by : str, optional
        Column to group by before the union. Without it every polygon is
        merged into one feature.

    Returns
    -------
    gpd.GeoDataFrame
        One row per group (or one row in total) whose geometry is always a
        MultiPolygon, in the CRS of ``frame``
    """
    polygons = keep_geometry_types(frame, POLYGON_TYPES)
    if polygons.empty:
        raise ValueError("No polygon features to union")

    if by is not None:
        merged = polygons[[by, polygons.geometry.name]].dissolve(by=by, as_index=False)
    else:
        merged = gpd.GeoDataFrame(geometry=[polygons.geometry.union_all()], crs=frame.crs)

    geoms = [MultiPolygon([g]) if g.geom_type == "Polygon" else g for g in merged.geometry]
    merged[merged.geometry.name] = gpd.GeoSeries(geoms, index=merged.index, crs=frame.crs)
    return merged


def explode_parts(frame: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """One row per polygon part of every multipart feature."""
    return frame.explode(index_parts=False).reset_index(drop=True)


def area_km2(frame: gpd.GeoDataFrame, crs: str = AREA_CRS) -> pd.Series:
    """
    Area of every feature in km².

    The frame is projected to ``crs``, an equal-area projection by default,
    so planar areas match surface areas.

    Raises
    ------
    ValueError
        If ``frame`` has no CRS
    """
    if frame.crs is None:
        raise ValueError("GeoDataFrame has no CRS; set one before computing areas")
    areas = frame.to_crs(crs).area / 1e6
    areas.name = "area_km2"
    return areas
