"""
Raster reprojection and coordinate transformation.

Regular lon/lat (or projected) grids are warped with ``rasterio.warp`` into a
target CRS. Missing cells travel through the warp as NaN and come back
masked.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pyproj
import xarray as xr
from affine import Affine
from rasterio.crs import CRS
from rasterio.transform import array_bounds
from rasterio.warp import Resampling, calculate_default_transform, reproject

from .constants import GEOGRAPHIC_CRS

logger = logging.getLogger(__name__)

X_DIM_NAMES = ("lon", "longitude", "x", "rlon")
Y_DIM_NAMES = ("lat", "latitude", "y", "rlat")


@dataclass
class ReprojectedGrid:
    """
    A 2-D grid in its target CRS.

    Attributes
    ----------
    data : np.ma.MaskedArray
        Warped values, shape (ny, nx), north-up
    transform : Affine
        Pixel-to-CRS transform of ``data``
    crs : str
        Target CRS as a string
    x : np.ndarray
        Cell-centre x coordinates, shape (nx,)
    y : np.ndarray
        Cell-centre y coordinates, shape (ny,)
    """

    data: np.ma.MaskedArray
    transform: Affine
    crs: str
    x: np.ndarray
    y: np.ndarray

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape


def _string_to_resampling(method: str) -> Resampling:
    """
    Convert resampling method string to rasterio Resampling enum.

    Raises
    ------
    ValueError
        If method is not valid
    """
    method_map = {
        'nearest': Resampling.nearest,
        'bilinear': Resampling.bilinear,
        'cubic': Resampling.cubic,
        'average': Resampling.average,
        'mode': Resampling.mode,
        'lanczos': Resampling.lanczos,
    }

    if method not in method_map:
        valid = ', '.join(method_map.keys())
        raise ValueError(f"Invalid resampling method '{method}'. Valid options: {valid}")

    return method_map[method]


def grid_transform(x: Sequence[float], y: Sequence[float]) -> Affine:
    """
    Affine transform of a regular grid given its cell-centre coordinates.

    Parameters
    ----------
    x : sequence of float
        Column centre coordinates, at least two
    y : sequence of float
        Row centre coordinates, at least two

    Returns
    -------
    Affine
        Maps (col, row) pixel corners to CRS coordinates
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.size < 2 or y.size < 2:
        raise ValueError(f"Need at least two x and y coordinates, got {x.size} and {y.size}")

    dx = (x[-1] - x[0]) / (x.size - 1)
    dy = (y[-1] - y[0]) / (y.size - 1)
    return Affine.translation(x[0] - dx / 2, y[0] - dy / 2) * Affine.scale(dx, dy)


def reproject_grid(
    data: np.ndarray,
    x: Sequence[float],
    y: Sequence[float],
    src_crs: str = GEOGRAPHIC_CRS,
    dst_crs: str = "EPSG:3857",
    resolution: Optional[Union[float, Tuple[float, float]]] = None,
    resampling: str = 'nearest',
) -> ReprojectedGrid:
    """
    Warp a 2-D grid into another CRS.

    Parameters
    ----------
    data : np.ndarray or np.ma.MaskedArray
        2-D values, shape (len(y), len(x)); masked and NaN cells are missing
    x, y : sequence of float
        Cell-centre coordinates in ``src_crs``
    src_crs : str, optional
        Source CRS (default: EPSG:4326)
    dst_crs : str, optional
        Target CRS (default: EPSG:3857 - Web Mercator)
    resolution : float or (float, float), optional
        Target cell size in ``dst_crs`` units. When None the target grid has
        the source's row and column count over the warped bounds.
    resampling : str, optional
        Resampling method name (default: 'nearest')

    Returns
    -------
    ReprojectedGrid
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    values = np.ma.masked_invalid(np.ma.asarray(data, dtype=np.float64))
    if values.shape != (y.size, x.size):
        raise ValueError(
            f"Data shape {values.shape} does not match coordinates ({y.size}, {x.size})"
        )

    src = values.filled(np.nan)
    if y[-1] > y[0]:
        # rasterio expects north-up rows
        src = np.ascontiguousarray(src[::-1])
        y = y[::-1]

    height, width = src.shape
    src_transform = grid_transform(x, y)
    left, bottom, right, top = array_bounds(height, width, src_transform)

    if resolution is None:
        # Keep the source cell count so nearest resampling samples every cell
        dst_transform, dst_width, dst_height = calculate_default_transform(
            src_crs, dst_crs, width, height,
            left=left, bottom=bottom, right=right, top=top,
            dst_width=width, dst_height=height,
        )
    else:
        dst_transform, dst_width, dst_height = calculate_default_transform(
            src_crs, dst_crs, width, height,
            left=left, bottom=bottom, right=right, top=top,
            resolution=resolution,
        )
    dst = np.full((dst_height, dst_width), np.nan, dtype=np.float64)

    reproject(
        source=src,
        destination=dst,
        src_transform=src_transform,
        src_crs=src_crs,
        src_nodata=np.nan,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        dst_nodata=np.nan,
        resampling=_string_to_resampling(resampling),
    )

    dst_x = dst_transform.c + dst_transform.a * (np.arange(dst_width) + 0.5)
    dst_y = dst_transform.f + dst_transform.e * (np.arange(dst_height) + 0.5)
    logger.info(f"Reprojected {src.shape} {src_crs} -> {dst.shape} {dst_crs}")

    return ReprojectedGrid(
        data=np.ma.masked_invalid(dst),
        transform=dst_transform,
        crs=CRS.from_user_input(dst_crs).to_string(),
        x=dst_x,
        y=dst_y,
    )


def _find_dim(grid: xr.DataArray, candidates: Sequence[str]) -> str:
    for name in grid.dims:
        if str(name).lower() in candidates:
            return str(name)
    raise KeyError(f"None of {list(candidates)} found in dims {list(grid.dims)}")


def reproject_dataarray(
    grid: xr.DataArray,
    src_crs: str = GEOGRAPHIC_CRS,
    dst_crs: str = "EPSG:3857",
    x_dim: Optional[str] = None,
    y_dim: Optional[str] = None,
    resolution: Optional[Union[float, Tuple[float, float]]] = None,
    resampling: str = 'nearest',
) -> ReprojectedGrid:
    """
    Warp a 2-D DataArray using its coordinate variables.

    ``x_dim``/``y_dim`` default to the first dimension named like a
    longitude/x or latitude/y axis.
    """
    if grid.ndim != 2:
        raise ValueError(f"Expected a 2-D grid, got dims {grid.dims}; select a time step first")

    x_dim = x_dim or _find_dim(grid, X_DIM_NAMES)
    y_dim = y_dim or _find_dim(grid, Y_DIM_NAMES)
    values = grid.transpose(y_dim, x_dim).values

    return reproject_grid(
        values,
        grid[x_dim].values,
        grid[y_dim].values,
        src_crs=src_crs,
        dst_crs=dst_crs,
        resolution=resolution,
        resampling=resampling,
    )


def transform_points(
    xs: Sequence[float],
    ys: Sequence[float],
    src_crs: str,
    dst_crs: str,
) -> Tuple[np.ndarray, np.ndarray]:
    """Transform coordinate arrays between CRSs (x/lon first, y/lat second)."""
    transformer = pyproj.Transformer.from_crs(src_crs, dst_crs, always_xy=True)
    tx, ty = transformer.transform(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
    return np.asarray(tx), np.asarray(ty)
