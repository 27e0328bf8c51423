"""
Post: reading a netCDF grid.

Fetch a netCDF file, list its variables, read one variable with the fill
value mapped to missing, pick a time step, optionally convert Kelvin to
Celsius and reproject, and plot it.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from geofiles.fetch import resolve_source
from geofiles.netcdf import list_variables, read_grid, read_variable
from geofiles.plotting import plot_grid
from geofiles.reproject import X_DIM_NAMES, Y_DIM_NAMES, reproject_dataarray
from geofiles.reshape import kelvin_to_celsius

from .constants import GRID_FIGSIZE

logger = logging.getLogger(__name__)


def run(
    source: Union[str, Path],
    workdir: Union[str, Path],
    variable: str,
    time_index: int = 0,
    time_dim: Optional[str] = None,
    to_celsius: bool = False,
    dst_crs: Optional[str] = None,
    resampling: str = 'nearest',
    show: bool = False,
    output_path: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    """
    Run the netCDF post end to end.

    Parameters
    ----------
    source : str or Path
        URL or local path of the netCDF file
    workdir : str or Path
        Download directory for URL sources
    variable : str
        Variable to plot
    time_index : int, optional
        Index along the non-spatial dimension of a 3-D variable (default: 0)
    time_dim : str, optional
        Name of that dimension; the first non-lon/lat dimension when None
    to_celsius : bool, optional
        Convert the values from Kelvin to degrees Celsius
    dst_crs : str, optional
        Reproject to this CRS before plotting (e.g. ``"EPSG:3035"``)
    resampling : str, optional
        Resampling method used when reprojecting
    show : bool, optional
        Display the figure instead of returning it
    output_path : str or Path, optional
        Save the figure here

    Returns
    -------
    dict
        ``source_file``, ``variables``, ``variable``, ``units``, ``n_missing``,
        ``shape``, ``crs`` and ``figure``

    Raises
    ------
    KeyError
        If ``variable`` is not in the file
    """
    path = resolve_source(source, workdir)

    variables = list_variables(path)
    info = {v.name: v for v in variables}
    if variable not in info:
        raise KeyError(f"Variable '{variable}' not found. Available: {list(info)}")

    raw = read_variable(path, variable)
    n_missing = int(np.ma.count_masked(raw))
    logger.info(f"'{variable}': {n_missing:,} of {raw.size:,} cells are missing (fill value)")

    # Coordinates come from the decoded read; values and missing cells from the fill-masked one
    grid = read_grid(path, variable)
    grid = grid.copy(data=raw.astype(np.float64).filled(np.nan))
    if grid.ndim == 3:
        if time_dim is None:
            spatial = set(X_DIM_NAMES) | set(Y_DIM_NAMES)
            time_dim = next(str(d) for d in grid.dims if str(d).lower() not in spatial)
        grid = grid.isel({time_dim: time_index})
    elif grid.ndim != 2:
        raise ValueError(f"Cannot plot '{variable}' with dims {grid.dims}")

    units = info[variable].units
    if to_celsius:
        grid = kelvin_to_celsius(grid)
        units = "degC"

    crs = None
    if dst_crs is not None:
        warped = reproject_dataarray(grid, dst_crs=dst_crs, resampling=resampling)
        crs = warped.crs
        figure = plot_grid(
            warped.data, warped.x, warped.y,
            variable=variable, label=info[variable].description or None,
            title=f"{variable} ({crs})", figsize=GRID_FIGSIZE,
            show=show, output_path=output_path,
        )
        shape = warped.shape
    else:
        figure = plot_grid(grid, variable=variable, figsize=GRID_FIGSIZE, show=show, output_path=output_path)
        shape = tuple(grid.shape)

    return {
        "source_file": str(path),
        "variables": [v.name for v in variables],
        "variable": variable,
        "units": units,
        "n_missing": n_missing,
        "shape": shape,
        "crs": crs,
        "figure": figure,
    }
