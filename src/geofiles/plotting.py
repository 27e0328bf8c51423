"""
Quick matplotlib renderers for grids, polygons and tables.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import geopandas as gpd
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import xarray as xr

from .constants import VARIABLE_RENDER

logger = logging.getLogger(__name__)


def get_cmap(cmap_name: str):
    """Get colormap, falling back to viridis for unknown names."""
    try:
        return plt.get_cmap(cmap_name)
    except ValueError:
        logger.warning(f"Unknown colormap '{cmap_name}', using viridis")
        return plt.get_cmap('viridis')


def _finish(
    fig: plt.Figure,
    created_fig: bool,
    show: bool,
    output_path: Optional[Union[str, Path]],
) -> Optional[plt.Figure]:
    if created_fig:
        fig.tight_layout()

    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=150)
        logger.info(f"Saved figure to {output_path}")

    if show:
        plt.show()
        return None
    return fig


def plot_grid(
    grid: Union[np.ndarray, xr.DataArray],
    x: Optional[np.ndarray] = None,
    y: Optional[np.ndarray] = None,
    variable: Optional[str] = None,
    title: Optional[str] = None,
    cmap: Optional[str] = None,
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
    label: Optional[str] = None,
    figsize: Tuple[int, int] = (10, 6),
    colorbar: bool = True,
    ax: Optional[plt.Axes] = None,
    show: bool = True,
    output_path: Optional[Union[str, Path]] = None,
) -> Optional[plt.Figure]:
    """
    Plot a 2-D grid.

    Parameters
    ----------
    grid : np.ndarray, np.ma.MaskedArray or xr.DataArray
        2-D values, shape (ny, nx). Masked and NaN cells are left blank.
        For a DataArray, coordinates, variable name and units are taken
        from the array unless given explicitly.
    x, y : np.ndarray, optional
        Cell-centre coordinates. Without them the grid is drawn by index.
    variable : str, optional
        Variable name for default colormap and label (see VARIABLE_RENDER)
    title : str, optional
        Plot title. Defaults to the variable name.
    cmap : str, optional
        Colormap name. If None, uses the variable default or 'viridis'
    vmin, vmax : float, optional
        Color scale limits. If None, uses variable defaults or data range
    label : str, optional
        Colorbar label
    figsize : tuple
        Figure size (width, height) in inches
    colorbar : bool
        Whether to show colorbar
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates new figure
    show : bool
        If True, displays the plot. If False, returns figure without displaying.
    output_path : str or Path, optional
        Save the figure here as well

    Returns
    -------
    matplotlib.figure.Figure or None
        Returns figure only if show=False
    """
    units = ""
    if isinstance(grid, xr.DataArray):
        if grid.ndim != 2:
            raise ValueError(f"Expected a 2-D grid, got dims {grid.dims}")
        y_dim, x_dim = grid.dims
        if x is None and x_dim in grid.coords:
            x = grid[x_dim].values
        if y is None and y_dim in grid.coords:
            y = grid[y_dim].values
        variable = variable or (str(grid.name) if grid.name is not None else None)
        units = str(grid.attrs.get("units", ""))
        label = label or grid.attrs.get("long_name")
        grid = grid.values

    data = np.ma.masked_invalid(np.ma.asarray(grid, dtype=np.float64))
    if data.ndim != 2:
        raise ValueError(f"Expected a 2-D grid, got shape {data.shape}")

    config = VARIABLE_RENDER.get(variable, {})
    valid = data.compressed()
    if valid.size == 0:
        logger.warning(f"Grid '{variable or 'data'}' has no valid cells")

    if cmap is None:
        cmap = config.get('cmap', 'viridis')
    if vmin is None:
        vmin = config.get('vmin', float(valid.min()) if valid.size else None)
    if vmax is None:
        vmax = config.get('vmax', float(valid.max()) if valid.size else None)

    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        created_fig = True
    else:
        fig = ax.figure

    if x is not None and y is not None:
        im = ax.pcolormesh(x, y, data, cmap=get_cmap(cmap), vmin=vmin, vmax=vmax, shading='auto')
        ax.set_xlabel('x')
        ax.set_ylabel('y')
    else:
        im = ax.imshow(data, origin='lower', cmap=get_cmap(cmap), vmin=vmin, vmax=vmax, aspect='equal')
        ax.set_xlabel('X index')
        ax.set_ylabel('Y index')

    if colorbar:
        cbar_label = label or config.get('label', variable or '')
        if units:
            cbar_label = f"{cbar_label} ({units})"
        fig.colorbar(im, ax=ax, label=cbar_label, shrink=0.8)

    ax.set_title(title if title is not None else (variable or 'Data'))

    return _finish(fig, created_fig, show, output_path)


def plot_polygons(
    frame: gpd.GeoDataFrame,
    column: Optional[str] = None,
    title: Optional[str] = None,
    cmap: str = 'viridis',
    edgecolor: str = 'black',
    figsize: Tuple[int, int] = (8, 8),
    ax: Optional[plt.Axes] = None,
    show: bool = True,
    output_path: Optional[Union[str, Path]] = None,
) -> Optional[plt.Figure]:
    """
    Plot vector features, optionally colored by ``column``.

    Returns
    -------
    matplotlib.figure.Figure or None
        Returns figure only if show=False
    """
    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        created_fig = True
    else:
        fig = ax.figure

    frame.plot(ax=ax, column=column, cmap=cmap if column else None,
               edgecolor=edgecolor, legend=column is not None)
    if title:
        ax.set_title(title)

    return _finish(fig, created_fig, show, output_path)


def plot_bars(
    table: pd.DataFrame,
    x: str,
    y: str,
    hue: Optional[str] = None,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (10, 6),
    ax: Optional[plt.Axes] = None,
    show: bool = True,
    output_path: Optional[Union[str, Path]] = None,
) -> Optional[plt.Figure]:
    """
    Bar chart of ``y`` per ``x``; with ``hue`` one bar group per ``x`` value.

    Returns
    -------
    matplotlib.figure.Figure or None
        Returns figure only if show=False
    """
    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        created_fig = True
    else:
        fig = ax.figure

    if hue is not None:
        wide = table.pivot_table(index=x, columns=hue, values=y, aggfunc='sum')
        wide.plot.bar(ax=ax)
    else:
        table.plot.bar(x=x, y=y, ax=ax, legend=False)

    ax.set_ylabel(y)
    if title:
        ax.set_title(title)

    return _finish(fig, created_fig, show, output_path)
