"""
netCDF grid reading.

Variables are read raw (``mask_and_scale=False``) so the declared fill value
can be mapped to a masked cell explicitly, the way a reader would check it by
hand. ``read_grid`` is the decoded counterpart used for plotting and
reprojection.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

import numpy as np
import xarray as xr

from .constants import FILL_VALUE_ATTRS
from .errors import SourceReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableInfo:
    """
    Summary of one data variable.

    Attributes
    ----------
    name : str
        Variable name in the file
    description : str
        ``long_name``, else ``standard_name``, else empty
    dimensions : tuple of str
        Dimension names in storage order
    shape : tuple of int
        Size of each dimension
    units : str
        ``units`` attribute, empty when absent
    """

    name: str
    description: str
    dimensions: Tuple[str, ...]
    shape: Tuple[int, ...]
    units: str = ""


def _open(source: Union[str, Path], engine: Optional[str] = None, decode: bool = False) -> xr.Dataset:
    source = Path(source)
    if not source.exists():
        raise SourceReadError(f"Grid file not found: {source}")
    try:
        if decode:
            return xr.open_dataset(source, engine=engine)
        return xr.open_dataset(source, engine=engine, mask_and_scale=False, decode_times=False)
    except (OSError, TypeError, ValueError) as e:
        raise SourceReadError(f"Cannot open grid file {source}: {e}") from e


def fill_value_of(attrs: Mapping[str, Any]) -> Optional[float]:
    """Return the declared fill value (``_FillValue`` or ``missing_value``), or None."""
    for key in FILL_VALUE_ATTRS:
        if key in attrs:
            value = np.asarray(attrs[key]).ravel()
            if value.size:
                return value[0].item()
    return None


def list_variables(source: Union[str, Path], engine: Optional[str] = None) -> List[VariableInfo]:
    """
    List the data variables of a grid file.

    Parameters
    ----------
    source : str or Path
        netCDF file
    engine : str, optional
        xarray backend (e.g. ``"netcdf4"``, ``"scipy"``); None lets xarray choose

    Returns
    -------
    list of VariableInfo
    """
    with _open(source, engine) as ds:
        variables = [
            VariableInfo(
                name=str(name),
                description=str(var.attrs.get("long_name", var.attrs.get("standard_name", ""))),
                dimensions=tuple(str(d) for d in var.dims),
                shape=tuple(int(n) for n in var.shape),
                units=str(var.attrs.get("units", "")),
            )
            for name, var in ds.data_vars.items()
        ]
    logger.info(f"{Path(source).name}: {len(variables)} variable(s): {[v.name for v in variables]}")
    return variables


def read_variable(
    source: Union[str, Path],
    name: str,
    mask_fill: bool = True,
    apply_scale: bool = True,
    engine: Optional[str] = None,
) -> np.ma.MaskedArray:
    """
    Read a variable as a masked array.

    Parameters
    ----------
    source : str or Path
        netCDF file
    name : str
        Variable name
    mask_fill : bool, optional
        Mask cells equal to the declared fill value and non-finite cells
        (default: True)
    apply_scale : bool, optional
        Apply CF ``scale_factor``/``add_offset`` after masking (default: True)
    engine : str, optional
        xarray backend

    Returns
    -------
    np.ma.MaskedArray
        Values in storage dimension order

    Raises
    ------
    KeyError
        If the variable does not exist
    """
    with _open(source, engine) as ds:
        if name not in ds.variables:
            raise KeyError(f"Variable '{name}' not found. Available: {list(ds.data_vars)}")
        var = ds[name]
        raw = np.asarray(var.values)
        attrs = dict(var.attrs)

    data = np.ma.MaskedArray(raw, mask=np.zeros(raw.shape, dtype=bool))
    if mask_fill:
        fill = fill_value_of(attrs)
        if fill is not None:
            data = np.ma.masked_where(raw == fill, data)
        if np.issubdtype(raw.dtype, np.floating):
            data = np.ma.masked_where(~np.isfinite(raw), data)
        n_masked = int(np.ma.count_masked(data))
        logger.debug(f"'{name}': fill value {fill}, {n_masked:,} of {data.size:,} cells masked")

    if apply_scale and ("scale_factor" in attrs or "add_offset" in attrs):
        scale = float(np.asarray(attrs.get("scale_factor", 1.0)).ravel()[0])
        offset = float(np.asarray(attrs.get("add_offset", 0.0)).ravel()[0])
        data = data.astype(np.float64) * scale + offset

    return data


def read_attribute(
    source: Union[str, Path],
    variable: Optional[str],
    attribute_name: str,
    engine: Optional[str] = None,
) -> Any:
    """
    Read one attribute; ``variable=None`` reads a global attribute.

    Raises
    ------
    KeyError
        If the variable or the attribute does not exist
    """
    with _open(source, engine) as ds:
        if variable is None:
            attrs = ds.attrs
            where = "global attributes"
        else:
            if variable not in ds.variables:
                raise KeyError(f"Variable '{variable}' not found")
            attrs = ds[variable].attrs
            where = f"variable '{variable}'"
        if attribute_name not in attrs:
            raise KeyError(f"Attribute '{attribute_name}' not found in {where}")
        value = attrs[attribute_name]

    if isinstance(value, np.ndarray) and value.size == 1:
        return value.item()
    if isinstance(value, np.generic):
        return value.item()
    return value


def read_grid(source: Union[str, Path], name: str, engine: Optional[str] = None) -> xr.DataArray:
    """
    Read a fully decoded variable with its coordinates.

    Fill values become NaN and times are decoded. The array is loaded into
    memory so the file is closed on return.

    Raises
    ------
    KeyError
        If the variable does not exist
    """
    with _open(source, engine, decode=True) as ds:
        if name not in ds.data_vars:
            raise KeyError(f"Variable '{name}' not found. Available: {list(ds.data_vars)}")
        grid = ds[name].load()
    logger.info(f"Read '{name}' {dict(grid.sizes)} from {Path(source).name}")
    return grid
