"""
Row/column reshaping steps used between parsing and rendering.
"""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence, Union

import pandas as pd
import xarray as xr

from .patterns import PatternTemplate, unglue_column

logger = logging.getLogger(__name__)

KELVIN_OFFSET = 273.15


def _require_columns(table: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise KeyError(f"Columns not found: {missing}. Available: {list(table.columns)}")


def select_rows(table: pd.DataFrame, column: str, keep: Iterable) -> pd.DataFrame:
    """Keep the rows whose ``column`` value is one of ``keep``."""
    _require_columns(table, [column])
    selected = table[table[column].isin(list(keep))]
    logger.debug(f"select_rows on '{column}': {len(table)} -> {len(selected)} rows")
    return selected


def drop_rows(table: pd.DataFrame, column: str, drop: Iterable) -> pd.DataFrame:
    """Remove the rows whose ``column`` value is one of ``drop``."""
    _require_columns(table, [column])
    return table[~table[column].isin(list(drop))]


def rename_columns(table: pd.DataFrame, mapping: Mapping[str, str]) -> pd.DataFrame:
    """Rename columns; every key of ``mapping`` must be an existing column."""
    _require_columns(table, mapping.keys())
    return table.rename(columns=dict(mapping))


def to_numeric(
    table: pd.DataFrame,
    columns: Sequence[str],
    decimal: str = ".",
    thousands: Optional[str] = None,
) -> pd.DataFrame:
    """
    Convert text columns to numbers.

    Parameters
    ----------
    table : pd.DataFrame
        Input table (not modified)
    columns : sequence of str
        Columns to convert
    decimal : str, optional
        Decimal mark used in the source, e.g. ``","`` for German data
    thousands : str, optional
        Thousands separator to remove before parsing

    Returns
    -------
    pd.DataFrame
        Copy of the table; values that cannot be parsed become NaN
    """
    _require_columns(table, columns)
    converted = table.copy()
    for column in columns:
        series = converted[column]
        if not pd.api.types.is_numeric_dtype(series):
            series = series.astype(str)
            if thousands:
                series = series.str.replace(thousands, "", regex=False)
            if decimal != ".":
                series = series.str.replace(decimal, ".", regex=False)
        converted[column] = pd.to_numeric(series, errors="coerce")
    return converted


def pivot_longer(
    table: pd.DataFrame,
    id_columns: Sequence[str],
    names_to: str = "name",
    values_to: str = "value",
    templates: Optional[Sequence[Union[str, PatternTemplate]]] = None,
) -> pd.DataFrame:
    """
    Melt every non-id column into (name, value) rows.

    With ``templates`` the melted column names are split into their parts
    with ``patterns.unglue_column`` and ``names_to`` is replaced by one
    column per extracted field.

    Examples
    --------
    >>> long = pivot_longer(wide, ["gebiet"], templates=["{party}_{measure}"])
    >>> long.columns.tolist()
    ['gebiet', 'party', 'measure', 'value']
    """
    _require_columns(table, id_columns)
    long = table.melt(id_vars=list(id_columns), var_name=names_to, value_name=values_to)

    if templates:
        parts = unglue_column(long[names_to], templates).drop(columns="template")
        long = pd.concat(
            [long[list(id_columns)], parts, long[[values_to]]],
            axis=1,
        )

    logger.debug(f"pivot_longer: {table.shape} -> {long.shape}")
    return long.reset_index(drop=True)


def kelvin_to_celsius(values):
    """
    Convert temperatures from Kelvin to degrees Celsius.

    Works on scalars, numpy (masked) arrays, pandas objects and xarray
    DataArrays. DataArray attributes are kept with ``units`` set to ``degC``.
    """
    converted = values - KELVIN_OFFSET
    if isinstance(values, xr.DataArray):
        converted.attrs = {**values.attrs, "units": "degC"}
    return converted
