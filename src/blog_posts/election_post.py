"""
Post: a CSV with a two-row header.

Election result tables from statistical offices put the party name on one
row and the measure (``Anzahl``, ``gültig``, ...) on the next. The post reads
both header rows, merges them into one label per column, labels the data,
filters and renames, converts the counts to numbers, pivots the table longer
(splitting the merged labels back into parts) and plots the result.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union

from geofiles.fetch import resolve_source
from geofiles.headers import read_two_row_header_csv
from geofiles.patterns import PatternTemplate
from geofiles.plotting import plot_bars
from geofiles.reshape import pivot_longer, rename_columns, select_rows, to_numeric

from .constants import BAR_FIGSIZE, VALUE_COLUMN

logger = logging.getLogger(__name__)


def run(
    source: Union[str, Path],
    workdir: Union[str, Path],
    header_skip: int,
    id_columns: Sequence[str],
    sep: str = ",",
    encoding: str = "utf-8",
    header_overrides: Optional[Mapping[int, str]] = None,
    filter_column: Optional[str] = None,
    keep: Optional[Iterable] = None,
    rename: Optional[Mapping[str, str]] = None,
    decimal: str = ".",
    thousands: Optional[str] = None,
    templates: Optional[Sequence[Union[str, PatternTemplate]]] = None,
    plot_x: Optional[str] = None,
    plot_hue: Optional[str] = None,
    show: bool = False,
    output_path: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    """
    Run the two-row-header CSV post end to end.

    Parameters
    ----------
    source : str or Path
        URL or local path of the CSV file
    workdir : str or Path
        Download directory for URL sources
    header_skip : int
        Rows above the first header row
    id_columns : sequence of str
        Columns (after renaming) kept as identifiers when pivoting
    sep, encoding : str, optional
        CSV delimiter and text encoding
    header_overrides : mapping of int to str, optional
        Positional replacements applied to the merged header, used to give
        repeated labels (``gebiet``, ``gebiet``) distinct names
    filter_column, keep : optional
        Keep only rows whose ``filter_column`` value is in ``keep``
    rename : mapping, optional
        Column renames applied after filtering
    decimal, thousands : str, optional
        Number format of the value columns
    templates : sequence, optional
        Pattern templates splitting the merged value labels when pivoting,
        e.g. ``["{vote}_{measure}"]``
    plot_x, plot_hue : str, optional
        Columns of the long table used for the bar chart; no plot when
        ``plot_x`` is None
    show : bool, optional
        Display the figure instead of returning it
    output_path : str or Path, optional
        Save the figure here

    Returns
    -------
    dict
        ``source_file``, ``header``, ``table`` (wide), ``long`` and ``figure``
    """
    path = resolve_source(source, workdir)

    table = read_two_row_header_csv(
        path, header_skip, sep=sep, encoding=encoding,
        require_unique=True, header_overrides=header_overrides,
    )
    header = list(table.columns)

    if filter_column is not None:
        table = select_rows(table, filter_column, keep or [])
    if rename:
        table = rename_columns(table, rename)

    value_columns = [c for c in table.columns if c not in id_columns]
    table = to_numeric(table, value_columns, decimal=decimal, thousands=thousands)

    long = pivot_longer(table, id_columns, values_to=VALUE_COLUMN, templates=templates)

    figure = None
    if plot_x is not None:
        figure = plot_bars(
            long, x=plot_x, y=VALUE_COLUMN, hue=plot_hue,
            title=path.stem, figsize=BAR_FIGSIZE,
            show=show, output_path=output_path,
        )

    return {
        "source_file": str(path),
        "header": header,
        "table": table,
        "long": long,
        "figure": figure,
    }
