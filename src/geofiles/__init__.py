"""
geofiles - open and reshape netCDF grids, KMZ/KML archives and two-row-header CSVs
"""

from .errors import (
    GeofilesError,
    SourceReadError,
    LengthMismatchError,
    FetchError,
    NoMatchError,
    DuplicateHeaderError,
)
from .fetch import fetch, fetch_to_dir, resolve_source
from .headers import (
    clean_label,
    extract_header_row,
    read_header_rows,
    merge_headers,
    apply_header,
    check_unique_headers,
    read_data_rows,
    read_two_row_header_csv,
)
from .patterns import PatternTemplate, PatternMatch, compile_template, unglue, unglue_column
from .reshape import (
    select_rows,
    drop_rows,
    rename_columns,
    to_numeric,
    pivot_longer,
    kelvin_to_celsius,
)
from .netcdf import VariableInfo, list_variables, read_variable, read_attribute, read_grid
from .reproject import ReprojectedGrid, grid_transform, reproject_grid, reproject_dataarray, transform_points
from .vector import (
    extract_archive,
    find_kml,
    list_layers,
    read_vector,
    geometry_types,
    keep_geometry_types,
    union_polygons,
    explode_parts,
    area_km2,
)
from .plotting import plot_grid, plot_polygons, plot_bars

__version__ = "0.1.0"

__all__ = [
    # Errors
    "GeofilesError",
    "SourceReadError",
    "LengthMismatchError",
    "FetchError",
    "NoMatchError",
    "DuplicateHeaderError",
    # Loader
    "fetch",
    "fetch_to_dir",
    "resolve_source",
    # Two-row headers
    "clean_label",
    "extract_header_row",
    "read_header_rows",
    "merge_headers",
    "apply_header",
    "check_unique_headers",
    "read_data_rows",
    "read_two_row_header_csv",
    # Pattern extraction
    "PatternTemplate",
    "PatternMatch",
    "compile_template",
    "unglue",
    "unglue_column",
    # Reshaping
    "select_rows",
    "drop_rows",
    "rename_columns",
    "to_numeric",
    "pivot_longer",
    "kelvin_to_celsius",
    # Grids
    "VariableInfo",
    "list_variables",
    "read_variable",
    "read_attribute",
    "read_grid",
    # Reprojection
    "ReprojectedGrid",
    "grid_transform",
    "reproject_grid",
    "reproject_dataarray",
    "transform_points",
    # Vector / KMZ
    "extract_archive",
    "find_kml",
    "list_layers",
    "read_vector",
    "geometry_types",
    "keep_geometry_types",
    "union_polygons",
    "explode_parts",
    "area_km2",
    # Rendering
    "plot_grid",
    "plot_polygons",
    "plot_bars",
]
