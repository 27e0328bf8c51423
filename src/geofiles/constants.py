"""
Constants for header normalization, downloads, projections and rendering.
"""

# Placeholder emitted by clean_label() for a blank header cell
DEFAULT_SENTINEL = "x"

# Separator used when normalizing labels and joining two header rows
HEADER_SEPARATOR = "_"

# Download settings
DEFAULT_TIMEOUT = 60.0  # seconds
DOWNLOAD_CHUNK_SIZE = 1024 * 1024  # 1 MB

# Coordinate reference systems
GEOGRAPHIC_CRS = "EPSG:4326"  # KML coordinates are always WGS84 lon/lat
AREA_CRS = "EPSG:6933"  # WGS 84 / NSIDC EASE-Grid 2.0 Global (equal-area)

# Geometry type tags treated as polygons
POLYGON_TYPES = ("Polygon", "MultiPolygon")

# Attributes that may declare the "no data" value of a grid variable
FILL_VALUE_ATTRS = ("_FillValue", "missing_value")

# Default rendering parameters for common gridded variables
VARIABLE_RENDER = {
    "t2m": {"cmap": "RdYlBu_r", "label": "2 m temperature"},
    "tas": {"cmap": "RdYlBu_r", "label": "Near-surface air temperature"},
    "tasmax": {"cmap": "RdYlBu_r", "label": "Daily maximum temperature"},
    "tasmin": {"cmap": "RdYlBu_r", "label": "Daily minimum temperature"},
    "pr": {"cmap": "Blues", "vmin": 0.0, "label": "Precipitation"},
    "tp": {"cmap": "Blues", "vmin": 0.0, "label": "Total precipitation"},
    "sst": {"cmap": "viridis", "label": "Sea surface temperature"},
}
