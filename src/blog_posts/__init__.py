"""
Tutorial pipelines
==================

Each post runs once, top to bottom: fetch a file, parse it with an existing
reader, reshape the result and render a plot.

Posts:
- netcdf_post: netCDF grid with fill values, unit conversion and reprojection
- kmz_post: KMZ archive to a multipolygon and its area
- election_post: CSV whose column names span two rows
"""

__version__ = "0.1.0"

from . import netcdf_post, kmz_post, election_post

__all__ = [
    "netcdf_post",
    "kmz_post",
    "election_post",
]
