"""
Defaults shared by the tutorial pipelines.
"""

# Where downloads and extracted archives go unless a post is given a workdir
DEFAULT_WORKDIR = "data"

# Figure sizes per post
GRID_FIGSIZE = (10, 6)
MAP_FIGSIZE = (8, 8)
BAR_FIGSIZE = (12, 6)

# Name of the value column produced when a wide table is pivoted longer
VALUE_COLUMN = "value"
