"""
netCDF example: read a reanalysis grid and plot one time step.

This example demonstrates:
- Listing the variables of a netCDF file
- Counting cells hidden by the fill value
- Converting Kelvin to Celsius
- Reprojecting to an equal-area grid before plotting
"""
import logging

from blog_posts import netcdf_post


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # A URL works too; it is downloaded into workdir first
    grid_file = "data/netcdf/era5_t2m_2021-07.nc"

    result = netcdf_post.run(
        source=grid_file,
        variable="t2m",
        workdir="data/netcdf",
        time_index=0,
        to_celsius=True,
        dst_crs="EPSG:3035",       # ETRS89 / LAEA Europe
        resampling="bilinear",
        output_path="output/t2m_laea.png",
    )

    print(f"Variables in {result['source_file']}: {', '.join(result['variables'])}")
    print(f"Missing cells (fill value): {result['n_missing']:,}")
    print(f"Plotted grid: {result['shape']} in {result['crs']} ({result['units']})")


if __name__ == "__main__":
    main()
