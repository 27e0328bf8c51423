"""
Unit tests for geofiles.netcdf module.

Uses the synthetic grid written by the ``grid_file`` fixture.
"""

import numpy as np
import pytest

from geofiles.errors import SourceReadError
from geofiles.netcdf import fill_value_of, list_variables, read_attribute, read_grid, read_variable


class TestListVariables:
    """Test variable listing."""

    def test_lists_data_variables(self, grid_file):
        """Test names, dimensions and descriptions."""
        variables = {v.name: v for v in list_variables(grid_file)}

        assert set(variables) == {"t2m", "tp"}
        assert variables["t2m"].dimensions == ("time", "lat", "lon")
        assert variables["t2m"].shape == (2, 4, 5)
        assert variables["t2m"].description == "2 metre temperature"
        assert variables["t2m"].units == "K"
        # Falls back to standard_name
        assert variables["tp"].description == "precipitation_amount"

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises SourceReadError."""
        with pytest.raises(SourceReadError):
            list_variables(tmp_path / "missing.nc")

    def test_not_a_netcdf(self, tmp_path):
        """Test that an unreadable file raises SourceReadError."""
        path = tmp_path / "broken.nc"
        path.write_text("not a grid", encoding="utf-8")
        with pytest.raises(SourceReadError):
            list_variables(path, engine="scipy")


class TestReadVariable:
    """Test masked reads."""

    def test_fill_value_is_masked(self, grid_file):
        """Exactly the fill cell is masked."""
        data = read_variable(grid_file, "t2m")

        assert data.shape == (2, 4, 5)
        assert data.mask[0, 1, 2]
        assert np.ma.count_masked(data) == 1
        assert data[1, 0, 0] == pytest.approx(280.0 + 20 * 0.5)

    def test_packed_variable_is_scaled(self, grid_file):
        """Packed integers are masked then scaled."""
        data = read_variable(grid_file, "tp")

        assert data.mask[1, 0, 0]
        assert np.ma.count_masked(data) == 1
        np.testing.assert_allclose(data.compressed(), 1.5)

    def test_raw_read(self, grid_file):
        """Without masking or scaling the stored integers come back."""
        data = read_variable(grid_file, "tp", mask_fill=False, apply_scale=False)

        assert np.ma.count_masked(data) == 0
        assert data[1, 0, 0] == -32767
        assert data[0, 0, 0] == 150

    def test_unknown_variable(self, grid_file):
        """Test that an unknown variable raises KeyError."""
        with pytest.raises(KeyError):
            read_variable(grid_file, "sst")

    def test_not_a_netcdf(self, tmp_path):
        """A text file posing as netCDF raises SourceReadError, not the backend's error."""
        path = tmp_path / "broken.nc"
        path.write_text("not a grid", encoding="utf-8")

        with pytest.raises(SourceReadError) as exc_info:
            read_variable(path, "t2m", engine="scipy")
        assert exc_info.value.__cause__ is not None


class TestReadAttribute:
    """Test attribute reads."""

    def test_global_attribute(self, grid_file):
        """variable=None reads global attributes."""
        assert read_attribute(grid_file, None, "title") == "Synthetic reanalysis"

    def test_variable_attribute(self, grid_file):
        """Test a variable attribute."""
        assert read_attribute(grid_file, "t2m", "units") == "K"

    def test_fill_value_attribute_is_scalar(self, grid_file):
        """Numeric attributes come back as Python scalars."""
        value = read_attribute(grid_file, "t2m", "_FillValue")
        assert value == -9999.0
        assert isinstance(value, float)

    def test_missing_attribute(self, grid_file):
        """Test that a missing attribute raises KeyError."""
        with pytest.raises(KeyError):
            read_attribute(grid_file, "t2m", "comment")
        with pytest.raises(KeyError):
            read_attribute(grid_file, "sst", "units")


class TestReadGrid:
    """Test decoded reads."""

    def test_decoded_grid(self, grid_file):
        """Fill values become NaN and coordinates are attached."""
        grid = read_grid(grid_file, "t2m")

        assert grid.dims == ("time", "lat", "lon")
        assert np.isnan(grid.values[0, 1, 2])
        assert int(np.isnan(grid.values).sum()) == 1
        np.testing.assert_allclose(grid["lat"].values, [50.0, 51.0, 52.0, 53.0])

    def test_unknown_variable(self, grid_file):
        """Test that an unknown variable raises KeyError."""
        with pytest.raises(KeyError):
            read_grid(grid_file, "lat_bnds")


class TestFillValueOf:
    """Test fill value lookup."""

    def test_prefers_fill_value(self):
        """_FillValue wins over missing_value."""
        assert fill_value_of({"_FillValue": -1, "missing_value": -2}) == -1

    def test_missing_value_and_none(self):
        """Test the fallback and the absent case."""
        assert fill_value_of({"missing_value": np.array([-2.0])}) == -2.0
        assert fill_value_of({"units": "K"}) is None
