"""
Pytest configuration and fixtures.
"""
import zipfile

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
import xarray as xr


def kml_driver_available() -> bool:
    """True when the installed GDAL can read KML."""
    try:
        import pyogrio
    except ImportError:
        return False
    drivers = pyogrio.list_drivers()
    return "KML" in drivers or "LIBKML" in drivers


requires_kml = pytest.mark.skipif(not kml_driver_available(), reason="GDAL KML driver not available")


ELECTION_CSV = "\n".join([
    "Bundestagswahl 2021;;;;;",
    "Endgültiges Ergebnis;;;;;",
    "Quelle: Die Bundeswahlleiterin;;;;;",
    "Stand: 15.10.2021;;;;;",
    "Gebiet;Gebiet;Erststimmen;Erststimmen;Zweitstimmen;Zweitstimmen",
    ";;Anzahl;Gültig;Anzahl;Gültig",
    "1;Flensburg – Schleswig;1.520;1.498;1.530;1.512",
    "2;Nordfriesland – Dithmarschen Nord;1.210;1.187;1.220;1.201",
    "3;Steinburg – Dithmarschen Süd;980;965;990;978",
    "99;Bund;46.854;46.362;46.854;46.442",
]) + "\n"


KML_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
<Document>
  <name>Test fields</name>
  <Folder>
    <name>fields</name>
    <Placemark>
      <name>west</name>
      <Polygon><outerBoundaryIs><LinearRing>
        <coordinates>0,0,0 1,0,0 1,1,0 0,1,0 0,0,0</coordinates>
      </LinearRing></outerBoundaryIs></Polygon>
    </Placemark>
    <Placemark>
      <name>east</name>
      <Polygon><outerBoundaryIs><LinearRing>
        <coordinates>2,0,0 3,0,0 3,1,0 2,1,0 2,0,0</coordinates>
      </LinearRing></outerBoundaryIs></Polygon>
    </Placemark>
  </Folder>
  <Folder>
    <name>markers</name>
    <Placemark>
      <name>well</name>
      <Point><coordinates>0.5,0.5,0</coordinates></Point>
    </Placemark>
  </Folder>
</Document>
</kml>
"""


@pytest.fixture(autouse=True)
def close_figures():
    """Close all figures after each test."""
    yield
    plt.close("all")


@pytest.fixture
def election_csv(tmp_path):
    """Semicolon-separated election results with four title lines and a two-row header."""
    path = tmp_path / "btw21_kerg.csv"
    path.write_text(ELECTION_CSV, encoding="utf-8")
    return path


@pytest.fixture
def disambiguated_csv(tmp_path):
    """CSV whose fifth row holds parser-disambiguated duplicate names."""
    path = tmp_path / "dupes.csv"
    path.write_text("title\nsource,x\n\"note, quoted\"\n---\nA,B_1,B_2\n1,2,3\n", encoding="utf-8")
    return path


@pytest.fixture
def grid_file(tmp_path):
    """
    Synthetic netCDF grid with a fill value and a packed variable.

    t2m: float64 (time, lat, lon) in K, _FillValue -9999 at [0, 1, 2]
    tp:  int16-packed (scale 0.01), _FillValue -32767 at [1, 0, 0]
    """
    lat = np.array([50.0, 51.0, 52.0, 53.0])
    lon = np.array([5.0, 6.0, 7.0, 8.0, 9.0])
    time = pd.date_range("2021-07-01", periods=2, freq="D")

    t2m = 280.0 + np.arange(2 * 4 * 5, dtype=np.float64).reshape(2, 4, 5) * 0.5
    t2m[0, 1, 2] = np.nan
    tp = np.full((2, 4, 5), 1.5)
    tp[1, 0, 0] = np.nan

    ds = xr.Dataset(
        {
            "t2m": (("time", "lat", "lon"), t2m, {"long_name": "2 metre temperature", "units": "K"}),
            "tp": (("time", "lat", "lon"), tp, {"standard_name": "precipitation_amount", "units": "mm"}),
        },
        coords={"time": time, "lat": lat, "lon": lon},
        attrs={"title": "Synthetic reanalysis", "Conventions": "CF-1.8"},
    )
    path = tmp_path / "reanalysis.nc"
    ds.to_netcdf(
        path,
        engine="scipy",
        encoding={
            "t2m": {"_FillValue": -9999.0},
            "tp": {"dtype": "int16", "scale_factor": 0.01, "_FillValue": -32767},
        },
    )
    return path


@pytest.fixture
def kml_file(tmp_path):
    """KML with two polygons in one folder and a point in another."""
    path = tmp_path / "fields.kml"
    path.write_text(KML_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def kmz_file(tmp_path):
    """KMZ archive holding doc.kml and an icon."""
    path = tmp_path / "fields.kmz"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("doc.kml", KML_DOCUMENT)
        zf.writestr("files/icon.png", b"\x89PNG\r\n\x1a\n")
    return path
