"""
Unit tests for geofiles.fetch module.

HTTP is mocked; no test touches the network.
"""
from unittest.mock import MagicMock, patch

import pytest
import requests

from geofiles.errors import FetchError, SourceReadError
from geofiles.fetch import fetch, fetch_to_dir, filename_from_url, is_url, resolve_source


def _response(status_code=200, chunks=(), reason="OK"):
    """Mock streaming response usable as a context manager."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    resp.iter_content.return_value = iter(chunks)
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


class TestUrlHelpers:
    """Test URL helpers."""

    @pytest.mark.parametrize("source, expected", [
        ("https://example.org/data/grid.nc", True),
        ("http://example.org/a.kmz", True),
        ("data/grid.nc", False),
        ("ftp://example.org/grid.nc", False),
    ])
    def test_is_url(self, source, expected):
        assert is_url(source) is expected

    def test_filename_from_url(self):
        """The last path segment is used, query strings are ignored."""
        assert filename_from_url("https://example.org/btw/kerg%202021.csv?raw=1") == "kerg 2021.csv"

    def test_filename_from_url_without_name(self):
        """Test that a URL ending in a slash raises ValueError."""
        with pytest.raises(ValueError):
            filename_from_url("https://example.org/")


class TestFetch:
    """Test fetch."""

    @patch("geofiles.fetch.requests.get")
    def test_writes_bytes_verbatim(self, mock_get, tmp_path):
        """Chunks are written in order to the destination."""
        mock_get.return_value = _response(chunks=[b"PK\x03\x04", b"", b"rest"])
        destination = tmp_path / "sub" / "fields.kmz"

        result = fetch("https://example.org/fields.kmz", destination, timeout=5)

        assert result == destination
        assert destination.read_bytes() == b"PK\x03\x04rest"
        mock_get.assert_called_once()
        assert mock_get.call_args.kwargs["stream"] is True
        assert mock_get.call_args.kwargs["timeout"] == 5

    @patch("geofiles.fetch.requests.get")
    def test_http_error_status(self, mock_get, tmp_path):
        """Non-2xx responses raise FetchError and leave no file."""
        mock_get.return_value = _response(status_code=404, reason="Not Found")
        destination = tmp_path / "missing.csv"

        with pytest.raises(FetchError) as exc_info:
            fetch("https://example.org/missing.csv", destination)

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == "https://example.org/missing.csv"
        assert not destination.exists()

    @patch("geofiles.fetch.requests.get")
    def test_connection_error(self, mock_get, tmp_path):
        """Transport failures raise FetchError without a status code."""
        mock_get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(FetchError) as exc_info:
            fetch("https://example.org/grid.nc", tmp_path / "grid.nc")

        assert exc_info.value.status_code is None

    @patch("geofiles.fetch.requests.get")
    def test_interrupted_download_removes_partial_file(self, mock_get, tmp_path):
        """A failure while streaming removes what was written."""
        def chunks():
            yield b"partial"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

        resp = _response()
        resp.iter_content.return_value = chunks()
        mock_get.return_value = resp
        destination = tmp_path / "grid.nc"

        with pytest.raises(FetchError):
            fetch("https://example.org/grid.nc", destination)

        assert not destination.exists()

    @patch("geofiles.fetch.requests.get")
    def test_fetch_to_dir(self, mock_get, tmp_path):
        """The file is named after the URL."""
        mock_get.return_value = _response(chunks=[b"data"])

        path = fetch_to_dir("https://example.org/files/grid.nc", tmp_path)

        assert path == tmp_path / "grid.nc"


class TestResolveSource:
    """Test resolve_source."""

    def test_local_path(self, election_csv, tmp_path):
        """Local files are used in place."""
        assert resolve_source(election_csv, tmp_path / "work") == election_csv

    def test_missing_local_path(self, tmp_path):
        """Test that a missing local file raises SourceReadError."""
        with pytest.raises(SourceReadError):
            resolve_source(tmp_path / "missing.csv", tmp_path)

    @patch("geofiles.fetch.requests.get")
    def test_url_is_downloaded(self, mock_get, tmp_path):
        """URLs are fetched into the work directory."""
        mock_get.return_value = _response(chunks=[b"a;b\n"])

        path = resolve_source("https://example.org/kerg.csv", tmp_path / "work")

        assert path == tmp_path / "work" / "kerg.csv"
        assert path.read_bytes() == b"a;b\n"
