"""
Download remote files to explicit local paths.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

import requests

from .constants import DEFAULT_TIMEOUT, DOWNLOAD_CHUNK_SIZE
from .errors import FetchError, SourceReadError

logger = logging.getLogger(__name__)


def is_url(source: Union[str, Path]) -> bool:
    """Return True for http(s) URLs."""
    return isinstance(source, str) and urlparse(source).scheme in ("http", "https")


def filename_from_url(url: str) -> str:
    """
    Derive a local file name from the last path segment of a URL.

    Raises
    ------
    ValueError
        If the URL path has no file name
    """
    name = Path(unquote(urlparse(url).path)).name
    if not name:
        raise ValueError(f"Cannot derive a file name from URL '{url}'")
    return name


def fetch(
    url: str,
    destination: Union[str, Path],
    timeout: float = DEFAULT_TIMEOUT,
    chunk_size: int = DOWNLOAD_CHUNK_SIZE,
) -> Path:
    """
    Download ``url`` and write its bytes verbatim to ``destination``.

    Parameters
    ----------
    url : str
        Remote file location
    destination : str or Path
        Local file path; parent directories are created
    timeout : float, optional
        Connect/read timeout in seconds
    chunk_size : int, optional
        Streaming chunk size in bytes

    Returns
    -------
    Path
        The destination path

    Raises
    ------
    FetchError
        On connection failure, timeout or a non-2xx response. A partially
        written destination file is removed.
    """
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            if resp.status_code // 100 != 2:
                raise FetchError(url, resp.reason or "unexpected status", status_code=resp.status_code)
            with open(destination, "wb") as f:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        destination.unlink(missing_ok=True)
        raise FetchError(url, str(e)) from e

    logger.info(f"Fetched {url} -> {destination} ({destination.stat().st_size / 1024:.1f} KB)")
    return destination


def fetch_to_dir(
    url: str,
    directory: Union[str, Path],
    filename: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Path:
    """Download ``url`` into ``directory``, naming the file after the URL unless ``filename`` is given."""
    return fetch(url, Path(directory) / (filename or filename_from_url(url)), timeout=timeout)


def resolve_source(source: Union[str, Path], workdir: Union[str, Path]) -> Path:
    """
    Turn a post's input into a local path.

    URLs are downloaded into ``workdir``; local paths are returned unchanged
    after an existence check.

    Raises
    ------
    SourceReadError
        If a local path does not exist
    FetchError
        If downloading a URL fails
    """
    if is_url(source):
        return fetch_to_dir(str(source), workdir)

    path = Path(source)
    if not path.exists():
        raise SourceReadError(f"Source file not found: {path}")
    return path
