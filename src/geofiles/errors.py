"""
Exceptions raised by the geofiles steps.

Every error is fatal to the pipeline that raised it; nothing here is retried.
"""
from __future__ import annotations

from typing import Optional, Sequence


class GeofilesError(Exception):
    """Base class for all geofiles errors."""


class SourceReadError(GeofilesError):
    """Source file missing, unreadable, or a row offset past its end."""


class LengthMismatchError(GeofilesError, ValueError):
    """Two sequences that must align positionally differ in length."""

    def __init__(self, expected: int, actual: int, what: str = "sequence"):
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what} length mismatch: expected {expected}, got {actual}")


class FetchError(GeofilesError):
    """Remote retrieval failed (network failure or non-2xx response)."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        self.message = message
        code = status_code if status_code is not None else "no response"
        super().__init__(f"fetching {url} failed ({code}): {message}")


class NoMatchError(GeofilesError, ValueError):
    """No pattern template matched the input text."""

    def __init__(self, text: str, templates: Sequence[str] = ()):
        self.text = text
        self.templates = list(templates)
        super().__init__(f"no template matched {text!r} (tried: {', '.join(self.templates)})")


class DuplicateHeaderError(GeofilesError, ValueError):
    """Column labels are not unique where unique labels are required."""

    def __init__(self, duplicates: Sequence[str]):
        self.duplicates = list(duplicates)
        super().__init__(f"duplicate column labels: {self.duplicates}")
