"""Exception hierarchy for the web reader pipeline."""

from __future__ import annotations

from typing import Optional


class WebReaderError(Exception):
    """Base exception for web reader failures."""


class ConfigurationError(WebReaderError):
    """Raised when required process configuration is missing."""


class InvalidInputError(WebReaderError):
    """Raised when tool arguments cannot be turned into a read request."""


class FetchError(WebReaderError):
    """Raised when the origin page cannot be retrieved."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConversionError(WebReaderError):
    """Raised when the text-generation service does not yield Markdown."""


class AssetDownloadError(WebReaderError):
    """Raised for a single image that could not be downloaded.

    Never aborts a read; the image keeps its metadata and loses its data URI.
    """


class OversizedAssetError(AssetDownloadError):
    """Raised when an image exceeds the configured byte ceiling."""

    def __init__(self, url: str, size: int, limit: int) -> None:
        super().__init__(f"image too large: {size} bytes (limit {limit}) for {url}")
        self.url = url
        self.size = size
        self.limit = limit
