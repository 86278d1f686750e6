"""Data models used throughout the reader pipeline."""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlsplit

from .errors import InvalidInputError

_ALLOWED_SCHEMES = {"http", "https"}


@dataclass(frozen=True)
class ReadRequest:
    """Validated arguments for a single ``web_reader`` call."""

    url: str
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    retain_images: bool = False
    keep_image_data_url: bool = False
    with_images_summary: bool = False
    with_links_summary: bool = False

    @property
    def scan_images(self) -> bool:
        return self.retain_images or self.with_images_summary


@dataclass
class ImageReference:
    """Image element discovered in the page, optionally with inline data."""

    original_url: str
    alt_text: str = ""
    width: int = 0
    height: int = 0
    encoded_data: str = ""
    size_bytes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"original_url": self.original_url}
        if self.encoded_data:
            data["data_url"] = self.encoded_data
        if self.alt_text:
            data["alt"] = self.alt_text
        if self.width:
            data["width"] = self.width
        if self.height:
            data["height"] = self.height
        if self.size_bytes:
            data["size_bytes"] = self.size_bytes
        return data


@dataclass
class LinkReference:
    """Hyperlink discovered in the page."""

    url: str
    text: str = ""
    title: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.url}
        if self.text:
            data["text"] = self.text
        if self.title:
            data["title"] = self.title
        return data


def _utc_timestamp() -> str:
    return (
        dt.datetime.now(dt.timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


@dataclass
class ReadResult:
    """Successful outcome of reading a page."""

    markdown: str
    source_url: str
    processing_ms: float
    images: List[ImageReference] = field(default_factory=list)
    links: List[LinkReference] = field(default_factory=list)
    fetched_at: str = field(default_factory=_utc_timestamp)

    @property
    def word_count(self) -> int:
        return len(self.markdown.split())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "markdown": self.markdown,
            "metadata": {
                "source_url": self.source_url,
                "fetched_at": self.fetched_at,
                "processing_time_ms": round(self.processing_ms, 2),
                "word_count": self.word_count,
                "image_count": len(self.images),
                "link_count": len(self.links),
                "images": [image.to_dict() for image in self.images],
                "links": [link.to_dict() for link in self.links],
            },
        }


def _optional_bool(arguments: Mapping[str, Any], key: str) -> bool:
    value = arguments.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidInputError(f"invalid parameter {key}: expected a boolean")
    return value


def _validate_url(raw: str) -> str:
    url = raw.strip()
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidInputError(f"invalid URL format: {exc}") from exc
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.netloc:
        raise InvalidInputError(f"invalid URL format: {raw!r}")
    return url


def parse_read_request(arguments: Mapping[str, Any]) -> ReadRequest:
    """Coerce loosely-typed tool arguments into a :class:`ReadRequest`.

    Keys follow the tool's wire names (``maxTokens``, ``retain_images``,
    ``keep_img_data_url`` ...). ``None`` counts as absent.
    """
    raw_url = arguments.get("url")
    if not isinstance(raw_url, str) or not raw_url.strip():
        raise InvalidInputError("missing required parameter: url")
    url = _validate_url(raw_url)

    model = arguments.get("model")
    if model is not None:
        if not isinstance(model, str):
            raise InvalidInputError("invalid parameter model: expected a string")
        model = model.strip() or None

    max_tokens = arguments.get("maxTokens")
    if max_tokens is not None:
        if isinstance(max_tokens, bool) or not isinstance(max_tokens, (int, float)):
            raise InvalidInputError("invalid parameter maxTokens: expected an integer")
        if isinstance(max_tokens, float):
            if not max_tokens.is_integer():
                raise InvalidInputError("invalid parameter maxTokens: expected an integer")
            max_tokens = int(max_tokens)
        if max_tokens <= 0:
            raise InvalidInputError("invalid parameter maxTokens: must be positive")

    temperature = arguments.get("temperature")
    if temperature is not None:
        if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
            raise InvalidInputError("invalid parameter temperature: expected a number")
        temperature = float(temperature)
        if temperature < 0:
            raise InvalidInputError("invalid parameter temperature: must not be negative")
        if not math.isfinite(temperature):
            raise InvalidInputError("invalid parameter temperature: must be a finite number")

    return ReadRequest(
        url=url,
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        retain_images=_optional_bool(arguments, "retain_images"),
        keep_image_data_url=_optional_bool(arguments, "keep_img_data_url"),
        with_images_summary=_optional_bool(arguments, "with_images_summary"),
        with_links_summary=_optional_bool(arguments, "with_links_summary"),
    )
