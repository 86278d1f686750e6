"""Image downloading and data URI encoding utilities."""

from __future__ import annotations

import base64
import logging
from typing import Dict, List, Optional, Tuple

import requests
from filetype import guess

from .config import ReaderConfig
from .errors import AssetDownloadError, OversizedAssetError
from .models import ImageReference

logger = logging.getLogger("web_reader_mcp")

CHUNK_SIZE = 64 * 1024
FALLBACK_MIME_TYPE = "application/octet-stream"


def detect_mime_type(content_type: Optional[str], data: bytes) -> str:
    """Prefer the declared Content-Type; sniff the file signature otherwise."""
    if content_type:
        declared = content_type.split(";")[0].strip().lower()
        if declared:
            return declared
    kind = guess(data)
    if kind:
        return kind.mime
    return FALLBACK_MIME_TYPE


def encode_data_uri(mime_type: str, data: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _declared_length(headers) -> Optional[int]:
    value = headers.get("Content-Length")
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def download_image(
    url: str,
    config: ReaderConfig,
    session: Optional[requests.Session] = None,
) -> Tuple[str, int]:
    """Fetch one image and return ``(data_uri, size_bytes)``.

    Raises :class:`OversizedAssetError` when the declared Content-Length or
    the bytes actually read exceed ``config.max_image_bytes``; partial data
    is dropped. Any other failure raises :class:`AssetDownloadError`.
    """
    client = session or requests.Session()
    limit = config.max_image_bytes
    try:
        with client.get(
            url,
            timeout=config.image_timeout,
            verify=config.verify_tls,
            stream=True,
        ) as resp:
            if resp.status_code != 200:
                raise AssetDownloadError(f"HTTP {resp.status_code} for {url}")

            declared = _declared_length(resp.headers)
            if declared is not None and declared > limit:
                raise OversizedAssetError(url, declared, limit)

            buffer = bytearray()
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                buffer.extend(chunk)
                if len(buffer) > limit:
                    raise OversizedAssetError(url, len(buffer), limit)
            content_type = resp.headers.get("Content-Type")
    except requests.RequestException as exc:
        raise AssetDownloadError(f"failed to fetch image {url}: {exc}") from exc
    finally:
        if session is None:
            client.close()

    data = bytes(buffer)
    mime_type = detect_mime_type(content_type, data)
    return encode_data_uri(mime_type, data), len(data)


def download_images(
    images: List[ImageReference],
    config: ReaderConfig,
    session: Optional[requests.Session] = None,
) -> List[ImageReference]:
    """Populate ``encoded_data``/``size_bytes`` in place for each image.

    A failed download leaves that image as metadata only; nothing is raised.
    Repeated URLs are fetched once.
    """
    if not images:
        return images

    client = session or requests.Session()
    downloaded: Dict[str, Tuple[str, int]] = {}
    failed = set()
    try:
        for image in images:
            url = image.original_url
            if url in downloaded:
                image.encoded_data, image.size_bytes = downloaded[url]
                continue
            if url in failed:
                continue
            try:
                encoded, size = download_image(url, config, session=client)
            except AssetDownloadError as exc:
                logger.warning("Skipping image %s: %s", url, exc)
                failed.add(url)
                continue
            downloaded[url] = (encoded, size)
            image.encoded_data, image.size_bytes = encoded, size
    finally:
        if session is None:
            client.close()

    logger.debug("Encoded %d of %d image(s)", len(downloaded), len(images))
    return images
