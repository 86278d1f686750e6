"""HTML scanning helpers for image and link references.

Extraction is pattern based, not DOM based: tags are located with regular
expressions over the raw HTML text. Malformed or nested markup may be missed
or mis-read, and attribute values are taken as written (no entity decoding).
Excluded link schemes are matched case-sensitively at the start of ``href``,
so ``JavaScript:`` or a space-led ``mailto:`` is kept as a link.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional
from urllib.parse import urljoin, urlsplit

import requests

from .config import ReaderConfig
from .images import download_images
from .models import ImageReference, LinkReference

logger = logging.getLogger("web_reader_mcp")

IMG_TAG_PATTERN = re.compile(r"<img[^>]+>")
SRC_PATTERN = re.compile(r"""src=["']([^"']+)["']""")
ALT_PATTERN = re.compile(r"""alt=["']([^"']*)["']""")
WIDTH_PATTERN = re.compile(r"""width=["'](\d+)["']""")
HEIGHT_PATTERN = re.compile(r"""height=["'](\d+)["']""")

ANCHOR_PATTERN = re.compile(r"<a[^>]+>(.*?)</a>")
HREF_PATTERN = re.compile(r"""href=["']([^"']+)["']""")
TITLE_PATTERN = re.compile(r"""title=["']([^"']*)["']""")
MARKUP_PATTERN = re.compile(r"<[^>]+>")

EXCLUDED_LINK_PREFIXES = ("javascript:", "mailto:", "tel:", "#")


def resolve_url(base_url: str, reference: str) -> Optional[str]:
    """Resolve ``reference`` against ``base_url``; ``None`` when it cannot be parsed."""
    try:
        urlsplit(reference)
        return urljoin(base_url, reference)
    except ValueError:
        return None


def _int_attribute(pattern: re.Pattern, tag: str) -> int:
    match = pattern.search(tag)
    return int(match.group(1)) if match else 0


def scan_images(html: str, base_url: str) -> List[ImageReference]:
    """Return image references in document order, with absolute URLs."""
    images: List[ImageReference] = []
    for tag in IMG_TAG_PATTERN.findall(html):
        src_match = SRC_PATTERN.search(tag)
        if not src_match:
            continue
        src = src_match.group(1)
        if not src or src.startswith("data:"):
            continue
        absolute_url = resolve_url(base_url, src)
        if absolute_url is None:
            continue
        alt_match = ALT_PATTERN.search(tag)
        images.append(
            ImageReference(
                original_url=absolute_url,
                alt_text=alt_match.group(1) if alt_match else "",
                width=_int_attribute(WIDTH_PATTERN, tag),
                height=_int_attribute(HEIGHT_PATTERN, tag),
            )
        )
    return images


def extract_images(
    html: str,
    base_url: str,
    config: ReaderConfig,
    download: bool = False,
    session: Optional[requests.Session] = None,
) -> List[ImageReference]:
    """Scan the page for images and optionally inline their bytes as data URIs."""
    images = scan_images(html, base_url)
    logger.debug("Found %d image reference(s)", len(images))
    if download and images:
        download_images(images, config, session=session)
    return images


def _link_text(inner_html: str) -> str:
    return MARKUP_PATTERN.sub("", inner_html.strip()).strip()


def extract_links(html: str, base_url: str) -> List[LinkReference]:
    """Return unique hyperlinks in order of first appearance."""
    links: List[LinkReference] = []
    seen = set()
    for match in ANCHOR_PATTERN.finditer(html):
        anchor = match.group(0)
        href_match = HREF_PATTERN.search(anchor)
        if not href_match:
            continue
        href = href_match.group(1)
        if href.startswith(EXCLUDED_LINK_PREFIXES):
            continue
        absolute_url = resolve_url(base_url, href)
        if absolute_url is None or absolute_url in seen:
            continue
        seen.add(absolute_url)
        title_match = TITLE_PATTERN.search(anchor)
        links.append(
            LinkReference(
                url=absolute_url,
                text=_link_text(match.group(1)),
                title=title_match.group(1) if title_match else "",
            )
        )
    logger.debug("Found %d unique link(s)", len(links))
    return links
