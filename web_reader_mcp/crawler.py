"""High-level orchestration for fetching pages and producing Markdown."""

from __future__ import annotations

import logging
import time
from typing import Optional

import requests

from .config import ReaderConfig
from .content import extract_images, extract_links
from .errors import FetchError
from .markdown import ChatMarkdownGenerator, replace_image_links
from .models import ReadRequest, ReadResult

logger = logging.getLogger("web_reader_mcp")

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,zh-CN;q=0.8,zh;q=0.7",
}


def fetch_html(
    url: str,
    config: ReaderConfig,
    session: Optional[requests.Session] = None,
) -> str:
    """Retrieve the page body with a single GET; raises :class:`FetchError`."""
    client = session or requests.Session()
    try:
        logger.info("Fetching URL: %s", url)
        resp = client.get(
            url,
            headers=BROWSER_HEADERS,
            timeout=config.fetch_timeout,
            verify=config.verify_tls,
        )
    except requests.Timeout as exc:
        raise FetchError(f"timed out fetching {url}: {exc}") from exc
    except requests.RequestException as exc:
        raise FetchError(f"failed to fetch URL: {exc}") from exc
    finally:
        if session is None:
            client.close()

    if resp.status_code != 200:
        message = f"HTTP {resp.status_code}"
        if resp.reason:
            message += f": {resp.reason}"
        raise FetchError(message, status_code=resp.status_code)
    return resp.text


def read_url(
    request: ReadRequest,
    config: ReaderConfig,
    session: Optional[requests.Session] = None,
    generator: Optional[ChatMarkdownGenerator] = None,
) -> ReadResult:
    """Run the full pipeline for one request.

    fetch -> extract (and download) assets -> convert -> rewrite -> assemble.
    Fetch and conversion failures propagate; image failures do not.
    """
    start = time.perf_counter()

    html = fetch_html(request.url, config, session=session)

    images = []
    if request.scan_images:
        logger.info("Extracting images...")
        images = extract_images(
            html,
            request.url,
            config,
            download=request.keep_image_data_url,
            session=session,
        )

    links = []
    if request.with_links_summary:
        logger.info("Extracting links...")
        links = extract_links(html, request.url)

    logger.info("Converting to Markdown...")
    generator = generator or ChatMarkdownGenerator(config, session=session)
    markdown = generator.generate_body(
        html,
        model=request.model,
        max_tokens=request.max_tokens,
        temperature=request.temperature,
    )

    markdown = replace_image_links(markdown, images if request.retain_images else [])

    elapsed_ms = (time.perf_counter() - start) * 1000.0
    logger.info(
        "Read %s in %.2fms (%d image(s), %d link(s))",
        request.url,
        elapsed_ms,
        len(images),
        len(links),
    )
    return ReadResult(
        markdown=markdown,
        source_url=request.url,
        processing_ms=elapsed_ms,
        images=images,
        links=links,
    )
