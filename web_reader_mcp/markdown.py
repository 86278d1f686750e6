"""Markdown generation helpers backed by a remote chat-completions service."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from .config import ReaderConfig
from .errors import ConversionError
from .models import ImageReference, LinkReference, ReadResult
from .utils import strip_query_and_fragment, truncate_text

logger = logging.getLogger("web_reader_mcp")

SYSTEM_PROMPT = (
    "You are a web content extractor. Your task is to convert HTML content to clean, "
    "well-formatted Markdown. Extract only the main content, removing ads, navigation, "
    "scripts, and other non-essential elements. Preserve the structure with proper "
    "Markdown headings, lists, links, and formatting. Keep all image references in "
    "Markdown format: ![alt text](image_url). Keep all links in Markdown format: "
    "[link text](url). Return ONLY the Markdown content without any explanations or "
    "additional text."
)
USER_PROMPT_PREFIX = "Please convert the following HTML content to Markdown:\n\n"

SUMMARY_LIMIT = 10
LINK_TEXT_LIMIT = 50


class ChatMarkdownGenerator:
    """Thin client for the text-generation service that writes the Markdown."""

    def __init__(
        self,
        config: ReaderConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self._session = session

    def build_payload(
        self,
        html: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Render the two-message request body for ``html``."""
        return {
            "temperature": self.config.temperature if temperature is None else temperature,
            "top_k": 0,
            "top_p": 0,
            "frequency_penalty": 0,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT_PREFIX + html},
            ],
            "model": model or self.config.model_id,
            "maxTokens": max_tokens or self.config.max_tokens,
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

    def generate_body(
        self,
        html: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Convert raw HTML into Markdown; raises :class:`ConversionError`."""
        payload = self.build_payload(html, model, max_tokens, temperature)
        logger.debug(
            "Requesting Markdown from %s (model=%s, maxTokens=%s)",
            self.config.api_url,
            payload["model"],
            payload["maxTokens"],
        )
        session = self._session or requests.Session()
        try:
            resp = session.post(
                self.config.api_url,
                json=payload,
                headers=self._headers(),
                timeout=self.config.conversion_timeout,
            )
        except requests.RequestException as exc:
            raise ConversionError(f"failed to call AI API: {exc}") from exc
        finally:
            if self._session is None:
                session.close()

        try:
            body = resp.json()
        except ValueError as exc:
            raise ConversionError(
                f"failed to parse response (HTTP {resp.status_code}): {exc}"
            ) from exc
        return extract_completion(body)


def extract_completion(body: Any) -> str:
    """Pull the trimmed completion text out of a chat-completions response."""
    if not isinstance(body, dict):
        raise ConversionError("failed to parse response: unexpected JSON shape")
    error = body.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else str(error)
        raise ConversionError(f"AI API error: {message}")

    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ConversionError("no response from AI API")

    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message")
    if not isinstance(message, dict):
        message = {}
    content = (message.get("content") or "").strip()
    if not content:
        raise ConversionError("empty response from AI API")
    return content


def replace_image_links(markdown: str, images: Sequence[ImageReference]) -> str:
    """Swap remote image URLs for their inline data URIs.

    Each URL is replaced as extracted and again without its query string and
    fragment, since the model may have dropped them when echoing the link.
    """
    updated = markdown
    for image in images:
        if not image.encoded_data:
            continue
        updated = updated.replace(image.original_url, image.encoded_data)
        updated = updated.replace(
            strip_query_and_fragment(image.original_url), image.encoded_data
        )
    return updated


def _image_line(index: int, image: ImageReference) -> str:
    line = f"{index}. {image.original_url}"
    if image.alt_text:
        line += f" (Alt: {image.alt_text})"
    if image.width > 0 and image.height > 0:
        line += f" [{image.width}x{image.height}]"
    return line


def _link_line(index: int, link: LinkReference) -> str:
    line = f"{index}. {link.url}"
    if link.text:
        line += f" - {truncate_text(link.text, LINK_TEXT_LIMIT)}"
    return line


def _capped_section(title: str, lines: List[str]) -> str:
    section = f"\n**{title}:**\n"
    for line in lines[:SUMMARY_LIMIT]:
        section += line + "\n"
    if len(lines) > SUMMARY_LIMIT:
        section += f"... and {len(lines) - SUMMARY_LIMIT} more\n"
    return section


def compose_metadata(result: ReadResult) -> str:
    """Render the human-readable metadata block appended to the Markdown."""
    text = "\n\n---\n**Metadata:**\n"
    text += f"- Source: {result.source_url}\n"
    text += f"- Processing time: {result.processing_ms:.2f}ms\n"
    text += f"- Word count: {result.word_count}\n"
    text += f"- Images found: {len(result.images)}\n"
    text += f"- Links found: {len(result.links)}\n"

    if result.images:
        text += _capped_section(
            "Images",
            [_image_line(idx, image) for idx, image in enumerate(result.images, start=1)],
        )
    if result.links:
        text += _capped_section(
            "Links",
            [_link_line(idx, link) for idx, link in enumerate(result.links, start=1)],
        )
    return text


def compose_tool_content(result: ReadResult) -> List[str]:
    """Return the text blocks sent back to the tool caller."""
    return [
        f"# Web Content from {result.source_url}\n\n",
        result.markdown,
        compose_metadata(result),
    ]
