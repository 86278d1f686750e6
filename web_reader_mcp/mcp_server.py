"""MCP server exposing the ``web_reader`` tool."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated, Any, List, Mapping, Optional

import requests
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import TextContent
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import ReaderConfig, apply_tls_policy
from .crawler import read_url
from .errors import ConfigurationError, ConversionError, FetchError, InvalidInputError
from .markdown import ChatMarkdownGenerator, compose_tool_content
from .models import parse_read_request

logger = logging.getLogger("web_reader_mcp.mcp")

SERVER_NAME = "web-reader-mcp"
TOOL_NAME = "web_reader"
TOOL_DESCRIPTION = (
    "Fetch web content and convert it to clean Markdown format. "
    "Optionally extract images and links with metadata."
)
TRANSPORTS = ("stdio", "sse", "streamable-http")


def handle_web_reader(
    arguments: Mapping[str, Any],
    config: ReaderConfig,
    session: Optional[requests.Session] = None,
    generator: Optional[ChatMarkdownGenerator] = None,
) -> List[TextContent]:
    """Validate raw tool arguments, run the pipeline and format the reply."""
    try:
        request = parse_read_request(arguments)
    except InvalidInputError as exc:
        raise ToolError(str(exc)) from exc

    try:
        result = read_url(request, config, session=session, generator=generator)
    except FetchError as exc:
        logger.error("Fetch failed for %s: %s", request.url, exc)
        raise ToolError(f"Failed to fetch web content: {exc}") from exc
    except ConversionError as exc:
        logger.error("Conversion failed for %s: %s", request.url, exc)
        raise ToolError(f"Failed to convert content: {exc}") from exc

    return [TextContent(type="text", text=block) for block in compose_tool_content(result)]


def create_server(
    config: ReaderConfig,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> FastMCP:
    """Build a FastMCP server bound to ``config``."""
    mcp = FastMCP(name=SERVER_NAME, host=host, port=port)

    @mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION, structured_output=False)
    async def web_reader(
        url: Annotated[str, Field(description="The URL to fetch content from")],
        model: Annotated[
            Optional[str],
            Field(description="AI model to use for conversion (default: deepseek-ai/DeepSeek-V3)"),
        ] = None,
        maxTokens: Annotated[  # noqa: N803 - wire name
            Optional[int],
            Field(description="Maximum tokens in response (default: 4000)"),
        ] = None,
        temperature: Annotated[
            Optional[float],
            Field(description="AI temperature 0-1 (default: 0.7)"),
        ] = None,
        retain_images: Annotated[
            bool, Field(description="Extract images from content")
        ] = False,
        keep_img_data_url: Annotated[
            bool, Field(description="Download and convert images to base64 data URLs")
        ] = False,
        with_images_summary: Annotated[
            bool, Field(description="Include image metadata in response")
        ] = False,
        with_links_summary: Annotated[
            bool, Field(description="Extract and include link metadata")
        ] = False,
    ) -> List[TextContent]:
        arguments = {
            "url": url,
            "model": model,
            "maxTokens": maxTokens,
            "temperature": temperature,
            "retain_images": retain_images,
            "keep_img_data_url": keep_img_data_url,
            "with_images_summary": with_images_summary,
            "with_links_summary": with_links_summary,
        }
        logger.info("Tool call: %s", TOOL_NAME)
        return await asyncio.to_thread(handle_web_reader, arguments, config)

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return mcp


def main() -> None:
    """Entry point for running the MCP server over stdio."""
    logging.basicConfig(level=logging.ERROR)
    try:
        config = ReaderConfig.from_env()
    except ConfigurationError as exc:
        raise SystemExit(str(exc)) from exc
    apply_tls_policy(config)
    create_server(config).run()


if __name__ == "__main__":
    main()
