"""Command-line entry point for the web reader."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Iterable, Optional, Sequence

from .config import ReaderConfig, apply_tls_policy
from .crawler import read_url
from .errors import ConfigurationError, WebReaderError
from .markdown import compose_metadata
from .mcp_server import TRANSPORTS, create_server
from .models import parse_read_request

logger = logging.getLogger("web_reader_mcp.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("read", *argv)


def _add_read_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="URL of the page to read")
    parser.add_argument(
        "--model",
        default=None,
        help="Text-generation model identifier (default: AI_MODEL or the built-in default)",
    )
    parser.add_argument(
        "--max-tokens",
        type=int,
        default=None,
        help="Maximum number of tokens to generate for the Markdown",
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=None,
        help="Sampling temperature for the conversion model",
    )
    parser.add_argument(
        "--retain-images",
        action="store_true",
        help="Extract images and keep them in the Markdown",
    )
    parser.add_argument(
        "--keep-img-data-url",
        action="store_true",
        help="Download images and inline them as base64 data URLs",
    )
    parser.add_argument(
        "--with-images-summary",
        action="store_true",
        help="Include image metadata in the output",
    )
    parser.add_argument(
        "--with-links-summary",
        action="store_true",
        help="Extract and include link metadata",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the result as JSON instead of Markdown",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_serve_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default="stdio",
        help="MCP transport to serve on (default: stdio)",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for HTTP transports")
    parser.add_argument("--port", type=int, default=8000, help="Port for HTTP transports")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch web pages and convert them to Markdown with image and link metadata.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    read_parser = subparsers.add_parser("read", help="Read a single URL and print Markdown")
    _add_read_arguments(read_parser)

    serve_parser = subparsers.add_parser("serve", help="Run the web_reader MCP server")
    _add_serve_arguments(serve_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _run_read(args: argparse.Namespace, config: ReaderConfig) -> int:
    _configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    arguments = {
        "url": args.url,
        "model": args.model,
        "maxTokens": args.max_tokens,
        "temperature": args.temperature,
        "retain_images": args.retain_images,
        "keep_img_data_url": args.keep_img_data_url,
        "with_images_summary": args.with_images_summary,
        "with_links_summary": args.with_links_summary,
    }
    try:
        request = parse_read_request(arguments)
        result = read_url(request, config)
    except WebReaderError as exc:
        if args.json:
            sys.stdout.write(json.dumps({"error": str(exc)}) + "\n")
        else:
            sys.stderr.write(f"error: {exc}\n")
        return 1

    if args.json:
        sys.stdout.write(json.dumps(result.to_dict(), ensure_ascii=False, indent=2) + "\n")
    else:
        markdown = result.markdown
        sys.stdout.write(markdown if markdown.endswith("\n") else markdown + "\n")
        if args.with_images_summary or args.with_links_summary:
            sys.stdout.write(compose_metadata(result))
    sys.stdout.flush()
    return 0


def _run_serve(args: argparse.Namespace, config: ReaderConfig) -> int:
    level = logging.DEBUG if args.verbose else logging.INFO
    if args.transport == "stdio" and not args.verbose:
        level = logging.ERROR
    _configure_logging(level)
    logger.info("Starting %s server (host=%s, port=%d)", args.transport, args.host, args.port)
    create_server(config, host=args.host, port=args.port).run(transport=args.transport)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        config = ReaderConfig.from_env()
    except ConfigurationError as exc:
        sys.stderr.write(f"error: {exc}\n")
        raise SystemExit(1) from exc
    apply_tls_policy(config)

    if args.command == "read":
        status = _run_read(args, config)
    else:
        status = _run_serve(args, config)
    if status:
        raise SystemExit(status)


if __name__ == "__main__":
    main()
