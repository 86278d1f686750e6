"""Shared fixtures and fake HTTP collaborators."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from web_reader_mcp.config import ReaderConfig

API_URL = "https://ai.example.test/v1/chat/completions"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeResponse:
    """Minimal stand-in for :class:`requests.Response`."""

    def __init__(
        self,
        status_code: int = 200,
        text: str = "",
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        reason: str = "",
        chunk_size: int = 16,
    ) -> None:
        self.status_code = status_code
        self.text = text
        self.content = content
        self.headers = CaseInsensitiveDict(headers or {})
        self.reason = reason
        self._json_body = json_body
        self._chunk_size = chunk_size
        self.chunks_read = 0
        self.closed = False

    def json(self) -> Any:
        if self._json_body is None:
            return json.loads(self.text)
        return self._json_body

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), self._chunk_size):
            self.chunks_read += 1
            yield self.content[start : start + self._chunk_size]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


Route = Union[FakeResponse, Exception]


class FakeSession:
    """Routes GET/POST calls by URL to canned responses or exceptions."""

    def __init__(
        self,
        get_routes: Optional[Dict[str, Route]] = None,
        post_routes: Optional[Dict[str, Route]] = None,
    ) -> None:
        self.get_routes = dict(get_routes or {})
        self.post_routes = dict(post_routes or {})
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def _dispatch(self, method: str, routes: Dict[str, Route], url: str, kwargs) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if url not in routes:
            raise requests.ConnectionError(f"no route for {url}")
        route = routes[url]
        if isinstance(route, Exception):
            raise route
        return route

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self._dispatch("GET", self.get_routes, url, kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._dispatch("POST", self.post_routes, url, kwargs)

    def close(self) -> None:
        pass

    def urls(self, method: str) -> List[str]:
        return [url for call_method, url, _ in self.calls if call_method == method]


def completion(content: str) -> FakeResponse:
    return FakeResponse(json_body={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def config() -> ReaderConfig:
    return ReaderConfig(api_key="test-key", api_url=API_URL)
