"""Configuration objects and constants for the web reader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.gitcode.com/api/v5/chat/completions"
DEFAULT_MODEL_ID = "deepseek-ai/DeepSeek-V3"
DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7

FETCH_TIMEOUT = 30.0
IMAGE_TIMEOUT = 15.0
CONVERSION_TIMEOUT = 60.0
MAX_IMAGE_BYTES = 5 * 1024 * 1024

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ReaderConfig:
    """Process-wide settings for fetching pages and generating Markdown."""

    api_key: str
    api_url: str = DEFAULT_API_URL
    model_id: str = DEFAULT_MODEL_ID
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    fetch_timeout: float = FETCH_TIMEOUT
    image_timeout: float = IMAGE_TIMEOUT
    conversion_timeout: float = CONVERSION_TIMEOUT
    max_image_bytes: int = MAX_IMAGE_BYTES
    # Origin and image fetches skip certificate checks unless enabled.
    verify_tls: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReaderConfig":
        """Build a config from ``AI_API_KEY`` and friends."""
        env = os.environ if environ is None else environ
        api_key = (env.get("AI_API_KEY") or "").strip()
        if not api_key:
            raise ConfigurationError("AI_API_KEY environment variable is not set")
        return cls(
            api_key=api_key,
            api_url=env.get("AI_API_URL") or DEFAULT_API_URL,
            model_id=env.get("AI_MODEL") or DEFAULT_MODEL_ID,
            verify_tls=(env.get("WEB_READER_VERIFY_TLS") or "").strip().lower() in _TRUTHY,
        )


def apply_tls_policy(config: ReaderConfig) -> None:
    """Silence urllib3's per-request warning once when TLS checks are off."""
    if not config.verify_tls:
        urllib3.disable_warnings(InsecureRequestWarning)
