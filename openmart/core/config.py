"""Configuration helpers for the OpenMart client."""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional

from dotenv import load_dotenv

from openmart.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openmart.ai"


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    max_retries: int = 0
    page_size: int = 50
    max_results: int = 1000


@dataclass(frozen=True)
class ClientConfig:
    """Snapshot of everything a single request needs; swapped whole, never mutated."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    headers: Dict[str, str] = field(default_factory=dict)


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    api_key = os.getenv("OPENMART_API_KEY", "")
    base_url = (os.getenv("OPENMART_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
    timeout = _env_number("OPENMART_TIMEOUT", "30", float)
    max_retries = _env_number("OPENMART_MAX_RETRIES", "0", int)
    page_size = _env_number("OPENMART_PAGE_SIZE", "50", int)
    max_results = _env_number("OPENMART_MAX_RESULTS", "1000", int)

    if not api_key:
        logger.warning("OPENMART_API_KEY is not configured; pass api_key explicitly to the client.")

    return Settings(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        max_retries=max_retries,
        page_size=page_size,
        max_results=max_results,
    )


def build_client_config(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
    settings: Optional[Settings] = None,
) -> ClientConfig:
    """Merge explicit client arguments over the environment settings."""
    settings = settings or get_settings()
    api_key = api_key or settings.api_key
    if not api_key:
        raise ConfigError("An API key is required (api_key argument or OPENMART_API_KEY).")
    return ClientConfig(
        api_key=api_key,
        base_url=(base_url or settings.base_url).rstrip("/"),
        timeout=timeout if timeout is not None else settings.timeout,
        headers=dict(headers or {}),
    )
