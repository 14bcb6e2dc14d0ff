"""Feed fetchers - one per backend."""

import httpx

from ..config import AppConfig
from .base import BaseFetcher
from .direct import DirectFeedFetcher
from .rss2json import Rss2JsonFetcher

__all__ = ["BaseFetcher", "DirectFeedFetcher", "Rss2JsonFetcher", "create_client", "create_fetcher"]


def create_client(config: AppConfig, **kwargs) -> httpx.AsyncClient:
    """Shared HTTP client; the timeout bounds every single feed fetch."""
    return httpx.AsyncClient(
        headers={"User-Agent": config.user_agent},
        timeout=config.fetch_timeout,
        **kwargs,
    )


def create_fetcher(config: AppConfig, client: httpx.AsyncClient) -> BaseFetcher:
    """Pick the fetcher for the configured backend."""
    if config.backend == "rss2json":
        return Rss2JsonFetcher(client, config.api_base_url, config.api_key)
    if config.backend == "direct":
        return DirectFeedFetcher(client)
    raise ValueError(f"Unknown feed backend: {config.backend}")
