"""Fetcher for the rss2json feed-normalization backend."""

import httpx

from ..models import FeedPayload, FeedResult
from .base import BaseFetcher


class Rss2JsonFetcher(BaseFetcher):
    """
    Query the backend with the feed URL as a parameter.

    Expected body::

        {"status": "ok", "feed": {"title": ...}, "items": [...]}

    Any other status is treated as a failed feed.
    """

    name = "rss2json"

    def __init__(self, client: httpx.AsyncClient, api_base_url: str, api_key: str = ""):
        super().__init__(client)
        self.api_base_url = api_base_url
        self.api_key = api_key

    async def request(self, endpoint: str) -> httpx.Response:
        params = {"rss_url": endpoint}
        if self.api_key:
            params["api_key"] = self.api_key
        return await self.client.get(self.api_base_url, params=params)

    def parse_response(self, endpoint: str, resp: httpx.Response) -> FeedResult:
        payload = FeedPayload.model_validate(resp.json())
        if payload.status != "ok":
            raise ValueError(f"backend status {payload.status!r}")
        return FeedResult(
            endpoint=endpoint,
            ok=True,
            title=payload.feed.title,
            items=payload.items,
        )
