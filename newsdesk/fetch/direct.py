"""Fetch feeds directly and parse them locally with feedparser."""

import logging
from typing import Optional

import feedparser
import httpx

from ..models import Enclosure, FeedResult, RawItem
from .base import BaseFetcher

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")


class DirectFeedFetcher(BaseFetcher):
    """Download the RSS/Atom document itself, no normalization backend."""

    name = "direct"

    async def request(self, endpoint: str) -> httpx.Response:
        return await self.client.get(endpoint, follow_redirects=True)

    def parse_response(self, endpoint: str, resp: httpx.Response) -> FeedResult:
        feed = feedparser.parse(resp.content)
        if feed.bozo and not feed.entries:
            raise ValueError(f"unparseable feed: {feed.get('bozo_exception')}")

        items = [self.entry_to_item(entry) for entry in feed.entries]
        return FeedResult(
            endpoint=endpoint,
            ok=True,
            title=feed.feed.get("title"),
            items=items,
        )

    def entry_to_item(self, entry: dict) -> RawItem:
        """Map a feedparser entry onto the backend's item shape."""
        enclosure = self._extract_enclosure(entry)
        return RawItem(
            guid=entry.get("id"),
            link=entry.get("link"),
            title=entry.get("title", ""),
            description=entry.get("summary", entry.get("description", "")),
            content=self._extract_content(entry),
            pub_date=entry.get("published") or entry.get("updated"),
            thumbnail=self._extract_thumbnail(entry),
            enclosure=enclosure,
        )

    def _extract_content(self, entry: dict) -> Optional[str]:
        content_list = entry.get("content")
        if isinstance(content_list, list) and content_list:
            return content_list[0].get("value") or None
        return None

    def _extract_thumbnail(self, entry: dict) -> Optional[str]:
        """
        Find a preview image for an entry.

        Checked in order:
        - media_thumbnail: [{"url": "..."}]
        - media_content: [{"url": "...", "type": "image/..."}]
        """
        for thumb in entry.get("media_thumbnail", []):
            url = thumb.get("url", "")
            if url:
                return url

        for media in entry.get("media_content", []):
            url = media.get("url", "")
            media_type = media.get("type", "")
            if url and ("image" in media_type or _looks_like_image(url)):
                return url

        return None

    def _extract_enclosure(self, entry: dict) -> Optional[Enclosure]:
        for enc in entry.get("enclosures", []):
            url = enc.get("href", enc.get("url", ""))
            enc_type = enc.get("type", "")
            if url and ("image" in enc_type or _looks_like_image(url)):
                return Enclosure(link=url, type=enc_type or None)
        return None


def _looks_like_image(url: str) -> bool:
    lower = url.lower()
    return any(ext in lower for ext in IMAGE_EXTENSIONS)
