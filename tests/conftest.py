"""Shared helpers: a fake feed backend served through httpx.MockTransport."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from newsdesk.cache import ArticleCache
from newsdesk.catalog import FeedCatalog
from newsdesk.fetch import Rss2JsonFetcher
from newsdesk.preferences import PreferenceStore
from newsdesk.session import NewsSession

API_URL = "https://backend.test/v1/api.json"
API_KEY = "test-key"

WORLD = "https://intl.test/world.xml"
TECH = "https://intl.test/tech.xml"
SPORTS = "https://intl.test/sports.xml"
LOCAL_NEWS = "https://local.test/feed"
LOCAL_POLITICS = "https://local.test/politics/feed"

CATALOG = {
    "international": {
        "all": [WORLD, TECH, SPORTS],
        "World": WORLD,
        "Technology": TECH,
        "Sports": SPORTS,
    },
    "domestic": {
        "all": [LOCAL_NEWS, LOCAL_POLITICS],
        "World": LOCAL_NEWS,
        "Politics": LOCAL_POLITICS,
    },
}


def make_item(
    guid: Optional[str] = None,
    link: Optional[str] = None,
    title: str = "Untitled",
    description: str = "",
    pub_date: str = "2024-05-01 10:00:00",
    **extra,
) -> dict:
    """One item in the backend's JSON shape."""
    item = {
        "guid": guid,
        "link": link,
        "title": title,
        "description": description,
        "pubDate": pub_date,
        "thumbnail": "",
        "enclosure": {},
    }
    item.update(extra)
    return item


def make_payload(title: Optional[str], items: list[dict], status: str = "ok") -> dict:
    return {
        "status": status,
        "feed": {"title": title, "url": "https://example.test"} if title else {},
        "items": items,
    }


class FakeBackend:
    """
    Serves canned rss2json responses keyed by the ``rss_url`` parameter.

    A route may be a payload dict, an int status code, an exception
    instance (raised as a transport error), or a ``(asyncio.Event, route)``
    pair that blocks until the event is set.
    """

    def __init__(self, routes: Optional[dict] = None):
        self.routes: dict = dict(routes or {})
        self.requests: list[str] = []
        self.params: list[dict] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        feed_url = request.url.params.get("rss_url", "")
        self.requests.append(feed_url)
        self.params.append(dict(request.url.params))

        route = self.routes.get(feed_url, 404)
        if isinstance(route, tuple):
            gate, route = route
            await gate.wait()

        if isinstance(route, Exception):
            raise route
        if isinstance(route, int):
            return httpx.Response(route, json={"status": "error", "message": "nope"})
        return httpx.Response(200, json=route)

    def count(self, feed_url: str) -> int:
        return self.requests.count(feed_url)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_session(
    backend: FakeBackend,
    store: Optional[PreferenceStore] = None,
    clock: Optional[FakeClock] = None,
    ttl: float = 300,
) -> NewsSession:
    client = backend.client()
    return NewsSession(
        catalog=FeedCatalog(CATALOG),
        fetcher=Rss2JsonFetcher(client, API_URL, API_KEY),
        store=store or PreferenceStore(),
        cache=ArticleCache(ttl=ttl, clock=clock or FakeClock()),
        client=client,
    )


def default_routes() -> dict:
    return {
        WORLD: make_payload("World News", [
            make_item(guid="w1", link="https://intl.test/w1", title="Summit opens", pub_date="2024-05-01 09:00:00"),
            make_item(guid="w2", link="https://intl.test/w2", title="Election results", pub_date="2024-05-01 12:00:00"),
        ]),
        TECH: make_payload("Tech Daily", [
            make_item(guid="t1", link="https://intl.test/t1", title="New chip released",
                      description="Faster Python runtimes", pub_date="2024-05-01 11:00:00"),
        ]),
        SPORTS: make_payload("Sports Wire", [
            make_item(guid="s1", link="https://intl.test/s1", title="Cup final tonight", pub_date="2024-05-01 08:00:00"),
        ]),
        LOCAL_NEWS: make_payload("Local Desk", [
            make_item(guid="l1", link="https://local.test/l1", title="Road reopened", pub_date="2024-05-01 10:30:00"),
        ]),
        LOCAL_POLITICS: make_payload("Local Politics", [
            make_item(guid="p1", link="https://local.test/p1", title="Budget passes", pub_date="2024-05-01 07:00:00"),
        ]),
    }


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(default_routes())


def run(coro):
    """Drive a coroutine to completion from a plain test function."""
    return asyncio.run(coro)
