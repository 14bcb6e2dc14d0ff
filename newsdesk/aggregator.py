"""Concurrent fan-out over feed endpoints, merged into one article list."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from pydantic import ValidationError

from .core import derive_article_id
from .fetch import BaseFetcher
from .models import UNKNOWN_SOURCE, Article, FeedResult, RawItem

__all__ = ["AggregationResult", "Aggregator", "normalize_item", "merge_results"]

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    """Merged articles (newest first) plus the endpoints that soft-failed."""
    articles: list[Article] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.failed)


class Aggregator:
    """Fetch every endpoint concurrently and merge the results."""

    def __init__(self, fetcher: BaseFetcher):
        self.fetcher = fetcher

    async def aggregate(self, endpoints: Sequence[str]) -> AggregationResult:
        """
        Fetch all endpoints and merge them.

        Waits for every fetch to settle; individual feed failures only shrink
        the result. If the calling task is cancelled, every outstanding fetch
        is cancelled too and CancelledError propagates (no partial result).

        Args:
            endpoints: Feed URLs, in catalog order

        Returns:
            AggregationResult
        """
        if not endpoints:
            return AggregationResult()

        results = await asyncio.gather(*(self.fetcher.fetch(url) for url in endpoints))

        aggregation = merge_results(results)
        logger.info(
            f"Aggregated {len(aggregation.articles)} articles from "
            f"{len(endpoints) - len(aggregation.failed)}/{len(endpoints)} feeds"
        )
        return aggregation


def merge_results(results: Sequence[FeedResult]) -> AggregationResult:
    """
    Normalize and merge fetched feeds.

    Articles sharing an ID collapse to one: the last one fetched (endpoint
    order, then item order) wins, keeping the first one's slot. The merged
    list is then stable-sorted newest first.
    """
    merged: dict[str, Article] = {}
    failed: list[str] = []

    for result in results:
        if not result.ok:
            failed.append(result.endpoint)
            continue
        source = result.title or UNKNOWN_SOURCE
        for item in result.items:
            article = normalize_item(item, source)
            if article is None:
                continue
            if article.id in merged:
                logger.debug(f"Duplicate article id {article.id!r}, keeping the later one")
            merged[article.id] = article

    articles = sorted(merged.values(), key=lambda a: a.published_at, reverse=True)
    return AggregationResult(articles=articles, failed=failed)


def normalize_item(item: RawItem, source: str) -> Optional[Article]:
    """Turn a raw feed item into an Article, or None if it has no identity."""
    article_id = derive_article_id(item)
    if article_id is None:
        logger.debug(f"Skipping item without guid or link: {item.title[:60]!r}")
        return None

    thumbnail = item.thumbnail or (item.enclosure.link if item.enclosure else None) or None
    try:
        return Article(
            id=article_id,
            title=item.title,
            description=item.description,
            link=item.link or "",
            pub_date=item.pub_date or "",
            source=source,
            thumbnail=thumbnail,
            content=item.content,
        )
    except ValidationError as e:
        logger.debug(f"Skipping invalid item {article_id!r}: {e}")
        return None
