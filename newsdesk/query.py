"""Search filtering, pagination and user-state annotation over article lists."""

import math
from typing import AbstractSet, Sequence

from .models import Article


def filter_articles(articles: Sequence[Article], query: str) -> list[Article]:
    """Keep articles whose title or description contains query (case-insensitive)."""
    if not query:
        return list(articles)
    needle = query.casefold()
    return [
        article for article in articles
        if needle in article.title.casefold() or needle in article.description.casefold()
    ]


def paginate(articles: Sequence[Article], page: int, page_size: int) -> list[Article]:
    """Window ``[(page-1)*page_size, page*page_size)``; invalid or out-of-range pages are empty."""
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(articles[start:start + page_size])


def annotate(
    articles: Sequence[Article],
    bookmarked: AbstractSet[str],
    read_later: AbstractSet[str],
) -> list[Article]:
    """Return copies carrying the current bookmark/read-later flags."""
    return [
        article.model_copy(update={
            "is_bookmarked": article.id in bookmarked,
            "is_read_later": article.id in read_later,
        })
        for article in articles
    ]


def count_pages(total: int, page_size: int) -> int:
    if page_size < 1:
        return 0
    return math.ceil(total / page_size)


def view(
    articles: Sequence[Article],
    query: str,
    page: int,
    page_size: int,
    bookmarked: AbstractSet[str] = frozenset(),
    read_later: AbstractSet[str] = frozenset(),
) -> list[Article]:
    """
    Project one visible page out of a cached or fresh article list.

    Args:
        articles: Unfiltered articles, newest first
        query: Search text; empty means no filtering
        page: 1-based page number
        page_size: Articles per page
        bookmarked: IDs of bookmarked articles
        read_later: IDs of read-later articles

    Returns:
        Annotated copies; the input sequence and its articles are untouched
    """
    window = paginate(filter_articles(articles, query), page, page_size)
    return annotate(window, bookmarked, read_later)
