"""Data models for NewsDesk."""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from .core import parse_pub_date

WORDS_PER_MINUTE = 200

_TAG_RE = re.compile(r"<[^>]+>")

UNKNOWN_SOURCE = "Unknown Source"


# ─────────────────────────────────────────────────────────────
# Upstream payloads
# ─────────────────────────────────────────────────────────────

class Enclosure(BaseModel):
    """Media enclosure attached to a feed item."""
    link: Optional[str] = None
    type: Optional[str] = None

    class Config:
        extra = "ignore"


class RawItem(BaseModel):
    """One item as returned by the feed backend, before normalization."""

    guid: Optional[str] = None
    link: Optional[str] = None
    title: str = ""
    description: str = ""
    content: Optional[str] = None
    pub_date: Optional[str] = Field(default=None, alias="pubDate")
    thumbnail: Optional[str] = None
    enclosure: Optional[Enclosure] = None

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("title", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("enclosure", mode="before")
    @classmethod
    def _empty_enclosure(cls, value):
        # rss2json sends [] or {} when there is no enclosure
        if not value or not isinstance(value, dict):
            return None
        return value


class FeedInfo(BaseModel):
    title: Optional[str] = None
    link: Optional[str] = None

    class Config:
        extra = "ignore"


class FeedPayload(BaseModel):
    """Response body of the feed-normalization backend."""

    status: str = ""
    feed: FeedInfo = Field(default_factory=FeedInfo)
    items: list[RawItem] = []

    class Config:
        extra = "ignore"

    @field_validator("feed", mode="before")
    @classmethod
    def _empty_feed(cls, value):
        if not value or not isinstance(value, dict):
            return {}
        return value


@dataclass
class FeedResult:
    """Outcome of fetching one feed endpoint.

    A soft failure is ``ok=False`` with no items.
    """
    endpoint: str
    ok: bool
    title: Optional[str] = None
    items: list[RawItem] = field(default_factory=list)

    @classmethod
    def failure(cls, endpoint: str) -> "FeedResult":
        return cls(endpoint=endpoint, ok=False)


# ─────────────────────────────────────────────────────────────
# Articles
# ─────────────────────────────────────────────────────────────

class Article(BaseModel):
    """
    A normalized feed entry.

    ``is_bookmarked`` / ``is_read_later`` are read-time annotations; cached
    articles always carry the defaults.
    """

    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    link: str = ""
    pub_date: str = ""
    source: str = UNKNOWN_SOURCE
    thumbnail: Optional[str] = None
    content: Optional[str] = None

    is_bookmarked: bool = False
    is_read_later: bool = False

    class Config:
        frozen = True

    @computed_field
    @property
    def published_at(self) -> datetime:
        """Parsed publish date; unparseable dates sort as the oldest."""
        return parse_pub_date(self.pub_date)

    @computed_field
    @property
    def reading_time(self) -> int:
        """Estimated reading time in minutes."""
        text = _TAG_RE.sub(" ", self.content or self.description or "")
        words = len(text.split())
        return max(1, math.ceil(words / WORDS_PER_MINUTE))


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────

Language = Literal["en", "np"]
Theme = Literal["light", "dark", "system"]


class Settings(BaseModel):
    """User-facing preferences, persisted as one JSON blob."""

    news_sources: list[str] = Field(default_factory=lambda: ["international"], min_length=1)
    articles_per_page: int = Field(default=12, ge=1, le=100)
    language: Language = "en"
    content_language: Language = "en"
    notifications: bool = True
    auto_refresh: bool = False
    refresh_interval: float = Field(default=300.0, gt=0, description="Seconds between auto refreshes")
    show_reading_time: bool = True
    enable_social_share: bool = True
    show_thumbnails: bool = True
    has_seen_welcome: bool = True
    theme: Theme = "system"

    class Config:
        extra = "ignore"


class RequestState(str, Enum):
    """Lifecycle of the current aggregation request."""
    IDLE = "idle"
    LOADING = "loading"
    SETTLED = "settled"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RequestSelector:
    """Everything that determines one visible page of articles."""
    category: str
    sources: tuple[str, ...]
    language: str
    content_language: str
    search_query: str = ""
    page: int = 1
    page_size: int = 12

    @property
    def cache_key(self) -> str:
        """Only category, source set and languages select the cached data."""
        sources = ",".join(sorted(self.sources))
        return f"{self.category}-{sources}-{self.language}-{self.content_language}"
