"""NewsSession: the explicitly owned state of one reader session."""

from __future__ import annotations

import functools
import logging
from typing import Any, Optional

import httpx

from .aggregator import AggregationResult, Aggregator
from .cache import ArticleCache
from .catalog import ALL_CATEGORY, FeedCatalog, load_catalog
from .config import AppConfig
from .coordinator import RequestCoordinator
from .fetch import BaseFetcher, create_client, create_fetcher
from .models import Article, RequestSelector, Settings
from .preferences import BOOKMARKS_KEY, READ_LATER_KEY, PreferenceStore
from .query import annotate, view

logger = logging.getLogger(__name__)

DEGRADED_NOTICE = "Failed to load some news feeds. Showing available articles."

# Settings whose change invalidates the visible list
_RELOAD_FIELDS = ("news_sources", "language", "content_language", "articles_per_page")


class NewsSession:
    """
    Settings, cache, user-state lists and the request coordinator of one
    session, plus the operations the presentation layer calls.

    Published state (read by the UI): ``articles``, ``is_loading``,
    ``error``, ``current_category``, ``search_query``, ``current_page``,
    ``settings``.

    Usage:
        async with NewsSession.from_config(load_config()) as session:
            await session.set_category("Technology")
            print(session.articles)
    """

    def __init__(
        self,
        *,
        catalog: FeedCatalog,
        fetcher: BaseFetcher,
        store: Optional[PreferenceStore] = None,
        cache: Optional[ArticleCache] = None,
        coordinator: Optional[RequestCoordinator] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.catalog = catalog
        self.aggregator = Aggregator(fetcher)
        self.store = store or PreferenceStore()
        self.cache = cache or ArticleCache()
        self.coordinator = coordinator or RequestCoordinator()
        self._client = client

        self.settings: Settings = self.store.load_settings()
        self._bookmarks: list[str] = self.store.load_ids(BOOKMARKS_KEY)
        self._read_later: list[str] = self.store.load_ids(READ_LATER_KEY)

        self.articles: list[Article] = []
        self.error: Optional[str] = None
        self.current_category = ALL_CATEGORY
        self.search_query = ""
        self.current_page = 1

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        store: Optional[PreferenceStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "NewsSession":
        """Build a session with its own HTTP client, catalog and preference file."""
        client = create_client(config, transport=transport)
        return cls(
            catalog=load_catalog(config.catalog_path),
            fetcher=create_fetcher(config, client),
            store=store or PreferenceStore(config.preferences_file),
            cache=ArticleCache(ttl=config.cache_ttl),
            client=client,
        )

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Arm the auto-refresh timer and load the first page."""
        self._configure_auto_refresh()
        await self.load()

    async def aclose(self) -> None:
        await self.coordinator.aclose()
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "NewsSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ─────────────────────────────────────────────────────────────
    # Published state
    # ─────────────────────────────────────────────────────────────

    @property
    def is_loading(self) -> bool:
        return self.coordinator.is_loading

    @property
    def bookmarks(self) -> frozenset[str]:
        return frozenset(self._bookmarks)

    @property
    def read_later(self) -> frozenset[str]:
        return frozenset(self._read_later)

    @property
    def needs_setup(self) -> bool:
        return not self.store.setup_completed

    def selector(self) -> RequestSelector:
        return RequestSelector(
            category=self.current_category,
            sources=tuple(self.settings.news_sources),
            language=self.settings.language,
            content_language=self.settings.content_language,
            search_query=self.search_query,
            page=self.current_page,
            page_size=self.settings.articles_per_page,
        )

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of the published state."""
        return {
            "articles": [a.model_dump(mode="json") for a in self.articles],
            "is_loading": self.is_loading,
            "error": self.error,
            "current_category": self.current_category,
            "search_query": self.search_query,
            "current_page": self.current_page,
            "settings": self.settings.model_dump(mode="json"),
        }

    # ─────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────

    async def load(self, *, append: bool = False, force: bool = False) -> bool:
        """
        Publish the page described by the current selector.

        Served from cache when a fresh entry exists (unless ``force``),
        otherwise aggregated. Any request still in flight is superseded.
        An append that misses the cache starts over at page 1 instead of
        mixing pages of two different aggregations.

        Returns:
            False if this load was itself superseded before publishing.
        """
        selector = self.selector()

        if not force:
            entry = self.cache.get(selector.cache_key)
            if entry is not None:
                self.coordinator.cancel_pending()
                self._publish(selector, entry.data, append=append, degraded=entry.degraded)
                return True

        if append and self.current_page > 1:
            # Fresh data: later pages would not line up with the published ones
            logger.info(f"Cache for {selector.cache_key} expired, restarting at page 1")
            self.current_page = 1
            selector = self.selector()
            append = False

        endpoints = self.catalog.resolve(selector.sources, selector.category)
        logger.info(f"Loading {selector.cache_key} from {len(endpoints)} feeds")
        return await self.coordinator.run(
            functools.partial(self.aggregator.aggregate, endpoints),
            commit=functools.partial(self._commit, selector, append),
            on_error=functools.partial(self._fail, append),
        )

    def _commit(self, selector: RequestSelector, append: bool, result: AggregationResult) -> None:
        if result.degraded:
            logger.warning(f"{len(result.failed)} feed(s) unavailable: {', '.join(result.failed)}")
        self.cache.put(selector.cache_key, result.articles, degraded=result.degraded)
        self._publish(selector, result.articles, append=append, degraded=result.degraded)

    def _fail(self, append: bool, exc: Exception) -> None:
        if not append:
            self.articles = []
        self.error = DEGRADED_NOTICE

    def _publish(self, selector: RequestSelector, data, *, append: bool, degraded: bool) -> None:
        page = view(
            data,
            selector.search_query,
            selector.page,
            selector.page_size,
            self.bookmarks,
            self.read_later,
        )
        self.articles = self.articles + page if append else page
        self.error = DEGRADED_NOTICE if degraded else None

    # ─────────────────────────────────────────────────────────────
    # Presentation operations
    # ─────────────────────────────────────────────────────────────

    async def set_category(self, category: str) -> None:
        self.current_category = category or ALL_CATEGORY
        self.current_page = 1
        await self.load()

    async def set_search_query(self, query: str) -> None:
        self.search_query = query or ""
        self.current_page = 1
        await self.load()

    async def set_page(self, page: int) -> None:
        if page < 1:
            raise ValueError(f"Page must be >= 1, got {page}")
        self.current_page = page
        await self.load()

    async def refresh(self) -> None:
        """Re-aggregate the current selection, bypassing the cache."""
        await self.load(force=True)

    async def load_more(self) -> None:
        """Append the next page to the published list."""
        self.current_page += 1
        await self.load(append=True)

    def dismiss_error(self) -> None:
        self.error = None

    def toggle_bookmark(self, article_id: str) -> bool:
        """Flip bookmark state; returns True if the article is now bookmarked."""
        added = _toggle(self._bookmarks, article_id)
        self.store.save_ids(BOOKMARKS_KEY, self._bookmarks)
        self._reannotate()
        return added

    def toggle_read_later(self, article_id: str) -> bool:
        """Flip read-later state; returns True if the article is now saved."""
        added = _toggle(self._read_later, article_id)
        self.store.save_ids(READ_LATER_KEY, self._read_later)
        self._reannotate()
        return added

    def bookmarked_articles(self) -> list[Article]:
        """Bookmarked articles available in the current selection, newest first."""
        return self._saved_articles(self.bookmarks)

    def read_later_articles(self) -> list[Article]:
        return self._saved_articles(self.read_later)

    def _saved_articles(self, ids: frozenset[str]) -> list[Article]:
        entry = self.cache.get(self.selector().cache_key)
        pool = entry.data if entry is not None else self.articles
        saved = [article for article in pool if article.id in ids]
        return annotate(saved, self.bookmarks, self.read_later)

    def _reannotate(self) -> None:
        self.articles = annotate(self.articles, self.bookmarks, self.read_later)

    # ─────────────────────────────────────────────────────────────
    # Settings
    # ─────────────────────────────────────────────────────────────

    async def save_settings(self, settings: Optional[Settings] = None, **changes) -> Settings:
        """
        Merge, validate and persist settings.

        Restarts or stops the refresh timer as needed and reloads when the
        source set, languages or page size changed.

        Raises:
            pydantic.ValidationError: invalid values (nothing is saved)
        """
        base = settings or self.settings
        merged = Settings(**{**base.model_dump(), **changes})

        previous = self.settings
        self.settings = merged
        self.store.save_settings(merged)
        self._configure_auto_refresh()

        if any(getattr(previous, name) != getattr(merged, name) for name in _RELOAD_FIELDS):
            self.current_page = 1
            await self.load()
        return merged

    async def complete_setup(self, settings: Settings) -> Settings:
        """Save the onboarding choices and remember that setup ran."""
        self.store.mark_setup_completed()
        return await self.save_settings(settings)

    async def toggle_source(self, source: str) -> list[str]:
        """Add or remove a source; the last remaining source cannot be removed."""
        sources = list(self.settings.news_sources)
        if source in sources:
            if len(sources) == 1:
                return sources
            sources.remove(source)
        else:
            if source not in self.catalog.sources():
                raise ValueError(f"Unknown news source: {source}")
            sources.append(source)
        await self.save_settings(news_sources=sources)
        return sources

    async def toggle_language(self) -> str:
        language = "np" if self.settings.language == "en" else "en"
        await self.save_settings(language=language)
        return language

    def _configure_auto_refresh(self) -> None:
        self.coordinator.configure_auto_refresh(
            self.settings.auto_refresh,
            self.settings.refresh_interval,
            self.refresh,
        )


def _toggle(ids: list[str], article_id: str) -> bool:
    if article_id in ids:
        ids.remove(article_id)
        return False
    ids.append(article_id)
    return True
