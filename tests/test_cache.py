"""TTL article cache."""

from conftest import FakeClock
from newsdesk.cache import DEFAULT_TTL, ArticleCache
from newsdesk.models import Article, RequestSelector


def _articles(*ids):
    return [Article(id=i, title=f"Article {i}") for i in ids]


class TestArticleCache:
    """get/put semantics"""

    def test_round_trip_within_ttl(self):
        clock = FakeClock()
        cache = ArticleCache(clock=clock)
        data = _articles("a", "b")
        cache.put("k", data)
        clock.advance(DEFAULT_TTL - 1)

        entry = cache.get("k")
        assert entry is not None
        assert list(entry.data) == data

    def test_expires_at_ttl(self):
        """Hit only while now - timestamp < ttl (strict)"""
        clock = FakeClock()
        cache = ArticleCache(ttl=300, clock=clock)
        cache.put("k", _articles("a"))
        clock.advance(299)
        assert cache.get("k") is not None
        clock.advance(1)
        assert cache.get("k") is None
        assert "k" not in cache

    def test_put_overwrites_with_fresh_timestamp(self):
        clock = FakeClock()
        cache = ArticleCache(ttl=300, clock=clock)
        cache.put("k", _articles("old"))
        clock.advance(250)
        cache.put("k", _articles("new"))
        clock.advance(250)

        entry = cache.get("k")
        assert [a.id for a in entry.data] == ["new"]

    def test_miss(self):
        assert ArticleCache().get("missing") is None

    def test_stale_entries_are_kept_until_overwritten(self):
        clock = FakeClock()
        cache = ArticleCache(ttl=10, clock=clock)
        cache.put("k", _articles("a"))
        clock.advance(60)
        assert cache.get("k") is None
        assert len(cache) == 1

    def test_degraded_flag(self):
        cache = ArticleCache(clock=FakeClock())
        cache.put("k", [], degraded=True)
        assert cache.get("k").degraded

    def test_stored_data_is_immutable_snapshot(self):
        cache = ArticleCache(clock=FakeClock())
        data = _articles("a")
        cache.put("k", data)
        data.append(Article(id="b"))
        assert len(cache.get("k").data) == 1

    def test_invalidate(self):
        cache = ArticleCache(clock=FakeClock())
        cache.put("a", [])
        cache.put("b", [])
        cache.invalidate("a")
        assert "a" not in cache and "b" in cache
        cache.invalidate()
        assert len(cache) == 0


class TestCacheKey:
    """RequestSelector.cache_key"""

    def test_key_format(self):
        selector = RequestSelector("Technology", ("international", "domestic"), "en", "np")
        assert selector.cache_key == "Technology-domestic,international-en-np"

    def test_source_order_does_not_matter(self):
        a = RequestSelector("all", ("international", "domestic"), "en", "en")
        b = RequestSelector("all", ("domestic", "international"), "en", "en")
        assert a.cache_key == b.cache_key

    def test_view_fields_not_in_key(self):
        a = RequestSelector("all", ("international",), "en", "en", search_query="x", page=3, page_size=5)
        b = RequestSelector("all", ("international",), "en", "en")
        assert a.cache_key == b.cache_key
