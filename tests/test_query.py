"""Search filtering, pagination and annotation."""

from newsdesk.models import Article
from newsdesk.query import annotate, count_pages, filter_articles, paginate, view


def create_test_articles() -> list[Article]:
    return [
        Article(id="1", title="Python 3.13 released", description="Faster interpreter"),
        Article(id="2", title="Election night", description="Results from every PROVINCE"),
        Article(id="3", title="Cup final", description="A python-themed mascot appears"),
        Article(id="4", title="काठमाडौं समाचार", description="स्थानीय खबर"),
        Article(id="5", title="Weather", description="Sunny"),
    ]


class TestView:
    """Full projection"""

    def test_empty_query_is_identity_window(self):
        """No query, empty sets: the plain window with both flags false"""
        articles = create_test_articles()
        page = view(articles, "", 1, 3, set(), set())
        assert page == articles[:3]
        assert all(not a.is_bookmarked and not a.is_read_later for a in page)

    def test_second_page(self):
        articles = create_test_articles()
        assert [a.id for a in view(articles, "", 2, 3)] == ["4", "5"]

    def test_page_beyond_range_is_empty(self):
        assert view(create_test_articles(), "", 3, 3) == []
        assert view(create_test_articles(), "python", 2, 12) == []

    def test_query_then_window(self):
        page = view(create_test_articles(), "PYTHON", 1, 1)
        assert [a.id for a in page] == ["1"]
        page = view(create_test_articles(), "PYTHON", 2, 1)
        assert [a.id for a in page] == ["3"]

    def test_annotations(self):
        page = view(create_test_articles(), "", 1, 5, bookmarked={"2"}, read_later={"2", "5"})
        flags = {a.id: (a.is_bookmarked, a.is_read_later) for a in page}
        assert flags["2"] == (True, True)
        assert flags["5"] == (False, True)
        assert flags["1"] == (False, False)

    def test_input_not_mutated(self):
        articles = create_test_articles()
        view(articles, "", 1, 5, bookmarked={"1"}, read_later={"1"})
        assert not articles[0].is_bookmarked
        assert not articles[0].is_read_later


class TestFilter:
    """Case-insensitive substring search"""

    def test_matches_title_or_description(self):
        ids = [a.id for a in filter_articles(create_test_articles(), "python")]
        assert ids == ["1", "3"]

    def test_every_result_contains_query(self):
        for query in ["python", "ELECTION", "province", "e", "सम"]:
            for article in filter_articles(create_test_articles(), query):
                haystack = (article.title + " " + article.description).casefold()
                assert query.casefold() in haystack

    def test_idempotent(self):
        once = filter_articles(create_test_articles(), "e")
        twice = filter_articles(once, "e")
        assert once == twice

    def test_non_latin_substring(self):
        assert [a.id for a in filter_articles(create_test_articles(), "खबर")] == ["4"]

    def test_no_match(self):
        assert filter_articles(create_test_articles(), "zebra") == []

    def test_empty_query_keeps_everything(self):
        assert len(filter_articles(create_test_articles(), "")) == 5


class TestPaginate:

    def test_invalid_page_or_size_is_empty(self):
        articles = create_test_articles()
        assert paginate(articles, 0, 3) == []
        assert paginate(articles, -1, 3) == []
        assert paginate(articles, 1, 0) == []

    def test_partial_last_page(self):
        assert [a.id for a in paginate(create_test_articles(), 3, 2)] == ["5"]

    def test_count_pages(self):
        assert count_pages(0, 12) == 0
        assert count_pages(12, 12) == 1
        assert count_pages(13, 12) == 2
        assert count_pages(5, 0) == 0


class TestAnnotate:

    def test_returns_copies(self):
        articles = create_test_articles()
        marked = annotate(articles, {"1"}, set())
        assert marked[0].is_bookmarked
        assert marked[0] is not articles[0]
        assert marked[0].id == articles[0].id
