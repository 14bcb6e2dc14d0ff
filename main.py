"""NewsDesk - print one page of aggregated news from the command line."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from typing import Optional

from newsdesk.config import load_config, setup_logging
from newsdesk.models import Article
from newsdesk.session import NewsSession


# ─────────────────────────────────────────────────────────────
# Output formatting
# ─────────────────────────────────────────────────────────────

def print_header(category: str, sources: list[str]):
    """Print run header."""
    now = datetime.now().strftime("%Y-%m-%d %H:%M")
    print()
    print("=" * 62)
    print("                    NewsDesk - Headlines                      ")
    print(f"                     {now}                       ")
    print("=" * 62)
    print(f"  Category: {category}   Sources: {', '.join(sources)}")
    print()


def print_table(headers: list[str], rows: list[list], indent: int = 1):
    """Print a simple table."""
    prefix = "|  " * indent
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    header_line = "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    print(f"{prefix}{header_line}")
    print(f"{prefix}{'-' * len(header_line)}")

    for row in rows:
        row_line = "  ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row))
        print(f"{prefix}{row_line}")


def article_row(index: int, article: Article, show_reading_time: bool) -> list:
    title = article.title[:60] + "..." if len(article.title) > 60 else article.title
    marks = ("*" if article.is_bookmarked else "") + ("+" if article.is_read_later else "")
    published = article.published_at.strftime("%Y-%m-%d %H:%M") if article.pub_date else "-"
    row = [index, marks, title, article.source[:24], published]
    if show_reading_time:
        row.append(f"{article.reading_time} min")
    return row


# ─────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────

def parse_args(argv: Optional[list[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="NewsDesk - aggregated RSS headlines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                  # All categories, saved sources
  python main.py --category Technology --page 2   # Second page of tech news
  python main.py --search election --sources international,domestic
        """
    )

    parser.add_argument(
        "--category",
        type=str,
        default="all",
        help="Category to show (default: all)"
    )

    parser.add_argument(
        "--search",
        type=str,
        default="",
        help="Only show articles whose title or description contains this text"
    )

    parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page number, 1-based (default: 1)"
    )

    parser.add_argument(
        "--sources",
        type=str,
        default=None,
        help="Comma-separated source ids (default: saved settings)"
    )

    parser.add_argument(
        "--backend",
        choices=["rss2json", "direct"],
        default=None,
        help="Feed backend (default: from config)"
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Config file (default: config/settings.yaml)"
    )

    return parser.parse_args(argv)


async def run(args) -> int:
    """Load and print one page. Returns the number of articles shown."""
    config = load_config(args.config)
    if args.backend:
        config = config.model_copy(update={"backend": args.backend})

    log_file = setup_logging(config.log_dir)
    logger = logging.getLogger(__name__)
    logger.info("NewsDesk CLI started")

    session = NewsSession.from_config(config)
    try:
        if args.sources:
            sources = [s.strip() for s in args.sources.split(",") if s.strip()]
            # Session-only override, not persisted
            session.settings = session.settings.model_copy(update={"news_sources": sources})

        print_header(args.category, session.settings.news_sources)

        session.current_category = args.category
        session.search_query = args.search
        session.current_page = max(1, args.page)
        await session.load()

        rows = [
            article_row(i, article, session.settings.show_reading_time)
            for i, article in enumerate(session.articles, 1)
        ]
        headers = ["#", "", "Title", "Source", "Published"]
        if session.settings.show_reading_time:
            headers.append("Read")

        if rows:
            print_table(headers, rows)
        else:
            print("|  No articles on this page.")
        print()

        if session.error:
            print(f"[!] {session.error}")
        print(f"[OK] {len(rows)} articles (page {session.current_page}, log: {log_file})")
        return len(rows)
    finally:
        await session.aclose()


def main(argv: Optional[list[str]] = None):
    args = parse_args(argv)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
