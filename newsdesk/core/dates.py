"""Date parsing utilities for feed timestamps."""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

# Sort key for items whose publish date cannot be parsed
MIN_DATETIME = datetime.min.replace(tzinfo=timezone.utc)

# Formats seen from the rss2json backend and common feed generators
_PUB_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)


def parse_pub_date(value: Optional[str], default: datetime = MIN_DATETIME) -> datetime:
    """
    Parse a feed publish date into an aware UTC datetime.

    Accepts ISO 8601, RFC 822 (RSS pubDate) and the plain
    "YYYY-MM-DD HH:MM:SS" format the rss2json backend emits (UTC).
    Naive values are assumed to be UTC.

    Args:
        value: Raw date string from the feed
        default: Value returned when parsing fails

    Returns:
        Aware datetime, or default
    """
    if not value:
        return default

    text = value.strip()
    parsed: Optional[datetime] = None

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass

    if parsed is None:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError, OverflowError):
            parsed = None

    if parsed is None:
        for fmt in _PUB_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return default

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        # Offset pushes the instant outside the datetime range
        return default
