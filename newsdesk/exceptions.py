"""Exceptions raised by NewsDesk.

Per-feed failures are never raised; the fetcher reduces them to an empty
``FeedResult``. Superseded work surfaces as ``asyncio.CancelledError``.
"""


class NewsDeskError(Exception):
    """Base class for NewsDesk errors."""


class ConfigError(NewsDeskError):
    """Invalid or unreadable configuration (app config or feed catalog)."""
