"""Base fetcher class."""

import asyncio
import logging
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError

from ..models import FeedResult

logger = logging.getLogger(__name__)


class BaseFetcher(ABC):
    """
    Fetch one feed endpoint and turn the response into a FeedResult.

    Failures other than cancellation never escape ``fetch``: non-2xx
    responses, transport errors, timeouts and malformed bodies all become a
    soft failure (``ok=False``, no items) so one bad feed cannot abort an
    aggregation. No retries.
    """

    name: str = "base"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch(self, endpoint: str) -> FeedResult:
        try:
            resp = await self.request(endpoint)
            if not resp.is_success:
                logger.warning(f"[{self.name}] HTTP {resp.status_code} for {endpoint}")
                return FeedResult.failure(endpoint)
            return self.parse_response(endpoint, resp)
        except asyncio.CancelledError:
            logger.debug(f"[{self.name}] Fetch cancelled: {endpoint}")
            raise
        except httpx.HTTPError as e:
            logger.warning(f"[{self.name}] Fetch error for {endpoint}: {e!r}")
            return FeedResult.failure(endpoint)
        except (ValueError, ValidationError) as e:
            logger.warning(f"[{self.name}] Malformed feed response for {endpoint}: {e}")
            return FeedResult.failure(endpoint)

    @abstractmethod
    async def request(self, endpoint: str) -> httpx.Response:
        """Issue the HTTP request for one feed."""

    @abstractmethod
    def parse_response(self, endpoint: str, resp: httpx.Response) -> FeedResult:
        """
        Parse a 2xx response.

        Raise ValueError (or a pydantic ValidationError) for a malformed body;
        ``fetch`` turns it into a soft failure.
        """
