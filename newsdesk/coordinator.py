"""Last-request-wins coordination of aggregations, plus the auto-refresh timer."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .models import RequestState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestCoordinator:
    """
    Owns the single "current request" of a session.

    Every ``run`` gets a new generation number and cancels the in-flight
    task of the previous generation. Only the current generation may call
    ``commit``/``on_error``; stale completions are dropped, so a superseded
    aggregation never touches cache, articles or error state.

    State: IDLE -> LOADING -> SETTLED -> IDLE, or LOADING -> CANCELLED.
    """

    def __init__(self):
        self.generation = 0
        self.state = RequestState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._refresh_config: Optional[tuple[bool, float]] = None

    @property
    def is_loading(self) -> bool:
        return self.state == RequestState.LOADING

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def cancel_pending(self) -> int:
        """Supersede the in-flight request without starting a new one."""
        self.generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            logger.debug(f"Cancelling request generation {self.generation - 1}")
            task.cancel()
            self.state = RequestState.CANCELLED
        elif self.state == RequestState.LOADING:
            self.state = RequestState.CANCELLED
        return self.generation

    async def run(
        self,
        work: Callable[[], Awaitable[T]],
        commit: Callable[[T], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> bool:
        """
        Run ``work`` as the new current request.

        Args:
            work: Coroutine factory doing the aggregation
            commit: Called with the result, only if still current
            on_error: Called with an unexpected exception, only if still current

        Returns:
            True if this request settled and was committed, False if it was
            superseded (or failed without an on_error handler).
        """
        generation = self.cancel_pending()
        task = asyncio.ensure_future(work())
        self._task = task
        self.state = RequestState.LOADING

        try:
            result = await task
        except asyncio.CancelledError:
            if not self.is_current(generation):
                logger.debug(f"Request generation {generation} superseded")
                return False
            # The caller itself was cancelled
            self._task = None
            self.state = RequestState.CANCELLED
            raise
        except Exception as e:
            if not self.is_current(generation):
                return False
            logger.exception(f"Request generation {generation} failed: {e}")
            if on_error is None:
                self._task = None
                self.state = RequestState.IDLE
                return False
            self._settle(on_error, e)
            return True

        if not self.is_current(generation):
            logger.debug(f"Discarding stale result of generation {generation}")
            return False

        self._settle(commit, result)
        return True

    def _settle(self, publish: Callable, value) -> None:
        # No await between the generation check and publishing
        self._task = None
        self.state = RequestState.SETTLED
        try:
            publish(value)
        finally:
            self.state = RequestState.IDLE

    # ─────────────────────────────────────────────────────────────
    # Auto refresh
    # ─────────────────────────────────────────────────────────────

    @property
    def auto_refresh_active(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    def configure_auto_refresh(
        self,
        enabled: bool,
        interval: float,
        callback: Callable[[], Awaitable[object]],
    ) -> None:
        """
        Start, restart or stop the refresh timer.

        The timer is restarted whenever ``enabled`` or ``interval`` changes
        and stays stopped while disabled. Must be called from a running loop.
        """
        config = (enabled, float(interval))
        if config == self._refresh_config and (self.auto_refresh_active or not enabled):
            return

        self.stop_auto_refresh()
        self._refresh_config = config
        if not enabled:
            return

        if interval <= 0:
            raise ValueError(f"Refresh interval must be positive, got {interval}")
        self._refresh_task = asyncio.get_running_loop().create_task(
            self._refresh_loop(float(interval), callback)
        )
        logger.info(f"Auto refresh every {interval:g}s")

    def stop_auto_refresh(self) -> None:
        task, self._refresh_task = self._refresh_task, None
        self._refresh_config = None
        if task is not None and not task.done():
            task.cancel()

    async def _refresh_loop(self, interval: float, callback: Callable[[], Awaitable[object]]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await callback()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Auto refresh failed: {e}")

    async def aclose(self) -> None:
        """Cancel the in-flight request and the refresh timer, and wait for both."""
        tasks = [t for t in (self._task, self._refresh_task) if t is not None and not t.done()]
        self.cancel_pending()
        self.stop_auto_refresh()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.state = RequestState.IDLE
