"""Periodic cache warm-up for the repository listing."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Callable

    from repo_showcase.cache import RepositoryCache

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 2 * 60 * 60


class SchedulerStatus(BaseModel):
    """Snapshot of the refresh loop."""

    is_running: bool
    account: str
    interval_seconds: float
    runs: int = Field(default=0, ge=0)
    failures: int = Field(default=0, ge=0)
    last_run_at: str | None = None
    last_success: bool | None = None


class RefreshScheduler:
    """Re-fetch an account's listing on a fixed interval to keep the cache warm.

    Errors never escape the loop: a failed refresh is logged and the next
    one happens after the usual interval. The cache call runs in a worker
    thread so the event loop is not blocked by the upstream request.
    """

    def __init__(
        self,
        cache: RepositoryCache,
        account: str,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        run_on_startup: bool = True,
    ) -> None:
        if interval_seconds <= 0:
            msg = f"interval_seconds must be positive, got {interval_seconds}"
            raise ValueError(msg)
        self._cache = cache
        self._account = account
        self._interval_seconds = interval_seconds
        self._run_on_startup = run_on_startup

        self._task: asyncio.Task[None] | None = None
        self._runs = 0
        self._failures = 0
        self._last_run_at: str | None = None
        self._last_success: bool | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background loop on the running event loop."""
        if self.is_running:
            logger.info("scheduler_already_running", account=self._account)
            return
        self._task = asyncio.create_task(self._run(), name="github-refresh")
        logger.info(
            "scheduler_started",
            account=self._account,
            interval_seconds=self._interval_seconds,
        )

    async def stop(self) -> None:
        if self._task is None:
            logger.info("scheduler_not_running", account=self._account)
            return
        task, self._task = self._task, None
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("scheduler_stopped", account=self._account)

    async def refresh_once(self) -> bool:
        """Fetch the listing once. Returns False if anything went wrong."""
        return await self._record(self._cache.fetch_pinned_repositories)

    async def trigger_refresh(self) -> bool:
        """Clear the cache and fetch the listing again."""
        return await self._record(self._cache.refresh)

    def status(self) -> SchedulerStatus:
        return SchedulerStatus(
            is_running=self.is_running,
            account=self._account,
            interval_seconds=self._interval_seconds,
            runs=self._runs,
            failures=self._failures,
            last_run_at=self._last_run_at,
            last_success=self._last_success,
        )

    async def _run(self) -> None:
        if self._run_on_startup:
            await self.refresh_once()
        while True:
            await asyncio.sleep(self._interval_seconds)
            await self.refresh_once()

    async def _record(self, fetch: Callable[[str], object]) -> bool:
        self._runs += 1
        self._last_run_at = datetime.now(tz=UTC).isoformat()
        try:
            await asyncio.to_thread(fetch, self._account)
        except Exception:
            self._failures += 1
            self._last_success = False
            logger.exception("scheduled_refresh_failed", account=self._account)
            return False
        self._last_success = True
        logger.info("scheduled_refresh_completed", account=self._account)
        return True
