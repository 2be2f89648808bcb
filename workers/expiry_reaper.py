"""
Expiry reaper: periodically removes accounts whose OTP expired before they
were verified.

Runs as a background asyncio task owned by the app lifespan. Each tick reads
the stale accounts, then deletes them with the same filter re-applied, so an
account verified between the read and the delete is left alone.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

from repositories.protocol import AccountStore
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)


class ExpiryReaper:
    def __init__(
        self,
        store: AccountStore,
        otp_ttl: timedelta,
        interval_seconds: float = 300.0,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._otp_ttl = otp_ttl
        self._interval = interval_seconds
        self._clock = clock or utcnow
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self, now: Optional[datetime] = None) -> int:
        """Delete every unverified account issued before ``now - otp_ttl``.

        Returns the number of accounts removed. Safe to call repeatedly.
        """
        cutoff = (now or self._clock()) - self._otp_ttl
        stale = await self._store.find_expired_unverified(cutoff)
        if not stale:
            return 0

        deleted = await self._store.delete_batch(
            [a.id for a in stale], unverified_before=cutoff
        )
        log.info(
            "expired_accounts_reaped",
            found=len(stale),
            deleted=deleted,
            cutoff=cutoff.isoformat(),
        )
        return deleted

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop(), name="expiry-reaper")
        log.info("expiry_reaper_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        log.info("expiry_reaper_stopped")

    async def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception as e:
                # Next tick retries; a stale account only lingers one interval longer
                log.error(
                    "expiry_reaper_tick_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
            try:
                await asyncio.wait_for(self._stop_event.wait(), self._interval)
            except asyncio.TimeoutError:
                pass
