"""Per-job alert cooldown — process-lifetime, in memory."""

from __future__ import annotations

import asyncio
import datetime
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

DEFAULT_COOLDOWN_MINUTES = 60.0


class AlertCooldownTracker:
    """Remembers when each job last alerted and suppresses repeats.

    State is lost on restart; a duplicate alert after a restart is
    acceptable, a missed one is not.

    Callers that check, send, then record should hold :meth:`guard` for
    the job so concurrent ticks cannot both pass the check::

        async with tracker.guard(job.id):
            if not tracker.should_suppress(job.id, now):
                if await send(...):
                    tracker.record_alert_sent(job.id, now)
    """

    def __init__(self, cooldown_minutes: float = DEFAULT_COOLDOWN_MINUTES) -> None:
        self._cooldown = datetime.timedelta(minutes=cooldown_minutes)
        self._last_alert: dict[int, datetime.datetime] = {}
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def cooldown(self) -> datetime.timedelta:
        return self._cooldown

    def should_suppress(self, job_id: int, now: datetime.datetime) -> bool:
        """True if *job_id* alerted less than one cooldown window before *now*."""
        last = self._last_alert.get(job_id)
        if last is None:
            return False
        return now - last < self._cooldown

    def record_alert_sent(self, job_id: int, now: datetime.datetime) -> None:
        self._last_alert[job_id] = now

    def last_alert(self, job_id: int) -> datetime.datetime | None:
        return self._last_alert.get(job_id)

    def snapshot(self) -> dict[int, datetime.datetime]:
        return dict(self._last_alert)

    @asynccontextmanager
    async def guard(self, job_id: int) -> AsyncIterator[None]:
        """Serialize check-send-record for one job."""
        async with self._locks[job_id]:
            yield

    def __len__(self) -> int:
        return len(self._last_alert)
