"""Timer-driven job monitor."""

from __future__ import annotations

import asyncio
import datetime
import time
from collections.abc import Callable

import structlog

from taskwatch.core.types import ScheduledJob
from taskwatch.monitor.dispatcher import AlertDispatcher
from taskwatch.monitor.evaluator import DEFAULT_WAITING_GRACE_MINUTES, evaluate_job
from taskwatch.monitor.exceptions import EvaluationInputError
from taskwatch.monitor.metrics import MonitorMetrics
from taskwatch.monitor.types import DispatchOutcome, TickResult
from taskwatch.store.base import JobStore
from taskwatch.store.exceptions import PersistenceUnavailableError, RecordMappingError

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class JobMonitor:
    """Background task that checks every active job once per interval.

    Ticks never overlap: the loop waits for a tick to finish before it
    sleeps, and :meth:`run_once` skips when another tick holds the lock.

    Usage::

        monitor = JobMonitor(store=store, dispatcher=dispatcher, interval_secs=300)
        await monitor.start()
        # ...
        await monitor.stop()
    """

    def __init__(
        self,
        store: JobStore,
        dispatcher: AlertDispatcher,
        *,
        interval_secs: float = 300.0,
        waiting_grace_minutes: float = DEFAULT_WAITING_GRACE_MINUTES,
        max_concurrency: int = 1,
        clock: Clock | None = None,
        metrics: MonitorMetrics | None = None,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._interval_secs = interval_secs
        self._waiting_grace_minutes = waiting_grace_minutes
        self._max_concurrency = max(1, max_concurrency)
        self._clock = clock or utc_now
        self._metrics = metrics
        self._tick_lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._last_result: TickResult | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_result(self) -> TickResult | None:
        return self._last_result

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "monitor_started",
            interval_secs=self._interval_secs,
            max_concurrency=self._max_concurrency,
        )

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("monitor_stopped")

    async def run_once(self, now: datetime.datetime | None = None) -> TickResult:
        """Run a single monitoring pass over all active jobs."""
        now = now or self._clock()

        if self._tick_lock.locked():
            logger.warning("tick_skipped_previous_running", now=now.isoformat())
            result = TickResult(started_at=now, finished_at=now, skipped=True)
            self._record_tick(result)
            return result

        async with self._tick_lock:
            started = time.monotonic()
            result = TickResult(started_at=now)
            logger.info("tick_started", now=now.isoformat())

            try:
                jobs = await self._store.list_active_jobs()
            except (PersistenceUnavailableError, RecordMappingError) as exc:
                if self._metrics is not None:
                    self._metrics.record_persistence_error()
                logger.error("list_active_jobs_failed", error=str(exc))
                jobs = []

            for exc in self._store.drain_rejected_rows():
                result.job_errors += 1
                if self._metrics is not None:
                    self._metrics.record_evaluation_error()
                logger.warning("job_skipped_bad_row", error=str(exc))

            semaphore = asyncio.Semaphore(self._max_concurrency)

            async def _bounded(job: ScheduledJob) -> None:
                async with semaphore:
                    await self._check_job(job, now, result)

            await asyncio.gather(*(_bounded(job) for job in jobs))

            elapsed = time.monotonic() - started
            result.finished_at = now + datetime.timedelta(seconds=elapsed)
            logger.info(
                "tick_finished",
                jobs_checked=result.jobs_checked,
                alerts_raised=result.alerts_raised,
                alerts_sent=result.alerts_sent,
                alerts_suppressed=result.alerts_suppressed,
                alerts_failed=result.alerts_failed,
                job_errors=result.job_errors,
                duration_secs=round(elapsed, 3),
            )
            self._record_tick(result)
            return result

    # ── Internal ────────────────────────────────────────────────

    async def _check_job(
        self,
        job: ScheduledJob,
        now: datetime.datetime,
        result: TickResult,
    ) -> None:
        log = logger.bind(job_id=job.id, job_code=job.code)
        try:
            entries = await self._store.list_log_entries(job.code)
            alert = evaluate_job(
                job,
                entries,
                now,
                waiting_grace_minutes=self._waiting_grace_minutes,
            )
        except PersistenceUnavailableError as exc:
            result.job_errors += 1
            if self._metrics is not None:
                self._metrics.record_persistence_error()
            log.error("job_logs_unavailable", error=str(exc))
            return
        except (EvaluationInputError, RecordMappingError) as exc:
            result.job_errors += 1
            if self._metrics is not None:
                self._metrics.record_evaluation_error()
            log.warning("job_skipped_bad_input", error=str(exc))
            return
        except Exception:
            result.job_errors += 1
            if self._metrics is not None:
                self._metrics.record_unexpected_error()
            log.exception("job_check_error")
            return

        result.jobs_checked += 1
        if alert is None:
            log.debug("job_healthy")
            return

        result.alerts_raised += 1
        if self._metrics is not None:
            self._metrics.record_alert(alert.kind)

        try:
            outcome = await self._dispatcher.handle(job, alert, now)
        except Exception:
            result.job_errors += 1
            if self._metrics is not None:
                self._metrics.record_unexpected_error()
            log.exception("job_dispatch_error", kind=alert.kind.value)
            return

        result.outcomes[job.id] = outcome
        if outcome == DispatchOutcome.SENT:
            result.alerts_sent += 1
        elif outcome == DispatchOutcome.SUPPRESSED:
            result.alerts_suppressed += 1
        else:
            result.alerts_failed += 1

    def _record_tick(self, result: TickResult) -> None:
        self._last_result = result
        if self._metrics is not None:
            self._metrics.record_tick(result)

    async def _loop(self) -> None:
        while self._running:
            started = time.monotonic()
            try:
                await self.run_once()
            except asyncio.CancelledError:
                return
            except Exception:
                logger.exception("monitor_loop_error")
            delay = max(0.0, self._interval_secs - (time.monotonic() - started))
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                return
