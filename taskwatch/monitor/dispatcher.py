"""Alert dispatcher — routes job alerts through the cooldown to the notifier."""

from __future__ import annotations

import asyncio
import datetime

import structlog

from taskwatch.core.types import ScheduledJob
from taskwatch.monitor.channels import Notifier
from taskwatch.monitor.cooldown import AlertCooldownTracker
from taskwatch.monitor.exceptions import NotificationDeliveryError
from taskwatch.monitor.formatters import format_alert_email
from taskwatch.monitor.metrics import MonitorMetrics
from taskwatch.monitor.types import DispatchOutcome, JobAlert

# Dedicated structured logger for alert decisions.
alert_logger = structlog.get_logger("alert_log")

logger = structlog.get_logger(__name__)

_OUTCOME_LEVEL: dict[DispatchOutcome, str] = {
    DispatchOutcome.SENT: "warning",
    DispatchOutcome.SUPPRESSED: "info",
    DispatchOutcome.FAILED: "error",
}


class AlertDispatcher:
    """Sends job alerts by email, at most once per cooldown window per job.

    - Every alert is logged via *alert_logger* with its outcome.
    - Alerts inside the cooldown window are log-only.
    - The cooldown timestamp is recorded only after a successful send, so
      a failed send is retried on the next tick.
    - Each send is bounded by *send_timeout_secs*; a timeout is a failure.
    """

    def __init__(
        self,
        notifier: Notifier,
        tracker: AlertCooldownTracker | None = None,
        *,
        send_timeout_secs: float = 30.0,
        default_recipients: list[str] | None = None,
        metrics: MonitorMetrics | None = None,
    ) -> None:
        self._notifier = notifier
        self._tracker = tracker if tracker is not None else AlertCooldownTracker()
        self._send_timeout_secs = send_timeout_secs
        self._default_recipients = list(default_recipients or [])
        self._metrics = metrics

    @property
    def tracker(self) -> AlertCooldownTracker:
        return self._tracker

    async def handle(
        self,
        job: ScheduledJob,
        alert: JobAlert,
        now: datetime.datetime,
    ) -> DispatchOutcome:
        async with self._tracker.guard(job.id):
            if self._tracker.should_suppress(job.id, now):
                self._log_alert(job, alert, DispatchOutcome.SUPPRESSED)
                return self._finish(DispatchOutcome.SUPPRESSED)

            try:
                await self._deliver(job, alert, now)
            except NotificationDeliveryError as exc:
                self._log_alert(job, alert, DispatchOutcome.FAILED, error=str(exc))
                return self._finish(DispatchOutcome.FAILED)

            self._tracker.record_alert_sent(job.id, now)
            self._log_alert(job, alert, DispatchOutcome.SENT)
            return self._finish(DispatchOutcome.SENT)

    # ── Internal ────────────────────────────────────────────────

    def _recipients_for(self, job: ScheduledJob) -> list[str]:
        return job.recipients or self._default_recipients

    async def _deliver(
        self,
        job: ScheduledJob,
        alert: JobAlert,
        now: datetime.datetime,
    ) -> None:
        recipients = self._recipients_for(job)
        if not recipients:
            raise NotificationDeliveryError(f"no recipients configured for job {job.id}")

        email = format_alert_email(job, alert, now)
        try:
            ok = await asyncio.wait_for(
                self._notifier.send(recipients, email.subject, email.body),
                timeout=self._send_timeout_secs,
            )
        except TimeoutError as exc:
            raise NotificationDeliveryError(
                f"send timed out after {self._send_timeout_secs}s"
            ) from exc
        except Exception as exc:
            logger.exception(
                "notifier_error",
                notifier=type(self._notifier).__name__,
                job_id=job.id,
            )
            raise NotificationDeliveryError(str(exc)) from exc

        if not ok:
            raise NotificationDeliveryError("notifier reported failure")

    def _finish(self, outcome: DispatchOutcome) -> DispatchOutcome:
        if self._metrics is not None:
            self._metrics.record_outcome(outcome)
        return outcome

    def _log_alert(
        self,
        job: ScheduledJob,
        alert: JobAlert,
        outcome: DispatchOutcome,
        **extra: object,
    ) -> None:
        log = getattr(alert_logger, _OUTCOME_LEVEL[outcome])
        log(
            "job_alert",
            outcome=outcome.value,
            job_id=job.id,
            job_code=job.code,
            description=job.description,
            kind=alert.kind.value,
            reason=alert.reason,
            **extra,
        )

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        try:
            await self._notifier.close()
        except Exception:
            logger.exception("notifier_close_error", notifier=type(self._notifier).__name__)
