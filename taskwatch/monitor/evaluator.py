"""Pure health evaluation for a single scheduled job.

Checks run in a fixed order and the first match wins:

1. No history at all → nothing to judge yet.
2. The latest finished run (SUCCESS or ERROR):
   - ERROR → alert.
   - SUCCESS older than the job's frequency → LATE.
3. The latest WAITING entry scheduled more than the grace period ago
   → STUCK.

The job's ``active`` flag and weekday flags are not consulted here.
"""

from __future__ import annotations

import datetime
from collections.abc import Sequence

from taskwatch.core.types import ExecutionLogEntry, ExecutionStatus, ScheduledJob
from taskwatch.monitor.exceptions import EvaluationInputError
from taskwatch.monitor.types import AlertKind, JobAlert

DEFAULT_WAITING_GRACE_MINUTES = 5.0

_FINISHED = (ExecutionStatus.SUCCESS, ExecutionStatus.ERROR)


def format_timestamp(ts: datetime.datetime) -> str:
    """UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
    utc = ts.astimezone(datetime.UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _minutes_between(earlier: datetime.datetime, later: datetime.datetime) -> float:
    return (later - earlier).total_seconds() / 60.0


def _fmt_minutes(value: float) -> str:
    return f"{value:g}"


def evaluate_job(
    job: ScheduledJob,
    entries: Sequence[ExecutionLogEntry],
    now: datetime.datetime,
    *,
    waiting_grace_minutes: float = DEFAULT_WAITING_GRACE_MINUTES,
) -> JobAlert | None:
    """Decide whether *job* needs an alert at *now*.

    Args:
        job: The scheduled job.
        entries: Its execution-log entries, in any order.
        now: Current time (timezone-aware).
        waiting_grace_minutes: How long a WAITING entry may sit past its
            scheduled time before it counts as stuck.

    Returns:
        A JobAlert, or None when the job looks healthy.

    Raises:
        EvaluationInputError: On a naive *now* or an active job without a
            positive frequency.
    """
    if now.tzinfo is None:
        raise EvaluationInputError("now must be timezone-aware")

    if not entries:
        return None

    ordered = sorted(entries, key=lambda e: e.end_time, reverse=True)

    alert = _check_last_run(job, ordered, now)
    if alert is not None:
        return alert

    return _check_waiting(job, ordered, now, waiting_grace_minutes)


def _check_last_run(
    job: ScheduledJob,
    ordered: Sequence[ExecutionLogEntry],
    now: datetime.datetime,
) -> JobAlert | None:
    last_run = next((e for e in ordered if e.status in _FINISHED), None)
    if last_run is None:
        return None

    ended = format_timestamp(last_run.end_time)

    if last_run.status == ExecutionStatus.ERROR:
        return JobAlert(
            job_id=job.id,
            kind=AlertKind.ERROR,
            reason=(
                f"Task {job.description} last execution resulted in an ERROR at "
                f"{ended}. Message: {last_run.message or 'N/A'}"
            ),
            reference_time=last_run.end_time,
        )

    if job.active and job.frequency_minutes <= 0:
        raise EvaluationInputError(
            f"job {job.id} is active but has non-positive frequency {job.frequency_minutes}"
        )

    elapsed = _minutes_between(last_run.end_time, now)
    if elapsed > job.frequency_minutes:
        return JobAlert(
            job_id=job.id,
            kind=AlertKind.LATE,
            reason=(
                f"Task {job.description} is LATE. Last successful execution was at "
                f"{ended}, which is more than the "
                f"{_fmt_minutes(job.frequency_minutes)} min interval."
            ),
            reference_time=last_run.end_time,
        )
    return None


def _check_waiting(
    job: ScheduledJob,
    ordered: Sequence[ExecutionLogEntry],
    now: datetime.datetime,
    grace_minutes: float,
) -> JobAlert | None:
    waiting = next((e for e in ordered if e.status == ExecutionStatus.WAITING), None)
    if waiting is None or waiting.end_time >= now:
        return None

    if _minutes_between(waiting.end_time, now) > grace_minutes:
        return JobAlert(
            job_id=job.id,
            kind=AlertKind.STUCK,
            reason=(
                f"Task {job.description} is STUCK in WAITING state. "
                f"Scheduled for {format_timestamp(waiting.end_time)} but not processed."
            ),
            reference_time=waiting.end_time,
        )
    return None
