"""Pure functions that turn job alerts into email content."""

from __future__ import annotations

import datetime

from pydantic import BaseModel

from taskwatch.core.types import ScheduledJob
from taskwatch.monitor.evaluator import format_timestamp
from taskwatch.monitor.types import JobAlert


class AlertEmail(BaseModel):
    subject: str
    body: str


def format_subject(job: ScheduledJob) -> str:
    return f"Alert: Task {job.description} requires attention"


def format_alert_email(
    job: ScheduledJob,
    alert: JobAlert,
    now: datetime.datetime,
) -> AlertEmail:
    """Build the subject and plain-text body for *alert*.

    The body opens with the alert reason, followed by job details.
    """
    lines = [
        alert.reason,
        "",
        f"Job ID: {job.id}",
        f"Job code: {job.code}",
        f"Condition: {alert.kind.value}",
        f"Expected frequency: {job.frequency_minutes:g} min",
        f"Checked at: {format_timestamp(now)}",
    ]
    return AlertEmail(subject=format_subject(job), body="\n".join(lines))
