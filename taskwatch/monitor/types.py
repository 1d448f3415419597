"""Domain types for the monitoring / alerting subsystem."""

from __future__ import annotations

import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class AlertKind(StrEnum):
    """Why a job needs attention."""

    ERROR = "ERROR"
    LATE = "LATE"
    STUCK = "STUCK"


class JobAlert(BaseModel):
    """Outcome of a health check that warrants an alert."""

    job_id: int
    kind: AlertKind
    reason: str
    reference_time: datetime.datetime


class DispatchOutcome(StrEnum):
    """What the dispatcher did with an alert."""

    SENT = "SENT"
    SUPPRESSED = "SUPPRESSED"
    FAILED = "FAILED"


class TickResult(BaseModel):
    """Summary of a single monitoring pass."""

    started_at: datetime.datetime
    finished_at: datetime.datetime | None = None
    skipped: bool = False
    jobs_checked: int = 0
    alerts_raised: int = 0
    alerts_sent: int = 0
    alerts_suppressed: int = 0
    alerts_failed: int = 0
    job_errors: int = 0
    outcomes: dict[int, DispatchOutcome] = Field(default_factory=dict)
