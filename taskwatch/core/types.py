"""Domain types for scheduled jobs and their execution history."""

from __future__ import annotations

import datetime
import re
from enum import IntEnum

from pydantic import BaseModel, Field, field_validator

_RECIPIENT_SPLIT_RE = re.compile(r"[,;]")


class ExecutionStatus(IntEnum):
    """Execution-log status codes written by the job runner."""

    WAITING = 1
    SUCCESS = 3
    ERROR = 7


def ensure_utc(value: datetime.datetime) -> datetime.datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)


def parse_recipients(raw: str | list[str] | None) -> list[str]:
    """Split a stored recipient string on commas/semicolons."""
    if raw is None:
        return []
    parts = raw if isinstance(raw, list) else _RECIPIENT_SPLIT_RE.split(raw)
    return [p.strip() for p in parts if p and p.strip()]


class ScheduledJob(BaseModel):
    """A scheduled background job as stored in the job table.

    ``active`` and the weekday flags are exposed for callers but the
    health evaluation does not consult them.
    """

    id: int
    code: int
    description: str = ""
    active: bool = True
    monday: bool = False
    tuesday: bool = False
    wednesday: bool = False
    thursday: bool = False
    friday: bool = False
    saturday: bool = False
    sunday: bool = False
    frequency_minutes: float = 0.0
    recipients: list[str] = Field(default_factory=list)

    @field_validator("recipients", mode="before")
    @classmethod
    def _split_recipients(cls, v: object) -> list[str]:
        if v is None or isinstance(v, (str, list)):
            return parse_recipients(v)  # type: ignore[arg-type]
        raise ValueError("recipients must be a string or a list of strings")

    @property
    def active_weekdays(self) -> list[int]:
        """ISO weekday numbers (1=Monday … 7=Sunday) flagged active."""
        flags = (
            self.monday,
            self.tuesday,
            self.wednesday,
            self.thursday,
            self.friday,
            self.saturday,
            self.sunday,
        )
        return [day for day, flag in enumerate(flags, start=1) if flag]


class ExecutionLogEntry(BaseModel):
    """One row of a job's execution history.

    For WAITING rows ``end_time`` holds the scheduled run time.
    """

    job_code: int
    status: int
    end_time: datetime.datetime
    message: str | None = None

    @field_validator("end_time")
    @classmethod
    def _to_utc(cls, v: datetime.datetime) -> datetime.datetime:
        return ensure_utc(v)

    @property
    def execution_status(self) -> ExecutionStatus | None:
        try:
            return ExecutionStatus(self.status)
        except ValueError:
            return None
