"""Tests for core domain types — recipients, weekdays, status mapping, UTC handling."""

from __future__ import annotations

import datetime

import pytest
from pydantic import ValidationError

from taskwatch.core.types import (
    ExecutionLogEntry,
    ExecutionStatus,
    ScheduledJob,
    ensure_utc,
    parse_recipients,
)


class TestParseRecipients:
    def test_comma_and_semicolon(self) -> None:
        assert parse_recipients("a@x.com, b@x.com;c@x.com") == ["a@x.com", "b@x.com", "c@x.com"]

    def test_none_and_blank(self) -> None:
        assert parse_recipients(None) == []
        assert parse_recipients(" ; , ") == []

    def test_list_passthrough_strips(self) -> None:
        assert parse_recipients([" a@x.com ", ""]) == ["a@x.com"]


class TestScheduledJob:
    def test_recipients_from_string(self) -> None:
        job = ScheduledJob(id=1, code=1, recipients="a@x.com;b@x.com")  # type: ignore[arg-type]
        assert job.recipients == ["a@x.com", "b@x.com"]

    def test_recipients_rejects_other_types(self) -> None:
        with pytest.raises(ValidationError):
            ScheduledJob(id=1, code=1, recipients=42)  # type: ignore[arg-type]

    def test_active_weekdays(self) -> None:
        job = ScheduledJob(id=1, code=1, monday=True, friday=True, sunday=True)
        assert job.active_weekdays == [1, 5, 7]

    def test_no_weekdays(self) -> None:
        assert ScheduledJob(id=1, code=1).active_weekdays == []


class TestExecutionLogEntry:
    def test_known_status(self) -> None:
        entry = ExecutionLogEntry(job_code=1, status=7, end_time=datetime.datetime(2024, 1, 1))
        assert entry.execution_status == ExecutionStatus.ERROR

    def test_unknown_status_kept_raw(self) -> None:
        entry = ExecutionLogEntry(job_code=1, status=2, end_time=datetime.datetime(2024, 1, 1))
        assert entry.status == 2
        assert entry.execution_status is None

    def test_naive_end_time_is_utc(self) -> None:
        entry = ExecutionLogEntry(job_code=1, status=3, end_time=datetime.datetime(2024, 1, 1, 8))
        assert entry.end_time.tzinfo == datetime.UTC
        assert entry.end_time.hour == 8

    def test_missing_end_time_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ExecutionLogEntry(job_code=1, status=3, end_time=None)  # type: ignore[arg-type]


class TestEnsureUtc:
    def test_offset_converted(self) -> None:
        tz = datetime.timezone(datetime.timedelta(hours=2))
        value = ensure_utc(datetime.datetime(2024, 1, 1, 10, tzinfo=tz))
        assert value.hour == 8
        assert value.tzinfo == datetime.UTC

    def test_status_values(self) -> None:
        assert (ExecutionStatus.WAITING, ExecutionStatus.SUCCESS, ExecutionStatus.ERROR) == (1, 3, 7)
