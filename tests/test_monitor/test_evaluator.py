"""Tests for evaluate_job — ERROR / LATE / STUCK ordering and thresholds."""

from __future__ import annotations

import datetime

import pytest

from taskwatch.core.types import ExecutionLogEntry, ExecutionStatus, ScheduledJob
from taskwatch.monitor.evaluator import evaluate_job, format_timestamp
from taskwatch.monitor.exceptions import EvaluationInputError
from taskwatch.monitor.types import AlertKind

T = datetime.datetime(2024, 3, 4, 12, 0, tzinfo=datetime.UTC)


# ── Helpers ─────────────────────────────────────────────────────


def _job(**kw: object) -> ScheduledJob:
    defaults: dict[str, object] = {
        "id": 1,
        "code": 100,
        "description": "Nightly export",
        "active": True,
        "frequency_minutes": 30,
        "recipients": "ops@example.com",
    }
    defaults.update(kw)
    return ScheduledJob(**defaults)  # type: ignore[arg-type]


def _entry(
    status: int,
    minutes_ago: float,
    message: str | None = None,
) -> ExecutionLogEntry:
    return ExecutionLogEntry(
        job_code=100,
        status=status,
        end_time=T - datetime.timedelta(minutes=minutes_ago),
        message=message,
    )


# ── No history ──────────────────────────────────────────────────


class TestNoHistory:
    def test_no_entries_no_alert(self) -> None:
        assert evaluate_job(_job(), [], T) is None

    def test_no_entries_ignores_bad_frequency(self) -> None:
        assert evaluate_job(_job(frequency_minutes=0), [], T) is None

    def test_only_unknown_statuses(self) -> None:
        entries = [_entry(2, 600), _entry(5, 300)]
        assert evaluate_job(_job(), entries, T) is None


# ── ERROR ───────────────────────────────────────────────────────


class TestError:
    def test_scenario_c_error_with_message(self) -> None:
        entries = [_entry(ExecutionStatus.ERROR, 5, "disk full")]
        alert = evaluate_job(_job(), entries, T)
        assert alert is not None
        assert alert.kind == AlertKind.ERROR
        assert "ERROR" in alert.reason
        assert "disk full" in alert.reason
        assert "Nightly export" in alert.reason

    def test_error_without_message_uses_na(self) -> None:
        alert = evaluate_job(_job(), [_entry(ExecutionStatus.ERROR, 5)], T)
        assert alert is not None
        assert alert.reason.endswith("Message: N/A")

    def test_error_cites_end_timestamp(self) -> None:
        entry = _entry(ExecutionStatus.ERROR, 5)
        alert = evaluate_job(_job(), [entry], T)
        assert alert is not None
        assert format_timestamp(entry.end_time) in alert.reason
        assert alert.reference_time == entry.end_time

    def test_error_wins_over_older_success(self) -> None:
        entries = [
            _entry(ExecutionStatus.SUCCESS, 60),
            _entry(ExecutionStatus.ERROR, 1),
        ]
        alert = evaluate_job(_job(), entries, T)
        assert alert is not None
        assert alert.kind == AlertKind.ERROR

    def test_error_wins_over_stuck_waiting(self) -> None:
        entries = [
            _entry(ExecutionStatus.WAITING, 20),
            _entry(ExecutionStatus.ERROR, 40),
        ]
        alert = evaluate_job(_job(), entries, T)
        assert alert is not None
        assert alert.kind == AlertKind.ERROR

    def test_recent_success_hides_older_error(self) -> None:
        entries = [
            _entry(ExecutionStatus.ERROR, 20),
            _entry(ExecutionStatus.SUCCESS, 5),
        ]
        assert evaluate_job(_job(), entries, T) is None

    def test_error_alerts_even_with_bad_frequency(self) -> None:
        alert = evaluate_job(
            _job(frequency_minutes=0), [_entry(ExecutionStatus.ERROR, 1)], T
        )
        assert alert is not None
        assert alert.kind == AlertKind.ERROR


# ── LATE ────────────────────────────────────────────────────────


class TestLate:
    def test_scenario_a_late(self) -> None:
        alert = evaluate_job(_job(), [_entry(ExecutionStatus.SUCCESS, 45)], T)
        assert alert is not None
        assert alert.kind == AlertKind.LATE
        assert "LATE" in alert.reason
        assert "30 min interval" in alert.reason

    def test_scenario_b_recent_success(self) -> None:
        assert evaluate_job(_job(), [_entry(ExecutionStatus.SUCCESS, 10)], T) is None

    def test_exactly_at_frequency_not_late(self) -> None:
        assert evaluate_job(_job(), [_entry(ExecutionStatus.SUCCESS, 30)], T) is None

    def test_just_past_frequency_is_late(self) -> None:
        alert = evaluate_job(_job(), [_entry(ExecutionStatus.SUCCESS, 30.5)], T)
        assert alert is not None
        assert alert.kind == AlertKind.LATE

    def test_late_wins_over_stuck_waiting(self) -> None:
        entries = [
            _entry(ExecutionStatus.WAITING, 20),
            _entry(ExecutionStatus.SUCCESS, 45),
        ]
        alert = evaluate_job(_job(), entries, T)
        assert alert is not None
        assert alert.kind == AlertKind.LATE

    def test_unsorted_entries_use_newest_success(self) -> None:
        entries = [
            _entry(ExecutionStatus.SUCCESS, 500),
            _entry(ExecutionStatus.SUCCESS, 10),
            _entry(ExecutionStatus.SUCCESS, 200),
        ]
        assert evaluate_job(_job(), entries, T) is None

    def test_active_job_with_zero_frequency_raises(self) -> None:
        with pytest.raises(EvaluationInputError):
            evaluate_job(_job(frequency_minutes=0), [_entry(ExecutionStatus.SUCCESS, 1)], T)


# ── STUCK ───────────────────────────────────────────────────────


class TestStuckWaiting:
    def test_scenario_d_stuck(self) -> None:
        entry = _entry(ExecutionStatus.WAITING, 10)
        alert = evaluate_job(_job(), [entry], T)
        assert alert is not None
        assert alert.kind == AlertKind.STUCK
        assert "STUCK" in alert.reason
        assert format_timestamp(entry.end_time) in alert.reason

    def test_scenario_d_within_grace(self) -> None:
        assert evaluate_job(_job(), [_entry(ExecutionStatus.WAITING, 3)], T) is None

    def test_exactly_grace_not_stuck(self) -> None:
        assert evaluate_job(_job(), [_entry(ExecutionStatus.WAITING, 5)], T) is None

    def test_future_waiting_not_stuck(self) -> None:
        assert evaluate_job(_job(), [_entry(ExecutionStatus.WAITING, -30)], T) is None

    def test_healthy_success_then_stuck_waiting(self) -> None:
        entries = [
            _entry(ExecutionStatus.SUCCESS, 10),
            _entry(ExecutionStatus.WAITING, 8),
        ]
        alert = evaluate_job(_job(), entries, T)
        assert alert is not None
        assert alert.kind == AlertKind.STUCK

    def test_custom_grace(self) -> None:
        entries = [_entry(ExecutionStatus.WAITING, 10)]
        assert evaluate_job(_job(), entries, T, waiting_grace_minutes=15) is None
        alert = evaluate_job(_job(), entries, T, waiting_grace_minutes=9)
        assert alert is not None


# ── Inputs ──────────────────────────────────────────────────────


class TestInputs:
    def test_naive_now_rejected(self) -> None:
        with pytest.raises(EvaluationInputError):
            evaluate_job(_job(), [], T.replace(tzinfo=None))

    def test_inactive_job_still_evaluated(self) -> None:
        alert = evaluate_job(_job(active=False), [_entry(ExecutionStatus.ERROR, 1)], T)
        assert alert is not None

    def test_alert_carries_job_id(self) -> None:
        alert = evaluate_job(_job(id=42), [_entry(ExecutionStatus.ERROR, 1)], T)
        assert alert is not None
        assert alert.job_id == 42

    def test_does_not_mutate_entries(self) -> None:
        entries = [
            _entry(ExecutionStatus.SUCCESS, 500),
            _entry(ExecutionStatus.ERROR, 10),
        ]
        before = list(entries)
        evaluate_job(_job(), entries, T)
        assert entries == before


class TestFormatTimestamp:
    def test_utc_z_suffix(self) -> None:
        assert format_timestamp(T) == "2024-03-04T12:00:00.000Z"

    def test_converts_offset_to_utc(self) -> None:
        tz = datetime.timezone(datetime.timedelta(hours=-3))
        ts = datetime.datetime(2024, 3, 4, 9, 0, tzinfo=tz)
        assert format_timestamp(ts) == "2024-03-04T12:00:00.000Z"
