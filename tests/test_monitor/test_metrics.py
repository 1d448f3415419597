"""Tests for MonitorMetrics — counters, tick samples, summary shape."""

from __future__ import annotations

import datetime

from taskwatch.monitor.metrics import MonitorMetrics
from taskwatch.monitor.types import AlertKind, DispatchOutcome, TickResult

T = datetime.datetime(2024, 3, 4, 12, 0, tzinfo=datetime.UTC)


def _tick(secs: float, jobs: int = 3, alerts: int = 1, skipped: bool = False) -> TickResult:
    return TickResult(
        started_at=T,
        finished_at=T + datetime.timedelta(seconds=secs),
        jobs_checked=jobs,
        alerts_raised=alerts,
        skipped=skipped,
    )


class TestCounters:
    def test_empty_summary(self) -> None:
        summary = MonitorMetrics().summary()
        assert summary["ticks_run"] == 0
        assert summary["alerts_raised"] == 0
        assert summary["tick_duration_secs"] == {"mean": 0.0, "max": 0.0}

    def test_alerts_by_kind(self) -> None:
        m = MonitorMetrics()
        m.record_alert(AlertKind.ERROR)
        m.record_alert(AlertKind.ERROR)
        m.record_alert(AlertKind.LATE)
        summary = m.summary()
        assert summary["alerts_raised"] == 3
        assert summary["alerts_by_kind"] == {"ERROR": 2, "LATE": 1}

    def test_outcomes(self) -> None:
        m = MonitorMetrics()
        m.record_outcome(DispatchOutcome.SENT)
        m.record_outcome(DispatchOutcome.FAILED)
        m.record_outcome(DispatchOutcome.FAILED)
        assert m.outcome_count(DispatchOutcome.FAILED) == 2
        assert m.summary()["alerts_sent"] == 1
        assert m.summary()["alerts_suppressed"] == 0

    def test_error_counters(self) -> None:
        m = MonitorMetrics()
        m.record_evaluation_error()
        m.record_persistence_error()
        m.record_persistence_error()
        m.record_unexpected_error()
        summary = m.summary()
        assert summary["evaluation_errors"] == 1
        assert summary["persistence_errors"] == 2
        assert summary["unexpected_errors"] == 1


class TestTicks:
    def test_ticks_counted(self) -> None:
        m = MonitorMetrics()
        m.record_tick(_tick(1.0))
        m.record_tick(_tick(3.0))
        m.record_tick(_tick(0.0, skipped=True))
        summary = m.summary()
        assert summary["ticks_run"] == 2
        assert summary["ticks_skipped"] == 1
        assert summary["jobs_checked"] == 6
        assert summary["tick_duration_secs"] == {"mean": 2.0, "max": 3.0}

    def test_samples_capped(self) -> None:
        m = MonitorMetrics(max_tick_samples=2)
        for i in range(5):
            m.record_tick(_tick(float(i)))
        samples = m.tick_samples()
        assert [s.duration_secs for s in samples] == [3.0, 4.0]
