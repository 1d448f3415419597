"""MonitorMetrics — process-lifetime counters for the job monitor.

Aggregates:
- Ticks run / skipped and their durations
- Jobs checked and per-kind alert counts
- Dispatch outcomes (sent, suppressed, failed)
- Evaluation and persistence errors
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from taskwatch.monitor.types import AlertKind, DispatchOutcome, TickResult


@dataclass
class TickSample:
    """Duration and size of one completed tick."""

    duration_secs: float
    jobs_checked: int
    alerts_raised: int


class MonitorMetrics:
    """Collects counters from the dispatcher and the monitor loop.

    Usage::

        metrics = MonitorMetrics()
        monitor = JobMonitor(store, dispatcher, metrics=metrics)
        ...
        logger.info("monitor_stopped", **metrics.summary())
    """

    def __init__(self, max_tick_samples: int = 1_000) -> None:
        self._ticks_run = 0
        self._ticks_skipped = 0
        self._jobs_checked = 0
        self._evaluation_errors = 0
        self._persistence_errors = 0
        self._unexpected_errors = 0
        self._alerts_by_kind: Counter[AlertKind] = Counter()
        self._outcomes: Counter[DispatchOutcome] = Counter()
        self._tick_samples: list[TickSample] = []
        self._max_tick_samples = max_tick_samples

    # ── Recording ───────────────────────────────────────────────

    def record_alert(self, kind: AlertKind) -> None:
        self._alerts_by_kind[kind] += 1

    def record_outcome(self, outcome: DispatchOutcome) -> None:
        self._outcomes[outcome] += 1

    def record_evaluation_error(self) -> None:
        self._evaluation_errors += 1

    def record_persistence_error(self) -> None:
        self._persistence_errors += 1

    def record_unexpected_error(self) -> None:
        self._unexpected_errors += 1

    def record_tick(self, result: TickResult) -> None:
        if result.skipped:
            self._ticks_skipped += 1
            return
        self._ticks_run += 1
        self._jobs_checked += result.jobs_checked
        if result.finished_at is not None:
            duration = (result.finished_at - result.started_at).total_seconds()
            self._tick_samples.append(TickSample(
                duration_secs=duration,
                jobs_checked=result.jobs_checked,
                alerts_raised=result.alerts_raised,
            ))
            if len(self._tick_samples) > self._max_tick_samples:
                self._tick_samples = self._tick_samples[-self._max_tick_samples:]

    # ── Query methods ───────────────────────────────────────────

    def outcome_count(self, outcome: DispatchOutcome) -> int:
        return self._outcomes[outcome]

    def tick_samples(self) -> list[TickSample]:
        return list(self._tick_samples)

    def tick_duration_stats(self) -> dict[str, float]:
        """Return mean / max tick duration in seconds."""
        if not self._tick_samples:
            return {"mean": 0.0, "max": 0.0}
        values = [s.duration_secs for s in self._tick_samples]
        return {
            "mean": round(sum(values) / len(values), 4),
            "max": round(max(values), 4),
        }

    def summary(self) -> dict[str, object]:
        """Return all counters as a flat-ish dict suitable for logging."""
        return {
            "ticks_run": self._ticks_run,
            "ticks_skipped": self._ticks_skipped,
            "jobs_checked": self._jobs_checked,
            "alerts_raised": sum(self._alerts_by_kind.values()),
            "alerts_by_kind": {k.value: v for k, v in self._alerts_by_kind.items()},
            "alerts_sent": self._outcomes[DispatchOutcome.SENT],
            "alerts_suppressed": self._outcomes[DispatchOutcome.SUPPRESSED],
            "alerts_failed": self._outcomes[DispatchOutcome.FAILED],
            "evaluation_errors": self._evaluation_errors,
            "persistence_errors": self._persistence_errors,
            "unexpected_errors": self._unexpected_errors,
            "tick_duration_secs": self.tick_duration_stats(),
        }
