"""Convenience factory for wiring the monitoring stack."""

from __future__ import annotations

from taskwatch.core.config import Settings
from taskwatch.monitor.channels import LogOnlyNotifier, Notifier, SmtpNotifier
from taskwatch.monitor.cooldown import AlertCooldownTracker
from taskwatch.monitor.dispatcher import AlertDispatcher
from taskwatch.monitor.loop import Clock, JobMonitor
from taskwatch.monitor.metrics import MonitorMetrics
from taskwatch.store.base import JobStore


def create_notifier(settings: Settings, dry_run: bool = False) -> Notifier:
    """SMTP when mail is enabled, otherwise log-only."""
    if settings.mail.enabled and not dry_run:
        return SmtpNotifier(settings.mail)
    return LogOnlyNotifier()


def create_monitor_stack(
    settings: Settings,
    store: JobStore,
    *,
    dry_run: bool = False,
    clock: Clock | None = None,
) -> tuple[JobMonitor, AlertDispatcher, MonitorMetrics]:
    """Build a monitor + dispatcher + metrics from config.

    Returns:
        (monitor, dispatcher, metrics)
    """
    cfg = settings.monitor
    metrics = MonitorMetrics()

    dispatcher = AlertDispatcher(
        notifier=create_notifier(settings, dry_run=dry_run),
        tracker=AlertCooldownTracker(cooldown_minutes=cfg.cooldown_minutes),
        send_timeout_secs=cfg.send_timeout_secs,
        default_recipients=settings.mail.default_recipients,
        metrics=metrics,
    )

    monitor = JobMonitor(
        store=store,
        dispatcher=dispatcher,
        interval_secs=cfg.interval_secs,
        waiting_grace_minutes=cfg.waiting_grace_minutes,
        max_concurrency=cfg.max_concurrency,
        clock=clock,
        metrics=metrics,
    )

    return monitor, dispatcher, metrics
