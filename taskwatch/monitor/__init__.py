"""Job health evaluation, alert cooldown, and email alerting."""

from taskwatch.monitor.channels import LogOnlyNotifier, Notifier, SmtpNotifier
from taskwatch.monitor.cooldown import AlertCooldownTracker
from taskwatch.monitor.dispatcher import AlertDispatcher
from taskwatch.monitor.evaluator import evaluate_job, format_timestamp
from taskwatch.monitor.exceptions import (
    EvaluationInputError,
    MonitorError,
    NotificationDeliveryError,
)
from taskwatch.monitor.factory import create_monitor_stack, create_notifier
from taskwatch.monitor.formatters import AlertEmail, format_alert_email
from taskwatch.monitor.loop import JobMonitor
from taskwatch.monitor.metrics import MonitorMetrics
from taskwatch.monitor.types import AlertKind, DispatchOutcome, JobAlert, TickResult

__all__ = [
    "AlertCooldownTracker",
    "AlertDispatcher",
    "AlertEmail",
    "AlertKind",
    "DispatchOutcome",
    "EvaluationInputError",
    "JobAlert",
    "JobMonitor",
    "LogOnlyNotifier",
    "MonitorError",
    "MonitorMetrics",
    "NotificationDeliveryError",
    "Notifier",
    "SmtpNotifier",
    "TickResult",
    "create_monitor_stack",
    "create_notifier",
    "evaluate_job",
    "format_alert_email",
    "format_timestamp",
]
