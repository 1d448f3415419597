"""Monitoring and alerting exceptions."""

from __future__ import annotations


class MonitorError(Exception):
    """Base exception for job monitoring errors."""


class EvaluationInputError(MonitorError):
    """A job or log record is missing data the evaluator needs."""


class NotificationDeliveryError(MonitorError):
    """An alert email could not be delivered."""
