#!/usr/bin/env python3
"""Job monitor entrypoint — wires the store, notifier and monitor loop.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Single pass, then exit
    python scripts/run.py --once

    # Log alerts instead of emailing them
    python scripts/run.py --dry-run --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog
import yaml
from pydantic import ValidationError

from taskwatch.core.config import ConfigError, load_settings
from taskwatch.core.logging import setup_logging
from taskwatch.monitor.factory import create_monitor_stack
from taskwatch.store.sql import SqlJobStore

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start the monitor and run until interrupted (or for one tick)."""
    try:
        settings = load_settings(args.config)
    except (ValidationError, yaml.YAMLError) as exc:
        print(f"FATAL: invalid configuration: {exc}", file=sys.stderr)
        return 1
    setup_logging(level=args.log_level)

    try:
        store = SqlJobStore.from_config(settings.database)
    except ConfigError as exc:
        logger.error("config_invalid", error=str(exc))
        print(f"FATAL: {exc}", file=sys.stderr)
        return 1

    monitor, dispatcher, metrics = create_monitor_stack(
        settings,
        store,
        dry_run=args.dry_run,
    )

    logger.info(
        "monitor_starting",
        interval_secs=settings.monitor.interval_secs,
        cooldown_minutes=settings.monitor.cooldown_minutes,
        mail_enabled=settings.mail.enabled and not args.dry_run,
        once=args.once,
    )

    if args.once:
        try:
            await monitor.run_once()
        finally:
            await dispatcher.close()
            await store.close()
        logger.info("monitor_summary", **metrics.summary())
        return 0

    await monitor.start()

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    logger.info("monitor_shutting_down")
    await monitor.stop()
    await dispatcher.close()
    await store.close()

    logger.info("monitor_summary", **metrics.summary())
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Scheduled job health monitor")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single monitoring pass and exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log alerts instead of sending email",
    )
    args = parser.parse_args()

    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
