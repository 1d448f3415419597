"""SQLAlchemy-backed job store.

Queries are blocking, so each one runs in a worker thread with its own
short-lived session.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from pydantic import ValidationError
from sqlalchemy import create_engine, select
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskwatch.core.config import ConfigError, DatabaseConfig
from taskwatch.core.types import ExecutionLogEntry, ScheduledJob
from taskwatch.store.base import JobStore
from taskwatch.store.exceptions import PersistenceUnavailableError, RecordMappingError
from taskwatch.store.tables import FLAG_TRUE, ScheduledTaskRow, TaskExecutionLogRow

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def build_database_url(config: DatabaseConfig) -> str | URL:
    """Return ``config.url`` or assemble a SQL Server URL from its parts.

    Raises:
        ConfigError: If neither a URL nor the full set of parts is configured.
    """
    if config.url is not None and config.url.get_secret_value():
        return config.url.get_secret_value()

    missing = config.missing_fields()
    if missing:
        raise ConfigError(
            "Missing database connection details: " + ", ".join(f"database.{m}" for m in missing)
        )

    return URL.create(
        "mssql+pyodbc",
        username=config.username,
        password=config.password.get_secret_value(),
        host=config.server,
        port=config.port,
        database=config.database,
        query={
            "driver": config.driver,
            "Encrypt": "yes" if config.encrypt else "no",
            "TrustServerCertificate": "yes" if config.trust_server_certificate else "no",
        },
    )


def _flag(value: int | None) -> bool:
    return value == FLAG_TRUE


def row_to_job(row: ScheduledTaskRow) -> ScheduledJob:
    try:
        return ScheduledJob(
            id=row.rowid,
            code=row.task_code,
            description=row.description or "",
            active=_flag(row.is_active),
            monday=_flag(row.monday),
            tuesday=_flag(row.tuesday),
            wednesday=_flag(row.wednesday),
            thursday=_flag(row.thursday),
            friday=_flag(row.friday),
            saturday=_flag(row.saturday),
            sunday=_flag(row.sunday),
            frequency_minutes=row.frequency if row.frequency is not None else 0,
            recipients=row.email_recipients,
        )
    except ValidationError as exc:
        raise RecordMappingError(f"ScheduledTask ROWID={row.rowid}: {exc}") from exc


def row_to_entry(row: TaskExecutionLogRow) -> ExecutionLogEntry:
    try:
        return ExecutionLogEntry(
            job_code=row.task_code,
            status=row.status,
            end_time=row.end_date,
            message=row.user_message,
        )
    except ValidationError as exc:
        raise RecordMappingError(f"TaskExecutionLog ROWID={row.rowid}: {exc}") from exc


class SqlJobStore(JobStore):
    """Reads jobs and execution logs through SQLAlchemy.

    Usage::

        store = SqlJobStore.from_config(settings.database)
        jobs = await store.list_active_jobs()
        await store.close()
    """

    def __init__(self, engine: Engine, schema: str | None = None) -> None:
        if schema:
            engine = engine.execution_options(schema_translate_map={None: schema})
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, autoflush=False)
        self._rejected: list[RecordMappingError] = []

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> SqlJobStore:
        url = build_database_url(config)
        engine = create_engine(url, pool_pre_ping=True, echo=config.echo)
        return cls(engine, schema=config.schema_name)

    async def list_active_jobs(self) -> list[ScheduledJob]:
        rows = await self._run(self._query_active_jobs)
        jobs: list[ScheduledJob] = []
        for row in rows:
            try:
                jobs.append(row_to_job(row))
            except RecordMappingError as exc:
                logger.warning("job_row_skipped", rowid=row.rowid, error=str(exc))
                self._rejected.append(exc)
        return jobs

    def drain_rejected_rows(self) -> list[RecordMappingError]:
        rejected, self._rejected = self._rejected, []
        return rejected

    async def list_log_entries(self, job_code: int) -> list[ExecutionLogEntry]:
        rows = await self._run(self._query_log_entries, job_code)
        return [row_to_entry(r) for r in rows]

    async def close(self) -> None:
        await asyncio.to_thread(self._engine.dispose)

    # ── Internal ────────────────────────────────────────────────

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as exc:
            logger.warning("store_query_failed", query=fn.__name__, error=str(exc))
            raise PersistenceUnavailableError(str(exc)) from exc

    def _query_active_jobs(self) -> list[ScheduledTaskRow]:
        stmt = (
            select(ScheduledTaskRow)
            .where(ScheduledTaskRow.is_active == FLAG_TRUE)
            .order_by(ScheduledTaskRow.rowid)
        )
        with self._session() as session:
            return list(session.scalars(stmt))

    def _query_log_entries(self, job_code: int) -> list[TaskExecutionLogRow]:
        stmt = (
            select(TaskExecutionLogRow)
            .where(TaskExecutionLogRow.task_code == job_code)
            .order_by(TaskExecutionLogRow.end_date.desc(), TaskExecutionLogRow.rowid.desc())
        )
        with self._session() as session:
            return list(session.scalars(stmt))

    def _session(self) -> Session:
        return self._session_factory(expire_on_commit=False)
