"""Abstract read-only job store."""

from __future__ import annotations

import abc
from types import TracebackType

from taskwatch.core.types import ExecutionLogEntry, ScheduledJob
from taskwatch.store.exceptions import RecordMappingError


class JobStore(abc.ABC):
    """Read-only access to scheduled jobs and their execution history."""

    @abc.abstractmethod
    async def list_active_jobs(self) -> list[ScheduledJob]:
        """Return every job flagged active."""

    @abc.abstractmethod
    async def list_log_entries(self, job_code: int) -> list[ExecutionLogEntry]:
        """Return the execution-log entries of one job, newest first."""

    def drain_rejected_rows(self) -> list[RecordMappingError]:
        """Return and clear the job rows skipped by the last listing."""
        return []

    async def close(self) -> None:
        """Release connections. No-op by default."""

    async def __aenter__(self) -> JobStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
