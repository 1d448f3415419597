"""List-backed job store for tests."""

from __future__ import annotations

from collections.abc import Iterable

from taskwatch.core.types import ExecutionLogEntry, ScheduledJob
from taskwatch.store.base import JobStore


class InMemoryJobStore(JobStore):
    """Holds jobs and log entries in plain lists.

    ``query_count`` counts calls to :meth:`list_log_entries`.
    """

    def __init__(
        self,
        jobs: Iterable[ScheduledJob] = (),
        entries: Iterable[ExecutionLogEntry] = (),
    ) -> None:
        self._jobs: list[ScheduledJob] = list(jobs)
        self._entries: list[ExecutionLogEntry] = list(entries)
        self.query_count = 0

    def add_job(self, job: ScheduledJob) -> None:
        self._jobs.append(job)

    def add_entry(self, entry: ExecutionLogEntry) -> None:
        self._entries.append(entry)

    async def list_active_jobs(self) -> list[ScheduledJob]:
        return [job for job in self._jobs if job.active]

    async def list_log_entries(self, job_code: int) -> list[ExecutionLogEntry]:
        self.query_count += 1
        matching = [e for e in self._entries if e.job_code == job_code]
        return sorted(matching, key=lambda e: e.end_time, reverse=True)
