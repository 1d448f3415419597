"""Read-only access to scheduled jobs and their execution logs."""

from taskwatch.store.base import JobStore
from taskwatch.store.exceptions import (
    PersistenceUnavailableError,
    RecordMappingError,
    StoreError,
)
from taskwatch.store.memory import InMemoryJobStore
from taskwatch.store.sql import SqlJobStore, build_database_url

__all__ = [
    "InMemoryJobStore",
    "JobStore",
    "PersistenceUnavailableError",
    "RecordMappingError",
    "SqlJobStore",
    "StoreError",
    "build_database_url",
]
