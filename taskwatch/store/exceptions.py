"""Exception hierarchy for the job store."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for all job store errors."""


class PersistenceUnavailableError(StoreError):
    """The backing database could not be queried."""


class RecordMappingError(StoreError):
    """A stored row could not be mapped to a domain record."""
