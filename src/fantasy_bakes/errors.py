"""Persistence failure conditions surfaced to callers."""

from __future__ import annotations


class FantasyBakesError(Exception):
    """Base class for Fantasy Bakes errors."""


class StorageUnavailable(FantasyBakesError):
    """Raised when no configured source can produce a season."""


class StorageWriteError(FantasyBakesError):
    """Raised when the backing store rejects a save."""
