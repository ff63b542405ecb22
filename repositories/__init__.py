"""
Repositories package - Data access layer.

This package contains repository classes that handle all data persistence
and retrieval operations, isolating the UI and business logic from data access details.
"""

from repositories.usage_repository import (
    ArtUsageRecord,
    DeckNameRecord,
    UsageLedgerError,
    UsageRepository,
    get_usage_repository,
    reset_usage_repository,
)

__all__ = [
    "ArtUsageRecord",
    "DeckNameRecord",
    "UsageLedgerError",
    "UsageRepository",
    "get_usage_repository",
    "reset_usage_repository",
]
