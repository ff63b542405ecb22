"""
Usage Repository - Local ledger of recently used deck names and card art.

This module handles:
- Deck name upserts and recency-ranked autocomplete
- Art usage upserts keyed by art crop URL
- Batch lookups of art usage for the art picker

Storage is a small SQLite database with one table per record type.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from utils.constants import DECK_NAME_MAX_LENGTH, DECK_NAME_SUGGESTION_LIMIT, USAGE_DB_PATH

# SQLite caps bound parameters per statement; stay well below it.
_URL_BATCH_SIZE = 500


class UsageLedgerError(Exception):
    """Raised when the usage ledger cannot be read or written."""


@dataclass(frozen=True)
class DeckNameRecord:
    name: str
    last_used_at: datetime


@dataclass(frozen=True)
class ArtUsageRecord:
    art_url: str
    card_id: str
    last_used_at: datetime


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


class UsageRepository:
    """Repository for deck-name and art-usage records."""

    def __init__(
        self,
        db_path: Path = USAGE_DB_PATH,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize the usage repository.

        Args:
            db_path: SQLite database file, created on first use
            clock: Source of ``last_used_at`` timestamps
        """
        self.db_path = Path(db_path)
        self._clock = clock
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        # SQLite LOWER() only folds ASCII
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    def _init_database(self) -> None:
        """Initialize SQLite database schema."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS deck_names (
                        name TEXT PRIMARY KEY,
                        last_used_at TEXT NOT NULL
                    )
                """
                )
                conn.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_deck_last_used ON deck_names(last_used_at)
                """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS card_art_usage (
                        art_url TEXT PRIMARY KEY,
                        card_id TEXT NOT NULL,
                        last_used_at TEXT NOT NULL
                    )
                """
                )
                conn.commit()
        except (OSError, sqlite3.Error) as exc:
            logger.error(f"Failed to initialise usage ledger at {self.db_path}: {exc}")
            raise UsageLedgerError(f"Failed to initialise usage ledger: {exc}") from exc

    # ============= Deck Names =============

    def upsert_deck_name(self, name: str) -> DeckNameRecord:
        """
        Record that a deck name was used now.

        Args:
            name: Deck name, stored as given after trimming surrounding whitespace

        Returns:
            The stored record

        Raises:
            ValueError: If the name is empty or longer than the allowed maximum
            UsageLedgerError: If the database write fails
        """
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("Deck name must not be empty")
        if len(cleaned) > DECK_NAME_MAX_LENGTH:
            raise ValueError(f"Deck name exceeds {DECK_NAME_MAX_LENGTH} characters")

        used_at = self._clock()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO deck_names (name, last_used_at) VALUES (?, ?)
                    ON CONFLICT(name) DO UPDATE SET last_used_at = excluded.last_used_at
                """,
                    (cleaned, used_at.isoformat()),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error(f"Failed to save or update deck name '{cleaned}': {exc}")
            raise UsageLedgerError("Failed to save or update deck name") from exc

        logger.debug(f"Recorded deck name '{cleaned}'")
        return DeckNameRecord(cleaned, used_at)

    def find_deck_names(
        self, query: str, limit: int = DECK_NAME_SUGGESTION_LIMIT
    ) -> list[DeckNameRecord]:
        """
        Deck names containing ``query`` (case-insensitive), most recently used first.

        Args:
            query: Substring to search for; empty returns no results
            limit: Maximum number of results
        """
        if not query:
            return []
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT name, last_used_at
                    FROM deck_names
                    WHERE instr(casefold(name), ?) > 0
                    ORDER BY last_used_at DESC
                    LIMIT ?
                """,
                    (query.casefold(), limit),
                ).fetchall()
        except sqlite3.Error as exc:
            logger.error(f"Failed to autocomplete deck name '{query}': {exc}")
            raise UsageLedgerError("Failed to autocomplete deck name") from exc
        return [DeckNameRecord(name, datetime.fromisoformat(stamp)) for name, stamp in rows]

    # ============= Art Usage =============

    def upsert_art_usage(self, art_url: str, card_id: str) -> ArtUsageRecord:
        """Record that ``art_url`` (belonging to print ``card_id``) was used now."""
        if not art_url or not card_id:
            raise ValueError("Art usage requires both an art URL and a card id")

        used_at = self._clock()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO card_art_usage (art_url, card_id, last_used_at) VALUES (?, ?, ?)
                    ON CONFLICT(art_url) DO UPDATE SET
                        card_id = excluded.card_id,
                        last_used_at = excluded.last_used_at
                """,
                    (art_url, card_id, used_at.isoformat()),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error(f"Failed to record art usage for {art_url}: {exc}")
            raise UsageLedgerError("Failed to record art usage") from exc

        logger.debug(f"Recorded art usage {art_url} ({card_id})")
        return ArtUsageRecord(art_url, card_id, used_at)

    def find_art_usage(self, art_urls: Iterable[str]) -> list[ArtUsageRecord]:
        """Usage records for any of ``art_urls`` that have been used before."""
        urls = list(dict.fromkeys(url for url in art_urls if url))
        if not urls:
            return []

        records: list[ArtUsageRecord] = []
        try:
            with self._connect() as conn:
                for start in range(0, len(urls), _URL_BATCH_SIZE):
                    batch = urls[start : start + _URL_BATCH_SIZE]
                    placeholders = ", ".join("?" for _ in batch)
                    rows = conn.execute(
                        f"""
                        SELECT art_url, card_id, last_used_at
                        FROM card_art_usage
                        WHERE art_url IN ({placeholders})
                    """,
                        batch,
                    ).fetchall()
                    records.extend(
                        ArtUsageRecord(url, card_id, datetime.fromisoformat(stamp))
                        for url, card_id, stamp in rows
                    )
        except sqlite3.Error as exc:
            logger.error(f"Failed to get art usage: {exc}")
            raise UsageLedgerError("Failed to get art usage") from exc
        return records

    def count_art_usage(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM card_art_usage").fetchone()[0]


# Global instance
_default_repository: UsageRepository | None = None


def get_usage_repository() -> UsageRepository:
    """Get the default usage repository instance."""
    global _default_repository
    if _default_repository is None:
        _default_repository = UsageRepository()
    return _default_repository


def reset_usage_repository() -> None:
    """
    Reset the global usage repository instance.

    This is primarily useful for testing to ensure test isolation
    and prevent state leakage between tests.
    """
    global _default_repository
    _default_repository = None


__all__ = [
    "ArtUsageRecord",
    "DeckNameRecord",
    "UsageLedgerError",
    "UsageRepository",
    "get_usage_repository",
    "reset_usage_repository",
]
