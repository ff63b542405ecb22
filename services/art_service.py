"""
Art Service - Business logic for card art lookup, art usage and image loading.

This module handles:
- Card name autocomplete and art search through the Scryfall client
- Art usage lookups (with a single retry) for the art picker
- Deck name suggestions from the usage ledger
- Decoded art image caching keyed by URL
- Logo loading
"""

from __future__ import annotations

import io
import threading
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from loguru import logger
from PIL import Image, UnidentifiedImageError

from navigators.scryfall import (
    REASON_UPSTREAM,
    CardArtOption,
    ImageFetchError,
    ScryfallClient,
    get_scryfall_client,
)
from repositories.usage_repository import (
    DeckNameRecord,
    UsageLedgerError,
    UsageRepository,
    get_usage_repository,
)


def load_logo(path: Path | str | None) -> Image.Image | None:
    """Load a logo image from disk; failures are logged and yield None."""
    if not path:
        return None
    logo_path = Path(path)
    if not logo_path.exists():
        logger.warning(f"Logo not found: {logo_path}")
        return None
    try:
        with Image.open(logo_path) as image:
            image.load()
            return image.convert("RGBA")
    except (OSError, UnidentifiedImageError) as exc:
        logger.warning(f"Failed to load logo {logo_path}: {exc}")
        return None


class ArtService:
    """Service for card art search, usage lookups and art images."""

    def __init__(
        self,
        client: ScryfallClient | None = None,
        repository: UsageRepository | None = None,
    ):
        self.client = client or get_scryfall_client()
        self._repository = repository
        self._image_cache: dict[str, Image.Image] = {}
        self._cache_lock = threading.Lock()

    @property
    def repository(self) -> UsageRepository:
        # Opened lazily so a broken ledger never blocks art search.
        if self._repository is None:
            self._repository = get_usage_repository()
        return self._repository

    # ============= Card search =============

    def autocomplete(self, partial_name: str) -> list[str]:
        return self.client.autocomplete(partial_name)

    def search_arts(self, card_name: str) -> list[CardArtOption]:
        return self.client.search_arts(card_name)

    # ============= Usage ledger =============

    def get_art_usage(self, art_urls: Iterable[str]) -> dict[str, datetime]:
        """
        Last-used timestamps for the given art URLs.

        A failed lookup is retried once; a second failure is logged and the
        picker simply shows no usage information.
        """
        urls = [url for url in art_urls if url]
        if not urls:
            return {}
        for attempt in (1, 2):
            try:
                records = self.repository.find_art_usage(urls)
            except UsageLedgerError as exc:
                if attempt == 1:
                    logger.warning(f"Art usage lookup failed, retrying: {exc}")
                    continue
                logger.error(f"Art usage lookup failed after retry: {exc}")
                return {}
            return {record.art_url: record.last_used_at for record in records}
        return {}

    def suggest_deck_names(self, query: str) -> list[DeckNameRecord]:
        try:
            return self.repository.find_deck_names(query)
        except UsageLedgerError as exc:
            logger.error(f"Deck name suggestions unavailable: {exc}")
            return []

    # ============= Images =============

    def load_art_image(self, art_url: str) -> Image.Image:
        """
        Fetch and decode an art crop, reusing earlier downloads of the same URL.

        Raises:
            ImageFetchError: If the download is refused or fails, or the bytes are not an image
        """
        with self._cache_lock:
            cached = self._image_cache.get(art_url)
        if cached is not None:
            return cached

        payload = self.client.fetch_image_bytes(art_url)
        try:
            with Image.open(io.BytesIO(payload)) as raw:
                raw.load()
                image = raw.convert("RGBA")
        except (OSError, UnidentifiedImageError) as exc:
            logger.error(f"Could not decode image from {art_url}: {exc}")
            raise ImageFetchError(REASON_UPSTREAM, f"Could not decode image: {exc}") from exc

        with self._cache_lock:
            self._image_cache[art_url] = image
        return image

    def cached_image(self, art_url: str) -> Image.Image | None:
        with self._cache_lock:
            return self._image_cache.get(art_url)

    def clear_image_cache(self) -> None:
        with self._cache_lock:
            self._image_cache.clear()


# Global instance
_default_service: ArtService | None = None


def get_art_service() -> ArtService:
    """Get the default art service instance."""
    global _default_service
    if _default_service is None:
        _default_service = ArtService()
    return _default_service


def reset_art_service() -> None:
    """Reset the global art service (use in tests for isolation)."""
    global _default_service
    _default_service = None


__all__ = ["ArtService", "get_art_service", "load_logo", "reset_art_service"]
