"""
Scryfall client - card name autocomplete, art crop lookup and image download.

Search results are reshaped into ``CardArtOption`` entries (one per distinct
art crop URL, across prints and card faces). Image downloads only accept
Scryfall's image hosts and are capped in size and time; those failures are
raised as ``ImageFetchError`` with a reason code. Every other upstream
problem is logged and reported as an empty result.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import requests
from loguru import logger

from utils.constants import (
    ALLOWED_IMAGE_DOMAINS,
    CHUNK_SIZE,
    IMAGE_FETCH_TIMEOUT_SECONDS,
    MAX_IMAGE_SIZE_BYTES,
    SCRYFALL_API_BASE,
    SCRYFALL_MAX_SEARCH_PAGES,
    SCRYFALL_REQUEST_DELAY_SECONDS,
    SCRYFALL_USER_AGENT,
)

API_TIMEOUT_SECONDS = 30
AUTOCOMPLETE_MIN_LENGTH = 2

REASON_DISALLOWED_DOMAIN = "disallowed_domain"
REASON_TOO_LARGE = "too_large"
REASON_TIMEOUT = "timeout"
REASON_UPSTREAM = "upstream"


class ImageFetchError(Exception):
    """An art image could not be fetched; ``reason`` is one of the REASON_* codes."""

    def __init__(self, reason: str, message: str = "") -> None:
        super().__init__(message or reason)
        self.reason = reason


@dataclass(frozen=True)
class CardArtOption:
    art_url: str
    set_code: str
    print_id: str
    artist: str | None = None


def collect_card_arts(cards: list[dict[str, Any]]) -> list[CardArtOption]:
    """Collect art crops from card objects, deduplicated by URL in first-seen order."""
    options: list[CardArtOption] = []
    seen: set[str] = set()

    def add(art_url: str | None, card: dict[str, Any], artist: str | None) -> None:
        if not art_url or art_url in seen:
            return
        seen.add(art_url)
        options.append(
            CardArtOption(
                art_url=art_url,
                set_code=str(card.get("set", "")).upper(),
                print_id=str(card.get("id", "")),
                artist=artist,
            )
        )

    for card in cards:
        if not isinstance(card, dict):
            continue
        image_uris = card.get("image_uris") or {}
        add(image_uris.get("art_crop"), card, card.get("artist"))
        for face in card.get("card_faces") or []:
            face_uris = face.get("image_uris") or {}
            add(face_uris.get("art_crop"), card, face.get("artist") or card.get("artist"))
    return options


class ScryfallClient:
    """Thin wrapper over the Scryfall REST API."""

    def __init__(
        self,
        session: requests.Session | None = None,
        api_base: str = SCRYFALL_API_BASE,
        request_delay: float = SCRYFALL_REQUEST_DELAY_SECONDS,
        max_pages: int = SCRYFALL_MAX_SEARCH_PAGES,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.request_delay = request_delay
        self.max_pages = max_pages
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": SCRYFALL_USER_AGENT,
                "Accept": "application/json, */*;q=0.8",
            }
        )

    # ============= API =============

    def _get_json(
        self, url: str, operation: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """GET a Scryfall endpoint; returns None on any upstream failure."""
        # Naive rate limit: Scryfall asks for 50-100 ms between requests.
        time.sleep(self.request_delay)
        try:
            resp = self.session.get(url, params=params, timeout=API_TIMEOUT_SECONDS)
        except requests.RequestException as exc:
            logger.error(f"Scryfall {operation} request failed: {exc}")
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.error(f"Scryfall {operation} returned invalid JSON (status {resp.status_code})")
            return None

        if not isinstance(data, dict):
            logger.error(f"Scryfall {operation} returned an unexpected payload")
            return None
        if data.get("object") == "error":
            # 404 for unknown cards is routine; anything else is worth a louder log.
            log = logger.warning if resp.status_code == 404 else logger.error
            log(f"Scryfall {operation} error: {data.get('details', resp.status_code)}")
            return None
        if not resp.ok:
            logger.error(f"Scryfall {operation} API error: {resp.status_code}")
            return None
        return data

    def autocomplete(self, partial_name: str) -> list[str]:
        """Card name completions for ``partial_name``."""
        query = (partial_name or "").strip()
        if len(query) < AUTOCOMPLETE_MIN_LENGTH:
            return []
        data = self._get_json(
            f"{self.api_base}/cards/autocomplete", "autocomplete", params={"q": query}
        )
        if data is None:
            return []
        names = data.get("data")
        if not isinstance(names, list):
            logger.error("Scryfall autocomplete payload missing 'data'")
            return []
        return [name for name in names if isinstance(name, str)]

    def search_arts(self, card_name: str) -> list[CardArtOption]:
        """Every distinct art crop printed for the exact card ``card_name``."""
        name = (card_name or "").strip()
        if not name:
            return []

        cards: list[dict[str, Any]] = []
        url: str | None = f"{self.api_base}/cards/search"
        params: dict[str, Any] | None = {
            "q": f'!"{name}"',
            "unique": "art",
            "include_variations": "true",
            "include_extras": "true",
        }
        pages = 0
        while url and pages < self.max_pages:
            data = self._get_json(url, "search", params=params)
            if data is None:
                break
            page_cards = data.get("data")
            if not isinstance(page_cards, list):
                logger.error(f"Scryfall search payload for '{name}' missing 'data'")
                break
            cards.extend(page_cards)
            pages += 1
            # next_page already carries the query string
            url = data.get("next_page") if data.get("has_more") else None
            params = None

        options = collect_card_arts(cards)
        logger.debug(f"Found {len(options)} arts for '{name}' across {pages} page(s)")
        return options

    # ============= Images =============

    def fetch_image_bytes(self, url: str) -> bytes:
        """Download an art image from an allowed Scryfall host."""
        host = urlparse(url).hostname or ""
        if host not in ALLOWED_IMAGE_DOMAINS:
            raise ImageFetchError(REASON_DISALLOWED_DOMAIN, f"Image URL from disallowed domain: {host}")

        try:
            head = self.session.head(url, timeout=IMAGE_FETCH_TIMEOUT_SECONDS, allow_redirects=True)
            if not head.ok:
                raise ImageFetchError(
                    REASON_UPSTREAM, f"Failed to fetch image headers: {head.status_code}"
                )
            content_length = head.headers.get("content-length")
            if content_length and content_length.isdigit() and int(content_length) > MAX_IMAGE_SIZE_BYTES:
                raise ImageFetchError(
                    REASON_TOO_LARGE,
                    f"Image exceeds maximum allowed size of {MAX_IMAGE_SIZE_BYTES // (1024 * 1024)}MB",
                )

            resp = self.session.get(url, stream=True, timeout=IMAGE_FETCH_TIMEOUT_SECONDS)
            if not resp.ok:
                raise ImageFetchError(REASON_UPSTREAM, f"Failed to fetch image: {resp.status_code}")

            buffer = bytearray()
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                buffer.extend(chunk)
                if len(buffer) > MAX_IMAGE_SIZE_BYTES:
                    resp.close()
                    raise ImageFetchError(
                        REASON_TOO_LARGE,
                        "Image payload exceeded the maximum allowed size during download",
                    )
        except requests.Timeout as exc:
            raise ImageFetchError(REASON_TIMEOUT, "Request to fetch image timed out") from exc
        except requests.RequestException as exc:
            logger.error(f"Error fetching image {url}: {exc}")
            raise ImageFetchError(REASON_UPSTREAM, f"Failed to fetch image: {exc}") from exc

        return bytes(buffer)


# Global instance
_default_client: ScryfallClient | None = None


def get_scryfall_client() -> ScryfallClient:
    global _default_client
    if _default_client is None:
        _default_client = ScryfallClient()
    return _default_client


def reset_scryfall_client() -> None:
    global _default_client
    _default_client = None


__all__ = [
    "CardArtOption",
    "ImageFetchError",
    "REASON_DISALLOWED_DOMAIN",
    "REASON_TIMEOUT",
    "REASON_TOO_LARGE",
    "REASON_UPSTREAM",
    "ScryfallClient",
    "collect_card_arts",
    "get_scryfall_client",
    "reset_scryfall_client",
]
