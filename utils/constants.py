"""Constants file."""

import os
import sys
from pathlib import Path

APP_NAME = "MTG Thumbnail Tools"


def _default_base_dir() -> Path:
    """Return the writable base directory for config/cache/logging."""
    override = os.getenv("THUMBNAIL_TOOLS_HOME")
    if override:
        return Path(override).expanduser()
    if getattr(sys, "frozen", False):
        local_appdata = os.getenv("LOCALAPPDATA")
        if local_appdata:
            return Path(local_appdata) / APP_NAME
        return Path.home() / ".mtg_thumbnail_tools"
    return Path(__file__).resolve().parent.parent


SUBDUED_TEXT = (185, 191, 202)
DARK_BG = (20, 22, 27)
DARK_PANEL = (34, 39, 46)
DARK_ALT = (40, 46, 54)
DARK_ACCENT = (59, 130, 246)
LIGHT_TEXT = (236, 236, 236)

__all__ = [
    "SUBDUED_TEXT",
    "DARK_BG",
    "DARK_PANEL",
    "DARK_ALT",
    "DARK_ACCENT",
    "LIGHT_TEXT",
]

BASE_DATA_DIR = _default_base_dir()
CONFIG_DIR = BASE_DATA_DIR / "config"
CACHE_DIR = BASE_DATA_DIR / "cache"
LOGS_DIR = BASE_DATA_DIR / "logs"
EXPORTS_DIR = BASE_DATA_DIR / "exports"
ASSETS_DIR = Path(__file__).resolve().parent / "assets"


def ensure_base_dirs() -> None:
    """Ensure base config/cache/export/log directories exist without importing side effects."""
    BASE_DATA_DIR.mkdir(parents=True, exist_ok=True)
    for path in (CONFIG_DIR, CACHE_DIR, LOGS_DIR, EXPORTS_DIR):
        path.mkdir(parents=True, exist_ok=True)


SETTINGS_FILE = CONFIG_DIR / "thumbnail_settings.json"
USAGE_DB_PATH = Path(os.getenv("THUMBNAIL_DB_PATH") or CACHE_DIR / "usage.db")
DEFAULT_LOGO_PATH = Path(os.getenv("THUMBNAIL_LOGO_PATH") or ASSETS_DIR / "logo_512.png")

__all__ += [
    "APP_NAME",
    "BASE_DATA_DIR",
    "CONFIG_DIR",
    "CACHE_DIR",
    "LOGS_DIR",
    "EXPORTS_DIR",
    "ASSETS_DIR",
    "SETTINGS_FILE",
    "USAGE_DB_PATH",
    "DEFAULT_LOGO_PATH",
    "ensure_base_dirs",
]

# Scryfall API
SCRYFALL_API_BASE = os.getenv("SCRYFALL_API_BASE", "https://api.scryfall.com")
SCRYFALL_USER_AGENT = "MTGThumbnailTools/1.0"
SCRYFALL_REQUEST_DELAY_SECONDS = 0.1
SCRYFALL_MAX_SEARCH_PAGES = 5
ALLOWED_IMAGE_DOMAINS = (
    "cards.scryfall.io",
    "c1.scryfall.com",
    "svgs.scryfall.io",
)
MAX_IMAGE_SIZE_BYTES = 10 * 1024 * 1024
IMAGE_FETCH_TIMEOUT_SECONDS = 5
CHUNK_SIZE = 8192  # Download chunk size

# Usage ledger
DECK_NAME_MAX_LENGTH = 100
DECK_NAME_SUGGESTION_LIMIT = 10

# Export
EXPORT_PIXEL_RATIO = 1.3334  # 960x540 working canvas -> 1280x720 output

__all__ += [
    "SCRYFALL_API_BASE",
    "SCRYFALL_USER_AGENT",
    "SCRYFALL_REQUEST_DELAY_SECONDS",
    "SCRYFALL_MAX_SEARCH_PAGES",
    "ALLOWED_IMAGE_DOMAINS",
    "MAX_IMAGE_SIZE_BYTES",
    "IMAGE_FETCH_TIMEOUT_SECONDS",
    "CHUNK_SIZE",
    "DECK_NAME_MAX_LENGTH",
    "DECK_NAME_SUGGESTION_LIMIT",
    "EXPORT_PIXEL_RATIO",
]
