from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from utils.constants import EXPORTS_DIR, SETTINGS_FILE
from utils.layout_engine import MODE_VIDEO, MODES


@dataclass
class ThumbnailSettings:
    """Persisted editor preferences."""

    mode: str = MODE_VIDEO
    export_dir: Path = EXPORTS_DIR
    custom_logo_path: Path | None = None
    logo_x: float | None = None
    logo_y: float | None = None
    logo_y_offset: float = 0.0


class StateService:
    """Loads and persists application state."""

    def __init__(self, settings_path: Path | None = None) -> None:
        self.settings_path = settings_path or SETTINGS_FILE

    def load(self) -> dict[str, Any]:
        if not self.settings_path.exists():
            return {}
        try:
            with self.settings_path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Failed to load thumbnail settings: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, data: dict[str, Any]) -> None:
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with self.settings_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
        except OSError as exc:
            logger.warning(f"Unable to persist thumbnail settings: {exc}")

    @staticmethod
    def coerce_float(value: Any, default: float | None = None) -> float | None:
        if value is None or value == "":
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def build_settings(self, data: dict[str, Any]) -> ThumbnailSettings:
        """Validate raw persisted values, falling back to defaults field by field."""
        mode = data.get("mode", MODE_VIDEO)
        if mode not in MODES:
            mode = MODE_VIDEO

        export_dir = data.get("export_dir")
        logo_path = data.get("custom_logo_path")
        return ThumbnailSettings(
            mode=mode,
            export_dir=Path(export_dir).expanduser() if export_dir else EXPORTS_DIR,
            custom_logo_path=Path(logo_path).expanduser() if logo_path else None,
            logo_x=self.coerce_float(data.get("logo_x")),
            logo_y=self.coerce_float(data.get("logo_y")),
            logo_y_offset=self.coerce_float(data.get("logo_y_offset"), 0.0) or 0.0,
        )

    def load_settings(self) -> ThumbnailSettings:
        return self.build_settings(self.load())

    def save_settings(self, settings: ThumbnailSettings) -> None:
        self.save(
            {
                "mode": settings.mode,
                "export_dir": str(settings.export_dir),
                "custom_logo_path": (
                    str(settings.custom_logo_path) if settings.custom_logo_path else None
                ),
                "logo_x": settings.logo_x,
                "logo_y": settings.logo_y,
                "logo_y_offset": settings.logo_y_offset,
            }
        )


__all__ = ["StateService", "ThumbnailSettings"]
