"""
Export Service - Writes the finished thumbnail and records what it used.

Exports always go through the same steps:
1. Record each non-empty deck name in the usage ledger
2. Record the art used in each filled quadrant
3. Render the layout at the export pixel ratio (960x540 -> 1280x720)
4. Save a PNG named after the mode and deck names, replacing any earlier export

Ledger failures are logged and never stop the export.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from PIL import Image

from repositories.usage_repository import UsageLedgerError, UsageRepository, get_usage_repository
from services.thumbnail_state import ThumbnailState
from utils.constants import EXPORT_PIXEL_RATIO, EXPORTS_DIR
from utils.layout_engine import MODE_VIDEO, ThumbnailLayout
from utils.thumbnail_names import export_filename
from utils.thumbnail_renderer import QuadrantImages, render_thumbnail, save_png


class ExportService:
    """Service for exporting thumbnails to PNG."""

    def __init__(
        self,
        repository: UsageRepository | None = None,
        output_dir: Path = EXPORTS_DIR,
        pixel_ratio: float = EXPORT_PIXEL_RATIO,
    ):
        self._repository = repository
        self.output_dir = Path(output_dir)
        self.pixel_ratio = pixel_ratio

    @property
    def repository(self) -> UsageRepository:
        if self._repository is None:
            self._repository = get_usage_repository()
        return self._repository

    def record_usage(self, state: ThumbnailState) -> None:
        """Upsert deck names and art usage for ``state``; failures are only logged."""
        deck_names = (state.left_deck_name, state.right_deck_name) if state.mode == MODE_VIDEO else ()
        for name in deck_names:
            if not name.strip():
                continue
            try:
                self.repository.upsert_deck_name(name)
            except (UsageLedgerError, ValueError) as exc:
                logger.warning(f"Failed to record deck name '{name}': {exc}")

        for slot, card in state.slots.items():
            if not card.art_url or not card.card_id:
                continue
            try:
                self.repository.upsert_art_usage(card.art_url, card.card_id)
            except (UsageLedgerError, ValueError) as exc:
                logger.warning(f"Failed to record art usage for {slot}: {exc}")

    def filename_for(self, state: ThumbnailState) -> str:
        return export_filename(
            state.mode, state.left_deck_name, state.right_deck_name, state.stream_date
        )

    def render(
        self,
        layout: ThumbnailLayout,
        quadrant_images: QuadrantImages | None = None,
        logo_image: Image.Image | None = None,
    ) -> Image.Image:
        return render_thumbnail(layout, quadrant_images, logo_image, pixel_ratio=self.pixel_ratio)

    def export(
        self,
        state: ThumbnailState,
        layout: ThumbnailLayout,
        quadrant_images: QuadrantImages | None = None,
        logo_image: Image.Image | None = None,
        output_dir: Path | None = None,
    ) -> Path:
        """
        Record usage, render and save the thumbnail.

        Returns:
            Path of the written PNG

        Raises:
            OSError: If the PNG cannot be written
        """
        self.record_usage(state)
        image = self.render(layout, quadrant_images, logo_image)
        target = Path(output_dir or self.output_dir) / self.filename_for(state)
        if target.exists():
            logger.info(f"Replacing existing export {target.name}")
        return save_png(image, target)


# Global instance
_default_service: ExportService | None = None


def get_export_service() -> ExportService:
    global _default_service
    if _default_service is None:
        _default_service = ExportService()
    return _default_service


def reset_export_service() -> None:
    global _default_service
    _default_service = None


__all__ = ["ExportService", "get_export_service", "reset_export_service"]
