"""
Thumbnail Controller - Application logic for the thumbnail editor window.

This controller separates business logic and state management from UI presentation.
It owns the immutable ``ThumbnailState`` and the loaded quadrant images, runs
network and ledger calls on the background worker, and tells the view what
changed. The view is any object exposing the ``ThumbnailView`` methods; the
wx frame is the production implementation.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from loguru import logger
from PIL import Image

if TYPE_CHECKING:
    import wx

from navigators.scryfall import CardArtOption, ImageFetchError
from services import thumbnail_state as transitions
from services.art_service import ArtService, get_art_service, load_logo
from services.export_service import ExportService, get_export_service
from services.state_service import StateService, ThumbnailSettings
from services.thumbnail_state import ArtDialogState, CustomLogoSettings, ThumbnailState
from utils.background_worker import BackgroundWorker
from utils.constants import DEFAULT_LOGO_PATH
from utils.layout_engine import (
    CANVAS_HEIGHT_DEFAULT,
    CANVAS_WIDTH_DEFAULT,
    ThumbnailLayout,
    compute_layout,
    quadrant_rects,
)
from utils.quadrant_view import QuadrantView
from utils.text_fit import PillowTextMeasurer, TextMeasurer
from utils.thumbnail_renderer import render_thumbnail

IMAGE_FAILURE_MESSAGES = {
    "disallowed_domain": "Image host is not allowed",
    "too_large": "Image is too large",
    "timeout": "Image download timed out",
    "upstream": "Image could not be downloaded",
}


class ThumbnailView(Protocol):
    def refresh_canvas(self) -> None: ...

    def show_art_dialog(self, dialog: ArtDialogState) -> None: ...

    def update_art_usage(self, dialog: ArtDialogState) -> None: ...

    def hide_art_dialog(self) -> None: ...

    def set_card_suggestions(self, slot: str, names: list[str]) -> None: ...

    def clear_card_input(self, slot: str) -> None: ...

    def set_deck_suggestions(self, side: str, names: list[str]) -> None: ...

    def set_status(self, message: str) -> None: ...

    def on_export_complete(self, path: Path) -> None: ...

    def on_export_failed(self, message: str) -> None: ...


class ThumbnailController:

    def __init__(
        self,
        art_service: ArtService | None = None,
        export_service: ExportService | None = None,
        state_service: StateService | None = None,
        worker: BackgroundWorker | None = None,
        measurer: TextMeasurer | None = None,
        default_logo_path: Path | None = DEFAULT_LOGO_PATH,
        view_factory: Callable[[ThumbnailController], ThumbnailView] | None = None,
        canvas_size: tuple[int, int] = (CANVAS_WIDTH_DEFAULT, CANVAS_HEIGHT_DEFAULT),
    ):
        # Services
        self.art_service = art_service or get_art_service()
        self.export_service = export_service or get_export_service()
        self.state_service = state_service or StateService()
        self.worker = worker or BackgroundWorker()
        self.measurer = measurer or PillowTextMeasurer()
        self.canvas_width, self.canvas_height = canvas_size

        # Settings management
        self.settings: ThumbnailSettings = self.state_service.load_settings()

        # Logos
        self.default_logo: Image.Image | None = load_logo(default_logo_path)
        self.custom_logo: Image.Image | None = None
        custom_settings = None
        if self.settings.custom_logo_path is not None:
            self.custom_logo = load_logo(self.settings.custom_logo_path)
            if self.custom_logo is not None:
                custom_settings = CustomLogoSettings(
                    self.settings.custom_logo_path,
                    self.settings.logo_x,
                    self.settings.logo_y,
                    self.settings.logo_y_offset,
                )

        # Application state
        self.state = ThumbnailState(mode=self.settings.mode, custom_logo=custom_settings)
        self.images: dict[str, Image.Image] = {}
        self.views: dict[str, QuadrantView] = {}
        self.loading_slots: set[str] = set()

        self.view: ThumbnailView | None = view_factory(self) if view_factory else None

    # ============= View helpers =============

    def _refresh(self) -> None:
        if self.view is not None:
            self.view.refresh_canvas()

    def _status(self, message: str) -> None:
        logger.info(message)
        if self.view is not None:
            self.view.set_status(message)

    def _drop_image(self, slot: str) -> None:
        self.images.pop(slot, None)
        self.views.pop(slot, None)
        self.loading_slots.discard(slot)

    # ============= Deck names =============

    def set_deck_name(self, side: str, name: str) -> None:
        self.state = transitions.set_deck_name(self.state, side, name)
        self._refresh()

        query = name.strip()
        if not query:
            return

        def on_success(records):
            if self.view is not None:
                self.view.set_deck_suggestions(side, [record.name for record in records])

        self.worker.submit(
            self.art_service.suggest_deck_names,
            query,
            on_success=on_success,
            key=f"deck_names:{side}",
        )

    # ============= Card selection =============

    def autocomplete_card(self, slot: str, partial_name: str) -> None:
        def on_success(names: list[str]):
            if self.view is not None:
                self.view.set_card_suggestions(slot, names)

        self.worker.submit(
            self.art_service.autocomplete,
            partial_name,
            on_success=on_success,
            key=f"autocomplete:{slot}",
        )

    def select_card(self, slot: str, card_name: str) -> None:
        """Search for every art of ``card_name`` and open the picker for ``slot``."""
        self.state = transitions.select_card(self.state, slot, card_name)
        self._drop_image(slot)
        self._refresh()

        pending = self.state.pending
        if pending is None:
            if self.view is not None:
                self.view.hide_art_dialog()
            return

        self._status(f"Searching arts for {pending.card_name}…")
        self.worker.submit(
            self.art_service.search_arts,
            pending.card_name,
            on_success=lambda options: self._on_arts_loaded(slot, pending.card_name, options),
            on_error=lambda exc: self._on_arts_loaded(slot, pending.card_name, []),
            key=f"search:{slot}",
        )

    def _on_arts_loaded(self, slot: str, card_name: str, options: list[CardArtOption]) -> None:
        previous = self.state
        self.state = transitions.arts_loaded(self.state, slot, card_name, options)
        if self.state is previous:
            logger.debug(f"Ignoring stale art results for '{card_name}' in {slot}")
            return

        dialog = self.state.art_dialog
        if dialog is None:
            self._status(f"No art found for {card_name}")
            if self.view is not None:
                self.view.clear_card_input(slot)
            self._refresh()
            return

        self._status(f"Found {len(dialog.options)} arts for {card_name}")
        if self.view is not None:
            self.view.show_art_dialog(dialog)

        urls = [option.art_url for option in dialog.options]
        self.worker.submit(
            self.art_service.get_art_usage,
            urls,
            on_success=lambda usage: self._on_usage_loaded(card_name, usage),
            key="art_usage",
        )

    def _on_usage_loaded(self, card_name: str, usage) -> None:
        self.state = transitions.usage_loaded(self.state, card_name, usage)
        dialog = self.state.art_dialog
        if dialog is not None and dialog.card_name == card_name and self.view is not None:
            self.view.update_art_usage(dialog)

    def choose_art(self, option: CardArtOption) -> None:
        dialog = self.state.art_dialog
        if dialog is None:
            return
        slot = dialog.slot
        self.state = transitions.select_art(self.state, option)
        if self.view is not None:
            self.view.hide_art_dialog()
        self._load_slot_image(slot, option.art_url)

    def cancel_art_dialog(self) -> None:
        dialog = self.state.art_dialog
        self.state = transitions.close_art_dialog(self.state)
        if self.view is not None:
            self.view.hide_art_dialog()
            if dialog is not None and not self.state.slot(dialog.slot).card_name:
                self.view.clear_card_input(dialog.slot)
        self._refresh()

    def _load_slot_image(self, slot: str, art_url: str) -> None:
        self._drop_image(slot)
        self.loading_slots.add(slot)
        self._refresh()
        self.worker.submit(
            self.art_service.load_art_image,
            art_url,
            on_success=lambda image: self._on_image_loaded(slot, art_url, image),
            on_error=lambda exc: self._on_image_failed(slot, art_url, exc),
            key=f"image:{slot}",
        )

    def _on_image_loaded(self, slot: str, art_url: str, image: Image.Image) -> None:
        if self.state.slot(slot).art_url != art_url:
            return
        quad = self.quadrant_size()
        self.images[slot] = image
        self.views[slot] = QuadrantView.cover(image.width, image.height, *quad)
        self.loading_slots.discard(slot)
        self._refresh()

    def _on_image_failed(self, slot: str, art_url: str, error: Exception) -> None:
        if self.state.slot(slot).art_url != art_url:
            return
        self.loading_slots.discard(slot)
        reason = getattr(error, "reason", None) if isinstance(error, ImageFetchError) else None
        message = IMAGE_FAILURE_MESSAGES.get(reason or "upstream", str(error))
        self._status(f"{message}: {self.state.slot(slot).card_name}")
        self._refresh()

    # ============= Quadrants =============

    def quadrant_size(self) -> tuple[float, float]:
        return self.canvas_width / 2, self.canvas_height / 2

    def quadrant_origin(self, slot: str) -> tuple[float, float]:
        x, y, _, _ = quadrant_rects(self.canvas_width, self.canvas_height)[slot]
        return x, y

    def swap_quadrants(self, first: str, second: str) -> None:
        previous = self.state
        self.state = transitions.swap_quadrants(self.state, first, second)
        if self.state is previous:
            return
        for store in (self.images, self.views):
            a, b = store.pop(first, None), store.pop(second, None)
            if a is not None:
                store[second] = a
            if b is not None:
                store[first] = b
        moved_loads = [
            destination
            for source, destination in ((first, second), (second, first))
            if source in self.loading_slots
        ]
        self.loading_slots.discard(first)
        self.loading_slots.discard(second)
        # In-flight loads are keyed by their old slot; restart them where the art now lives.
        for destination in moved_loads:
            art_url = self.state.slot(destination).art_url
            if art_url:
                self._load_slot_image(destination, art_url)
        self._refresh()

    def drag_quadrant(self, slot: str, dx: float, dy: float) -> None:
        view = self.views.get(slot)
        if view is None:
            return
        self.views[slot] = view.drag_by(dx, dy)
        self._refresh()

    def zoom_quadrant(self, slot: str, wheel_delta: float, canvas_x: float, canvas_y: float) -> None:
        """Zoom the quadrant under the pointer; the pointer is in canvas coordinates."""
        view = self.views.get(slot)
        if view is None:
            return
        origin_x, origin_y = self.quadrant_origin(slot)
        self.views[slot] = view.zoom(wheel_delta, canvas_x - origin_x, canvas_y - origin_y)
        self._refresh()

    # ============= Mode, stream details and logo =============

    def change_mode(self, mode: str) -> None:
        self.state = transitions.change_mode(self.state, mode)
        if self.settings.mode != self.state.mode:
            self.settings.mode = self.state.mode
            self.state_service.save_settings(self.settings)
        self._refresh()

    def set_stream_details(self, stream_date: date | None = None, event_name: str | None = None) -> None:
        self.state = transitions.set_stream_details(self.state, stream_date, event_name)
        self._refresh()

    def set_custom_logo(
        self,
        path: Path,
        x: float | None = None,
        y: float | None = None,
        y_offset: float = 0.0,
    ) -> bool:
        image = load_logo(path)
        if image is None:
            self._status(f"Could not load logo {Path(path).name}")
            return False
        self.custom_logo = image
        self.state = transitions.set_custom_logo(self.state, path, x, y, y_offset)
        self.settings.custom_logo_path = Path(path)
        self.settings.logo_x, self.settings.logo_y, self.settings.logo_y_offset = x, y, y_offset
        self.state_service.save_settings(self.settings)
        self._refresh()
        return True

    def set_logo_position(self, x: Any = None, y: Any = None, y_offset: Any = 0.0) -> bool:
        """Move the active custom logo; blank or invalid axes fall back to centring."""
        current = self.state.custom_logo
        if current is None:
            return False
        x = StateService.coerce_float(x)
        y = StateService.coerce_float(y)
        y_offset = StateService.coerce_float(y_offset, 0.0)
        self.state = transitions.set_custom_logo(self.state, current.path, x, y, y_offset)
        self.settings.logo_x, self.settings.logo_y, self.settings.logo_y_offset = x, y, y_offset
        self.state_service.save_settings(self.settings)
        self._refresh()
        return True

    def clear_custom_logo(self) -> None:
        self.custom_logo = None
        self.state = transitions.clear_custom_logo(self.state)
        self.settings.custom_logo_path = None
        self.settings.logo_x = self.settings.logo_y = None
        self.settings.logo_y_offset = 0.0
        self.state_service.save_settings(self.settings)
        self._refresh()

    def logo_image(self) -> Image.Image | None:
        if self.state.custom_logo is not None and self.custom_logo is not None:
            return self.custom_logo
        return self.default_logo

    # ============= Layout and rendering =============

    def current_layout(self) -> ThumbnailLayout:
        default_size = self.default_logo.size if self.default_logo else None
        custom_size = self.custom_logo.size if self.custom_logo else None
        logo = transitions.resolve_state_logo(self.state, default_size, custom_size)
        inputs = transitions.layout_inputs(self.state, logo, self.canvas_width, self.canvas_height)
        return compute_layout(inputs, self.measurer)

    def quadrant_images(self) -> dict[str, tuple[Image.Image, QuadrantView]]:
        return {
            slot: (image, self.views[slot])
            for slot, image in self.images.items()
            if slot in self.views and self.state.slot(slot).has_art
        }

    def render_preview(self) -> Image.Image:
        return render_thumbnail(
            self.current_layout(),
            self.quadrant_images(),
            self.logo_image(),
            loading_slots=frozenset(self.loading_slots),
        )

    # ============= Export =============

    def set_export_dir(self, path: Path) -> None:
        self.settings.export_dir = Path(path)
        self.state_service.save_settings(self.settings)

    def export(self) -> None:
        state = self.state
        layout = self.current_layout()
        images = self.quadrant_images()
        logo = self.logo_image()
        self._status("Exporting thumbnail…")

        def on_success(path: Path):
            self._status(f"Exported {path.name}")
            if self.view is not None:
                self.view.on_export_complete(path)

        def on_error(exc: Exception):
            logger.error(f"Export failed: {exc}")
            if self.view is not None:
                self.view.on_export_failed(str(exc))

        self.worker.submit(
            self.export_service.export,
            state,
            layout,
            images,
            logo,
            self.settings.export_dir,
            on_success=on_success,
            on_error=on_error,
        )

    def shutdown(self) -> None:
        self.worker.shutdown(timeout=2.0)

    # ============= Frame Factory =============

    def create_frame(self, parent: wx.Window | None = None) -> Any:
        from widgets.app_frame import ThumbnailFrame

        frame = ThumbnailFrame(controller=self, parent=parent)
        self.view = frame
        return frame


# Singleton instance
_controller_instance: ThumbnailController | None = None


def get_thumbnail_controller() -> ThumbnailController:
    global _controller_instance
    if _controller_instance is None:
        _controller_instance = ThumbnailController()
    return _controller_instance


def reset_thumbnail_controller() -> None:
    global _controller_instance
    _controller_instance = None
