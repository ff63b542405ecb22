"""End-to-end flows through ThumbnailController with a fake view."""

import io
from datetime import date
from unittest.mock import Mock

import pytest
from PIL import Image

from controllers.app_controller import ThumbnailController
from navigators.scryfall import ImageFetchError
from services.art_service import ArtService
from services.export_service import ExportService
from services.state_service import StateService
from services.thumbnail_state import SIDE_LEFT, SIDE_RIGHT
from utils.layout_engine import MODE_STREAM, SLOT_BOTTOM_RIGHT, SLOT_TOP_LEFT
from utils.text_fit import FixedWidthMeasurer


def _png_bytes(size=(626, 457)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, "green").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def client(art_options):
    fake = Mock()
    fake.search_arts.return_value = art_options
    fake.autocomplete.return_value = ["Sol Ring"]
    fake.fetch_image_bytes.return_value = _png_bytes()
    return fake


@pytest.fixture
def view():
    return Mock()


@pytest.fixture
def logo_path(tmp_path):
    path = tmp_path / "logo_512.png"
    Image.new("RGBA", (512, 512), (255, 255, 255, 255)).save(path)
    return path


@pytest.fixture
def controller(tmp_path, client, usage_repo, immediate_worker, view, logo_path):
    ctrl = ThumbnailController(
        art_service=ArtService(client=client, repository=usage_repo),
        export_service=ExportService(repository=usage_repo, output_dir=tmp_path / "unused"),
        state_service=StateService(tmp_path / "config" / "settings.json"),
        worker=immediate_worker,
        measurer=FixedWidthMeasurer(),
        default_logo_path=logo_path,
        view_factory=lambda _ctrl: view,
    )
    ctrl.set_export_dir(tmp_path / "exports")
    return ctrl


def _pick_first_art(controller, slot, card_name="Sol Ring"):
    controller.select_card(slot, card_name)
    controller.choose_art(controller.state.art_dialog.options[0])


def test_sol_ring_opens_dialog_with_two_prints(controller, view, art_options):
    controller.select_card(SLOT_TOP_LEFT, "Sol Ring")

    dialog = view.show_art_dialog.call_args.args[0]
    assert len(dialog.options) == 2
    assert controller.state.art_dialog.options == dialog.options

    controller.choose_art(art_options[1])

    view.hide_art_dialog.assert_called()
    assert controller.state.art_dialog is None
    assert controller.state.slot(SLOT_TOP_LEFT).art_url == art_options[1].art_url
    assert SLOT_TOP_LEFT in controller.views
    assert controller.views[SLOT_TOP_LEFT].covers_quadrant()
    assert not controller.loading_slots


def test_art_dialog_shows_previous_usage(controller, view, usage_repo, art_options):
    usage_repo.upsert_art_usage(art_options[0].art_url, "print-1")

    controller.select_card(SLOT_TOP_LEFT, "Sol Ring")

    updated = view.update_art_usage.call_args.args[0]
    assert updated.last_used(art_options[0]) is not None
    assert updated.last_used(art_options[1]) is None


def test_no_results_clears_slot(controller, client, view):
    client.search_arts.return_value = []

    controller.select_card(SLOT_TOP_LEFT, "Not A Card")

    view.show_art_dialog.assert_not_called()
    view.clear_card_input.assert_called_once_with(SLOT_TOP_LEFT)
    assert controller.state.slot(SLOT_TOP_LEFT).card_name == ""


def test_cancel_dialog_clears_slot(controller, view):
    controller.select_card(SLOT_TOP_LEFT, "Sol Ring")

    controller.cancel_art_dialog()

    assert controller.state.art_dialog is None
    assert controller.state.slot(SLOT_TOP_LEFT).card_name == ""
    view.clear_card_input.assert_called_once_with(SLOT_TOP_LEFT)


def test_image_failure_reports_reason(controller, client, view):
    client.fetch_image_bytes.side_effect = ImageFetchError("too_large")

    _pick_first_art(controller, SLOT_TOP_LEFT)

    assert SLOT_TOP_LEFT not in controller.views
    assert not controller.loading_slots
    assert "too large" in view.set_status.call_args.args[0]


def test_autocomplete_forwards_suggestions(controller, view):
    controller.autocomplete_card(SLOT_TOP_LEFT, "Sol")

    view.set_card_suggestions.assert_called_with(SLOT_TOP_LEFT, ["Sol Ring"])


def test_deck_name_suggestions_come_from_ledger(controller, view, usage_repo):
    usage_repo.upsert_deck_name("Mono Red")

    controller.set_deck_name(SIDE_LEFT, "mono")

    view.set_deck_suggestions.assert_called_with(SIDE_LEFT, ["Mono Red"])


def test_drag_and_zoom_update_quadrant_view(controller):
    _pick_first_art(controller, SLOT_BOTTOM_RIGHT)
    before = controller.views[SLOT_BOTTOM_RIGHT]

    controller.zoom_quadrant(SLOT_BOTTOM_RIGHT, -120, 720, 405)
    zoomed = controller.views[SLOT_BOTTOM_RIGHT]
    controller.drag_quadrant(SLOT_BOTTOM_RIGHT, -30, 0)

    assert zoomed.scale > before.scale
    assert controller.views[SLOT_BOTTOM_RIGHT].x < zoomed.x
    assert controller.views[SLOT_BOTTOM_RIGHT].covers_quadrant()


def test_swap_moves_images_with_cards(controller):
    _pick_first_art(controller, SLOT_TOP_LEFT)

    controller.swap_quadrants(SLOT_TOP_LEFT, SLOT_BOTTOM_RIGHT)

    assert SLOT_BOTTOM_RIGHT in controller.images
    assert SLOT_TOP_LEFT not in controller.images
    assert controller.state.slot(SLOT_BOTTOM_RIGHT).has_art


def test_swap_while_image_loading_finishes_in_new_quadrant(
    tmp_path, client, usage_repo, deferred_worker, view, logo_path, art_options
):
    ctrl = ThumbnailController(
        art_service=ArtService(client=client, repository=usage_repo),
        export_service=ExportService(repository=usage_repo, output_dir=tmp_path),
        state_service=StateService(tmp_path / "settings.json"),
        worker=deferred_worker,
        measurer=FixedWidthMeasurer(),
        default_logo_path=logo_path,
        view_factory=lambda _ctrl: view,
    )
    ctrl.select_card(SLOT_TOP_LEFT, "Sol Ring")
    deferred_worker.run_pending()
    ctrl.choose_art(art_options[0])

    assert ctrl.loading_slots == {SLOT_TOP_LEFT}

    ctrl.swap_quadrants(SLOT_TOP_LEFT, SLOT_BOTTOM_RIGHT)
    deferred_worker.run_pending()

    assert ctrl.state.slot(SLOT_BOTTOM_RIGHT).art_url == art_options[0].art_url
    assert SLOT_BOTTOM_RIGHT in ctrl.images
    assert SLOT_TOP_LEFT not in ctrl.images
    assert not ctrl.loading_slots


def test_stream_mode_hides_deck_names(controller):
    controller.set_deck_name(SIDE_LEFT, "Mono Red")
    controller.set_deck_name(SIDE_RIGHT, "Azorius Control")

    controller.change_mode(MODE_STREAM)

    layout = controller.current_layout()
    assert controller.state.left_deck_name == ""
    assert layout.text("left_deck") is None
    assert layout.text("right_deck") is None
    assert layout.text("live") is not None
    assert controller.state_service.load_settings().mode == MODE_STREAM


def test_export_video_writes_named_png_and_records_usage(controller, view, usage_repo, tmp_path):
    _pick_first_art(controller, SLOT_TOP_LEFT)
    controller.set_deck_name(SIDE_LEFT, "Mono Red")
    controller.set_deck_name(SIDE_RIGHT, "Azorius Control")

    controller.export()

    path = view.on_export_complete.call_args.args[0]
    assert path == tmp_path / "exports" / "MonoRedVsAzoriusControl.png"
    with Image.open(path) as exported:
        assert exported.size == (1280, 720)
    assert [r.name for r in usage_repo.find_deck_names("azorius")] == ["Azorius Control"]
    art_url = controller.state.slot(SLOT_TOP_LEFT).art_url
    assert [r.card_id for r in usage_repo.find_art_usage([art_url])] == ["print-1"]


def test_export_stream_uses_livestream_filename(controller, view, tmp_path):
    controller.change_mode(MODE_STREAM)
    controller.set_stream_details(date(2026, 10, 19), "Modern RCQ")

    controller.export()

    path = view.on_export_complete.call_args.args[0]
    assert path.name == "Livestream-10-19-26.png"
    assert path.exists()


def test_custom_logo_is_persisted(controller, tmp_path):
    custom = tmp_path / "custom.png"
    Image.new("RGBA", (600, 300), (0, 0, 0, 255)).save(custom)

    assert controller.set_custom_logo(custom, x=50)

    placement = controller.current_layout().logo
    assert placement.source == "custom"
    assert placement.x == 50
    assert controller.state_service.load_settings().custom_logo_path == custom


def test_logo_position_overrides_axes_and_persists(controller, tmp_path):
    custom = tmp_path / "custom.png"
    Image.new("RGBA", (600, 300), (0, 0, 0, 255)).save(custom)
    controller.set_custom_logo(custom)
    centred = controller.current_layout().logo

    assert controller.set_logo_position("", "40", "bad")

    placement = controller.current_layout().logo
    assert placement.x == centred.x
    assert placement.y == 40
    settings = controller.state_service.load_settings()
    assert (settings.logo_x, settings.logo_y, settings.logo_y_offset) == (None, 40.0, 0.0)


def test_logo_position_needs_custom_logo(controller):
    assert not controller.set_logo_position("10", "10")
    assert controller.current_layout().logo.source == "default"


def test_invalid_custom_logo_is_rejected(controller, tmp_path):
    assert not controller.set_custom_logo(tmp_path / "missing.png")
    assert controller.current_layout().logo.source == "default"


def test_missing_default_logo_omits_logo(tmp_path, client, usage_repo, immediate_worker):
    ctrl = ThumbnailController(
        art_service=ArtService(client=client, repository=usage_repo),
        export_service=ExportService(repository=usage_repo, output_dir=tmp_path),
        state_service=StateService(tmp_path / "settings.json"),
        worker=immediate_worker,
        measurer=FixedWidthMeasurer(),
        default_logo_path=tmp_path / "nope.png",
    )

    assert ctrl.current_layout().logo is None
    assert ctrl.render_preview().size == (960, 540)


def test_bundled_default_logo_drives_stream_layout(tmp_path, client, usage_repo, immediate_worker):
    ctrl = ThumbnailController(
        art_service=ArtService(client=client, repository=usage_repo),
        export_service=ExportService(repository=usage_repo, output_dir=tmp_path),
        state_service=StateService(tmp_path / "settings.json"),
        worker=immediate_worker,
        measurer=FixedWidthMeasurer(),
    )

    ctrl.change_mode(MODE_STREAM)
    ctrl.set_stream_details(date(2026, 10, 19), "Friday Night Magic")
    layout = ctrl.current_layout()

    assert ctrl.default_logo is not None
    assert layout.logo.source == "default"
    assert layout.text("event_name") is not None
    assert layout.text("live") is not None
