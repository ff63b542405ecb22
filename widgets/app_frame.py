from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

import wx
import wx.adv
from loguru import logger

if TYPE_CHECKING:
    from controllers.app_controller import ThumbnailController

from navigators.scryfall import CardArtOption
from services.thumbnail_state import SIDE_LEFT, SIDE_RIGHT, ArtDialogState
from utils.constants import DARK_BG, DARK_PANEL, LIGHT_TEXT
from utils.layout_engine import (
    MODE_STREAM,
    MODES,
    QUADRANT_SLOTS,
    SLOT_BOTTOM_LEFT,
    SLOT_BOTTOM_RIGHT,
    SLOT_TOP_LEFT,
    SLOT_TOP_RIGHT,
)
from utils.stylize import stylize_button, stylize_choice, stylize_label, stylize_panel, stylize_textctrl
from widgets.autocomplete_combo import AutocompleteCombo
from widgets.dialogs.art_selection_dialog import ArtSelectionDialog
from widgets.thumbnail_canvas import ThumbnailCanvas

SLOT_LABELS = {
    SLOT_TOP_LEFT: "Top left",
    SLOT_BOTTOM_LEFT: "Bottom left",
    SLOT_TOP_RIGHT: "Top right",
    SLOT_BOTTOM_RIGHT: "Bottom right",
}


class ThumbnailFrame(wx.Frame):
    """wxPython thumbnail editor: controls on the left, live canvas on the right."""

    def __init__(
        self,
        controller: ThumbnailController,
        parent: wx.Window | None = None,
    ):
        super().__init__(parent, title="MTG Matchup Thumbnail Tools", size=(1400, 700))

        # Store controller reference - ALL state and business logic goes through this
        self.controller: ThumbnailController = controller
        self.art_dialog: ArtSelectionDialog | None = None
        self.card_inputs: dict[str, AutocompleteCombo] = {}
        self.deck_inputs: dict[str, AutocompleteCombo] = {}

        self._build_ui()
        self._apply_mode_visibility()
        self.SetMinSize((1320, 640))
        self.Centre(wx.BOTH)

        self.Bind(wx.EVT_CLOSE, self.on_close)

    # ============= UI =============

    def _build_ui(self) -> None:
        """Build the main UI structure."""
        self.SetBackgroundColour(DARK_BG)
        self.status_bar = self.CreateStatusBar()
        self.status_bar.SetBackgroundColour(DARK_PANEL)
        self.status_bar.SetForegroundColour(LIGHT_TEXT)

        root_panel = wx.Panel(self)
        stylize_panel(root_panel)
        root_sizer = wx.BoxSizer(wx.HORIZONTAL)
        root_panel.SetSizer(root_sizer)

        controls = self._build_controls(root_panel)
        root_sizer.Add(controls, 0, wx.EXPAND | wx.ALL, 10)

        self.canvas = ThumbnailCanvas(root_panel, self.controller)
        root_sizer.Add(self.canvas, 0, wx.ALIGN_CENTER_VERTICAL | wx.ALL, 10)

        self.set_status("Ready")

    def _label(self, parent: wx.Window, text: str, subtle: bool = False) -> wx.StaticText:
        label = wx.StaticText(parent, label=text)
        stylize_label(label, subtle=subtle)
        return label

    def _build_controls(self, parent: wx.Window) -> wx.Panel:
        panel = wx.Panel(parent)
        stylize_panel(panel, alt=True)
        sizer = wx.BoxSizer(wx.VERTICAL)
        panel.SetSizer(sizer)

        # Mode
        sizer.Add(self._label(panel, "Thumbnail mode"), 0, wx.ALL, 6)
        self.mode_choice = wx.Choice(panel, choices=list(MODES))
        stylize_choice(self.mode_choice)
        self.mode_choice.SetStringSelection(self.controller.state.mode)
        self.mode_choice.Bind(wx.EVT_CHOICE, self._on_mode_changed)
        sizer.Add(self.mode_choice, 0, wx.EXPAND | wx.LEFT | wx.RIGHT, 6)

        # Deck names (Video)
        self.deck_panel = wx.Panel(panel)
        stylize_panel(self.deck_panel, alt=True)
        deck_sizer = wx.FlexGridSizer(cols=2, vgap=4, hgap=6)
        deck_sizer.AddGrowableCol(1)
        self.deck_panel.SetSizer(deck_sizer)
        for side, title in ((SIDE_LEFT, "Left deck"), (SIDE_RIGHT, "Right deck")):
            combo = AutocompleteCombo(
                self.deck_panel,
                on_query=lambda text, side=side: self.controller.set_deck_name(side, text),
                on_commit=lambda text, side=side: self.controller.set_deck_name(side, text),
            )
            combo.Bind(
                wx.EVT_KILL_FOCUS,
                lambda evt, side=side, combo=combo: self._on_deck_focus_lost(evt, side, combo),
            )
            self.deck_inputs[side] = combo
            deck_sizer.Add(self._label(self.deck_panel, title, subtle=True), 0, wx.ALIGN_CENTER_VERTICAL)
            deck_sizer.Add(combo, 1, wx.EXPAND)
        sizer.Add(self.deck_panel, 0, wx.EXPAND | wx.ALL, 6)

        # Stream details (Stream)
        self.stream_panel = wx.Panel(panel)
        stylize_panel(self.stream_panel, alt=True)
        stream_sizer = wx.FlexGridSizer(cols=2, vgap=4, hgap=6)
        stream_sizer.AddGrowableCol(1)
        self.stream_panel.SetSizer(stream_sizer)
        self.date_picker = wx.adv.DatePickerCtrl(
            self.stream_panel, style=wx.adv.DP_DROPDOWN | wx.adv.DP_SHOWCENTURY
        )
        self.date_picker.Bind(wx.adv.EVT_DATE_CHANGED, self._on_stream_details_changed)
        self.event_input = wx.TextCtrl(self.stream_panel)
        stylize_textctrl(self.event_input)
        self.event_input.Bind(wx.EVT_TEXT, self._on_stream_details_changed)
        stream_sizer.Add(self._label(self.stream_panel, "Stream date", subtle=True), 0, wx.ALIGN_CENTER_VERTICAL)
        stream_sizer.Add(self.date_picker, 1, wx.EXPAND)
        stream_sizer.Add(self._label(self.stream_panel, "Event name", subtle=True), 0, wx.ALIGN_CENTER_VERTICAL)
        stream_sizer.Add(self.event_input, 1, wx.EXPAND)
        sizer.Add(self.stream_panel, 0, wx.EXPAND | wx.ALL, 6)

        # Cards
        sizer.Add(self._label(panel, "Quadrant cards"), 0, wx.ALL, 6)
        card_sizer = wx.FlexGridSizer(cols=2, vgap=4, hgap=6)
        card_sizer.AddGrowableCol(1)
        for slot in QUADRANT_SLOTS:
            combo = AutocompleteCombo(
                panel,
                on_query=lambda text, slot=slot: self.controller.autocomplete_card(slot, text),
                on_commit=lambda text, slot=slot: self.controller.select_card(slot, text),
                min_chars=2,
            )
            combo.SetMinSize((240, -1))
            self.card_inputs[slot] = combo
            card_sizer.Add(self._label(panel, SLOT_LABELS[slot], subtle=True), 0, wx.ALIGN_CENTER_VERTICAL)
            card_sizer.Add(combo, 1, wx.EXPAND)
        sizer.Add(card_sizer, 0, wx.EXPAND | wx.LEFT | wx.RIGHT, 6)

        # Swap
        swap_sizer = wx.BoxSizer(wx.HORIZONTAL)
        slot_names = [SLOT_LABELS[slot] for slot in QUADRANT_SLOTS]
        self.swap_first = wx.Choice(panel, choices=slot_names)
        self.swap_second = wx.Choice(panel, choices=slot_names)
        for choice, index in ((self.swap_first, 0), (self.swap_second, 2)):
            stylize_choice(choice)
            choice.SetSelection(index)
        swap_button = wx.Button(panel, label="Swap")
        stylize_button(swap_button)
        swap_button.Bind(wx.EVT_BUTTON, self._on_swap)
        swap_sizer.Add(self.swap_first, 1, wx.RIGHT, 4)
        swap_sizer.Add(self.swap_second, 1, wx.RIGHT, 4)
        swap_sizer.Add(swap_button, 0)
        sizer.Add(swap_sizer, 0, wx.EXPAND | wx.ALL, 6)

        # Logo
        sizer.Add(self._label(panel, "Logo"), 0, wx.ALL, 6)
        logo_sizer = wx.BoxSizer(wx.HORIZONTAL)
        choose_logo = wx.Button(panel, label="Custom logo…")
        clear_logo = wx.Button(panel, label="Use default")
        for button in (choose_logo, clear_logo):
            stylize_button(button)
        choose_logo.Bind(wx.EVT_BUTTON, self._on_choose_logo)
        clear_logo.Bind(wx.EVT_BUTTON, lambda _evt: self.controller.clear_custom_logo())
        logo_sizer.Add(choose_logo, 1, wx.RIGHT, 4)
        logo_sizer.Add(clear_logo, 1)
        sizer.Add(logo_sizer, 0, wx.EXPAND | wx.LEFT | wx.RIGHT, 6)

        # Custom logo position; blank X or Y keeps that axis centred
        position_sizer = wx.FlexGridSizer(cols=4, vgap=4, hgap=6)
        position_sizer.AddGrowableCol(1)
        position_sizer.AddGrowableCol(3)
        settings = self.controller.settings
        self.logo_inputs: dict[str, wx.TextCtrl] = {}
        for name, title, value in (
            ("x", "X", settings.logo_x),
            ("y", "Y", settings.logo_y),
            ("y_offset", "Y offset", settings.logo_y_offset or None),
        ):
            ctrl = wx.TextCtrl(panel, value="" if value is None else f"{value:g}", size=(60, -1))
            stylize_textctrl(ctrl)
            self.logo_inputs[name] = ctrl
            position_sizer.Add(self._label(panel, title, subtle=True), 0, wx.ALIGN_CENTER_VERTICAL)
            position_sizer.Add(ctrl, 1, wx.EXPAND)
        apply_position = wx.Button(panel, label="Apply")
        stylize_button(apply_position)
        apply_position.Bind(wx.EVT_BUTTON, self._on_logo_position)
        position_sizer.Add(apply_position, 0)
        sizer.Add(position_sizer, 0, wx.EXPAND | wx.ALL, 6)

        sizer.AddStretchSpacer(1)

        # Export
        self.export_dir_label = self._label(panel, str(self.controller.settings.export_dir), subtle=True)
        sizer.Add(self.export_dir_label, 0, wx.ALL, 6)
        export_sizer = wx.BoxSizer(wx.HORIZONTAL)
        folder_button = wx.Button(panel, label="Export folder…")
        stylize_button(folder_button)
        folder_button.Bind(wx.EVT_BUTTON, self._on_choose_export_dir)
        self.export_button = wx.Button(panel, label="Export PNG")
        stylize_button(self.export_button, primary=True)
        self.export_button.Bind(wx.EVT_BUTTON, lambda _evt: self._on_export())
        export_sizer.Add(folder_button, 1, wx.RIGHT, 4)
        export_sizer.Add(self.export_button, 1)
        sizer.Add(export_sizer, 0, wx.EXPAND | wx.ALL, 6)

        return panel

    def _apply_mode_visibility(self) -> None:
        streaming = self.controller.state.mode == MODE_STREAM
        self.deck_panel.Show(not streaming)
        self.stream_panel.Show(streaming)
        self.Layout()

    # ============= Event handlers =============

    def _on_mode_changed(self, _event: wx.CommandEvent) -> None:
        self.controller.change_mode(self.mode_choice.GetStringSelection())
        if self.controller.state.mode == MODE_STREAM:
            for combo in self.deck_inputs.values():
                combo.clear()
        self._apply_mode_visibility()

    def _on_deck_focus_lost(self, event: wx.FocusEvent, side: str, combo: AutocompleteCombo) -> None:
        event.Skip()
        self.controller.set_deck_name(side, combo.GetValue())

    def _on_stream_details_changed(self, event: wx.Event) -> None:
        event.Skip()
        picked = self.date_picker.GetValue()
        stream_date = date(picked.GetYear(), picked.GetMonth() + 1, picked.GetDay())
        self.controller.set_stream_details(stream_date, self.event_input.GetValue())

    def _on_swap(self, _event: wx.CommandEvent) -> None:
        first = QUADRANT_SLOTS[self.swap_first.GetSelection()]
        second = QUADRANT_SLOTS[self.swap_second.GetSelection()]
        self.controller.swap_quadrants(first, second)
        names = {slot: self.card_inputs[slot].GetValue() for slot in (first, second)}
        self.card_inputs[first].ChangeValue(names[second])
        self.card_inputs[second].ChangeValue(names[first])

    def _on_choose_logo(self, _event: wx.CommandEvent) -> None:
        with wx.FileDialog(
            self,
            "Choose logo",
            wildcard="Images (*.png;*.jpg;*.jpeg;*.webp)|*.png;*.jpg;*.jpeg;*.webp",
            style=wx.FD_OPEN | wx.FD_FILE_MUST_EXIST,
        ) as dialog:
            if dialog.ShowModal() != wx.ID_OK:
                return
            path = Path(dialog.GetPath())
        if not self.controller.set_custom_logo(path):
            wx.MessageBox(f"Could not load logo from {path}", "Logo", wx.OK | wx.ICON_WARNING)
            return
        self._on_logo_position(None)

    def _on_logo_position(self, _event: wx.CommandEvent | None) -> None:
        values = {name: ctrl.GetValue().strip() for name, ctrl in self.logo_inputs.items()}
        if not self.controller.set_logo_position(values["x"], values["y"], values["y_offset"]):
            self.set_status("Choose a custom logo before positioning it")

    def _on_choose_export_dir(self, _event: wx.CommandEvent) -> None:
        with wx.DirDialog(
            self, "Choose export folder", defaultPath=str(self.controller.settings.export_dir)
        ) as dialog:
            if dialog.ShowModal() != wx.ID_OK:
                return
            path = Path(dialog.GetPath())
        self.controller.set_export_dir(path)
        self.export_dir_label.SetLabel(str(path))

    def _on_export(self) -> None:
        for side, combo in self.deck_inputs.items():
            if self.controller.state.mode != MODE_STREAM:
                self.controller.set_deck_name(side, combo.GetValue())
        self.export_button.Disable()
        self.controller.export()

    def on_close(self, event: wx.CloseEvent) -> None:
        logger.info("Closing thumbnail editor")
        if self.art_dialog is not None:
            self.art_dialog.dismiss()
            self.art_dialog = None
        self.controller.shutdown()
        event.Skip()

    # ============= ThumbnailView =============

    def refresh_canvas(self) -> None:
        self.canvas.redraw()

    def show_art_dialog(self, dialog: ArtDialogState) -> None:
        self.hide_art_dialog()
        self.art_dialog = ArtSelectionDialog(
            self,
            dialog,
            on_select=self._on_art_selected,
            on_cancel=self._on_art_cancelled,
        )
        self.art_dialog.Show()

    def update_art_usage(self, dialog: ArtDialogState) -> None:
        if self.art_dialog is not None:
            self.art_dialog.update_usage(dialog)

    def hide_art_dialog(self) -> None:
        if self.art_dialog is not None:
            self.art_dialog.dismiss()
            self.art_dialog = None

    def _on_art_selected(self, option: CardArtOption) -> None:
        self.controller.choose_art(option)

    def _on_art_cancelled(self) -> None:
        self.art_dialog = None
        self.controller.cancel_art_dialog()

    def set_card_suggestions(self, slot: str, names: list[str]) -> None:
        self.card_inputs[slot].set_suggestions(names)

    def clear_card_input(self, slot: str) -> None:
        self.card_inputs[slot].ChangeValue("")

    def set_deck_suggestions(self, side: str, names: list[str]) -> None:
        self.deck_inputs[side].set_suggestions(names)

    def set_status(self, message: str) -> None:
        self.status_bar.SetStatusText(message)

    def on_export_complete(self, path: Path) -> None:
        self.export_button.Enable()
        self.set_status(f"Saved {path}")

    def on_export_failed(self, message: str) -> None:
        self.export_button.Enable()
        wx.MessageBox(f"Export failed:\n\n{message}", "Export", wx.OK | wx.ICON_ERROR)
