"""Dialog listing every art of a card, with when each art was last exported."""

from __future__ import annotations

from collections.abc import Callable

import wx

from navigators.scryfall import CardArtOption
from services.thumbnail_state import ArtDialogState
from utils.constants import DARK_BG, LIGHT_TEXT, SUBDUED_TEXT
from utils.stylize import stylize_button, stylize_listctrl
from utils.thumbnail_names import describe_last_used

COLUMNS = (("Set", 80), ("Artist", 220), ("Last used", 160))


class ArtSelectionDialog(wx.Dialog):
    """Non-modal art picker; the controller decides when it opens and closes."""

    def __init__(
        self,
        parent: wx.Window,
        dialog: ArtDialogState,
        on_select: Callable[[CardArtOption], None],
        on_cancel: Callable[[], None],
    ) -> None:
        super().__init__(
            parent,
            title=f"Choose art: {dialog.card_name}",
            size=(520, 420),
            style=wx.DEFAULT_DIALOG_STYLE | wx.RESIZE_BORDER,
        )
        self.SetBackgroundColour(DARK_BG)
        self.state = dialog
        self._on_select = on_select
        self._on_cancel = on_cancel
        self._closing = False

        sizer = wx.BoxSizer(wx.VERTICAL)
        self.SetSizer(sizer)

        hint = wx.StaticText(
            self, label="Arts used recently are marked; reusing one is allowed."
        )
        hint.SetForegroundColour(SUBDUED_TEXT)
        sizer.Add(hint, 0, wx.ALL, 8)

        self.list_ctrl = wx.ListCtrl(self, style=wx.LC_REPORT | wx.LC_SINGLE_SEL)
        stylize_listctrl(self.list_ctrl)
        for index, (title, width) in enumerate(COLUMNS):
            self.list_ctrl.InsertColumn(index, title, width=width)
        sizer.Add(self.list_ctrl, 1, wx.EXPAND | wx.LEFT | wx.RIGHT, 8)

        buttons = wx.BoxSizer(wx.HORIZONTAL)
        self.select_button = wx.Button(self, wx.ID_OK, "Use art")
        stylize_button(self.select_button, primary=True)
        cancel_button = wx.Button(self, wx.ID_CANCEL, "Cancel")
        stylize_button(cancel_button)
        buttons.AddStretchSpacer(1)
        buttons.Add(cancel_button, 0, wx.RIGHT, 6)
        buttons.Add(self.select_button, 0)
        sizer.Add(buttons, 0, wx.EXPAND | wx.ALL, 8)

        self._populate()

        self.list_ctrl.Bind(wx.EVT_LIST_ITEM_ACTIVATED, lambda _evt: self._choose())
        self.select_button.Bind(wx.EVT_BUTTON, lambda _evt: self._choose())
        cancel_button.Bind(wx.EVT_BUTTON, lambda _evt: self.Close())
        self.Bind(wx.EVT_CLOSE, self._on_close)

    def _populate(self) -> None:
        self.list_ctrl.DeleteAllItems()
        for row, option in enumerate(self.state.options):
            last_used = self.state.last_used(option)
            self.list_ctrl.InsertItem(row, option.set_code)
            self.list_ctrl.SetItem(row, 1, option.artist or "Unknown artist")
            self.list_ctrl.SetItem(row, 2, describe_last_used(last_used))
            if last_used is not None:
                self.list_ctrl.SetItemTextColour(row, SUBDUED_TEXT)
            else:
                self.list_ctrl.SetItemTextColour(row, LIGHT_TEXT)
        if self.state.options:
            self.list_ctrl.Select(0)

    def update_usage(self, dialog: ArtDialogState) -> None:
        selected = self.list_ctrl.GetFirstSelected()
        self.state = dialog
        self._populate()
        if selected >= 0:
            self.list_ctrl.Select(selected)

    def _choose(self) -> None:
        index = self.list_ctrl.GetFirstSelected()
        if not 0 <= index < len(self.state.options):
            return
        self._closing = True
        self._on_select(self.state.options[index])

    def _on_close(self, event: wx.CloseEvent) -> None:
        if not self._closing:
            self._closing = True
            self._on_cancel()
        event.Skip()

    def dismiss(self) -> None:
        self._closing = True
        self.Destroy()
