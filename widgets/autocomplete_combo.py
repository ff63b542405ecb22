"""Combo box that asks for suggestions after the user pauses typing."""

from __future__ import annotations

from collections.abc import Callable

import wx

from utils.stylize import stylize_textctrl

DEBOUNCE_MS = 250


class AutocompleteCombo(wx.ComboBox):
    def __init__(
        self,
        parent: wx.Window,
        on_query: Callable[[str], None],
        on_commit: Callable[[str], None] | None = None,
        min_chars: int = 1,
        debounce_ms: int = DEBOUNCE_MS,
    ):
        super().__init__(parent, style=wx.CB_DROPDOWN | wx.TE_PROCESS_ENTER)
        stylize_textctrl(self)
        self._on_query = on_query
        self._on_commit = on_commit
        self._min_chars = min_chars
        self._debounce_ms = debounce_ms
        self._pending: wx.CallLater | None = None
        self._updating = False

        self.Bind(wx.EVT_TEXT, self._on_text)
        self.Bind(wx.EVT_COMBOBOX, self._on_pick)
        self.Bind(wx.EVT_TEXT_ENTER, self._on_enter)

    def _on_text(self, event: wx.CommandEvent) -> None:
        event.Skip()
        if self._updating:
            return
        if self._pending is not None and self._pending.IsRunning():
            self._pending.Stop()
        text = self.GetValue().strip()
        if len(text) < self._min_chars:
            return
        self._pending = wx.CallLater(self._debounce_ms, self._on_query, text)

    def _on_pick(self, event: wx.CommandEvent) -> None:
        if self._on_commit:
            self._on_commit(event.GetString())

    def _on_enter(self, _event: wx.CommandEvent) -> None:
        if self._on_commit:
            self._on_commit(self.GetValue())

    def set_suggestions(self, names: list[str]) -> None:
        """Replace the dropdown entries without disturbing what the user typed."""
        text = self.GetValue()
        point = self.GetInsertionPoint()
        self._updating = True
        try:
            self.Set(names)
            self.ChangeValue(text)
            self.SetInsertionPoint(point)
        finally:
            self._updating = False
        if names and self.HasFocus():
            self.Popup()

    def clear(self) -> None:
        self._updating = True
        try:
            self.Set([])
            self.ChangeValue("")
        finally:
            self._updating = False
