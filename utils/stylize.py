import wx

from utils.constants import (
    DARK_ACCENT,
    DARK_ALT,
    DARK_BG,
    DARK_PANEL,
    LIGHT_TEXT,
    SUBDUED_TEXT,
)


def stylize_label(label: wx.StaticText, subtle: bool = False) -> None:
    label.SetForegroundColour(SUBDUED_TEXT if subtle else LIGHT_TEXT)
    label.SetBackgroundColour(DARK_PANEL)
    font = label.GetFont()
    if not subtle:
        font.MakeBold()
    label.SetFont(font)


def stylize_textctrl(ctrl: wx.TextCtrl | wx.ComboBox) -> None:
    ctrl.SetBackgroundColour(DARK_ALT)
    ctrl.SetForegroundColour(LIGHT_TEXT)


def stylize_choice(ctrl: wx.Choice) -> None:
    ctrl.SetBackgroundColour(DARK_ALT)
    ctrl.SetForegroundColour(LIGHT_TEXT)


def stylize_listctrl(ctrl: wx.ListCtrl) -> None:
    ctrl.SetBackgroundColour(DARK_ALT)
    ctrl.SetTextColour(LIGHT_TEXT)
    if hasattr(ctrl, "SetHighlightColour"):
        ctrl.SetHighlightColour(DARK_ACCENT)


def stylize_button(button: wx.Button, primary: bool = False) -> None:
    if primary:
        button.SetBackgroundColour(DARK_ACCENT)
        button.SetForegroundColour(wx.Colour(12, 14, 18))
    else:
        button.SetBackgroundColour(DARK_ALT)
        button.SetForegroundColour(LIGHT_TEXT)
    font = button.GetFont()
    font.MakeBold()
    button.SetFont(font)


def stylize_panel(panel: wx.Window, alt: bool = False) -> None:
    panel.SetBackgroundColour(DARK_PANEL if alt else DARK_BG)
    panel.SetForegroundColour(LIGHT_TEXT)
