"""Interactive thumbnail canvas.

Paints the controller's Pillow render and turns mouse input into quadrant
pan/zoom:
- Left-drag pans the image in the quadrant where the drag started
- Mouse wheel zooms the quadrant under the pointer, one notch per event
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import wx
from loguru import logger
from PIL import Image

from utils.constants import DARK_BG
from utils.layout_engine import slot_at

if TYPE_CHECKING:
    from controllers.app_controller import ThumbnailController


def pil_to_bitmap(image: Image.Image, background: tuple[int, int, int] = DARK_BG) -> wx.Bitmap:
    """Flatten an RGBA Pillow image onto ``background`` and wrap it in a wx.Bitmap."""
    base = Image.new("RGBA", image.size, background + (255,))
    flat = Image.alpha_composite(base, image.convert("RGBA")).convert("RGB")
    wx_image = wx.Image(flat.width, flat.height)
    wx_image.SetData(flat.tobytes())
    return wx.Bitmap(wx_image)


class ThumbnailCanvas(wx.Panel):
    """Fixed-size panel drawing the working-resolution thumbnail."""

    def __init__(self, parent: wx.Window, controller: ThumbnailController):
        super().__init__(parent, style=wx.FULL_REPAINT_ON_RESIZE)
        self.controller = controller
        self._bitmap: wx.Bitmap | None = None
        self._drag_slot: str | None = None
        self._drag_origin: tuple[int, int] | None = None

        size = (controller.canvas_width, controller.canvas_height)
        self.SetMinSize(size)
        self.SetMaxSize(size)
        self.SetBackgroundStyle(wx.BG_STYLE_PAINT)

        self.Bind(wx.EVT_PAINT, self._on_paint)
        self.Bind(wx.EVT_LEFT_DOWN, self._on_left_down)
        self.Bind(wx.EVT_LEFT_UP, self._on_left_up)
        self.Bind(wx.EVT_MOTION, self._on_motion)
        self.Bind(wx.EVT_MOUSEWHEEL, self._on_wheel)
        self.Bind(wx.EVT_MOUSE_CAPTURE_LOST, lambda _evt: self._end_drag())

    def redraw(self) -> None:
        try:
            self._bitmap = pil_to_bitmap(self.controller.render_preview())
        except Exception as exc:
            logger.exception(f"Failed to render thumbnail preview: {exc}")
            self._bitmap = None
        self.Refresh(eraseBackground=False)

    def _on_paint(self, _event: wx.PaintEvent) -> None:
        dc = wx.AutoBufferedPaintDC(self)
        dc.SetBackground(wx.Brush(wx.Colour(*DARK_BG)))
        dc.Clear()
        if self._bitmap is not None:
            dc.DrawBitmap(self._bitmap, 0, 0)

    def _slot_under(self, x: int, y: int) -> str | None:
        return slot_at(self.controller.canvas_width, self.controller.canvas_height, x, y)

    # Dragging

    def _on_left_down(self, event: wx.MouseEvent) -> None:
        x, y = event.GetPosition()
        slot = self._slot_under(x, y)
        if slot is None or slot not in self.controller.views:
            event.Skip()
            return
        self._drag_slot = slot
        self._drag_origin = (x, y)
        if not self.HasCapture():
            self.CaptureMouse()

    def _on_motion(self, event: wx.MouseEvent) -> None:
        if self._drag_slot is None or self._drag_origin is None or not event.Dragging():
            event.Skip()
            return
        x, y = event.GetPosition()
        dx, dy = x - self._drag_origin[0], y - self._drag_origin[1]
        self._drag_origin = (x, y)
        self.controller.drag_quadrant(self._drag_slot, dx, dy)

    def _on_left_up(self, _event: wx.MouseEvent) -> None:
        self._end_drag()

    def _end_drag(self) -> None:
        self._drag_slot = None
        self._drag_origin = None
        if self.HasCapture():
            self.ReleaseMouse()

    # Zooming

    def _on_wheel(self, event: wx.MouseEvent) -> None:
        x, y = event.GetPosition()
        slot = self._slot_under(x, y)
        if slot is None:
            return
        # wx reports positive rotation for wheel-up; wheel-up zooms in.
        self.controller.zoom_quadrant(slot, -event.GetWheelRotation(), x, y)
