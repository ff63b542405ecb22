"""
Thumbnail Layout Engine - Pure computation of the drawable thumbnail template.

Given the deck names, which quadrants hold art, the thumbnail mode and the
resolved logo, ``compute_layout`` produces a ``ThumbnailLayout``: every
rectangle, line, text run, logo placement and quadrant placement needed to
draw the thumbnail on a fixed-size canvas. Nothing here touches pixels; the
renderer and the interactive canvas both draw from the same layout.

Modes:
- Video: horizontal bar across the middle with a deck name on each side of the logo
- Stream: vertical bar behind the logo with date, event name and "LIVE!" stacked on it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from utils.text_fit import (
    DEFAULT_LINE_HEIGHT,
    DEFAULT_MAX_FONT_SIZE,
    DEFAULT_MIN_FONT_SIZE,
    TextMeasurer,
    fit_font_size,
    wrap_words,
)

CANVAS_WIDTH_DEFAULT = 960  # 1920 / 2
CANVAS_HEIGHT_DEFAULT = 540  # 1080 / 2

MODE_VIDEO = "Video"
MODE_STREAM = "Stream"
MODES = (MODE_VIDEO, MODE_STREAM)

SLOT_TOP_LEFT = "topLeft"
SLOT_BOTTOM_LEFT = "bottomLeft"
SLOT_TOP_RIGHT = "topRight"
SLOT_BOTTOM_RIGHT = "bottomRight"
QUADRANT_SLOTS = (SLOT_TOP_LEFT, SLOT_BOTTOM_LEFT, SLOT_TOP_RIGHT, SLOT_BOTTOM_RIGHT)

BAR_HEIGHT = 98
BAR_COLOR = "#6A0DAD"
BAR_OPACITY = 0.63
BORDER_COLOR = "#000000"
BORDER_WIDTH = 10
TARGET_LOGO_HEIGHT = 294

TEXT_COLOR = "#FFFFFF"
TEXT_STROKE_COLOR = "#000000"
TEXT_STROKE_WIDTH = 2.3
DECK_NAME_PADDING = 20

STREAM_BASE_FONT_SIZE = 48
STREAM_DATE_SCALE = 0.75
STREAM_LIVE_SCALE = 1.5
STREAM_TEXT_TOP = 16
STREAM_TEXT_GAP = 8
STREAM_LIVE_TEXT = "LIVE!"
# (max length, font size); longer event names get smaller text
EVENT_NAME_FONT_BANDS = ((10, 56), (16, 44), (24, 36))
EVENT_NAME_MIN_FONT_SIZE = 28


# ============= Logo choice =============


@dataclass(frozen=True)
class NoLogo:
    """No logo is available (none configured or it failed to load)."""


@dataclass(frozen=True)
class DefaultLogo:
    natural_width: int
    natural_height: int


@dataclass(frozen=True)
class CustomLogo:
    """User-supplied logo with optional explicit position overrides."""

    natural_width: int
    natural_height: int
    x: float | None = None
    y: float | None = None
    y_offset: float = 0.0


LogoChoice = NoLogo | DefaultLogo | CustomLogo


def resolve_logo(
    default_size: tuple[int, int] | None,
    custom_size: tuple[int, int] | None = None,
    *,
    x: float | None = None,
    y: float | None = None,
    y_offset: float = 0.0,
) -> LogoChoice:
    """Pick the logo to display: custom when loaded, else default, else none."""
    if custom_size is not None:
        return CustomLogo(custom_size[0], custom_size[1], x=x, y=y, y_offset=y_offset)
    if default_size is not None:
        return DefaultLogo(default_size[0], default_size[1])
    return NoLogo()


def logo_width(
    natural_width: float, natural_height: float, target_height: float = TARGET_LOGO_HEIGHT
) -> float:
    """Width of a logo scaled to ``target_height`` with its aspect ratio preserved."""
    if natural_width <= 0 or natural_height <= 0:
        return float(target_height)
    return target_height * natural_width / natural_height


# ============= Primitives =============


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str | None = None
    opacity: float = 1.0
    stroke: str | None = None
    stroke_width: float = 0.0
    name: str = ""


@dataclass(frozen=True)
class Line:
    points: tuple[float, float, float, float]
    stroke: str
    stroke_width: float
    name: str = ""


@dataclass(frozen=True)
class TextRun:
    """A block of wrapped text positioned inside a box."""

    name: str
    text: str
    x: float
    y: float
    width: float
    height: float
    font_size: int
    lines: tuple[str, ...]
    line_height: float = DEFAULT_LINE_HEIGHT
    align: Literal["left", "center", "right"] = "center"
    vertical_align: Literal["top", "middle"] = "middle"
    fill: str = TEXT_COLOR
    stroke: str = TEXT_STROKE_COLOR
    stroke_width: float = TEXT_STROKE_WIDTH
    bold: bool = True

    @property
    def block_height(self) -> float:
        return len(self.lines) * self.font_size * self.line_height

    def line_tops(self) -> list[float]:
        """Top y coordinate of each wrapped line."""
        step = self.font_size * self.line_height
        top = self.y
        if self.vertical_align == "middle":
            top = self.y + (self.height - self.block_height) / 2
        return [top + index * step for index in range(len(self.lines))]


@dataclass(frozen=True)
class LogoPlacement:
    x: float
    y: float
    width: float
    height: float
    source: Literal["default", "custom"] = "default"


@dataclass(frozen=True)
class QuadrantPlacement:
    slot: str
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ThumbnailLayout:
    width: int
    height: int
    quadrants: tuple[QuadrantPlacement, ...] = ()
    rects: tuple[Rect, ...] = ()
    lines: tuple[Line, ...] = ()
    texts: tuple[TextRun, ...] = ()
    logo: LogoPlacement | None = None

    def text(self, name: str) -> TextRun | None:
        for run in self.texts:
            if run.name == name:
                return run
        return None

    def rect(self, name: str) -> Rect | None:
        for rect in self.rects:
            if rect.name == name:
                return rect
        return None


@dataclass(frozen=True)
class LayoutInputs:
    width: int = CANVAS_WIDTH_DEFAULT
    height: int = CANVAS_HEIGHT_DEFAULT
    left_deck_name: str = ""
    right_deck_name: str = ""
    filled_slots: frozenset[str] = field(default_factory=frozenset)
    mode: str = MODE_VIDEO
    stream_date_text: str = ""
    event_name: str = ""
    logo: LogoChoice = field(default_factory=NoLogo)


# ============= Geometry =============


def quadrant_rects(width: float, height: float) -> dict[str, tuple[float, float, float, float]]:
    """(x, y, width, height) of each quadrant keyed by slot."""
    half_w = width / 2
    half_h = height / 2
    return {
        SLOT_TOP_LEFT: (0.0, 0.0, half_w, half_h),
        SLOT_BOTTOM_LEFT: (0.0, half_h, half_w, half_h),
        SLOT_TOP_RIGHT: (half_w, 0.0, half_w, half_h),
        SLOT_BOTTOM_RIGHT: (half_w, half_h, half_w, half_h),
    }


def slot_at(width: float, height: float, x: float, y: float) -> str | None:
    """Slot whose quadrant contains the canvas point, or None when outside the canvas."""
    if not (0 <= x < width and 0 <= y < height):
        return None
    left = x < width / 2
    top = y < height / 2
    if top:
        return SLOT_TOP_LEFT if left else SLOT_TOP_RIGHT
    return SLOT_BOTTOM_LEFT if left else SLOT_BOTTOM_RIGHT


def place_logo(
    choice: LogoChoice,
    canvas_width: float,
    canvas_height: float,
    target_height: float = TARGET_LOGO_HEIGHT,
) -> LogoPlacement | None:
    """Scale and position the chosen logo on the canvas."""
    if isinstance(choice, NoLogo):
        return None

    width = logo_width(choice.natural_width, choice.natural_height, target_height)
    default_x = (canvas_width - width) / 2
    # Centered on a band sitting on the canvas's vertical midpoint.
    default_y = canvas_height / 2 - target_height / 2

    if isinstance(choice, CustomLogo):
        x = choice.x if choice.x is not None else default_x
        y = choice.y if choice.y is not None else default_y
        return LogoPlacement(x, y + choice.y_offset, width, target_height, source="custom")
    return LogoPlacement(default_x, default_y, width, target_height, source="default")


def event_name_font_size(event_name: str) -> int:
    """Step function from event-name length to font size."""
    length = len(event_name)
    for max_length, size in EVENT_NAME_FONT_BANDS:
        if length <= max_length:
            return size
    return EVENT_NAME_MIN_FONT_SIZE


def _wrap(text: str, width: float, font_size: int, measurer: TextMeasurer | None) -> tuple[str, ...]:
    if measurer is None:
        return (text,) if text.strip() else ()
    return tuple(wrap_words(text, width, font_size, measurer))


# ============= Layout =============


def _video_layer(
    inputs: LayoutInputs,
    logo: LogoPlacement | None,
    measurer: TextMeasurer | None,
) -> tuple[list[Rect], list[TextRun]]:
    bar_y = inputs.height / 2 - BAR_HEIGHT / 2
    bar = Rect(
        0, bar_y, inputs.width, BAR_HEIGHT, fill=BAR_COLOR, opacity=BAR_OPACITY, name="video_bar"
    )

    if logo is not None:
        logo_x, logo_w = logo.x, logo.width
    else:
        # Fallback assumes a square logo so text regions exist before any logo loads.
        logo_w = float(TARGET_LOGO_HEIGHT)
        logo_x = (inputs.width - logo_w) / 2

    left_x = DECK_NAME_PADDING
    left_width = max(0.0, logo_x - DECK_NAME_PADDING * 2)
    right_x = logo_x + logo_w + DECK_NAME_PADDING
    right_width = max(0.0, inputs.width - right_x - DECK_NAME_PADDING)

    texts: list[TextRun] = []
    for name, raw, x, width in (
        ("left_deck", inputs.left_deck_name, left_x, left_width),
        ("right_deck", inputs.right_deck_name, right_x, right_width),
    ):
        text = raw.strip().upper()
        if not text:
            continue
        size = fit_font_size(
            text,
            width,
            BAR_HEIGHT,
            measurer,
            min_size=DEFAULT_MIN_FONT_SIZE,
            max_size=DEFAULT_MAX_FONT_SIZE,
        )
        texts.append(
            TextRun(
                name=name,
                text=text,
                x=x,
                y=bar_y,
                width=width,
                height=BAR_HEIGHT,
                font_size=size,
                lines=_wrap(text, width, size, measurer),
            )
        )
    return [bar], texts


def _stream_layer(
    inputs: LayoutInputs,
    logo: LogoPlacement | None,
    measurer: TextMeasurer | None,
) -> tuple[list[Rect], list[TextRun]]:
    if logo is None:
        return [], []

    bar = Rect(
        logo.x, 0, logo.width, inputs.height, fill=BAR_COLOR, opacity=BAR_OPACITY, name="stream_bar"
    )

    texts: list[TextRun] = []
    top = float(STREAM_TEXT_TOP)

    def add(name: str, text: str, size: int, y: float) -> float:
        lines = _wrap(text, logo.width, size, measurer)
        height = len(lines) * size * DEFAULT_LINE_HEIGHT
        texts.append(
            TextRun(
                name=name,
                text=text,
                x=logo.x,
                y=y,
                width=logo.width,
                height=height,
                font_size=size,
                lines=lines,
                vertical_align="top",
            )
        )
        return y + height

    date_text = inputs.stream_date_text.strip().upper()
    if date_text:
        top = add("stream_date", date_text, int(STREAM_BASE_FONT_SIZE * STREAM_DATE_SCALE), top)

    event_text = inputs.event_name.strip().upper()
    if event_text:
        add("event_name", event_text, event_name_font_size(event_text), top)

    live_y = logo.y + logo.height + STREAM_TEXT_GAP
    add("live", STREAM_LIVE_TEXT, int(STREAM_BASE_FONT_SIZE * STREAM_LIVE_SCALE), live_y)
    return [bar], texts


def compute_layout(inputs: LayoutInputs, measurer: TextMeasurer | None = None) -> ThumbnailLayout:
    """Compute every drawable primitive of the thumbnail for ``inputs``."""
    quadrants = tuple(
        QuadrantPlacement(slot, *rect)
        for slot, rect in quadrant_rects(inputs.width, inputs.height).items()
        if slot in inputs.filled_slots
    )

    logo = place_logo(inputs.logo, inputs.width, inputs.height)

    if inputs.mode == MODE_STREAM:
        mode_rects, texts = _stream_layer(inputs, logo, measurer)
    else:
        mode_rects, texts = _video_layer(inputs, logo, measurer)

    border = Rect(
        0,
        0,
        inputs.width,
        inputs.height,
        stroke=BORDER_COLOR,
        stroke_width=BORDER_WIDTH,
        name="border",
    )
    middle_x = inputs.width / 2
    divider = Line((middle_x, 0, middle_x, inputs.height), BORDER_COLOR, BORDER_WIDTH, "divider")

    return ThumbnailLayout(
        width=inputs.width,
        height=inputs.height,
        quadrants=quadrants,
        rects=tuple(mode_rects + [border]),
        lines=(divider,),
        texts=tuple(texts),
        logo=logo,
    )


__all__ = [
    "CANVAS_HEIGHT_DEFAULT",
    "CANVAS_WIDTH_DEFAULT",
    "CustomLogo",
    "DefaultLogo",
    "LayoutInputs",
    "Line",
    "LogoChoice",
    "LogoPlacement",
    "MODES",
    "MODE_STREAM",
    "MODE_VIDEO",
    "NoLogo",
    "QUADRANT_SLOTS",
    "QuadrantPlacement",
    "Rect",
    "SLOT_BOTTOM_LEFT",
    "SLOT_BOTTOM_RIGHT",
    "SLOT_TOP_LEFT",
    "SLOT_TOP_RIGHT",
    "TARGET_LOGO_HEIGHT",
    "TextRun",
    "ThumbnailLayout",
    "compute_layout",
    "event_name_font_size",
    "logo_width",
    "place_logo",
    "quadrant_rects",
    "resolve_logo",
    "slot_at",
]
