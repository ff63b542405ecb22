"""Text measurement, greedy word wrapping and font-size fitting for thumbnail text.

The layout engine never talks to a rendering surface directly. It receives a
``TextMeasurer`` that answers one question, how wide a string renders at a
given size, and everything else (wrapping, fitting) is plain arithmetic on
top of that answer:

- ``PillowTextMeasurer`` measures with real TrueType fonts through Pillow
- ``FixedWidthMeasurer`` is a deterministic stand-in for headless use and tests

When no measurer is available at all, ``fit_font_size`` returns the maximum
configured size so layouts stay deterministic.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Protocol

from loguru import logger
from PIL import ImageFont

DEFAULT_MIN_FONT_SIZE = 24
DEFAULT_MAX_FONT_SIZE = 48
DEFAULT_LINE_HEIGHT = 1.2

# Calibri first to match the reference artwork, then fonts that ship with most systems.
BOLD_FONT_CANDIDATES = (
    "calibrib.ttf",
    "DejaVuSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
    "arialbd.ttf",
)
REGULAR_FONT_CANDIDATES = (
    "calibri.ttf",
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
    "arial.ttf",
)


class TextMeasurer(Protocol):
    """Capability that reports the rendered width of a string in pixels."""

    def measure(self, text: str, font_size: float, bold: bool = True) -> float: ...


@lru_cache(maxsize=64)
def load_font(font_size: int, bold: bool = True) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load the thumbnail font at ``font_size``, falling back to Pillow's bundled font."""
    size = max(1, int(round(font_size)))
    candidates = BOLD_FONT_CANDIDATES if bold else REGULAR_FONT_CANDIDATES
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.debug(f"No system font found for size {size}; using Pillow default font")
    return ImageFont.load_default(size=size)


class PillowTextMeasurer:
    """Measure text with the same fonts the renderer draws with."""

    def measure(self, text: str, font_size: float, bold: bool = True) -> float:
        if not text:
            return 0.0
        font = load_font(int(round(font_size)), bold)
        return float(font.getlength(text))


class FixedWidthMeasurer:
    """Deterministic measurer: every character is ``ratio`` x font size wide."""

    def __init__(self, ratio: float = 0.6) -> None:
        self.ratio = ratio

    def measure(self, text: str, font_size: float, bold: bool = True) -> float:
        return len(text) * font_size * self.ratio


def wrap_words(
    text: str,
    max_width: float,
    font_size: float,
    measurer: TextMeasurer,
    bold: bool = True,
) -> list[str]:
    """Greedily wrap ``text`` into lines no wider than ``max_width``.

    A single word wider than ``max_width`` is kept whole on its own line.
    """
    words = text.split()
    if not words:
        return []

    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if measurer.measure(candidate, font_size, bold) <= max_width:
            current = candidate
            continue
        lines.append(current)
        current = word
    lines.append(current)
    return lines


def wrapped_height(line_count: int, font_size: float, line_height: float = DEFAULT_LINE_HEIGHT) -> float:
    return line_count * font_size * line_height


def fits(
    text: str,
    font_size: int,
    max_width: float,
    max_height: float,
    measurer: TextMeasurer,
    line_height: float = DEFAULT_LINE_HEIGHT,
    bold: bool = True,
) -> bool:
    """Whether ``text`` wrapped at ``font_size`` stays within ``max_height``."""
    lines = wrap_words(text, max_width, font_size, measurer, bold)
    return wrapped_height(len(lines), font_size, line_height) <= max_height


def fit_font_size(
    text: str,
    max_width: float,
    max_height: float,
    measurer: TextMeasurer | None,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
    line_height: float = DEFAULT_LINE_HEIGHT,
    bold: bool = True,
) -> int:
    """Find the largest font size in ``[min_size, max_size]`` whose wrapped text fits.

    Binary search over integer sizes; ties resolve towards the larger size.
    Returns ``min_size`` when nothing fits and ``max_size`` when no measurer
    is available.
    """
    if measurer is None:
        return max_size

    best = min_size
    low, high = min_size, max_size
    while low <= high:
        mid = (low + high) // 2
        if fits(text, mid, max_width, max_height, measurer, line_height, bold):
            best = mid
            low = mid + 1
        else:
            high = mid - 1
    return best


__all__ = [
    "DEFAULT_LINE_HEIGHT",
    "DEFAULT_MAX_FONT_SIZE",
    "DEFAULT_MIN_FONT_SIZE",
    "FixedWidthMeasurer",
    "PillowTextMeasurer",
    "TextMeasurer",
    "fit_font_size",
    "fits",
    "load_font",
    "wrap_words",
    "wrapped_height",
]
