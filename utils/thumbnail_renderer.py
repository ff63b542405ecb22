"""Rasterise a ``ThumbnailLayout`` with Pillow.

The same renderer feeds the on-screen canvas (pixel ratio 1.0) and the
exported PNG (pixel ratio 1.3334, 960x540 -> 1280x720).
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from loguru import logger
from PIL import Image, ImageColor, ImageDraw

from utils.layout_engine import Line, LogoPlacement, Rect, TextRun, ThumbnailLayout
from utils.quadrant_view import QuadrantView
from utils.text_fit import load_font

QuadrantImages = Mapping[str, tuple[Image.Image, QuadrantView]]

LOADING_FILL = "#E0E0E0"


def _px(value: float, ratio: float) -> int:
    return int(round(value * ratio))


def _rgba(color: str, opacity: float = 1.0) -> tuple[int, int, int, int]:
    r, g, b = ImageColor.getrgb(color)[:3]
    return r, g, b, int(round(255 * max(0.0, min(1.0, opacity))))


def _draw_quadrants(
    canvas: Image.Image,
    layout: ThumbnailLayout,
    images: QuadrantImages,
    ratio: float,
    loading: frozenset[str],
) -> None:
    draw = ImageDraw.Draw(canvas)
    for placement in layout.quadrants:
        left = _px(placement.x, ratio)
        top = _px(placement.y, ratio)
        right = _px(placement.x + placement.width, ratio)
        bottom = _px(placement.y + placement.height, ratio)
        entry = images.get(placement.slot)
        if entry is None:
            if placement.slot in loading:
                draw.rectangle([left, top, right - 1, bottom - 1], fill=LOADING_FILL)
            continue
        image, view = entry
        # Cropping to the visible source box clips the art to its quadrant.
        region = image.convert("RGBA").resize(
            (max(1, right - left), max(1, bottom - top)),
            resample=Image.Resampling.LANCZOS,
            box=view.source_box(),
        )
        canvas.paste(region, (left, top))


def _draw_rect(canvas: Image.Image, rect: Rect, ratio: float) -> Image.Image:
    x0 = _px(rect.x, ratio)
    y0 = _px(rect.y, ratio)
    x1 = _px(rect.x + rect.width, ratio) - 1
    y1 = _px(rect.y + rect.height, ratio) - 1
    if rect.fill:
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).rectangle([x0, y0, x1, y1], fill=_rgba(rect.fill, rect.opacity))
        canvas = Image.alpha_composite(canvas, overlay)
    if rect.stroke and rect.stroke_width > 0:
        width = max(1, _px(rect.stroke_width, ratio))
        half = width // 2
        # Strokes straddle the rectangle edge; the outer half is clipped at the canvas edge.
        ImageDraw.Draw(canvas).rectangle(
            [x0 - half, y0 - half, x1 + half, y1 + half],
            outline=_rgba(rect.stroke),
            width=width,
        )
    return canvas


def _draw_line(canvas: Image.Image, line: Line, ratio: float) -> None:
    x0, y0, x1, y1 = line.points
    ImageDraw.Draw(canvas).line(
        [(_px(x0, ratio), _px(y0, ratio)), (_px(x1, ratio), _px(y1, ratio))],
        fill=_rgba(line.stroke),
        width=max(1, _px(line.stroke_width, ratio)),
    )


def _draw_logo(
    canvas: Image.Image, placement: LogoPlacement, logo: Image.Image, ratio: float
) -> Image.Image:
    size = (max(1, _px(placement.width, ratio)), max(1, _px(placement.height, ratio)))
    scaled = logo.convert("RGBA").resize(size, resample=Image.Resampling.LANCZOS)
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    layer.paste(scaled, (_px(placement.x, ratio), _px(placement.y, ratio)))
    return Image.alpha_composite(canvas, layer)


def _draw_text(canvas: Image.Image, run: TextRun, ratio: float) -> None:
    draw = ImageDraw.Draw(canvas)
    font = load_font(_px(run.font_size, ratio), run.bold)
    line_step = run.font_size * run.line_height * ratio
    stroke = max(1, _px(run.stroke_width, ratio))
    box_left = run.x * ratio
    box_width = run.width * ratio
    for text, top in zip(run.lines, run.line_tops()):
        width = font.getlength(text)
        if run.align == "center":
            x = box_left + (box_width - width) / 2
        elif run.align == "right":
            x = box_left + box_width - width
        else:
            x = box_left
        draw.text(
            (x, top * ratio + line_step / 2),
            text,
            font=font,
            fill=_rgba(run.fill),
            anchor="lm",
            stroke_width=stroke,
            stroke_fill=_rgba(run.stroke),
        )


def render_thumbnail(
    layout: ThumbnailLayout,
    quadrant_images: QuadrantImages | None = None,
    logo_image: Image.Image | None = None,
    pixel_ratio: float = 1.0,
    loading_slots: frozenset[str] = frozenset(),
) -> Image.Image:
    """Draw ``layout`` into a new RGBA image scaled by ``pixel_ratio``."""
    size = (_px(layout.width, pixel_ratio), _px(layout.height, pixel_ratio))
    canvas = Image.new("RGBA", size, (0, 0, 0, 0))

    _draw_quadrants(canvas, layout, quadrant_images or {}, pixel_ratio, loading_slots)
    for rect in layout.rects:
        canvas = _draw_rect(canvas, rect, pixel_ratio)
    for line in layout.lines:
        _draw_line(canvas, line, pixel_ratio)
    if layout.logo is not None and logo_image is not None:
        canvas = _draw_logo(canvas, layout.logo, logo_image, pixel_ratio)
    for run in layout.texts:
        _draw_text(canvas, run, pixel_ratio)
    return canvas


def save_png(image: Image.Image, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    logger.info(f"Saved thumbnail {path} ({image.width}x{image.height})")
    return path


__all__ = ["QuadrantImages", "render_thumbnail", "save_png"]
