"""Pan/zoom model for a single quadrant image.

Positions are relative to the quadrant's top-left corner; ``scale`` maps image
pixels to canvas pixels. Every operation returns a clamped copy, so the scaled
image always covers the whole quadrant and can never shrink below the
covering scale.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

ZOOM_STEP = 1.1


@dataclass(frozen=True)
class QuadrantView:
    image_width: int
    image_height: int
    quad_width: float
    quad_height: float
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    @classmethod
    def cover(
        cls, image_width: int, image_height: int, quad_width: float, quad_height: float
    ) -> QuadrantView:
        """Initial view: scaled to exactly cover the quadrant, centered on the overflowing axis."""
        if image_width <= 0 or image_height <= 0:
            raise ValueError(f"Invalid image size {image_width}x{image_height}")
        scale = max(quad_width / image_width, quad_height / image_height)
        x = (quad_width - image_width * scale) / 2
        y = (quad_height - image_height * scale) / 2
        return cls(image_width, image_height, quad_width, quad_height, x, y, scale).clamp()

    @property
    def min_scale(self) -> float:
        return max(self.quad_width / self.image_width, self.quad_height / self.image_height)

    @property
    def scaled_width(self) -> float:
        return self.image_width * self.scale

    @property
    def scaled_height(self) -> float:
        return self.image_height * self.scale

    def clamp(self) -> QuadrantView:
        scale = max(self.scale, self.min_scale)
        scaled_w = self.image_width * scale
        scaled_h = self.image_height * scale
        x = min(0.0, max(self.x, self.quad_width - scaled_w))
        y = min(0.0, max(self.y, self.quad_height - scaled_h))
        return replace(self, x=x, y=y, scale=scale)

    def drag_to(self, x: float, y: float) -> QuadrantView:
        return replace(self, x=x, y=y).clamp()

    def drag_by(self, dx: float, dy: float) -> QuadrantView:
        return self.drag_to(self.x + dx, self.y + dy)

    def zoom(
        self,
        wheel_delta: float,
        pointer_x: float,
        pointer_y: float,
        step: float = ZOOM_STEP,
    ) -> QuadrantView:
        """Zoom one notch about the pointer; positive ``wheel_delta`` zooms out."""
        if wheel_delta == 0:
            return self
        old_scale = self.scale
        new_scale = old_scale / step if wheel_delta > 0 else old_scale * step
        new_scale = max(new_scale, self.min_scale)

        # Keep the image point under the pointer fixed.
        image_x = (pointer_x - self.x) / old_scale
        image_y = (pointer_y - self.y) / old_scale
        return replace(
            self,
            x=pointer_x - image_x * new_scale,
            y=pointer_y - image_y * new_scale,
            scale=new_scale,
        ).clamp()

    def source_box(self) -> tuple[float, float, float, float]:
        """(left, top, right, bottom) of the image region visible in the quadrant."""
        left = -self.x / self.scale
        top = -self.y / self.scale
        right = min(self.image_width, left + self.quad_width / self.scale)
        bottom = min(self.image_height, top + self.quad_height / self.scale)
        return max(0.0, left), max(0.0, top), right, bottom

    def covers_quadrant(self, tolerance: float = 1e-6) -> bool:
        return (
            self.x <= tolerance
            and self.y <= tolerance
            and self.x + self.scaled_width >= self.quad_width - tolerance
            and self.y + self.scaled_height >= self.quad_height - tolerance
        )


__all__ = ["QuadrantView", "ZOOM_STEP"]
