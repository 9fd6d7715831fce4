from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .utils import round_half_away


@dataclass
class BoundingBox:
    """Pixel-space axis-aligned box, (x1, y1) top-left and (x2, y2) bottom-right."""
    x1: float
    y1: float
    x2: float
    y2: float

    @staticmethod
    def from_coords(coords) -> "BoundingBox":
        x1, y1, x2, y2 = coords
        return BoundingBox(float(x1), float(y1), float(x2), float(y2))

    def coords(self) -> Tuple[float, float, float, float]:
        return (self.x1, self.y1, self.x2, self.y2)

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x1 + self.x2) / 2.0, (self.y1 + self.y2) / 2.0)

    def aspect_ratio(self) -> Optional[float]:
        """width / height, or None for a zero-height box."""
        if self.height == 0:
            return None
        return self.width / self.height

    # ---------- geometric transforms ----------

    def scaled(self, scale_x: float, scale_y: float) -> "BoundingBox":
        """Scale width and height about the box center."""
        dx = (self.width * scale_x - self.width) * 0.5
        dy = (self.height * scale_y - self.height) * 0.5
        return BoundingBox(self.x1 - dx, self.y1 - dy, self.x2 + dx, self.y2 + dy)

    def grown_to_aspect(self, aspect_ratio: float) -> "BoundingBox":
        """
        Grow (never shrink) one side symmetrically so that width / height == aspect_ratio.
        A zero-height box always grows vertically. aspect_ratio <= 0 returns an unchanged copy.
        """
        if aspect_ratio <= 0:
            return BoundingBox(*self.coords())
        w, h = self.width, self.height
        ratio = w / h if h != 0 else math.inf
        if ratio < aspect_ratio:
            dx = (h * aspect_ratio - w) * 0.5
            return BoundingBox(self.x1 - dx, self.y1, self.x2 + dx, self.y2)
        if ratio > aspect_ratio:
            dy = (w / aspect_ratio - h) * 0.5
            return BoundingBox(self.x1, self.y1 - dy, self.x2, self.y2 + dy)
        return BoundingBox(*self.coords())

    # ---------- integer pixel rectangles ----------

    def to_pixel_rect(self) -> Tuple[int, int, int, int]:
        return (
            round_half_away(self.x1),
            round_half_away(self.y1),
            round_half_away(self.x2),
            round_half_away(self.y2),
        )

    def intersect_pixels(self, img_w: int, img_h: int) -> Optional[Tuple[int, int, int, int]]:
        """Rounded pixel rectangle intersected with the image bounds; None if empty."""
        x1, y1, x2, y2 = self.to_pixel_rect()
        x1, y1 = max(x1, 0), max(y1, 0)
        x2, y2 = min(x2, img_w), min(y2, img_h)
        if x2 <= x1 or y2 <= y1:
            return None
        return x1, y1, x2, y2
