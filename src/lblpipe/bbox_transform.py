from __future__ import annotations

import logging

from .errors import ConfigError

logger = logging.getLogger(__name__)


class BboxTransformer:
    """
    Per-annotation bounding box adjustment, in place:
      1. scale width/height about the center by (scale_x, scale_y);
      2. grow (never shrink) to aspect_ratio = width / height, if aspect_ratio > 0.
    """

    def __init__(self, scale_x: float = 1.0, scale_y: float = 1.0, aspect_ratio: float = 0.0) -> None:
        if scale_x <= 0 or scale_y <= 0:
            raise ConfigError(f"invalid bounding box scale factor ({scale_x}, {scale_y})")
        if aspect_ratio < 0:
            raise ConfigError(f"invalid bounding box aspect ratio {aspect_ratio}")
        self.scale_x = float(scale_x)
        self.scale_y = float(scale_y)
        self.aspect_ratio = float(aspect_ratio)

    @property
    def is_noop(self) -> bool:
        return self.scale_x == 1 and self.scale_y == 1 and self.aspect_ratio <= 0

    def transform(self, ann) -> None:
        box = ann.bbox
        if self.scale_x != 1 or self.scale_y != 1:
            box = box.scaled(self.scale_x, self.scale_y)
        if self.aspect_ratio > 0:
            box = box.grown_to_aspect(self.aspect_ratio)
        ann.set_bbox(box)

    def apply(self, dataset) -> int:
        """Transform every annotation of the dataset; returns the number transformed."""
        if self.is_noop:
            return 0
        n = 0
        for f in dataset:
            for a in f.annotations:
                self.transform(a)
                n += 1
        logger.info(
            f"[BBOX] transformed {n} boxes (scale={self.scale_x}x{self.scale_y}, "
            f"aspect_ratio={self.aspect_ratio or 'off'})"
        )
        return n
