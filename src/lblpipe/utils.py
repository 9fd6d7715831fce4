from __future__ import annotations

import math
from pathlib import Path


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def round_half_away(v: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(v) + 0.5), v))


def derived_crop_path(path: Path, index: int) -> Path:
    """foo/bar.jpg, 3 -> foo/bar_03.jpg"""
    p = Path(path)
    return p.with_name(f"{p.stem}_{index:02d}{p.suffix}")


def output_image_path(path: Path, out_dir: Path, ext: str) -> Path:
    """Base name of `path` with its extension replaced by `ext`, placed under `out_dir`."""
    return Path(out_dir) / (Path(path).stem + ext)
