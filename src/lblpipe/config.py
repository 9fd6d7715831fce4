# src/lblpipe/config.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .bbox_transform import BboxTransformer
from .enums import ImageEncoding, ResampleFilter
from .errors import ConfigError
from .filters import FilterConfig
from .labels import LabelMapper, parse_rules
from .pipeline import ImagePipelineConfig
from .splitter import DatasetSplitter, cumulative_splits

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 90
FALLBACK_JPEG_QUALITY = 92


def _str_list(v: Any) -> List[str]:
    """YAML list or comma-separated string -> list of non-empty strings."""
    if v in (None, "", False):
        return []
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return [str(x) for x in v]


@dataclass
class PipelineConfig:
    # Label mapping: "old=new" rules, applied in order
    label_mappings: List[str] = field(default_factory=list)

    # Bounding box transforms
    bbox_scale_x: float = 1.0
    bbox_scale_y: float = 1.0
    bbox_aspect_ratio: float = 0.0  # 0 disables

    # Filters
    filter_labels: List[str] = field(default_factory=list)
    filter_attributes: List[str] = field(default_factory=list)
    filter_required_attrs: List[str] = field(default_factory=list)
    min_confidence: float = 0.0
    require_label: bool = False
    min_bbox_width: float = 0.0
    min_bbox_height: float = 0.0
    min_aspect_ratio: float = 0.0
    max_aspect_ratio: float = 0.0

    # Image processing
    image_out_dir: Optional[Path] = None
    resize_longer: int = 0
    resize_shorter: int = 0
    downsample_filter: str = "box"
    upsample_filter: str = "linear"
    image_encoding: str = "jpg"
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    crop_objects: bool = False
    num_workers: Optional[int] = None

    # Split: per-bucket percentages, e.g. [70, 20, 10]
    split: List[int] = field(default_factory=lambda: [100])
    seed: Optional[int] = None

    # Keep raw YAML
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any], base_dir: Optional[Path] = None) -> "PipelineConfig":
        cfg = cfg or {}

        def _p(v: Any) -> Optional[Path]:
            if v in (None, "", False):
                return None
            p = Path(str(v)).expanduser()
            if base_dir is not None and not p.is_absolute():
                p = base_dir / p
            return p.resolve()

        split = cfg.get("split", [100])
        if isinstance(split, (str, int)):
            split = _str_list(str(split))
        seed = cfg.get("seed")
        workers = cfg.get("num_workers")

        return cls(
            label_mappings=_str_list(cfg.get("label_mappings")),

            bbox_scale_x=float(cfg.get("bbox_scale_x", 1.0)),
            bbox_scale_y=float(cfg.get("bbox_scale_y", 1.0)),
            bbox_aspect_ratio=float(cfg.get("bbox_aspect_ratio", 0.0)),

            filter_labels=_str_list(cfg.get("filter_labels")),
            filter_attributes=_str_list(cfg.get("filter_attributes")),
            filter_required_attrs=_str_list(cfg.get("filter_required_attrs")),
            min_confidence=float(cfg.get("min_confidence", 0.0)),
            require_label=bool(cfg.get("require_label", False)),
            min_bbox_width=float(cfg.get("min_bbox_width", 0.0)),
            min_bbox_height=float(cfg.get("min_bbox_height", 0.0)),
            min_aspect_ratio=float(cfg.get("min_aspect_ratio", 0.0)),
            max_aspect_ratio=float(cfg.get("max_aspect_ratio", 0.0)),

            image_out_dir=_p(cfg.get("image_out_dir")),
            resize_longer=int(cfg.get("resize_longer", 0)),
            resize_shorter=int(cfg.get("resize_shorter", 0)),
            downsample_filter=str(cfg.get("downsample_filter", "box")),
            upsample_filter=str(cfg.get("upsample_filter", "linear")),
            image_encoding=str(cfg.get("image_encoding", "jpg")),
            jpeg_quality=int(cfg.get("jpeg_quality", DEFAULT_JPEG_QUALITY)),
            crop_objects=bool(cfg.get("crop_objects", False)),
            num_workers=int(workers) if workers else None,

            split=[int(x) for x in split],
            seed=int(seed) if seed is not None else None,

            raw=cfg,
        )

    @classmethod
    def load(cls, path: Path) -> "PipelineConfig":
        import yaml

        path = Path(path)
        with open(path, "r") as f:
            cfg = yaml.safe_load(f) or {}
        if not isinstance(cfg, dict):
            raise ConfigError(f"{path}: expected a mapping at the top level, got {type(cfg).__name__}")
        # relative paths are relative to the config file
        return cls.from_dict(cfg, base_dir=path.parent.resolve())

    # ---------- validation ----------

    @property
    def processes_images(self) -> bool:
        return self.resize_longer > 0 or self.resize_shorter > 0 or self.crop_objects

    def validate(self) -> "PipelineConfig":
        """Check every option up front; raises a ConfigError subclass on the first problem."""
        parse_rules(self.label_mappings)
        if self.bbox_scale_x <= 0 or self.bbox_scale_y <= 0:
            raise ConfigError("invalid bounding box scale factor")
        if self.bbox_aspect_ratio < 0:
            raise ConfigError("invalid value for bbox_aspect_ratio")
        if self.min_confidence < 0 or self.min_confidence >= 1:
            raise ConfigError(f"invalid min_confidence {self.min_confidence}, must be in [0.0, 1.0)")
        if self.resize_longer < 0 or self.resize_shorter < 0:
            raise ConfigError("resize lengths must not be negative")
        if self.processes_images and self.image_out_dir is None:
            raise ConfigError("missing image output directory (image_out_dir)")
        ResampleFilter.parse(self.downsample_filter)
        ResampleFilter.parse(self.upsample_filter)
        ImageEncoding.parse(self.image_encoding)
        if self.jpeg_quality < 1 or self.jpeg_quality > 100:
            logger.warning(f"[CONFIG] invalid JPEG quality {self.jpeg_quality}, setting it to {FALLBACK_JPEG_QUALITY}")
            self.jpeg_quality = FALLBACK_JPEG_QUALITY
        cumulative_splits(self.split)
        return self

    # ---------- per-stage views ----------

    def label_mapper(self) -> LabelMapper:
        return LabelMapper(self.label_mappings)

    def bbox_transformer(self) -> BboxTransformer:
        return BboxTransformer(self.bbox_scale_x, self.bbox_scale_y, self.bbox_aspect_ratio)

    def filter_config(self) -> FilterConfig:
        return FilterConfig(
            labels=list(self.filter_labels),
            attributes=list(self.filter_attributes),
            required_attrs=list(self.filter_required_attrs),
            min_confidence=self.min_confidence,
            min_bbox_width=self.min_bbox_width,
            min_bbox_height=self.min_bbox_height,
            min_aspect_ratio=self.min_aspect_ratio,
            max_aspect_ratio=self.max_aspect_ratio,
            require_label=self.require_label,
        )

    def image_config(self) -> ImagePipelineConfig:
        return ImagePipelineConfig(
            output_dir=self.image_out_dir,
            longer_side=self.resize_longer,
            shorter_side=self.resize_shorter,
            downsample_filter=self.downsample_filter,
            upsample_filter=self.upsample_filter,
            encoding=self.image_encoding,
            quality=self.jpeg_quality,
            crop_objects=self.crop_objects,
            num_workers=self.num_workers,
        )

    def splitter(self) -> DatasetSplitter:
        return DatasetSplitter.from_percentages(self.split, seed=self.seed)
